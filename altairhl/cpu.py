"""Instruction decoder and executor for the Intel 8080."""

from __future__ import annotations

from enum import IntFlag
from typing import Callable, Dict, Optional, Protocol

from . import alu
from .disk import DiskController
from .memory import Memory
from .registers import CYCLES, Flag, Pair, Register, Registers, destination, register_pair, source

_REGISTER_NAMES = ("b", "c", "d", "e", "h", "l", None, "a")
_PAIR_NAMES = ("bc", "de", "hl", "sp")


class CpuStatus(IntFlag):
    """Front-panel status lights driven by the processor."""

    INTERRUPT = 0x01
    WRITE_OUTPUT = 0x02
    STACK = 0x04
    HALT = 0x08
    PORT_OUTPUT = 0x10
    OP_CODE_FETCH = 0x20
    PORT_INPUT = 0x40
    MEMORY_READ = 0x80


class DiskPorts(Protocol):
    def select(self, value: int) -> None: ...
    def status(self) -> int: ...
    def function(self, value: int) -> None: ...
    def sector(self) -> int: ...
    def write(self, value: int) -> None: ...
    def read(self) -> int: ...


class Intel8080:
    """An 8080 processor wired to memory, a terminal, the sense switches and a disk."""

    def __init__(
        self,
        memory: Optional[Memory] = None,
        terminal_in: Optional[Callable[[], int]] = None,
        terminal_out: Optional[Callable[[int], None]] = None,
        sense: Optional[Callable[[], int]] = None,
        disk: Optional[DiskPorts] = None,
        port_in: Optional[Callable[[int], int]] = None,
        port_out: Optional[Callable[[int, int], None]] = None,
    ) -> None:
        self.memory = memory if memory is not None else Memory()
        self.terminal_in = terminal_in or (lambda: 0)
        self.terminal_out = terminal_out or (lambda value: None)
        self.sense = sense or (lambda: 0)
        self.disk = disk if disk is not None else DiskController()
        self.port_in = port_in or (lambda port: 0xFF)
        self.port_out = port_out or (lambda port, value: None)
        self._pending_char = 0
        self._dispatch = self._build_dispatch()
        self.reset()

    def reset(self) -> None:
        """Clear the registers, buses and status lights."""
        self.registers = Registers()
        self.data_bus = 0
        self.address_bus = 0
        self.current_opcode = 0
        self.status = 0

    # -- bus access -------------------------------------------------------

    def _memory_read(self) -> None:
        self.status |= CpuStatus.MEMORY_READ
        self.data_bus = self.memory.read8(self.address_bus)

    def _memory_write(self) -> None:
        self.status &= ~CpuStatus.MEMORY_READ & 0xFF
        self.memory.write8(self.address_bus, self.data_bus)

    def _read_register(self, index: int) -> int:
        if index == Register.M:
            self.address_bus = self.registers.hl
            self._memory_read()
            return self.data_bus
        return getattr(self.registers, _REGISTER_NAMES[index])

    def _write_register(self, index: int, value: int) -> None:
        if index == Register.M:
            self.address_bus = self.registers.hl
            self.data_bus = value & 0xFF
            self._memory_write()
        else:
            setattr(self.registers, _REGISTER_NAMES[index], value)

    def _read_pair(self, pair: int) -> int:
        self.status |= CpuStatus.MEMORY_READ
        return getattr(self.registers, _PAIR_NAMES[pair])

    def _write_pair(self, pair: int, value: int) -> None:
        self.status &= ~CpuStatus.MEMORY_READ & 0xFF
        setattr(self.registers, _PAIR_NAMES[pair], value & 0xFFFF)

    def _immediate8(self) -> int:
        return self.memory.read8(self.registers.pc + 1)

    def _immediate16(self) -> int:
        return self.memory.read16(self.registers.pc + 1)

    # -- front panel ------------------------------------------------------

    def examine(self, address: int) -> None:
        """Point the program counter and address bus at ``address``."""
        address &= 0xFFFF
        self.registers.pc = address
        self.address_bus = address
        self.data_bus = self.memory.read8(address)

    def examine_next(self) -> None:
        """Advance the address bus and show the byte there."""
        self.address_bus = (self.address_bus + 1) & 0xFFFF
        self.data_bus = self.memory.read8(self.address_bus)

    def deposit(self, data: int) -> None:
        """Store ``data`` at the current address bus."""
        self.data_bus = data & 0xFF
        self._memory_write()

    def deposit_next(self, data: int) -> None:
        """Advance the address bus and store ``data`` there."""
        self.examine_next()
        self.data_bus = data & 0xFF
        self._memory_write()

    # -- execution --------------------------------------------------------

    def cycle(self) -> int:
        """Fetch and execute one instruction; return its cycle count.

        Opcodes without an implementation do nothing and return 0.
        """
        self.status = 0
        self.address_bus = self.registers.pc
        self._memory_read()
        opcode = self.current_opcode = self.data_bus
        handler = self._dispatch.get(opcode)
        return handler() if handler is not None else 0

    def _build_dispatch(self) -> Dict[int, Callable[[], int]]:
        table: Dict[int, Callable[[], int]] = {
            0x00: self._nop, 0x02: self._stax, 0x12: self._stax,
            0x0A: self._ldax, 0x1A: self._ldax,
            0x07: self._rlc, 0x0F: self._rrc, 0x17: self._ral, 0x1F: self._rar,
            0x22: self._shld, 0x27: self._daa, 0x2A: self._lhld, 0x2F: self._cma,
            0x32: self._sta, 0x37: self._stc, 0x3A: self._lda, 0x3F: self._cmc,
            0xC3: self._jmp, 0xC9: self._ret, 0xCD: self._call,
            0xC6: self._adi, 0xCE: self._aci, 0xD6: self._sui, 0xDE: self._sbi,
            0xE6: self._ani, 0xEE: self._xri, 0xF6: self._ori, 0xFE: self._cpi,
            0xD3: self._out, 0xDB: self._in, 0xE3: self._xthl, 0xE9: self._pchl,
            0xEB: self._xchg, 0xF3: self._di, 0xF9: self._sphl, 0xFB: self._ei,
        }
        for pair in range(4):
            base = pair << 4
            table[0x01 | base] = self._lxi
            table[0x03 | base] = self._inx
            table[0x09 | base] = self._dad
            table[0x0B | base] = self._dcx
            table[0xC1 | base] = self._pop
            table[0xC5 | base] = self._push
        for field in range(8):
            base = field << 3
            table[0x04 | base] = self._inr
            table[0x05 | base] = self._dcr
            table[0x06 | base] = self._mvi
            table[0xC0 | base] = self._rccc
            table[0xC2 | base] = self._jccc
            table[0xC4 | base] = self._cccc
            table[0xC7 | base] = self._rst
        for opcode in range(0x40, 0x80):
            if opcode != 0x76:
                table[opcode] = self._mov
        groups = (self._add, self._adc, self._sub, self._sbb,
                  self._ana, self._xra, self._ora, self._cmp)
        for opcode in range(0x80, 0xC0):
            table[opcode] = groups[(opcode >> 3) & 7]
        return table

    def _advance(self, count: int) -> None:
        self.registers.pc += count

    # -- data transfer ----------------------------------------------------

    def _mov(self) -> int:
        dest = destination(self.current_opcode)
        src = source(self.current_opcode)
        memory = Register.M in (dest, src)
        self._write_register(dest, self._read_register(src))
        self._advance(1)
        return CYCLES["MOV_MEM"] if memory else CYCLES["MOV_REG"]

    def _mvi(self) -> int:
        dest = destination(self.current_opcode)
        self._write_register(dest, self._immediate8())
        self._advance(2)
        return CYCLES["MVI_MEM"] if dest == Register.M else CYCLES["MVI_REG"]

    def _lxi(self) -> int:
        self._write_pair(register_pair(self.current_opcode), self._immediate16())
        self._advance(3)
        return CYCLES["LXI"]

    def _lda(self) -> int:
        self.address_bus = self._immediate16()
        self._memory_read()
        self.registers.a = self.data_bus
        self._advance(3)
        return CYCLES["LDA"]

    def _sta(self) -> int:
        self.address_bus = self._immediate16()
        self.data_bus = self.registers.a
        self._memory_write()
        self._advance(3)
        return CYCLES["STA"]

    def _lhld(self) -> int:
        self.registers.hl = self.memory.read16(self._immediate16())
        self._advance(3)
        return CYCLES["LHLD"]

    def _shld(self) -> int:
        self.memory.write16(self._immediate16(), self.registers.hl)
        self._advance(3)
        return CYCLES["SHLD"]

    def _ldax(self) -> int:
        address = self._read_pair(register_pair(self.current_opcode))
        self.registers.a = self.memory.read8(address)
        self._advance(1)
        return CYCLES["LDAX"]

    def _stax(self) -> int:
        address = self._read_pair(register_pair(self.current_opcode))
        self.memory.write8(address, self.registers.a)
        self._advance(1)
        return CYCLES["STAX"]

    def _xchg(self) -> int:
        regs = self.registers
        regs.hl, regs.de = regs.de, regs.hl
        self._advance(1)
        return CYCLES["XCHG"]

    # -- arithmetic and logic ---------------------------------------------

    def _carry_in(self) -> int:
        return 1 if self.registers.flags & Flag.CARRY else 0

    def _add(self) -> int:
        alu.add(self.registers, self._read_register(source(self.current_opcode)))
        self._advance(1)
        return CYCLES["ADD"]

    def _adi(self) -> int:
        alu.add(self.registers, self._immediate8())
        self._advance(2)
        return CYCLES["ADI"]

    def _adc(self) -> int:
        value = self._read_register(source(self.current_opcode)) + self._carry_in()
        alu.add(self.registers, value)
        self._advance(1)
        return CYCLES["ADC"]

    def _aci(self) -> int:
        alu.add(self.registers, self._immediate8() + self._carry_in())
        self._advance(2)
        return CYCLES["ACI"]

    def _sub(self) -> int:
        alu.subtract(self.registers, self._read_register(source(self.current_opcode)))
        self._advance(1)
        return CYCLES["SUB"]

    def _sui(self) -> int:
        alu.subtract(self.registers, self._immediate8())
        self._advance(2)
        return CYCLES["SUI"]

    def _sbb(self) -> int:
        value = self._read_register(source(self.current_opcode)) + self._carry_in()
        alu.subtract(self.registers, value)
        self._advance(1)
        return CYCLES["SBB"]

    def _sbi(self) -> int:
        alu.subtract(self.registers, self._immediate8() + self._carry_in())
        self._advance(2)
        return CYCLES["SBI"]

    def _inr(self) -> int:
        dest = destination(self.current_opcode)
        result = alu.increment(self.registers, self._read_register(dest))
        self._write_register(dest, result)
        self._advance(1)
        return CYCLES["INR"]

    def _dcr(self) -> int:
        dest = destination(self.current_opcode)
        result = alu.decrement(self.registers, self._read_register(dest))
        self._write_register(dest, result)
        self._advance(1)
        return CYCLES["DCR"]

    def _inx(self) -> int:
        pair = register_pair(self.current_opcode)
        self._write_pair(pair, self._read_pair(pair) + 1)
        self._advance(1)
        return CYCLES["INX"]

    def _dcx(self) -> int:
        pair = register_pair(self.current_opcode)
        self._advance(1)
        self._write_pair(pair, self._read_pair(pair) - 1)
        return CYCLES["DCX"]

    def _dad(self) -> int:
        total = self._read_pair(register_pair(self.current_opcode)) + self._read_pair(Pair.HL)
        if total > 0xFFFF:
            self.registers.flags |= Flag.CARRY
        else:
            self.registers.flags &= ~Flag.CARRY
        self._write_pair(Pair.HL, total)
        self._advance(1)
        return CYCLES["DAD"]

    def _ana(self) -> int:
        alu.logical_and(self.registers, self._read_register(source(self.current_opcode)))
        self._advance(1)
        return CYCLES["ANA"]

    def _ani(self) -> int:
        alu.logical_and(self.registers, self._immediate8(), clear_half=True)
        self._advance(2)
        return CYCLES["ANI"]

    def _ora(self) -> int:
        alu.logical_or(self.registers, self._read_register(source(self.current_opcode)))
        self._advance(1)
        return CYCLES["ORA"]

    def _ori(self) -> int:
        alu.logical_or(self.registers, self._immediate8())
        self._advance(2)
        return CYCLES["ORI"]

    def _xra(self) -> int:
        alu.logical_xor(self.registers, self._read_register(source(self.current_opcode)))
        self._advance(1)
        return CYCLES["XRA"]

    def _xri(self) -> int:
        alu.logical_xor(self.registers, self._immediate8())
        self._advance(2)
        return CYCLES["XRI"]

    def _cmp(self) -> int:
        alu.compare(self.registers, self._read_register(source(self.current_opcode)))
        self._advance(1)
        return CYCLES["CMP"]

    def _cpi(self) -> int:
        alu.compare(self.registers, self._immediate8())
        self._advance(2)
        return CYCLES["CPI"]

    def _daa(self) -> int:
        alu.decimal_adjust(self.registers)
        self._advance(1)
        return CYCLES["DAA"]

    def _cma(self) -> int:
        self.registers.a = ~self.registers.a
        self._advance(1)
        return CYCLES["CMA"]

    def _stc(self) -> int:
        self.registers.flags |= Flag.CARRY
        self._advance(1)
        return CYCLES["STC"]

    def _cmc(self) -> int:
        self.registers.flags ^= Flag.CARRY
        self._advance(1)
        return CYCLES["CMC"]

    def _rlc(self) -> int:
        alu.rotate_left(self.registers)
        self._advance(1)
        return CYCLES["RAL"]

    def _rrc(self) -> int:
        alu.rotate_right(self.registers)
        self._advance(1)
        return CYCLES["RAR"]

    def _ral(self) -> int:
        alu.rotate_left_through_carry(self.registers)
        self._advance(1)
        return CYCLES["RLC"]

    def _rar(self) -> int:
        alu.rotate_right_through_carry(self.registers)
        self._advance(1)
        return CYCLES["RRC"]

    # -- control ----------------------------------------------------------

    def _ei(self) -> int:
        self._advance(1)
        self.registers.flags |= Flag.INTERRUPT
        return CYCLES["EI"]

    def _di(self) -> int:
        self._advance(1)
        self.registers.flags &= ~Flag.INTERRUPT
        return CYCLES["DI"]

    def _nop(self) -> int:
        self._advance(1)
        return CYCLES["NOP"]

    def _jmp(self) -> int:
        self.registers.pc = self._immediate16()
        return CYCLES["JMP"]

    def _jccc(self) -> int:
        if self.registers.check(destination(self.current_opcode)):
            self._jmp()
        else:
            self._advance(3)
        return CYCLES["JMP"]

    def _ret(self) -> int:
        self.status |= CpuStatus.STACK
        regs = self.registers
        regs.pc = self.memory.read16(regs.sp)
        regs.sp += 2
        return CYCLES["RET"]

    def _rccc(self) -> int:
        if self.registers.check(destination(self.current_opcode)):
            self._ret()
        else:
            self._advance(1)
        return CYCLES["RET"]

    def _push_word(self, value: int) -> None:
        regs = self.registers
        regs.sp -= 2
        self.memory.write16(regs.sp, value)

    def _rst(self) -> int:
        self.status |= CpuStatus.STACK
        vector = destination(self.current_opcode)
        self._push_word(self.registers.pc + 1)
        self.registers.pc = vector * 8
        return CYCLES["RET"]

    def _call(self) -> int:
        self.status |= CpuStatus.STACK
        target = self._immediate16()
        self._push_word(self.registers.pc + 3)
        self.registers.pc = target
        return CYCLES["JMP"]

    def _cccc(self) -> int:
        if self.registers.check(destination(self.current_opcode)):
            self._call()
        else:
            self._advance(3)
        return CYCLES["CALL"]

    def _pchl(self) -> int:
        self.registers.pc = self.registers.hl
        return CYCLES["PCHL"]

    # -- stack ------------------------------------------------------------

    def _push(self) -> int:
        self.status |= CpuStatus.STACK
        pair = register_pair(self.current_opcode)
        value = self.registers.af if pair == Pair.SP else self._read_pair(pair)
        self._push_word(value)
        self._advance(1)
        return CYCLES["PUSH"]

    def _pop(self) -> int:
        self.status |= CpuStatus.STACK
        pair = register_pair(self.current_opcode)
        regs = self.registers
        value = self.memory.read16(regs.sp)
        regs.sp += 2
        if pair == Pair.SP:
            regs.af = value
        else:
            self._write_pair(pair, value)
        self._advance(1)
        return CYCLES["POP"]

    def _xthl(self) -> int:
        regs = self.registers
        top = self.memory.read16(regs.sp)
        self.memory.write16(regs.sp, regs.hl)
        regs.hl = top
        self._advance(1)
        return CYCLES["XTHL"]

    def _sphl(self) -> int:
        self.registers.sp = self.registers.hl
        self._advance(1)
        return CYCLES["SPHL"]

    # -- input and output -------------------------------------------------

    def _in(self) -> int:
        port = self._immediate8()
        regs = self.registers
        if port == 0x00:
            regs.a = 0
        elif port == 0x01:
            self.status |= CpuStatus.PORT_INPUT
            regs.a = self.terminal_in()
        elif port == 0x08:
            regs.a = self.disk.status()
        elif port == 0x09:
            regs.a = self.disk.sector()
        elif port == 0x0A:
            regs.a = self.disk.read()
        elif port == 0x10:
            # 2SIO status: bit 1 is "transmit buffer empty", bit 0 "character waiting".
            value = 0x02
            if not self._pending_char:
                self._pending_char = self.terminal_in() & 0xFF
            if self._pending_char:
                value |= 0x01
            regs.a = value
        elif port == 0x11:
            if self._pending_char:
                regs.a = self._pending_char
                self._pending_char = 0
            else:
                regs.a = self.terminal_in()
        elif port == 0xFF:
            regs.a = self.sense()
        else:
            regs.a = self.port_in(port)
        self._advance(2)
        return CYCLES["IN"]

    def _out(self) -> int:
        port = self._immediate8()
        a = self.registers.a
        if port == 0x01:
            self.status |= CpuStatus.PORT_OUTPUT
            self.terminal_out(a)
        elif port == 0x08:
            self.disk.select(a)
        elif port == 0x09:
            self.disk.function(a)
        elif port == 0x0A:
            self.disk.write(a)
        elif port == 0x10:
            pass
        elif port == 0x11:
            self.terminal_out(a)
        else:
            self.port_out(port, a)
        self._advance(2)
        return CYCLES["OUT"]
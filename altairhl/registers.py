"""Register file, flags and opcode field decoding for the 8080."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum, IntFlag


class Flag(IntFlag):
    CARRY = 0x01
    PARITY = 0x04
    HALF_CARRY = 0x10
    INTERRUPT = 0x20
    ZERO = 0x40
    SIGN = 0x80


class Register(IntEnum):
    B = 0
    C = 1
    D = 2
    E = 3
    H = 4
    L = 5
    M = 6  # memory at (HL)
    A = 7


class Pair(IntEnum):
    BC = 0
    DE = 1
    HL = 2
    SP = 3


class Condition(IntEnum):
    NZ = 0
    Z = 1
    NC = 2
    C = 3
    PO = 4
    PE = 5
    P = 6
    M = 7


CYCLES = {
    "JMP": 10, "NOP": 4, "MOV_REG": 5, "MOV_MEM": 7, "MVI_REG": 7, "MVI_MEM": 10,
    "LXI": 10, "LDA": 13, "STA": 13, "LHLD": 16, "SHLD": 16, "LDAX": 7, "STAX": 7,
    "XCHG": 5, "ADD": 4, "ADI": 7, "ADC": 4, "ACI": 7, "SUB": 4, "SUI": 7, "SBB": 4,
    "SBI": 7, "INR": 5, "DCR": 5, "INX": 5, "DCX": 5, "DAD": 10, "ANA": 4, "ANI": 7,
    "ORA": 4, "ORI": 7, "XRA": 4, "XRI": 7, "EI": 4, "DI": 4, "XTHL": 18, "SPHL": 5,
    "IN": 10, "OUT": 10, "PUSH": 11, "POP": 10, "RLC": 4, "RRC": 4, "RAL": 4, "RAR": 4,
    "RET": 5, "CALL": 17, "RST": 11, "CMP": 4, "CPI": 7, "STC": 1, "CMC": 2, "CMA": 2,
    "PCHL": 5, "DAA": 5,
}


def destination(opcode: int) -> int:
    """Bits 3-5 of an opcode: destination register, condition or restart vector."""
    return (opcode >> 3) & 7


def source(opcode: int) -> int:
    """Bits 0-2 of an opcode: source register."""
    return opcode & 7


def register_pair(opcode: int) -> Pair:
    """Bits 4-5 of an opcode: register pair."""
    return Pair((opcode >> 4) & 3)


def parity(value: int) -> bool:
    """True when the low byte of ``value`` has an even number of set bits."""
    return bin(value & 0xFF).count("1") % 2 == 0


_BYTE_FIELDS = frozenset({"a", "flags", "b", "c", "d", "e", "h", "l"})
_WORD_FIELDS = frozenset({"sp", "pc"})


@dataclass
class Registers:
    """The 8080 registers; values are truncated to their width on assignment."""

    a: int = 0
    flags: int = 0x02
    b: int = 0
    c: int = 0
    d: int = 0
    e: int = 0
    h: int = 0
    l: int = 0  # noqa: E741
    sp: int = 0
    pc: int = 0

    def __setattr__(self, name: str, value: int) -> None:
        if name in _BYTE_FIELDS:
            value &= 0xFF
        elif name in _WORD_FIELDS:
            value &= 0xFFFF
        super().__setattr__(name, value)

    @property
    def af(self) -> int:
        return (self.a << 8) | self.flags

    @af.setter
    def af(self, value: int) -> None:
        self.a = value >> 8
        self.flags = value

    @property
    def bc(self) -> int:
        return (self.b << 8) | self.c

    @bc.setter
    def bc(self, value: int) -> None:
        self.b = value >> 8
        self.c = value

    @property
    def de(self) -> int:
        return (self.d << 8) | self.e

    @de.setter
    def de(self, value: int) -> None:
        self.d = value >> 8
        self.e = value

    @property
    def hl(self) -> int:
        return (self.h << 8) | self.l

    @hl.setter
    def hl(self, value: int) -> None:
        self.h = value >> 8
        self.l = value

    def check(self, condition: int) -> bool:
        """Evaluate a branch condition against the current flags."""
        condition = Condition(condition)
        flag = {
            Condition.NZ: Flag.ZERO, Condition.Z: Flag.ZERO,
            Condition.NC: Flag.CARRY, Condition.C: Flag.CARRY,
            Condition.PO: Flag.PARITY, Condition.PE: Flag.PARITY,
            Condition.P: Flag.SIGN, Condition.M: Flag.SIGN,
        }[condition]
        is_set = bool(self.flags & flag)
        # Odd-numbered conditions test for the flag being set.
        return is_set if condition & 1 else not is_set
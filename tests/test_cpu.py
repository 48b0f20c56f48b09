import pytest

from altairhl.cpu import CpuStatus, Intel8080
from altairhl.memory import Memory
from altairhl.registers import CYCLES, Flag


def make_cpu(program, **kwargs):
    memory = Memory()
    memory.load(0, bytes(program))
    return Intel8080(memory, **kwargs), memory


def run(cpu, steps):
    for _ in range(steps):
        cpu.cycle()


class FakeDisk:
    def __init__(self):
        self.calls = []

    def select(self, value):
        self.calls.append(("select", value))

    def status(self):
        self.calls.append(("status",))
        return 0xE5

    def function(self, value):
        self.calls.append(("function", value))

    def sector(self):
        self.calls.append(("sector",))
        return 0x3C

    def write(self, value):
        self.calls.append(("write", value))

    def read(self):
        self.calls.append(("read",))
        return 0x7A


def test_reset_state():
    cpu, _ = make_cpu([0x3E, 0x12])
    cpu.cycle()
    cpu.reset()
    assert cpu.registers.pc == 0
    assert cpu.registers.a == 0
    assert cpu.registers.flags == 0x02
    assert cpu.status == 0


def test_mvi_and_mov():
    cpu, _ = make_cpu([0x3E, 0x5A, 0x47])
    assert cpu.cycle() == CYCLES["MVI_REG"]
    assert cpu.cycle() == CYCLES["MOV_REG"]
    assert cpu.registers.b == 0x5A
    assert cpu.registers.pc == 3


def test_mov_to_and_from_memory():
    program = [0x21, 0x00, 0x20, 0x3E, 0x99, 0x77, 0x46]
    cpu, memory = make_cpu(program)
    run(cpu, 3)
    assert memory.read8(0x2000) == 0x99
    assert cpu.registers.hl == 0x2000
    assert cpu.cycle() == CYCLES["MOV_MEM"]
    assert cpu.registers.b == 0x99


def test_sta_lda_round_trip():
    program = [0x3E, 0x77, 0x32, 0x00, 0x30, 0x3E, 0x00, 0x3A, 0x00, 0x30]
    cpu, memory = make_cpu(program)
    run(cpu, 4)
    assert memory.read8(0x3000) == 0x77
    assert cpu.registers.a == 0x77
    assert cpu.registers.pc == len(program)


def test_shld_lhld_round_trip():
    program = [0x21, 0x34, 0x12, 0x22, 0x00, 0x30, 0x21, 0x00, 0x00, 0x2A, 0x00, 0x30]
    cpu, memory = make_cpu(program)
    run(cpu, 4)
    assert memory.read16(0x3000) == 0x1234
    assert cpu.registers.hl == 0x1234


def test_stax_ldax():
    program = [0x01, 0x00, 0x40, 0x3E, 0x66, 0x02, 0x3E, 0x00, 0x0A]
    cpu, memory = make_cpu(program)
    run(cpu, 5)
    assert memory.read8(0x4000) == 0x66
    assert cpu.registers.a == 0x66


def test_jmp():
    cpu, _ = make_cpu([0xC3, 0x00, 0x10])
    assert cpu.cycle() == CYCLES["JMP"]
    assert cpu.registers.pc == 0x1000


def test_conditional_jump_not_taken():
    program = [0x97, 0xC2, 0x00, 0x10]
    cpu, _ = make_cpu(program)
    run(cpu, 2)
    assert cpu.registers.pc == len(program)


def test_conditional_jump_taken():
    cpu, _ = make_cpu([0x97, 0xCA, 0x00, 0x10])
    run(cpu, 2)
    assert cpu.registers.pc == 0x1000


def test_call_and_ret():
    program = [0x31, 0x00, 0x40, 0xCD, 0x00, 0x01]
    cpu, memory = make_cpu(program)
    memory.write8(0x0100, 0xC9)
    run(cpu, 2)
    assert cpu.registers.pc == 0x0100
    assert memory.read16(cpu.registers.sp) == len(program)
    assert (cpu.status & CpuStatus.STACK) == CpuStatus.STACK
    cpu.cycle()
    assert cpu.registers.pc == len(program)
    assert cpu.registers.sp == 0x4000


def test_push_pop_pair():
    program = [0x31, 0x00, 0x40, 0x01, 0x34, 0x12, 0xC5, 0xD1]
    cpu, _ = make_cpu(program)
    run(cpu, 4)
    assert cpu.registers.de == 0x1234
    assert cpu.registers.sp == 0x4000


def test_push_pop_psw_restores_accumulator_and_flags():
    program = [0x31, 0x00, 0x40, 0x3E, 0x80, 0x37, 0xF5, 0x97, 0xF1]
    cpu, _ = make_cpu(program)
    run(cpu, 3)
    saved = cpu.registers.af
    run(cpu, 2)
    assert cpu.registers.a == 0
    cpu.cycle()
    assert cpu.registers.af == saved
    assert cpu.registers.a == 0x80


def test_sub_a_sets_zero():
    cpu, _ = make_cpu([0x3E, 0x10, 0x97])
    run(cpu, 3)
    assert cpu.registers.a == 0
    assert (cpu.registers.flags & Flag.ZERO) == Flag.ZERO
    assert (cpu.registers.flags & Flag.CARRY) == 0


def test_compare_keeps_accumulator():
    cpu, _ = make_cpu([0x3E, 0x05, 0x06, 0x05, 0xB8])
    run(cpu, 3)
    assert cpu.registers.a == 0x05
    assert (cpu.registers.flags & Flag.ZERO) == Flag.ZERO


def test_add_then_subtract_round_trip():
    cpu, _ = make_cpu([0x3E, 0x33, 0xC6, 0x44, 0xD6, 0x44])
    run(cpu, 3)
    assert cpu.registers.a == 0x33


def test_inr_dcr_round_trip():
    cpu, _ = make_cpu([0x0E, 0x7F, 0x0C, 0x0D])
    run(cpu, 2)
    assert (cpu.registers.flags & Flag.SIGN) == Flag.SIGN
    cpu.cycle()
    assert cpu.registers.c == 0x7F
    assert (cpu.registers.flags & Flag.SIGN) == 0


def test_inr_memory():
    cpu, memory = make_cpu([0x21, 0x00, 0x50, 0x34])
    memory.write8(0x5000, 0xFF)
    run(cpu, 2)
    assert memory.read8(0x5000) == 0
    assert (cpu.registers.flags & Flag.ZERO) == Flag.ZERO


def test_dad_carry():
    cpu, _ = make_cpu([0x21, 0xFF, 0xFF, 0x01, 0x01, 0x00, 0x09])
    run(cpu, 3)
    assert cpu.registers.hl == 0
    assert (cpu.registers.flags & Flag.CARRY) == Flag.CARRY


def test_inx_dcx_round_trip():
    cpu, _ = make_cpu([0x11, 0xFF, 0x00, 0x13, 0x1B])
    run(cpu, 2)
    assert cpu.registers.de == 0x0100
    cpu.cycle()
    assert cpu.registers.de == 0x00FF


def test_xchg():
    cpu, _ = make_cpu([0x21, 0x11, 0x11, 0x11, 0x22, 0x22, 0xEB])
    run(cpu, 3)
    assert cpu.registers.hl == 0x2222
    assert cpu.registers.de == 0x1111


def test_cma_twice_restores():
    cpu, _ = make_cpu([0x3E, 0x5C, 0x2F, 0x2F])
    run(cpu, 2)
    assert cpu.registers.a == 0x5C ^ 0xFF
    cpu.cycle()
    assert cpu.registers.a == 0x5C


def test_rotate_left_then_right_restores():
    cpu, _ = make_cpu([0x3E, 0x81, 0x07, 0x0F])
    run(cpu, 4)
    assert cpu.registers.a == 0x81


def test_daa_after_bcd_addition():
    cpu, _ = make_cpu([0x3E, 0x09, 0xC6, 0x01, 0x27])
    run(cpu, 3)
    assert cpu.registers.a == 0x10


def test_ei_di():
    cpu, _ = make_cpu([0xFB, 0xF3])
    cpu.cycle()
    assert (cpu.registers.flags & Flag.INTERRUPT) == Flag.INTERRUPT
    cpu.cycle()
    assert (cpu.registers.flags & Flag.INTERRUPT) == 0


def test_rst_pushes_return_address():
    program = [0x31, 0x00, 0x40, 0xFF]
    cpu, memory = make_cpu(program)
    run(cpu, 2)
    assert cpu.registers.pc == 0x38
    assert memory.read16(cpu.registers.sp) == len(program)


def test_unimplemented_opcode_does_nothing():
    cpu, _ = make_cpu([0x76])
    assert cpu.cycle() == 0
    assert cpu.registers.pc == 0


def test_out_terminal():
    sent = []
    cpu, _ = make_cpu([0x3E, 0x48, 0xD3, 0x01, 0xD3, 0x11], terminal_out=sent.append)
    run(cpu, 2)
    assert (cpu.status & CpuStatus.PORT_OUTPUT) == CpuStatus.PORT_OUTPUT
    cpu.cycle()
    assert sent == [0x48, 0x48]


def test_out_other_port_goes_to_port_out():
    calls = []

    def record(port, value):
        calls.append((port, value))

    cpu, _ = make_cpu([0x3E, 0x02, 0xD3, 0x1E], port_out=record)
    run(cpu, 2)
    assert calls == [(0x1E, 0x02)]
    assert cpu.registers.pc == 4


@pytest.mark.parametrize(
    "port, expected",
    [(0x00, 0x00), (0x01, 0x4B), (0xFF, 0xA5), (0x2A, 0x2A)],
)
def test_in_ports(port, expected):
    cpu, _ = make_cpu(
        [0x3E, 0x99, 0xDB, port],
        terminal_in=lambda: 0x4B,
        sense=lambda: 0xA5,
        port_in=lambda p: p,
    )
    run(cpu, 2)
    assert cpu.registers.a == expected
    assert cpu.registers.pc == 4


def test_2sio_buffers_character():
    pending = [0x41]

    def terminal_in():
        return pending.pop() if pending else 0

    cpu, _ = make_cpu([0xDB, 0x10, 0xDB, 0x11], terminal_in=terminal_in)
    cpu.cycle()
    assert cpu.registers.a == 0x03
    assert pending == []
    cpu.cycle()
    assert cpu.registers.a == 0x41


def test_disk_ports():
    disk = FakeDisk()
    program = [
        0x3E, 0x01, 0xD3, 0x08, 0xD3, 0x09, 0xD3, 0x0A,
        0xDB, 0x08, 0xDB, 0x09, 0xDB, 0x0A,
    ]
    cpu, _ = make_cpu(program, disk=disk)
    run(cpu, 5)
    assert cpu.registers.a == 0xE5
    cpu.cycle()
    assert cpu.registers.a == 0x3C
    cpu.cycle()
    assert cpu.registers.a == 0x7A
    assert disk.calls == [
        ("select", 0x01),
        ("function", 0x01),
        ("write", 0x01),
        ("status",),
        ("sector",),
        ("read",),
    ]


def test_examine_and_deposit():
    cpu, memory = make_cpu([])
    cpu.examine(0x0100)
    cpu.deposit(0xAB)
    cpu.deposit_next(0xCD)
    assert memory.read8(0x0100) == 0xAB
    assert memory.read8(0x0101) == 0xCD
    assert cpu.address_bus == 0x0101
    assert cpu.registers.pc == 0x0100


def test_examine_next_reads_following_byte():
    cpu, memory = make_cpu([])
    memory.load(0x0200, b"\x11\x22")
    cpu.examine(0x0200)
    assert cpu.data_bus == 0x11
    cpu.examine_next()
    assert cpu.data_bus == 0x22
    assert cpu.address_bus == 0x0201


def test_examine_next_wraps_address_bus():
    cpu, memory = make_cpu([0x5E])
    cpu.examine(0xFFFF)
    cpu.examine_next()
    assert cpu.address_bus == 0
    assert cpu.data_bus == 0x5E
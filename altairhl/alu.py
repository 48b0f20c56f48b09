"""Arithmetic and logic operations of the 8080, acting on a register file."""

from __future__ import annotations

from .registers import Flag, Registers, parity


def carry(a: int, b: int) -> bool:
    """True when adding ``a`` and ``b`` overflows eight bits."""
    return a + b > 0xFF


def half_carry(a: int, b: int) -> bool:
    """True when adding the low nibbles of ``a`` and ``b`` overflows four bits."""
    return (a & 0x0F) + (b & 0x0F) > 0x0F


def _set(registers: Registers, flag: Flag, on: bool) -> None:
    if on:
        registers.flags |= flag
    else:
        registers.flags &= ~flag


def _update_flags(registers: Registers, value: int) -> None:
    """Set zero, sign and parity from ``value``."""
    value &= 0xFF
    _set(registers, Flag.PARITY, parity(value))
    _set(registers, Flag.ZERO, value == 0)
    _set(registers, Flag.SIGN, bool(value & 0x80))


def add(registers: Registers, value: int) -> int:
    """Add ``value`` to the accumulator and return the new accumulator."""
    a = registers.a
    _set(registers, Flag.HALF_CARRY, half_carry(a, value))
    _set(registers, Flag.CARRY, carry(a, value))
    registers.a = a + value
    _update_flags(registers, registers.a)
    return registers.a


def subtract(registers: Registers, value: int) -> int:
    """Subtract ``value`` from the accumulator by two's-complement addition.

    The carry flag ends up set when a borrow occurred.
    """
    a = registers.a
    b = (0x100 - value) & 0xFFFF
    _set(registers, Flag.HALF_CARRY, half_carry(a, b))
    _set(registers, Flag.CARRY, not carry(a, b))
    registers.a = a + b
    _update_flags(registers, registers.a)
    return registers.a


def compare(registers: Registers, value: int) -> None:
    """Set the flags as subtraction would, leaving the accumulator unchanged."""
    saved = registers.a
    subtract(registers, value)
    registers.a = saved


def logical_and(registers: Registers, value: int, clear_half: bool = False) -> int:
    """AND ``value`` into the accumulator; carry is cleared."""
    registers.a &= value
    registers.flags &= ~Flag.CARRY
    if clear_half:
        registers.flags &= ~Flag.HALF_CARRY
    _update_flags(registers, registers.a)
    return registers.a


def _clear_carries(registers: Registers) -> None:
    registers.flags &= ~(Flag.CARRY | Flag.HALF_CARRY)


def logical_or(registers: Registers, value: int) -> int:
    """OR ``value`` into the accumulator; carry and half carry are cleared."""
    registers.a |= value
    _clear_carries(registers)
    _update_flags(registers, registers.a)
    return registers.a


def logical_xor(registers: Registers, value: int) -> int:
    """XOR ``value`` into the accumulator; carry and half carry are cleared."""
    registers.a ^= value
    _clear_carries(registers)
    _update_flags(registers, registers.a)
    return registers.a


def increment(registers: Registers, value: int) -> int:
    """Return ``value`` plus one, setting every flag but carry."""
    _set(registers, Flag.HALF_CARRY, half_carry(value, 1))
    result = (value + 1) & 0xFF
    _update_flags(registers, result)
    return result


def decrement(registers: Registers, value: int) -> int:
    """Return ``value`` minus one, setting every flag but carry."""
    _set(registers, Flag.HALF_CARRY, half_carry(value, 0xFF))
    result = (value + 0xFF) & 0xFF
    _update_flags(registers, result)
    return result


def rotate_left(registers: Registers) -> int:
    """RLC: rotate the accumulator left; bit 7 goes to bit 0 and carry."""
    high = bool(registers.a & 0x80)
    registers.a = (registers.a << 1) | int(high)
    _set(registers, Flag.CARRY, high)
    return registers.a


def rotate_right(registers: Registers) -> int:
    """RRC: rotate the accumulator right; bit 0 goes to bit 7 and carry."""
    low = bool(registers.a & 0x01)
    registers.a = (registers.a >> 1) | (0x80 if low else 0)
    _set(registers, Flag.CARRY, low)
    return registers.a


def rotate_left_through_carry(registers: Registers) -> int:
    """RAL: rotate the accumulator left through the carry flag."""
    high = bool(registers.a & 0x80)
    carry_in = 1 if registers.flags & Flag.CARRY else 0
    registers.a = (registers.a << 1) | carry_in
    _set(registers, Flag.CARRY, high)
    return registers.a


def rotate_right_through_carry(registers: Registers) -> int:
    """RAR: rotate the accumulator right through the carry flag."""
    low = bool(registers.a & 0x01)
    carry_in = 0x80 if registers.flags & Flag.CARRY else 0
    registers.a = (registers.a >> 1) | carry_in
    _set(registers, Flag.CARRY, low)
    return registers.a


def decimal_adjust(registers: Registers) -> int:
    """DAA: adjust the accumulator to two BCD digits after an addition."""
    value = registers.a
    adjustment = 0
    if (value & 0x0F) > 9 or registers.flags & Flag.HALF_CARRY:
        adjustment += 0x06
    value = (value + adjustment) & 0xFF
    if (value >> 4) > 9 or registers.flags & Flag.CARRY:
        adjustment += 0x60
    return add(registers, adjustment)
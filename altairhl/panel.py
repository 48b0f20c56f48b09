"""Front panel support: commands, switch decoding and LED panel rendering."""

from __future__ import annotations

from enum import IntEnum
from typing import Callable, List, NamedTuple, Optional

PANEL_PIXELS = 64
_ROW = 8

# Rows of the 8x8 LED panel that show each value.
STATUS_ROW = 0
DATA_ROW = 3
BUS_HIGH_ROW = 6
BUS_LOW_ROW = 7

MIN_COLOR = 3
MAX_COLOR = 15
DEFAULT_COLOR = (19 << 1)

# Bit-reversal of each 4-bit value.
_REVERSE_NIBBLE = (0x0, 0x8, 0x4, 0xC, 0x2, 0xA, 0x6, 0xE,
                   0x1, 0x9, 0x5, 0xD, 0x3, 0xB, 0x7, 0xF)


class CpuOperatingMode(IntEnum):
    CPU_RUNNING = 1
    CPU_STOPPED = 2


class ButtonMode(IntEnum):
    CONTROL_MODE = 0
    INPUT_MODE = 1


class AltairCommand(IntEnum):
    NOP = 0x00
    RUN_CMD = 0x01
    STOP_CMD = 0x02
    SINGLE_STEP = 0x08
    EXAMINE = 0x20
    EXAMINE_NEXT = 0x10
    DEPOSIT = 0x80
    DEPOSIT_NEXT = 0x40
    DISASSEMBLE = 0x100
    TRACE = 0x101
    RESET = 0x102
    LOAD_ALTAIR_BASIC = 0x103


class SwitchState(NamedTuple):
    """Command switches and address switches read from the front panel."""

    command: int
    address: int


def encode_panel_word(status: int, data: int, bus: int) -> bytes:
    """Pack status, data and address lights into the four bytes sent to the panel."""
    word = ((status & 0xFF) << 24) | ((data & 0xFF) << 16) | (bus & 0xFFFF)
    return word.to_bytes(4, "little")


def decode_switches(raw: bytes) -> SwitchState:
    """Decode the three bytes read back from the panel's switch shift registers."""
    if len(raw) != 3:
        raise ValueError(f"expected 3 switch bytes, got {len(raw)}")
    word = int.from_bytes(bytes(raw), "little")
    command = (word >> 16) & 0xFF
    address = word & 0xFFFF
    address = (
        _REVERSE_NIBBLE[(address & 0xF000) >> 12] << 8
        | _REVERSE_NIBBLE[(address & 0x0F00) >> 8] << 12
        | _REVERSE_NIBBLE[(address & 0x00F0) >> 4]
        | _REVERSE_NIBBLE[address & 0x000F] << 4
    )
    return SwitchState(command, ~address & 0xFFFF)


class SenseHatPanel:
    """Shows status, data and address lights on an 8x8 LED matrix."""

    def __init__(self) -> None:
        self.color = DEFAULT_COLOR

    def set_color(self, color: int) -> None:
        """Pick a brightness; non-zero values are clamped to 3..15."""
        if color != 0 and color < MIN_COLOR:
            color = MIN_COLOR
        if color > MAX_COLOR:
            color = MAX_COLOR
        self.color = (color + 16) << 1

    def _row(self, value: int) -> List[int]:
        return [self.color if value & (1 << bit) else 0 for bit in range(_ROW)]

    def render(self, status: int, data: int, bus: int) -> List[int]:
        """Return the 64 pixel values for the given lights, least significant bit first."""
        pixels = [0] * PANEL_PIXELS
        for row, value in (
            (STATUS_ROW, status),
            (DATA_ROW, data),
            (BUS_HIGH_ROW, (bus >> 8) & 0xFF),
            (BUS_LOW_ROW, bus & 0xFF),
        ):
            pixels[row * _ROW:(row + 1) * _ROW] = self._row(value)
        return pixels


class FrontPanelSwitches:
    """Latches front-panel switch readings and reports new commands."""

    def __init__(self) -> None:
        self.last_command = int(AltairCommand.NOP)
        self.command = int(AltairCommand.NOP)
        self.bus = 0

    def process(self, raw: bytes, handler: Optional[Callable[[], None]] = None) -> bool:
        """Take one switch reading; return True when the command switches changed.

        ``handler`` is called when a new, non-zero command is latched.
        """
        state = decode_switches(raw)
        self.bus = state.address
        if state.command == self.last_command:
            return False
        self.last_command = state.command
        self.command = state.command
        if handler is not None and state.command:
            handler()
        return True
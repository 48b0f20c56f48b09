"""Bitmap helpers for 8x8 LED panels: font glyphs, bit reversal, rotation and colouring."""

from __future__ import annotations

from typing import Iterable, List, Sequence, Union

PANEL_ROWS = 8
PANEL_PIXELS = PANEL_ROWS * 8

FIRST_CHARACTER = 32

# Matrix font, one eight-row glyph per printable character from space (32) to 'z' (122).
_FONT: tuple = (
    (0x00, 0x00, 0x00, 0x00, 0x00, 0x00, 0x00, 0x00),  # space
    (0x00, 0x08, 0x08, 0x08, 0x08, 0x08, 0x00, 0x08),  # !
    (0x00, 0x14, 0x14, 0x14, 0x00, 0x00, 0x00, 0x40),  # "
    (0x00, 0x14, 0x14, 0x3E, 0x14, 0x3E, 0x14, 0x54),  # #
    (0x00, 0x08, 0x1E, 0x28, 0x1C, 0x0A, 0x3C, 0x08),  # $
    (0x00, 0x30, 0x32, 0x04, 0x08, 0x10, 0x26, 0x46),  # %
    (0x00, 0x18, 0x24, 0x28, 0x10, 0x2A, 0x24, 0x5A),  # &
    (0x00, 0x0C, 0x04, 0x08, 0x00, 0x00, 0x00, 0x40),  # '
    (0x00, 0x08, 0x10, 0x20, 0x20, 0x20, 0x10, 0x08),  # (
    (0x00, 0x08, 0x04, 0x02, 0x02, 0x02, 0x04, 0x08),  # )
    (0x00, 0x00, 0x08, 0x1C, 0x3E, 0x1C, 0x08, 0x00),  # *
    (0x00, 0x00, 0x08, 0x08, 0x3E, 0x08, 0x08, 0x00),  # +
    (0x00, 0x00, 0x00, 0x00, 0x00, 0x00, 0x08, 0x10),  # ,
    (0x00, 0x00, 0x00, 0x00, 0x3E, 0x00, 0x00, 0x00),  # -
    (0x00, 0x00, 0x00, 0x00, 0x00, 0x00, 0x00, 0x08),  # .
    (0x00, 0x00, 0x02, 0x04, 0x08, 0x10, 0x20, 0x00),  # /
    (0x00, 0x1C, 0x22, 0x22, 0x22, 0x22, 0x22, 0x1C),  # 0
    (0x00, 0x08, 0x18, 0x28, 0x08, 0x08, 0x08, 0x08),  # 1
    (0x00, 0x1C, 0x22, 0x02, 0x0C, 0x10, 0x20, 0x3E),  # 2
    (0x00, 0x1C, 0x22, 0x02, 0x0C, 0x02, 0x22, 0x1C),  # 3
    (0x00, 0x04, 0x0C, 0x14, 0x24, 0x1E, 0x04, 0x04),  # 4
    (0x00, 0x3E, 0x20, 0x20, 0x3E, 0x02, 0x02, 0x7E),  # 5
    (0x00, 0x0C, 0x10, 0x20, 0x3C, 0x22, 0x22, 0x1C),  # 6
    (0x00, 0x3E, 0x02, 0x04, 0x08, 0x10, 0x10, 0x50),  # 7
    (0x00, 0x1C, 0x22, 0x22, 0x1C, 0x22, 0x22, 0x5C),  # 8
    (0x00, 0x1C, 0x22, 0x22, 0x1E, 0x02, 0x02, 0x5C),  # 9
    (0x00, 0x00, 0x08, 0x00, 0x00, 0x00, 0x08, 0x00),  # :
    (0x00, 0x00, 0x08, 0x00, 0x00, 0x00, 0x08, 0x10),  # ;
    (0x00, 0x04, 0x08, 0x10, 0x20, 0x10, 0x08, 0x04),  # <
    (0x00, 0x00, 0x00, 0x3E, 0x00, 0x3E, 0x00, 0x00),  # =
    (0x00, 0x10, 0x08, 0x04, 0x02, 0x04, 0x08, 0x10),  # >
    (0x00, 0x1C, 0x22, 0x02, 0x0C, 0x08, 0x00, 0x08),  # ?
    (0x00, 0x1C, 0x22, 0x02, 0x1A, 0x2A, 0x2A, 0x1C),  # @
    (0x00, 0x1C, 0x22, 0x22, 0x22, 0x3E, 0x22, 0x22),  # A
    (0x00, 0x3C, 0x22, 0x22, 0x3C, 0x22, 0x22, 0x3C),  # B
    (0x00, 0x1C, 0x22, 0x20, 0x20, 0x20, 0x22, 0x1C),  # C
    (0x00, 0x38, 0x24, 0x22, 0x22, 0x22, 0x24, 0x38),  # D
    (0x00, 0x3E, 0x20, 0x20, 0x3C, 0x20, 0x20, 0x3E),  # E
    (0x00, 0x3E, 0x20, 0x20, 0x3C, 0x20, 0x20, 0x20),  # F
    (0x00, 0x1C, 0x22, 0x20, 0x2E, 0x22, 0x22, 0x1E),  # G
    (0x00, 0x22, 0x22, 0x22, 0x3E, 0x22, 0x22, 0x22),  # H
    (0x00, 0x1C, 0x08, 0x08, 0x08, 0x08, 0x08, 0x1C),  # I
    (0x00, 0x0E, 0x04, 0x04, 0x04, 0x04, 0x24, 0x18),  # J
    (0x00, 0x22, 0x24, 0x28, 0x30, 0x28, 0x24, 0x22),  # K
    (0x00, 0x20, 0x20, 0x20, 0x20, 0x20, 0x20, 0x3E),  # L
    (0x00, 0x22, 0x36, 0x2A, 0x2A, 0x22, 0x22, 0x22),  # M
    (0x00, 0x22, 0x22, 0x32, 0x2A, 0x26, 0x22, 0x22),  # N
    (0x00, 0x1C, 0x22, 0x22, 0x22, 0x22, 0x22, 0x1C),  # O
    (0x00, 0x3C, 0x22, 0x22, 0x3C, 0x20, 0x20, 0x20),  # P
    (0x00, 0x1C, 0x22, 0x22, 0x22, 0x2A, 0x24, 0x1A),  # Q
    (0x00, 0x3C, 0x22, 0x22, 0x3C, 0x28, 0x24, 0x22),  # R
    (0x00, 0x1E, 0x20, 0x20, 0x1C, 0x02, 0x02, 0x3C),  # S
    (0x00, 0x3E, 0x08, 0x08, 0x08, 0x08, 0x08, 0x08),  # T
    (0x00, 0x22, 0x22, 0x22, 0x22, 0x22, 0x22, 0x1C),  # U
    (0x00, 0x22, 0x22, 0x22, 0x22, 0x22, 0x14, 0x08),  # V
    (0x00, 0x22, 0x22, 0x22, 0x2A, 0x2A, 0x2A, 0x14),  # W
    (0x00, 0x22, 0x22, 0x14, 0x08, 0x14, 0x22, 0x22),  # X
    (0x00, 0x22, 0x22, 0x22, 0x1C, 0x08, 0x08, 0x08),  # Y
    (0x00, 0x3E, 0x02, 0x04, 0x08, 0x10, 0x20, 0x3E),  # Z
    (0x00, 0x30, 0x20, 0x20, 0x20, 0x20, 0x20, 0x30),  # [
    (0x00, 0x00, 0x20, 0x10, 0x08, 0x04, 0x02, 0x00),  # backslash
    (0x00, 0x0E, 0x02, 0x02, 0x02, 0x02, 0x02, 0x0E),  # ]
    (0x00, 0x08, 0x14, 0x00, 0x00, 0x00, 0x00, 0x00),  # ^
    (0x00, 0x00, 0x00, 0x00, 0x00, 0x00, 0x00, 0x3E),  # _
    (0x00, 0x08, 0x04, 0x00, 0x00, 0x00, 0x00, 0x00),  # `
    (0x00, 0x00, 0x00, 0x1C, 0x02, 0x1E, 0x22, 0x1E),  # a
    (0x00, 0x20, 0x20, 0x20, 0x2C, 0x32, 0x22, 0x3C),  # b
    (0x00, 0x00, 0x00, 0x3C, 0x20, 0x20, 0x22, 0x3C),  # c
    (0x00, 0x02, 0x02, 0x02, 0x1A, 0x26, 0x22, 0x1E),  # d
    (0x00, 0x00, 0x00, 0x1C, 0x22, 0x3E, 0x20, 0x1C),  # e
    (0x00, 0x0C, 0x12, 0x10, 0x38, 0x10, 0x10, 0x10),  # f
    (0x00, 0x00, 0x1E, 0x22, 0x22, 0x1E, 0x02, 0x1C),  # g
    (0x00, 0x20, 0x20, 0x20, 0x2C, 0x32, 0x22, 0x22),  # h
    (0x00, 0x00, 0x08, 0x00, 0x08, 0x08, 0x08, 0x08),  # i
    (0x00, 0x04, 0x00, 0x0C, 0x04, 0x04, 0x24, 0x18),  # j
    (0x00, 0x20, 0x20, 0x24, 0x28, 0x30, 0x28, 0x24),  # k
    (0x00, 0x18, 0x08, 0x08, 0x08, 0x08, 0x08, 0x1C),  # l
    (0x00, 0x00, 0x00, 0x34, 0x2A, 0x2A, 0x22, 0x22),  # m
    (0x00, 0x00, 0x00, 0x2C, 0x32, 0x22, 0x22, 0x22),  # n
    (0x00, 0x00, 0x00, 0x1C, 0x22, 0x22, 0x22, 0x1C),  # o
    (0x00, 0x00, 0x00, 0x3C, 0x22, 0x3C, 0x20, 0x20),  # p
    (0x00, 0x00, 0x00, 0x1A, 0x26, 0x1E, 0x02, 0x02),  # q
    (0x00, 0x00, 0x00, 0x2C, 0x32, 0x20, 0x20, 0x20),  # r
    (0x00, 0x00, 0x00, 0x1C, 0x20, 0x1C, 0x02, 0x3C),  # s
    (0x00, 0x10, 0x10, 0x38, 0x10, 0x10, 0x12, 0x0C),  # t
    (0x00, 0x00, 0x00, 0x22, 0x22, 0x22, 0x26, 0x1A),  # u
    (0x00, 0x00, 0x00, 0x22, 0x22, 0x22, 0x14, 0x28),  # v
    (0x00, 0x00, 0x00, 0x22, 0x22, 0x2A, 0x2A, 0x1C),  # w
    (0x00, 0x00, 0x00, 0x22, 0x14, 0x08, 0x14, 0x22),  # x
    (0x00, 0x00, 0x00, 0x22, 0x22, 0x1E, 0x02, 0x1C),  # y
    (0x00, 0x00, 0x00, 0x3E, 0x04, 0x08, 0x10, 0x3E),  # z
)

LAST_CHARACTER = FIRST_CHARACTER + len(_FONT) - 1

# Pixel colours selectable with Graphics.set_color, indexed by colour number.
COLORS = {0: 20480, 1: 640, 2: 40}
DEFAULT_COLOR = 40

_WORD = 0xFFFFFFFF


def reverse_byte(data: int) -> int:
    """Return the byte with its bit order reversed."""
    data &= 0xFF
    data = (data & 0xF0) >> 4 | (data & 0x0F) << 4
    data = (data & 0xCC) >> 2 | (data & 0x33) << 2
    data = (data & 0xAA) >> 1 | (data & 0x55) << 1
    return data & 0xFF


def reverse_panel(rows: Iterable[int]) -> List[int]:
    """Mirror a bitmap left to right by reversing every row."""
    return [reverse_byte(row) for row in rows]


def rotate_counterclockwise(rows: Sequence[int], m: int = 1, n: int = 1) -> List[int]:
    """Rotate an 8x8 bit matrix a quarter turn counterclockwise.

    Rows are read from ``rows[0], rows[m], ... rows[7*m]`` and written to
    positions ``0, n, ... 7*n`` of the returned list; other positions are zero.
    """
    if m < 0 or n < 1:
        raise ValueError(f"invalid strides m={m}, n={n}")
    if len(rows) <= 7 * m:
        raise ValueError(f"need at least {7 * m + 1} rows for stride {m}, got {len(rows)}")
    a = [rows[i * m] & 0xFF for i in range(PANEL_ROWS)]

    x = (a[0] << 24) | (a[1] << 16) | (a[2] << 8) | a[3]
    y = (a[4] << 24) | (a[5] << 16) | (a[6] << 8) | a[7]

    t = (x ^ (x >> 7)) & 0x00AA00AA
    x = (x ^ t ^ (t << 7)) & _WORD
    t = (y ^ (y >> 7)) & 0x00AA00AA
    y = (y ^ t ^ (t << 7)) & _WORD

    t = (x ^ (x >> 14)) & 0x0000CCCC
    x = (x ^ t ^ (t << 14)) & _WORD
    t = (y ^ (y >> 14)) & 0x0000CCCC
    y = (y ^ t ^ (t << 14)) & _WORD

    t = (x & 0xF0F0F0F0) | ((y >> 4) & 0x0F0F0F0F)
    y = ((x << 4) & 0xF0F0F0F0) | (y & 0x0F0F0F0F)
    x = t

    out = [0] * (7 * n + 1)
    for index, value in enumerate((x >> 24, x >> 16, x >> 8, x, y >> 24, y >> 16, y >> 8, y)):
        out[index * n] = value & 0xFF
    return out


def load_character(character: Union[int, str]) -> List[int]:
    """Return the glyph for ``character`` as eight rows, bottom row first."""
    code = ord(character) if isinstance(character, str) else character
    if isinstance(character, str) and len(character) != 1:
        raise ValueError(f"expected a single character, got {character!r}")
    if not FIRST_CHARACTER <= code <= LAST_CHARACTER:
        raise ValueError(f"no glyph for character code {code}")
    return list(reversed(_FONT[code - FIRST_CHARACTER]))


class Graphics:
    """Turns one-bit bitmaps into pixel values of the selected colour."""

    def __init__(self) -> None:
        self.pixel_color = DEFAULT_COLOR

    def set_color(self, color: int) -> None:
        """Choose colour 0, 1 or 2; any other number leaves the colour unchanged."""
        self.pixel_color = COLORS.get(color, self.pixel_color)

    def bitmap_to_rgb(self, bitmap: Sequence[int]) -> List[int]:
        """Expand eight rows into 64 pixels, most significant bit first."""
        if len(bitmap) != PANEL_ROWS:
            raise ValueError(f"bitmap must have {PANEL_ROWS} rows, got {len(bitmap)}")
        return [
            self.pixel_color if row & (0x80 >> column) else 0
            for row in bitmap
            for column in range(8)
        ]
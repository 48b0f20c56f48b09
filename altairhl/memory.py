"""Flat byte-addressable memory for the 8080 address space."""

from __future__ import annotations

DEFAULT_SIZE = 64 * 1024


class Memory:
    """Byte memory whose addresses wrap around its size, like a 16-bit bus."""

    def __init__(self, size: int = DEFAULT_SIZE) -> None:
        if size <= 0:
            raise ValueError(f"memory size must be positive, got {size}")
        self._data = bytearray(size)

    def __len__(self) -> int:
        return len(self._data)

    def _wrap(self, address: int) -> int:
        return address % len(self._data)

    def read8(self, address: int) -> int:
        """Return the byte stored at ``address``."""
        return self._data[self._wrap(address)]

    def write8(self, address: int, value: int) -> None:
        """Store the low eight bits of ``value`` at ``address``."""
        self._data[self._wrap(address)] = value & 0xFF

    def read16(self, address: int) -> int:
        """Return the little-endian word starting at ``address``."""
        return self.read8(address) | (self.read8(address + 1) << 8)

    def write16(self, address: int, value: int) -> None:
        """Store ``value`` as a little-endian word starting at ``address``."""
        self.write8(address, value & 0xFF)
        self.write8(address + 1, (value >> 8) & 0xFF)

    def load(self, address: int, data: bytes) -> None:
        """Copy ``data`` into memory starting at ``address``."""
        start = self._wrap(address)
        end = start + len(data)
        if end > len(self._data):
            raise ValueError(
                f"{len(data)} bytes at {start:#06x} do not fit in {len(self._data)} bytes of memory"
            )
        self._data[start:end] = data
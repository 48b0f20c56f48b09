"""88-DCDD floppy disk controller backed by disk image files."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import IntFlag
from typing import BinaryIO, Iterable, Optional

logger = logging.getLogger(__name__)

SECTOR_SIZE = 137
SECTORS_PER_TRACK = 32
TRACK_SIZE = SECTORS_PER_TRACK * SECTOR_SIZE
DRIVE_COUNT = 4


class Status(IntFlag):
    """Status register bits; each is active low."""

    ENWD = 1
    MOVE_HEAD = 2
    HEAD = 4
    IE = 32
    TRACK_0 = 64
    NRDA = 128


class Control(IntFlag):
    STEP_IN = 1
    STEP_OUT = 2
    HEAD_LOAD = 4
    HEAD_UNLOAD = 8
    IE = 16
    ID = 32
    HCS = 64
    WE = 128


@dataclass
class Disk:
    """State of one drive and its sector buffer."""

    file: Optional[BinaryIO] = None
    track: int = 0
    sector: int = 0
    status: int = 0
    write_status: int = 0
    disk_pointer: int = 0
    sector_pointer: int = 0
    sector_data: bytearray = field(default_factory=lambda: bytearray(SECTOR_SIZE + 2))
    sector_dirty: bool = False
    have_sector_data: bool = False

    def _assert_status(self, bit: int) -> None:
        self.status &= ~bit & 0xFF

    def _deassert_status(self, bit: int) -> None:
        self.status |= bit

    def _seek(self, offset: int) -> None:
        if self.file is not None:
            self.file.seek(offset)
        self.disk_pointer = offset

    def _write_sector(self) -> None:
        written = 0
        if self.file is not None:
            written = self.file.write(bytes(self.sector_data[:SECTOR_SIZE])) or 0
        if written != SECTOR_SIZE:
            logger.debug("Sector write failed. Wrote %d", written)
        self.sector_pointer = 0
        self.sector_dirty = False


class DiskController:
    """Four-drive controller driven through the 8080 I/O ports 8, 9 and 10."""

    def __init__(self, files: Iterable[Optional[BinaryIO]] = ()) -> None:
        files = list(files)
        if len(files) > DRIVE_COUNT:
            raise ValueError(f"at most {DRIVE_COUNT} disk images, got {len(files)}")
        files += [None] * (DRIVE_COUNT - len(files))
        self.disks = [Disk(file=f) for f in files]
        self.current_disk = 0

    @property
    def current(self) -> Disk:
        return self.disks[self.current_disk]

    def select(self, value: int) -> None:
        """Select a drive; numbers beyond the last drive select drive 0."""
        index = value & 0x0F
        self.current_disk = index if index < DRIVE_COUNT else 0

    def status(self) -> int:
        return self.current.status

    def _move_to_track(self, disk: Disk) -> None:
        offset = disk.track * TRACK_SIZE
        if disk.sector_dirty:
            disk._write_sector()
        disk._seek(offset)
        disk.have_sector_data = False
        disk.sector_pointer = 0

    def function(self, value: int) -> None:
        """Apply the control bits written to the function port."""
        disk = self.current
        if value & Control.STEP_IN:
            disk.track = (disk.track + 1) & 0xFF
            disk.sector = 0
            if disk.track != 0:
                disk._deassert_status(Status.TRACK_0)
            self._move_to_track(disk)
        if value & Control.STEP_OUT:
            if disk.track > 0:
                disk.track -= 1
            if disk.track == 0:
                disk._assert_status(Status.TRACK_0)
            disk.sector = 0
            self._move_to_track(disk)
        if value & Control.HEAD_LOAD:
            disk._assert_status(Status.HEAD)
            disk._assert_status(Status.NRDA)
        if value & Control.HEAD_UNLOAD:
            disk._deassert_status(Status.HEAD)
        if value & Control.WE:
            disk._assert_status(Status.ENWD)
            disk.write_status = 0

    def sector(self) -> int:
        """Advance to the next sector and return its position byte."""
        disk = self.current
        if disk.sector == SECTORS_PER_TRACK:
            disk.sector = 0
        if disk.sector_dirty:
            disk._write_sector()
        disk.sector_pointer = 0
        disk._seek(disk.track * TRACK_SIZE + disk.sector * SECTOR_SIZE)
        disk.have_sector_data = False
        position = (disk.sector << 1) & 0xFF
        disk.sector = (disk.sector + 1) & 0xFF
        return position

    def write(self, value: int) -> None:
        """Buffer one byte; the sector is written out after the last byte."""
        disk = self.current
        if disk.sector_pointer < len(disk.sector_data):
            disk.sector_data[disk.sector_pointer] = value & 0xFF
        disk.sector_pointer = (disk.sector_pointer + 1) & 0xFF
        disk.sector_dirty = True
        if disk.write_status == SECTOR_SIZE:
            disk._write_sector()
            disk.write_status = 0
            disk._deassert_status(Status.ENWD)
        else:
            disk.write_status = (disk.write_status + 1) & 0xFF

    def read(self) -> int:
        """Return the next byte of the current sector, fetching it if needed."""
        disk = self.current
        if not disk.have_sector_data:
            disk.sector_pointer = 0
            disk.sector_data[:] = bytes(len(disk.sector_data))
            chunk = disk.file.read(SECTOR_SIZE) if disk.file is not None else b""
            chunk = chunk or b""
            disk.sector_data[: len(chunk)] = chunk
            if len(chunk) != SECTOR_SIZE:
                logger.debug("Sector read failed. Read %d", len(chunk))
            disk.have_sector_data = len(chunk) == SECTOR_SIZE
        pointer = disk.sector_pointer
        value = disk.sector_data[pointer] if pointer < len(disk.sector_data) else 0
        disk.sector_pointer = (pointer + 1) & 0xFF
        return value
"""Flat 4 KiB memory with the built-in hex font."""

from __future__ import annotations

import logging
from typing import Iterable

from .constants import (
    ADDRESS_MASK,
    BYTE_MASK,
    FONT_BASE,
    FONT_DATA,
    FONT_GLYPH_SIZE,
    MAX_PROGRAM_SIZE,
    MEMORY_SIZE,
    PROGRAM_START,
)
from .errors import MemoryOutOfRange, ProgramTooLarge

logger = logging.getLogger(__name__)


class Memory:
    """Owned byte buffer; callers only ever see masked addresses."""

    def __init__(self) -> None:
        self._data = bytearray(MEMORY_SIZE)
        self._install_font()

    def _install_font(self) -> None:
        for digit, glyph in enumerate(FONT_DATA):
            start = FONT_BASE + digit * FONT_GLYPH_SIZE
            self._data[start : start + FONT_GLYPH_SIZE] = bytes(glyph)

    def _resolve(self, address: int) -> int:
        address &= ADDRESS_MASK
        if address >= len(self._data):
            raise MemoryOutOfRange(f"address 0x{address:X} outside memory")
        return address

    def __len__(self) -> int:
        return len(self._data)

    def clear(self) -> None:
        """Zero the whole space and re-install the font."""

        self._data[:] = bytes(MEMORY_SIZE)
        self._install_font()

    def read_byte(self, address: int) -> int:
        return self._data[self._resolve(address)]

    def write_byte(self, address: int, value: int) -> None:
        """Store one byte. Writes into the reserved area below 0x200 are dropped."""

        address = self._resolve(address)
        if address < PROGRAM_START:
            logger.debug(
                "Dropped write of 0x%02X to reserved address 0x%03X",
                value & BYTE_MASK,
                address,
            )
            return
        self._data[address] = value & BYTE_MASK

    def poke(self, address: int, value: int) -> None:
        """Host-side store that ignores the reserved-area protection."""

        self._data[self._resolve(address)] = value & BYTE_MASK

    def read_word(self, address: int) -> int:
        """Big-endian 16-bit read (high byte at the lower address)."""

        return (self.read_byte(address) << 8) | self.read_byte(address + 1)

    def read_block(self, address: int, length: int) -> bytes:
        """Read ``length`` consecutive bytes, wrapping at the end of memory."""

        return bytes(self.read_byte(address + offset) for offset in range(length))

    def write_block(self, address: int, data: Iterable[int]) -> None:
        for offset, value in enumerate(data):
            self.write_byte(address + offset, value)

    def load_program(self, data: bytes) -> None:
        """Copy a program image to 0x200."""

        if len(data) > MAX_PROGRAM_SIZE:
            raise ProgramTooLarge(len(data), MAX_PROGRAM_SIZE)
        self._data[PROGRAM_START : PROGRAM_START + len(data)] = bytes(data)
        logger.info("Loaded %d byte program at 0x%03X", len(data), PROGRAM_START)

    @staticmethod
    def font_address(digit: int) -> int:
        return FONT_BASE + (digit & 0xF) * FONT_GLYPH_SIZE

    def snapshot(self) -> bytes:
        return bytes(self._data)


__all__ = ["Memory"]

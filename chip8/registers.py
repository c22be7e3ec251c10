"""General-purpose registers, the address register and the program counter."""

from __future__ import annotations

from typing import List, Tuple

from .constants import (
    ADDRESS_MASK,
    BYTE_MASK,
    FLAG_REGISTER,
    INDEX_MASK,
    INSTRUCTION_SIZE,
    NUM_REGISTERS,
    PROGRAM_START,
)


class Registers:
    """V0-VF, I and PC with width masking on every write."""

    def __init__(self) -> None:
        self._v: List[int] = [0] * NUM_REGISTERS
        self._i = 0
        self._pc = PROGRAM_START

    def reset(self) -> None:
        self._v = [0] * NUM_REGISTERS
        self._i = 0
        self._pc = PROGRAM_START

    def get_v(self, index: int) -> int:
        return self._v[index & 0xF]

    def set_v(self, index: int, value: int) -> None:
        self._v[index & 0xF] = value & BYTE_MASK

    def set_flag(self, value: int) -> None:
        """Write VF. Always called after the result register."""

        self._v[FLAG_REGISTER] = value & BYTE_MASK

    @property
    def v(self) -> Tuple[int, ...]:
        return tuple(self._v)

    @property
    def i(self) -> int:
        return self._i

    @i.setter
    def i(self, value: int) -> None:
        self._i = value & INDEX_MASK

    @property
    def pc(self) -> int:
        return self._pc

    @pc.setter
    def pc(self, value: int) -> None:
        self._pc = value & ADDRESS_MASK

    def advance(self, count: int = 1) -> None:
        """Move PC forward by ``count`` instructions."""

        self.pc = self._pc + INSTRUCTION_SIZE * count

    def __repr__(self) -> str:
        regs = " ".join(f"V{idx:X}={val:02X}" for idx, val in enumerate(self._v))
        return f"Registers(PC={self._pc:03X} I={self._i:03X} {regs})"


__all__ = ["Registers"]

"""Shared pytest fixtures for CHIP-8 core tests."""

from __future__ import annotations

from typing import Iterable

import pytest

from chip8.config import MachineConfig
from chip8.emulator import Chip8Emulator


class FakeClock:
    """Manually driven clock; each read optionally advances by ``step``."""

    def __init__(self, start: float = 0.0, step: float = 0.0) -> None:
        self.now = start
        self.step = step
        self.reads = 0

    def __call__(self) -> float:
        value = self.now
        self.now += self.step
        self.reads += 1
        return value

    def advance(self, seconds: float) -> None:
        self.now += seconds


def program_bytes(words: Iterable[int]) -> bytes:
    data = bytearray()
    for word in words:
        data += word.to_bytes(2, "big")
    return bytes(data)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def emulator(clock: FakeClock):
    emu = Chip8Emulator(MachineConfig(seed=1234), clock=clock)
    yield emu
    emu.close()

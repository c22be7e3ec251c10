"""Snapshot-driven CHIP-8 CPU stepper.

This module exposes a pure stepping helper that accepts a register snapshot
and an in-memory image, executes a single instruction on a scratch machine,
and returns an updated snapshot together with the side effects of the step.
Unit tests use it to exercise one opcode at a time without building a full
emulator or program image.
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from .config import Quirks
from .constants import FLAG_REGISTER, NUM_REGISTERS, PROGRAM_START
from .cpu import CPU
from .display import Framebuffer
from .keypad import Keypad
from .memory import Memory
from .registers import Registers
from .stack import CallStack
from .timers import Timers


@dataclass
class CPURegistersSnapshot:
    """Minimal register file snapshot for the CHIP-8 core."""

    pc: int = PROGRAM_START
    v: Tuple[int, ...] = (0,) * NUM_REGISTERS
    i: int = 0
    stack: Tuple[int, ...] = ()
    delay: int = 0
    sound: int = 0

    def __post_init__(self) -> None:
        if len(self.v) != NUM_REGISTERS:
            raise ValueError(f"expected {NUM_REGISTERS} V registers, got {len(self.v)}")

    @classmethod
    def with_registers(cls, pc: int = PROGRAM_START, **values: int) -> "CPURegistersSnapshot":
        """Build a snapshot from keyword V registers, e.g. ``v3=0x10``."""

        v = [0] * NUM_REGISTERS
        extra: Dict[str, int] = {}
        for name, value in values.items():
            if name.startswith("v") and len(name) == 2:
                v[int(name[1], 16)] = value
            else:
                extra[name] = value
        return cls(pc=pc, v=tuple(v), **extra)

    @classmethod
    def capture(cls, regs: Registers, stack: CallStack, timers: Timers) -> "CPURegistersSnapshot":
        return cls(
            pc=regs.pc,
            v=regs.v,
            i=regs.i,
            stack=stack.entries(),
            delay=timers.get_delay(),
            sound=timers.get_sound(),
        )

    def apply_to(self, regs: Registers, stack: CallStack, timers: Timers) -> None:
        regs.pc = self.pc
        regs.i = self.i
        for index, value in enumerate(self.v):
            regs.set_v(index, value)
        stack.clear()
        for address in self.stack:
            stack.call(address)
        timers.set_delay(self.delay)
        timers.set_sound(self.sound)

    @property
    def vf(self) -> int:
        return self.v[FLAG_REGISTER]

    def diff(self, other: "CPURegistersSnapshot") -> Dict[str, Tuple[object, object]]:
        diffs: Dict[str, Tuple[object, object]] = {}
        for index, (before, after) in enumerate(zip(self.v, other.v)):
            if before != after:
                diffs[f"V{index:X}"] = (before, after)
        for name in ("pc", "i", "stack", "delay", "sound"):
            before = getattr(self, name)
            after = getattr(other, name)
            if before != after:
                diffs[name.upper()] = (before, after)
        return diffs


@dataclass
class MemoryWrite:
    """Memory mutation captured during a CPU step."""

    address: int
    value: int
    previous: int


class _SnapshotMemory(Memory):
    """Memory that records every store the CPU makes."""

    def __init__(self, image: Mapping[int, int]) -> None:
        super().__init__()
        for address, value in image.items():
            self.poke(address, value)
        self._writes: List[MemoryWrite] = []

    def write_byte(self, address: int, value: int) -> None:
        previous = self.read_byte(address)
        super().write_byte(address, value)
        current = self.read_byte(address)
        if current != previous:
            self._writes.append(
                MemoryWrite(address=address & 0xFFF, value=current, previous=previous)
            )

    @property
    def writes(self) -> Tuple[MemoryWrite, ...]:
        return tuple(self._writes)


@dataclass
class CPUStepResult:
    registers: CPURegistersSnapshot
    changed_registers: Dict[str, Tuple[object, object]]
    memory_writes: Tuple[MemoryWrite, ...]
    instruction_name: Optional[str]
    waiting_for_key: bool
    display: bytes = field(repr=False, default=b"")


class CPUStepper:
    """Utility that executes a single CHIP-8 instruction from a snapshot."""

    def __init__(self, *, quirks: Optional[Quirks] = None, seed: Optional[int] = 0) -> None:
        self._quirks = quirks or Quirks()
        self._seed = seed

    def step(
        self,
        registers: CPURegistersSnapshot,
        memory_image: Mapping[int, int],
        *,
        pressed_keys: Iterable[int] = (),
        display: Optional[bytes] = None,
    ) -> CPUStepResult:
        memory = _SnapshotMemory(memory_image)
        regs = Registers()
        stack = CallStack()
        timers = Timers()
        framebuffer = Framebuffer()
        keypad = Keypad()
        if display is not None:
            framebuffer.load_bytes(display)
        for key in pressed_keys:
            keypad.set_key_down(key, True)
        registers.apply_to(regs, stack, timers)

        cpu = CPU(
            memory,
            regs,
            stack,
            timers,
            framebuffer,
            keypad,
            quirks=self._quirks,
            rng=random.Random(self._seed),
        )
        instr = cpu.step()

        new_registers = CPURegistersSnapshot.capture(regs, stack, timers)
        return CPUStepResult(
            registers=new_registers,
            changed_registers=registers.diff(new_registers),
            memory_writes=memory.writes,
            instruction_name=instr.name() if instr is not None else None,
            waiting_for_key=cpu.waiting_for_key,
            display=framebuffer.to_bytes(),
        )


def program_image(words: Iterable[int], *, base: int = PROGRAM_START) -> Dict[int, int]:
    """Memory image holding big-endian instruction ``words`` from ``base``."""

    image: Dict[int, int] = {}
    for offset, word in enumerate(words):
        image[base + 2 * offset] = (word >> 8) & 0xFF
        image[base + 2 * offset + 1] = word & 0xFF
    return image


__all__ = [
    "CPUStepper",
    "CPUStepResult",
    "CPURegistersSnapshot",
    "MemoryWrite",
    "program_image",
]

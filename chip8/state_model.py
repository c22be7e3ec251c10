"""Canonical emulator state snapshots and diff utilities."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Optional, Tuple

from .constants import MachineState
from .emulator import Chip8Emulator


@dataclass(frozen=True)
class CPUState:
    """Register file, call stack and key-wait state."""

    v: Tuple[int, ...]
    i: int
    pc: int
    stack: Tuple[int, ...]
    key_wait_register: Optional[int]
    instruction_count: int


@dataclass(frozen=True)
class TimerState:
    delay: int
    sound: int
    audible: bool


@dataclass(frozen=True)
class KeypadState:
    pressed_keys: Tuple[int, ...]


@dataclass(frozen=True)
class DisplayState:
    """Framebuffer pixels, one byte per pixel, row-major."""

    pixels: bytes
    lit: int


@dataclass(frozen=True)
class EmulatorState:
    """Composite immutable snapshot of emulator subsystems."""

    machine: MachineState
    cpu: CPUState
    timers: TimerState
    keypad: KeypadState
    display: DisplayState
    memory: bytes


@dataclass(frozen=True)
class FieldDiff:
    """Difference for a single named field."""

    name: str
    before: object
    after: object


@dataclass(frozen=True)
class StateDiff:
    """Aggregated differences between two emulator states."""

    cpu: Tuple[FieldDiff, ...] = field(default_factory=tuple)
    timers: Tuple[FieldDiff, ...] = field(default_factory=tuple)
    keypad: Tuple[FieldDiff, ...] = field(default_factory=tuple)
    memory: Tuple[FieldDiff, ...] = field(default_factory=tuple)
    machine_changed: bool = False
    display_changed: bool = False

    def is_empty(self) -> bool:
        """Return True when no differences were recorded."""

        return (
            not self.cpu
            and not self.timers
            and not self.keypad
            and not self.memory
            and not self.machine_changed
            and not self.display_changed
        )


def capture_state(emulator: Chip8Emulator) -> EmulatorState:
    """Capture the current emulator state as canonical snapshot."""

    regs = emulator.registers
    return EmulatorState(
        machine=emulator.state,
        cpu=CPUState(
            v=regs.v,
            i=regs.i,
            pc=regs.pc,
            stack=emulator.stack.entries(),
            key_wait_register=emulator.cpu.key_wait_register,
            instruction_count=emulator.instruction_count,
        ),
        timers=TimerState(
            delay=emulator.timers.get_delay(),
            sound=emulator.timers.get_sound(),
            audible=emulator.timers.is_sound_audible(),
        ),
        keypad=KeypadState(pressed_keys=emulator.keypad.pressed_keys()),
        display=DisplayState(
            pixels=emulator.framebuffer.to_bytes(),
            lit=emulator.framebuffer.pixel_count(),
        ),
        memory=emulator.memory.snapshot(),
    )


def _diff_fields(before: object, after: object) -> Tuple[FieldDiff, ...]:
    diffs = []
    for item in fields(before):  # type: ignore[arg-type]
        old = getattr(before, item.name)
        new = getattr(after, item.name)
        if old != new:
            diffs.append(FieldDiff(item.name, old, new))
    return tuple(diffs)


def _diff_memory(before: bytes, after: bytes) -> Tuple[FieldDiff, ...]:
    return tuple(
        FieldDiff(f"0x{addr:03X}", old, new)
        for addr, (old, new) in enumerate(zip(before, after))
        if old != new
    )


def diff_states(before: Optional[EmulatorState], after: EmulatorState) -> StateDiff:
    """Compute per-subsystem differences; a missing ``before`` diffs nothing."""

    if before is None:
        return StateDiff()
    return StateDiff(
        cpu=_diff_fields(before.cpu, after.cpu),
        timers=_diff_fields(before.timers, after.timers),
        keypad=_diff_fields(before.keypad, after.keypad),
        memory=_diff_memory(before.memory, after.memory),
        machine_changed=before.machine != after.machine,
        display_changed=before.display.pixels != after.display.pixels,
    )


__all__ = [
    "CPUState",
    "TimerState",
    "KeypadState",
    "DisplayState",
    "EmulatorState",
    "FieldDiff",
    "StateDiff",
    "capture_state",
    "diff_states",
]

"""CHIP-8 interpreter package."""

from .config import MachineConfig, Quirks
from .constants import MachineState
from .emulator import Chip8Emulator
from .errors import (
    Chip8Error,
    DecodeError,
    ExecutionError,
    MachineHalted,
    MemoryOutOfRange,
    ProgramTooLarge,
    StackOverflow,
    StackUnderflow,
)
from .state_model import (
    CPUState,
    DisplayState,
    EmulatorState,
    FieldDiff,
    KeypadState,
    StateDiff,
    TimerState,
    capture_state,
    diff_states,
)

__all__ = [
    "Chip8Emulator",
    "MachineConfig",
    "Quirks",
    "MachineState",
    "Chip8Error",
    "ExecutionError",
    "DecodeError",
    "StackOverflow",
    "StackUnderflow",
    "MemoryOutOfRange",
    "ProgramTooLarge",
    "MachineHalted",
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

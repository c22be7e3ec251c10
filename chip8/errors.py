"""Exception hierarchy for the CHIP-8 interpreter."""

from __future__ import annotations

from typing import Optional


class Chip8Error(Exception):
    """Base class for every interpreter error."""


class ExecutionError(Chip8Error):
    """Fatal condition raised while executing a program.

    The engine attaches the address of the faulting instruction and its
    instruction word via :meth:`with_context` before reporting upward.
    """

    def __init__(
        self,
        message: str,
        *,
        pc: Optional[int] = None,
        opcode: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.pc = pc
        self.opcode = opcode

    def with_context(self, pc: int, opcode: int) -> "ExecutionError":
        if self.pc is None:
            self.pc = pc
        if self.opcode is None:
            self.opcode = opcode
        return self

    def __str__(self) -> str:
        parts = [self.message]
        if self.pc is not None:
            parts.append(f"pc=0x{self.pc:03X}")
        if self.opcode is not None:
            parts.append(f"opcode=0x{self.opcode:04X}")
        return " ".join(parts)


class DecodeError(ExecutionError):
    """Instruction word with no assigned meaning."""

    def __init__(self, word: int, *, pc: Optional[int] = None) -> None:
        super().__init__("unrecognized instruction", pc=pc, opcode=word & 0xFFFF)


class StackOverflow(ExecutionError):
    """CALL with a full call stack."""


class StackUnderflow(ExecutionError):
    """RET with an empty call stack."""


class MemoryOutOfRange(ExecutionError):
    """An address escaped masking. Indicates an interpreter bug."""


class ProgramTooLarge(Chip8Error):
    """Program image does not fit between 0x200 and the end of memory."""

    def __init__(self, size: int, limit: int) -> None:
        super().__init__(f"program is {size} bytes, at most {limit} fit in memory")
        self.size = size
        self.limit = limit


class MachineHalted(Chip8Error):
    """Raised when stepping an engine that a fatal error already stopped."""

    def __init__(self, reason: Optional[ExecutionError]) -> None:
        super().__init__(f"machine halted: {reason}")
        self.reason = reason


__all__ = [
    "Chip8Error",
    "ExecutionError",
    "DecodeError",
    "StackOverflow",
    "StackUnderflow",
    "MemoryOutOfRange",
    "ProgramTooLarge",
    "MachineHalted",
]

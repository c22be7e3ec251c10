from .decode import decode
from .opcodes import MNEMONICS, Instruction, Opcode

__all__ = ["decode", "Instruction", "Opcode", "MNEMONICS"]

"""Instruction set tags and the decoded instruction record."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Dict


class Opcode(enum.Enum):
    """The 35 CHIP-8 operations."""

    CLS = enum.auto()  # 00E0
    RET = enum.auto()  # 00EE
    SYS = enum.auto()  # 0NNN
    JP = enum.auto()  # 1NNN
    CALL = enum.auto()  # 2NNN
    SE_IMM = enum.auto()  # 3XNN
    SNE_IMM = enum.auto()  # 4XNN
    SE_REG = enum.auto()  # 5XY0
    LD_IMM = enum.auto()  # 6XNN
    ADD_IMM = enum.auto()  # 7XNN
    LD_REG = enum.auto()  # 8XY0
    OR = enum.auto()  # 8XY1
    AND = enum.auto()  # 8XY2
    XOR = enum.auto()  # 8XY3
    ADD_REG = enum.auto()  # 8XY4
    SUB = enum.auto()  # 8XY5
    SHR = enum.auto()  # 8XY6
    SUBN = enum.auto()  # 8XY7
    SHL = enum.auto()  # 8XYE
    SNE_REG = enum.auto()  # 9XY0
    LD_I = enum.auto()  # ANNN
    JP_V0 = enum.auto()  # BNNN
    RND = enum.auto()  # CXNN
    DRW = enum.auto()  # DXYN
    SKP = enum.auto()  # EX9E
    SKNP = enum.auto()  # EXA1
    LD_V_DT = enum.auto()  # FX07
    LD_V_K = enum.auto()  # FX0A
    LD_DT_V = enum.auto()  # FX15
    LD_ST_V = enum.auto()  # FX18
    ADD_I_V = enum.auto()  # FX1E
    LD_F_V = enum.auto()  # FX29
    LD_B_V = enum.auto()  # FX33
    LD_MEM_V = enum.auto()  # FX55
    LD_V_MEM = enum.auto()  # FX65

    @property
    def mnemonic(self) -> str:
        return MNEMONICS[self]


MNEMONICS: Dict[Opcode, str] = {
    Opcode.CLS: "CLS",
    Opcode.RET: "RET",
    Opcode.SYS: "SYS",
    Opcode.JP: "JP",
    Opcode.CALL: "CALL",
    Opcode.SE_IMM: "SE",
    Opcode.SNE_IMM: "SNE",
    Opcode.SE_REG: "SE",
    Opcode.LD_IMM: "LD",
    Opcode.ADD_IMM: "ADD",
    Opcode.LD_REG: "LD",
    Opcode.OR: "OR",
    Opcode.AND: "AND",
    Opcode.XOR: "XOR",
    Opcode.ADD_REG: "ADD",
    Opcode.SUB: "SUB",
    Opcode.SHR: "SHR",
    Opcode.SUBN: "SUBN",
    Opcode.SHL: "SHL",
    Opcode.SNE_REG: "SNE",
    Opcode.LD_I: "LD",
    Opcode.JP_V0: "JP",
    Opcode.RND: "RND",
    Opcode.DRW: "DRW",
    Opcode.SKP: "SKP",
    Opcode.SKNP: "SKNP",
    Opcode.LD_V_DT: "LD",
    Opcode.LD_V_K: "LD",
    Opcode.LD_DT_V: "LD",
    Opcode.LD_ST_V: "LD",
    Opcode.ADD_I_V: "ADD",
    Opcode.LD_F_V: "LD",
    Opcode.LD_B_V: "LD",
    Opcode.LD_MEM_V: "LD",
    Opcode.LD_V_MEM: "LD",
}


@dataclass(frozen=True)
class Instruction:
    """A decoded instruction word.

    All operand fields are always extracted; each opcode reads the ones it
    needs (``x``/``y`` register indices, ``n`` nibble, ``nn`` byte, ``nnn``
    address).
    """

    opcode: Opcode
    word: int
    x: int = 0
    y: int = 0
    n: int = 0
    nn: int = 0
    nnn: int = 0

    def name(self) -> str:
        return self.opcode.mnemonic

    def __str__(self) -> str:
        return f"{self.name()} ({self.word:04X})"


__all__ = ["Opcode", "MNEMONICS", "Instruction"]

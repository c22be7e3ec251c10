"""Instruction word decoder.

``decode`` is a pure function: it splits the word into its fixed fields and
selects the :class:`Opcode` from the top nibble, using a secondary key for
the groups that share a nibble.
"""

from __future__ import annotations

from typing import Dict, Optional

from ..errors import DecodeError
from .opcodes import Instruction, Opcode

# Top nibbles that map to exactly one operation.
_PRIMARY: Dict[int, Opcode] = {
    0x1: Opcode.JP,
    0x2: Opcode.CALL,
    0x3: Opcode.SE_IMM,
    0x4: Opcode.SNE_IMM,
    0x6: Opcode.LD_IMM,
    0x7: Opcode.ADD_IMM,
    0xA: Opcode.LD_I,
    0xB: Opcode.JP_V0,
    0xC: Opcode.RND,
    0xD: Opcode.DRW,
}

# 8XYN, keyed on N.
_ALU: Dict[int, Opcode] = {
    0x0: Opcode.LD_REG,
    0x1: Opcode.OR,
    0x2: Opcode.AND,
    0x3: Opcode.XOR,
    0x4: Opcode.ADD_REG,
    0x5: Opcode.SUB,
    0x6: Opcode.SHR,
    0x7: Opcode.SUBN,
    0xE: Opcode.SHL,
}

# EXNN, keyed on NN.
_KEY: Dict[int, Opcode] = {
    0x9E: Opcode.SKP,
    0xA1: Opcode.SKNP,
}

# FXNN, keyed on NN.
_MISC: Dict[int, Opcode] = {
    0x07: Opcode.LD_V_DT,
    0x0A: Opcode.LD_V_K,
    0x15: Opcode.LD_DT_V,
    0x18: Opcode.LD_ST_V,
    0x1E: Opcode.ADD_I_V,
    0x29: Opcode.LD_F_V,
    0x33: Opcode.LD_B_V,
    0x55: Opcode.LD_MEM_V,
    0x65: Opcode.LD_V_MEM,
}


def _select(word: int) -> Optional[Opcode]:
    group = (word >> 12) & 0xF
    n = word & 0xF
    nn = word & 0xFF

    if group in _PRIMARY:
        return _PRIMARY[group]
    if group == 0x0:
        if word == 0x00E0:
            return Opcode.CLS
        if word == 0x00EE:
            return Opcode.RET
        return Opcode.SYS
    if group == 0x5:
        return Opcode.SE_REG if n == 0 else None
    if group == 0x9:
        return Opcode.SNE_REG if n == 0 else None
    if group == 0x8:
        return _ALU.get(n)
    if group == 0xE:
        return _KEY.get(nn)
    if group == 0xF:
        return _MISC.get(nn)
    return None


def decode(word: int) -> Instruction:
    """Decode a 16-bit instruction word; raises :class:`DecodeError`."""

    word &= 0xFFFF
    opcode = _select(word)
    if opcode is None:
        raise DecodeError(word)
    return Instruction(
        opcode=opcode,
        word=word,
        x=(word >> 8) & 0xF,
        y=(word >> 4) & 0xF,
        n=word & 0xF,
        nn=word & 0xFF,
        nnn=word & 0xFFF,
    )


__all__ = ["decode"]

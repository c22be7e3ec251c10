import pytest

from chip8.errors import DecodeError
from chip8.instr import Instruction, Opcode, decode

ASSIGNED = [
    (0x00E0, Opcode.CLS),
    (0x00EE, Opcode.RET),
    (0x0123, Opcode.SYS),
    (0x1ABC, Opcode.JP),
    (0x2ABC, Opcode.CALL),
    (0x3A12, Opcode.SE_IMM),
    (0x4A12, Opcode.SNE_IMM),
    (0x5AB0, Opcode.SE_REG),
    (0x6A12, Opcode.LD_IMM),
    (0x7A12, Opcode.ADD_IMM),
    (0x8AB0, Opcode.LD_REG),
    (0x8AB1, Opcode.OR),
    (0x8AB2, Opcode.AND),
    (0x8AB3, Opcode.XOR),
    (0x8AB4, Opcode.ADD_REG),
    (0x8AB5, Opcode.SUB),
    (0x8AB6, Opcode.SHR),
    (0x8AB7, Opcode.SUBN),
    (0x8ABE, Opcode.SHL),
    (0x9AB0, Opcode.SNE_REG),
    (0xAABC, Opcode.LD_I),
    (0xBABC, Opcode.JP_V0),
    (0xCA12, Opcode.RND),
    (0xDAB5, Opcode.DRW),
    (0xEA9E, Opcode.SKP),
    (0xEAA1, Opcode.SKNP),
    (0xFA07, Opcode.LD_V_DT),
    (0xFA0A, Opcode.LD_V_K),
    (0xFA15, Opcode.LD_DT_V),
    (0xFA18, Opcode.LD_ST_V),
    (0xFA1E, Opcode.ADD_I_V),
    (0xFA29, Opcode.LD_F_V),
    (0xFA33, Opcode.LD_B_V),
    (0xFA55, Opcode.LD_MEM_V),
    (0xFA65, Opcode.LD_V_MEM),
]


def test_table_covers_every_opcode() -> None:
    assert {opcode for _, opcode in ASSIGNED} == set(Opcode)
    assert len(Opcode) == 35


@pytest.mark.parametrize("word,opcode", ASSIGNED)
def test_decode_assigned_words(word: int, opcode: Opcode) -> None:
    instr = decode(word)
    assert instr.opcode is opcode
    assert instr.word == word


@pytest.mark.parametrize(
    "word",
    [0x5AB1, 0x9ABF, 0x8AB8, 0x8ABD, 0xE000, 0xEA9F, 0xF000, 0xFAFF, 0xF166],
)
def test_decode_rejects_unassigned_words(word: int) -> None:
    with pytest.raises(DecodeError) as excinfo:
        decode(word)
    assert excinfo.value.opcode == word


def test_decode_extracts_operand_fields() -> None:
    instr = decode(0xD12F)
    assert instr == Instruction(
        opcode=Opcode.DRW, word=0xD12F, x=1, y=2, n=0xF, nn=0x2F, nnn=0x12F
    )


def test_instruction_str_uses_mnemonic() -> None:
    assert str(decode(0x6A12)) == "LD (6A12)"
    assert decode(0xFA55).name() == "LD"
    assert Opcode.SE_REG.mnemonic == "SE"


def test_decode_error_message_carries_word() -> None:
    with pytest.raises(DecodeError, match="opcode=0x5AB1"):
        decode(0x5AB1)

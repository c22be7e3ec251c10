import pytest

from chip8.config import Quirks
from chip8.display import Framebuffer
from chip8.errors import DecodeError, StackOverflow, StackUnderflow
from chip8.stepper import (
    CPURegistersSnapshot,
    CPUStepper,
    MemoryWrite,
    program_image,
)


def _step(words, *, quirks=None, pressed_keys=(), display=None, **registers):
    stepper = CPUStepper(quirks=quirks)
    snapshot = CPURegistersSnapshot.with_registers(**registers)
    return stepper.step(
        snapshot,
        program_image(words),
        pressed_keys=pressed_keys,
        display=display,
    )


# ---------------------------------------------------------------------- #
# Control flow
# ---------------------------------------------------------------------- #
def test_cls_clears_display() -> None:
    fb = Framebuffer()
    fb.draw_sprite(0, 0, bytes([0xFF]))
    result = _step([0x00E0], display=fb.to_bytes())

    assert result.instruction_name == "CLS"
    assert result.display == bytes(64 * 32)
    assert result.changed_registers == {"PC": (0x200, 0x202)}


def test_sys_is_a_no_op() -> None:
    result = _step([0x0123])
    assert result.instruction_name == "SYS"
    assert result.changed_registers == {"PC": (0x200, 0x202)}
    assert not result.memory_writes


def test_jump_sets_pc() -> None:
    result = _step([0x1ABC])
    assert result.registers.pc == 0xABC


def test_call_pushes_return_address() -> None:
    result = _step([0x2300])
    assert result.registers.pc == 0x300
    assert result.registers.stack == (0x202,)


def test_ret_pops_return_address() -> None:
    result = _step([0x00EE], stack=(0x202, 0x344))
    assert result.registers.pc == 0x344
    assert result.registers.stack == (0x202,)


def test_ret_with_empty_stack_underflows() -> None:
    with pytest.raises(StackUnderflow) as excinfo:
        _step([0x00EE])
    assert excinfo.value.pc == 0x200
    assert excinfo.value.opcode == 0x00EE


def test_call_with_full_stack_overflows() -> None:
    full = tuple(0x300 + 2 * idx for idx in range(16))
    with pytest.raises(StackOverflow):
        _step([0x2400], stack=full)


def test_unassigned_word_raises_decode_error() -> None:
    with pytest.raises(DecodeError) as excinfo:
        _step([0x5121])
    assert excinfo.value.pc == 0x200


@pytest.mark.parametrize(
    "word,registers,skipped",
    [
        (0x3A12, {"va": 0x12}, True),
        (0x3A12, {"va": 0x13}, False),
        (0x4A12, {"va": 0x13}, True),
        (0x4A12, {"va": 0x12}, False),
        (0x5AB0, {"va": 7, "vb": 7}, True),
        (0x5AB0, {"va": 7, "vb": 8}, False),
        (0x9AB0, {"va": 7, "vb": 8}, True),
        (0x9AB0, {"va": 7, "vb": 7}, False),
    ],
)
def test_conditional_skips(word: int, registers, skipped: bool) -> None:
    result = _step([word], **registers)
    assert result.registers.pc == (0x204 if skipped else 0x202)


def test_skip_key_pressed() -> None:
    assert _step([0xE19E], pressed_keys=[0xA], v1=0xA).registers.pc == 0x204
    assert _step([0xE19E], v1=0xA).registers.pc == 0x202
    assert _step([0xE1A1], v1=0xA).registers.pc == 0x204
    assert _step([0xE1A1], pressed_keys=[0xA], v1=0xA).registers.pc == 0x202


def test_skip_key_uses_low_nibble_of_vx() -> None:
    assert _step([0xE19E], pressed_keys=[0x3], v1=0x13).registers.pc == 0x204


def test_jump_with_offset() -> None:
    assert _step([0xB300], v0=0x10, v3=0x40).registers.pc == 0x310
    superchip = Quirks.for_model("superchip")
    assert _step([0xB300], quirks=superchip, v0=0x10, v3=0x40).registers.pc == 0x340


def test_jump_with_offset_wraps_to_12_bits() -> None:
    assert _step([0xBFFF], v0=0x02).registers.pc == 0x001


# ---------------------------------------------------------------------- #
# Arithmetic
# ---------------------------------------------------------------------- #
def test_load_and_add_immediate() -> None:
    assert _step([0x6A42]).registers.v[0xA] == 0x42
    result = _step([0x70F0], v0=0x20, vf=0x55)
    assert result.registers.v[0] == 0x10
    assert result.registers.vf == 0x55


def test_register_copy_and_logic() -> None:
    assert _step([0x8120], v2=0x33).registers.v[1] == 0x33
    assert _step([0x8121], v1=0xF0, v2=0x0F).registers.v[1] == 0xFF
    assert _step([0x8122], v1=0xF3, v2=0x3F).registers.v[1] == 0x33
    assert _step([0x8123], v1=0xFF, v2=0x0F).registers.v[1] == 0xF0


def test_logic_reset_quirk_clears_vf() -> None:
    vip = Quirks.for_model("cosmac-vip")
    assert _step([0x8121], v1=1, v2=2, vf=9).registers.vf == 9
    assert _step([0x8121], quirks=vip, v1=1, v2=2, vf=9).registers.vf == 0


def test_add_registers_sets_carry() -> None:
    result = _step([0x8124], v1=0xF0, v2=0x20)
    assert result.registers.v[1] == 0x10
    assert result.registers.vf == 1

    result = _step([0x8124], v1=0x10, v2=0x20, vf=1)
    assert result.registers.v[1] == 0x30
    assert result.registers.vf == 0


def test_subtract_sets_no_borrow() -> None:
    result = _step([0x8125], v1=0x30, v2=0x10)
    assert result.registers.v[1] == 0x20
    assert result.registers.vf == 1

    result = _step([0x8125], v1=0x10, v2=0x30)
    assert result.registers.v[1] == 0xE0
    assert result.registers.vf == 0

    # Equal operands do not borrow.
    assert _step([0x8125], v1=5, v2=5).registers.vf == 1


def test_reverse_subtract() -> None:
    result = _step([0x8127], v1=0x10, v2=0x30)
    assert result.registers.v[1] == 0x20
    assert result.registers.vf == 1

    result = _step([0x8127], v1=0x30, v2=0x10)
    assert result.registers.v[1] == 0xE0
    assert result.registers.vf == 0


def test_flag_written_after_result_when_x_is_vf() -> None:
    result = _step([0x8F14], vf=0xFF, v1=0x01)
    assert result.registers.vf == 1


def test_shifts_act_on_vx_by_default() -> None:
    result = _step([0x8126], v1=0x05, v2=0x80)
    assert result.registers.v[1] == 0x02
    assert result.registers.vf == 1

    result = _step([0x812E], v1=0x81, v2=0x01)
    assert result.registers.v[1] == 0x02
    assert result.registers.vf == 1


def test_shift_quirk_reads_vy() -> None:
    vip = Quirks.for_model("cosmac-vip")
    result = _step([0x8126], quirks=vip, v1=0x05, v2=0x80)
    assert result.registers.v[1] == 0x40
    assert result.registers.vf == 0


def test_random_is_masked() -> None:
    assert _step([0xC100], v1=0xAA).registers.v[1] == 0
    assert _step([0xC10F]).registers.v[1] & 0xF0 == 0


def test_random_is_reproducible_for_a_seed() -> None:
    first = _step([0xC1FF]).registers.v[1]
    second = _step([0xC1FF]).registers.v[1]
    assert first == second


# ---------------------------------------------------------------------- #
# Address register and memory
# ---------------------------------------------------------------------- #
def test_load_and_add_index() -> None:
    assert _step([0xA123]).registers.i == 0x123
    assert _step([0xF31E], i=0x0FFF, v3=0x02).registers.i == 0x1001


def test_font_address() -> None:
    assert _step([0xF029], v0=0xA).registers.i == 130


def test_bcd_writes_three_digits() -> None:
    result = _step([0xF033], v0=234, i=0x300)
    assert result.memory_writes == (
        MemoryWrite(0x300, 2, 0),
        MemoryWrite(0x301, 3, 0),
        MemoryWrite(0x302, 4, 0),
    )
    assert result.registers.i == 0x300


def test_bcd_into_reserved_area_is_dropped() -> None:
    result = _step([0xF033], v0=123, i=0x010)
    assert not result.memory_writes


def test_store_registers_leaves_i_by_default() -> None:
    result = _step([0xF255], v0=1, v1=2, v2=3, v3=4, i=0x300)
    assert [w.value for w in result.memory_writes] == [1, 2, 3]
    assert result.registers.i == 0x300


def test_load_registers_with_increment_quirk() -> None:
    vip = Quirks.for_model("cosmac-vip")
    stepper = CPUStepper(quirks=vip)
    image = program_image([0xF265])
    image.update({0x300: 9, 0x301: 8, 0x302: 7, 0x303: 6})

    result = stepper.step(CPURegistersSnapshot(i=0x300), image)

    assert result.registers.v[:4] == (9, 8, 7, 0)
    assert result.registers.i == 0x303


# ---------------------------------------------------------------------- #
# Display, timers and keypad
# ---------------------------------------------------------------------- #
def test_draw_font_glyph() -> None:
    result = _step([0xD015], i=0x050)
    fb = Framebuffer()
    fb.load_bytes(result.display)

    assert result.registers.vf == 0
    assert [fb.get_pixel(x, 0) for x in range(8)] == [1, 1, 1, 1, 0, 0, 0, 0]
    assert fb.pixel_count() == 14


def test_draw_reports_collision_in_vf() -> None:
    fb = Framebuffer()
    fb.draw_sprite(0, 0, bytes([0xF0]))
    result = _step([0xD011], i=0x050, display=fb.to_bytes())
    assert result.registers.vf == 1


def test_timer_transfers() -> None:
    assert _step([0xF115], v1=30).registers.delay == 30
    assert _step([0xF118], v1=40).registers.sound == 40
    assert _step([0xF107], delay=12).registers.v[1] == 12


def test_wait_for_key_parks_pc() -> None:
    result = _step([0xF30A], pressed_keys=[4])
    assert result.instruction_name == "LD"
    assert result.waiting_for_key
    assert result.registers.pc == 0x200
    assert result.registers.v[3] == 0


def test_snapshot_requires_sixteen_registers() -> None:
    with pytest.raises(ValueError):
        CPURegistersSnapshot(v=(0,) * 15)

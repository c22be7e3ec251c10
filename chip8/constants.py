"""Shared machine constants for the CHIP-8 interpreter.

This module centralizes the fixed geometry of the machine: memory layout,
register file width, display size and timer rate.
"""

from enum import IntEnum

# Total addressable memory. Every address is masked to 12 bits before use.
MEMORY_SIZE = 0x1000  # 4096 bytes
ADDRESS_MASK = 0xFFF

# Programs are loaded here; everything below is interpreter-reserved.
PROGRAM_START = 0x200
MAX_PROGRAM_SIZE = MEMORY_SIZE - PROGRAM_START  # 3584 bytes

# Hex digit glyphs, 5 bytes each, 16 digits (0x050-0x09F).
FONT_BASE = 0x050
FONT_GLYPH_SIZE = 5

FONT_DATA = (
    (0xF0, 0x90, 0x90, 0x90, 0xF0),  # 0
    (0x20, 0x60, 0x20, 0x20, 0x70),  # 1
    (0xF0, 0x10, 0xF0, 0x80, 0xF0),  # 2
    (0xF0, 0x10, 0xF0, 0x10, 0xF0),  # 3
    (0x90, 0x90, 0xF0, 0x10, 0x10),  # 4
    (0xF0, 0x80, 0xF0, 0x10, 0xF0),  # 5
    (0xF0, 0x80, 0xF0, 0x90, 0xF0),  # 6
    (0xF0, 0x10, 0x20, 0x40, 0x40),  # 7
    (0xF0, 0x90, 0xF0, 0x90, 0xF0),  # 8
    (0xF0, 0x90, 0xF0, 0x10, 0xF0),  # 9
    (0xF0, 0x90, 0xF0, 0x90, 0x90),  # A
    (0xE0, 0x90, 0xE0, 0x90, 0xE0),  # B
    (0xF0, 0x80, 0x80, 0x80, 0xF0),  # C
    (0xE0, 0x90, 0x90, 0x90, 0xE0),  # D
    (0xF0, 0x80, 0xF0, 0x80, 0xF0),  # E
    (0xF0, 0x80, 0xF0, 0x80, 0x80),  # F
)

# Register file.
NUM_REGISTERS = 16
FLAG_REGISTER = 0xF
BYTE_MASK = 0xFF
# I is stored as 16 bits; only the low 12 reach memory.
INDEX_MASK = 0xFFFF
INSTRUCTION_SIZE = 2

# Call stack. At least 12 nested calls must fit.
DEFAULT_STACK_DEPTH = 16
MIN_STACK_DEPTH = 12

# Display geometry.
DISPLAY_WIDTH = 64
DISPLAY_HEIGHT = 32
SPRITE_WIDTH = 8
MAX_SPRITE_HEIGHT = 15

# Timers count down at 60 Hz; the buzzer ignores a sound timer of 1.
TIMER_HZ = 60
SOUND_AUDIBLE_THRESHOLD = 2

NUM_KEYS = 16
DEFAULT_INSTRUCTIONS_PER_SECOND = 700


class MachineState(IntEnum):
    """Execution state of the opcode engine."""

    RUNNING = 0
    WAITING_FOR_KEY = 1  # FX0A suspended, PC parked on the instruction
    HALTED = 2  # a fatal error stopped the engine

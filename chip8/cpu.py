"""CHIP-8 opcode engine: fetch, decode and execute."""

from __future__ import annotations

import logging
import random
from typing import Callable, Dict, Optional

from .config import Quirks
from .constants import BYTE_MASK, INSTRUCTION_SIZE
from .display import Framebuffer
from .errors import ExecutionError
from .instr import Instruction, Opcode, decode
from .keypad import Keypad
from .memory import Memory
from .registers import Registers
from .stack import CallStack
from .timers import Timers

logger = logging.getLogger(__name__)

Handler = Callable[[Instruction], None]


class CPU:
    """Executes decoded instructions against the machine components.

    ``execute`` is a pure dispatch from :class:`Opcode` to a handler method.
    ``step`` adds the fetch and decode around it and keeps the FX0A key wait
    as explicit state: while waiting, PC stays on the FX0A instruction and
    ``step`` returns None until the keypad reports a new key-down.
    """

    def __init__(
        self,
        memory: Memory,
        registers: Registers,
        stack: CallStack,
        timers: Timers,
        framebuffer: Framebuffer,
        keypad: Keypad,
        *,
        quirks: Optional[Quirks] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.memory = memory
        self.regs = registers
        self.stack = stack
        self.timers = timers
        self.framebuffer = framebuffer
        self.keypad = keypad
        self.quirks = quirks or Quirks()
        self.rng = rng or random.Random()
        self._key_wait: Optional[int] = None

        self._handlers: Dict[Opcode, Handler] = {
            Opcode.CLS: self._cls,
            Opcode.RET: self._ret,
            Opcode.SYS: self._sys,
            Opcode.JP: self._jp,
            Opcode.CALL: self._call,
            Opcode.SE_IMM: self._se_imm,
            Opcode.SNE_IMM: self._sne_imm,
            Opcode.SE_REG: self._se_reg,
            Opcode.LD_IMM: self._ld_imm,
            Opcode.ADD_IMM: self._add_imm,
            Opcode.LD_REG: self._ld_reg,
            Opcode.OR: self._or,
            Opcode.AND: self._and,
            Opcode.XOR: self._xor,
            Opcode.ADD_REG: self._add_reg,
            Opcode.SUB: self._sub,
            Opcode.SHR: self._shr,
            Opcode.SUBN: self._subn,
            Opcode.SHL: self._shl,
            Opcode.SNE_REG: self._sne_reg,
            Opcode.LD_I: self._ld_i,
            Opcode.JP_V0: self._jp_v0,
            Opcode.RND: self._rnd,
            Opcode.DRW: self._drw,
            Opcode.SKP: self._skp,
            Opcode.SKNP: self._sknp,
            Opcode.LD_V_DT: self._ld_v_dt,
            Opcode.LD_V_K: self._ld_v_k,
            Opcode.LD_DT_V: self._ld_dt_v,
            Opcode.LD_ST_V: self._ld_st_v,
            Opcode.ADD_I_V: self._add_i_v,
            Opcode.LD_F_V: self._ld_f_v,
            Opcode.LD_B_V: self._ld_b_v,
            Opcode.LD_MEM_V: self._ld_mem_v,
            Opcode.LD_V_MEM: self._ld_v_mem,
        }

    # ------------------------------------------------------------------ #
    # Cycle
    # ------------------------------------------------------------------ #
    @property
    def waiting_for_key(self) -> bool:
        return self._key_wait is not None

    @property
    def key_wait_register(self) -> Optional[int]:
        return self._key_wait

    def reset(self) -> None:
        self._key_wait = None

    def fetch(self) -> int:
        """Read the word at PC and advance PC past it."""

        word = self.memory.read_word(self.regs.pc)
        self.regs.advance()
        return word

    def execute(self, instr: Instruction) -> None:
        self._handlers[instr.opcode](instr)

    def step(self) -> Optional[Instruction]:
        """Run one fetch-decode-execute cycle.

        Returns the executed instruction, or None while suspended on FX0A.
        On a fatal error PC is restored to the faulting instruction and the
        error is re-raised with that context.
        """

        if self._key_wait is not None:
            return self._poll_key_wait()

        pc = self.regs.pc
        word = self.fetch()
        try:
            instr = decode(word)
            self.execute(instr)
        except ExecutionError as exc:
            self.regs.pc = pc
            raise exc.with_context(pc, word)
        return instr

    def _poll_key_wait(self) -> Optional[Instruction]:
        key = self.keypad.pop_press()
        if key is None:
            return None
        register = self._key_wait
        assert register is not None
        self._key_wait = None
        pc = self.regs.pc
        self.regs.set_v(register, key)
        self.regs.advance()
        logger.debug("Key 0x%X resumed wait at 0x%03X", key, pc)
        return decode(self.memory.read_word(pc))

    def _skip_if(self, condition: bool) -> None:
        if condition:
            self.regs.advance()

    # ------------------------------------------------------------------ #
    # Control flow
    # ------------------------------------------------------------------ #
    def _cls(self, instr: Instruction) -> None:
        self.framebuffer.clear()

    def _ret(self, instr: Instruction) -> None:
        self.regs.pc = self.stack.ret()

    def _sys(self, instr: Instruction) -> None:
        # Native machine-code routines cannot run here.
        logger.debug("Ignoring SYS 0x%03X", instr.nnn)

    def _jp(self, instr: Instruction) -> None:
        self.regs.pc = instr.nnn

    def _call(self, instr: Instruction) -> None:
        self.stack.call(self.regs.pc)
        self.regs.pc = instr.nnn

    def _jp_v0(self, instr: Instruction) -> None:
        offset_reg = instr.x if self.quirks.jump_uses_vx else 0
        self.regs.pc = instr.nnn + self.regs.get_v(offset_reg)

    def _se_imm(self, instr: Instruction) -> None:
        self._skip_if(self.regs.get_v(instr.x) == instr.nn)

    def _sne_imm(self, instr: Instruction) -> None:
        self._skip_if(self.regs.get_v(instr.x) != instr.nn)

    def _se_reg(self, instr: Instruction) -> None:
        self._skip_if(self.regs.get_v(instr.x) == self.regs.get_v(instr.y))

    def _sne_reg(self, instr: Instruction) -> None:
        self._skip_if(self.regs.get_v(instr.x) != self.regs.get_v(instr.y))

    def _skp(self, instr: Instruction) -> None:
        key = self.regs.get_v(instr.x) & 0xF
        self._skip_if(self.keypad.is_key_down(key))

    def _sknp(self, instr: Instruction) -> None:
        key = self.regs.get_v(instr.x) & 0xF
        self._skip_if(not self.keypad.is_key_down(key))

    # ------------------------------------------------------------------ #
    # Register arithmetic
    # ------------------------------------------------------------------ #
    def _ld_imm(self, instr: Instruction) -> None:
        self.regs.set_v(instr.x, instr.nn)

    def _add_imm(self, instr: Instruction) -> None:
        self.regs.set_v(instr.x, self.regs.get_v(instr.x) + instr.nn)

    def _ld_reg(self, instr: Instruction) -> None:
        self.regs.set_v(instr.x, self.regs.get_v(instr.y))

    def _logic(self, instr: Instruction, value: int) -> None:
        self.regs.set_v(instr.x, value)
        if self.quirks.logic_resets_vf:
            self.regs.set_flag(0)

    def _or(self, instr: Instruction) -> None:
        self._logic(instr, self.regs.get_v(instr.x) | self.regs.get_v(instr.y))

    def _and(self, instr: Instruction) -> None:
        self._logic(instr, self.regs.get_v(instr.x) & self.regs.get_v(instr.y))

    def _xor(self, instr: Instruction) -> None:
        self._logic(instr, self.regs.get_v(instr.x) ^ self.regs.get_v(instr.y))

    def _add_reg(self, instr: Instruction) -> None:
        total = self.regs.get_v(instr.x) + self.regs.get_v(instr.y)
        self.regs.set_v(instr.x, total)
        self.regs.set_flag(1 if total > BYTE_MASK else 0)

    def _sub(self, instr: Instruction) -> None:
        vx = self.regs.get_v(instr.x)
        vy = self.regs.get_v(instr.y)
        self.regs.set_v(instr.x, vx - vy)
        self.regs.set_flag(1 if vx >= vy else 0)

    def _subn(self, instr: Instruction) -> None:
        vx = self.regs.get_v(instr.x)
        vy = self.regs.get_v(instr.y)
        self.regs.set_v(instr.x, vy - vx)
        self.regs.set_flag(1 if vy >= vx else 0)

    def _shift_source(self, instr: Instruction) -> int:
        return self.regs.get_v(instr.y if self.quirks.shift_uses_vy else instr.x)

    def _shr(self, instr: Instruction) -> None:
        source = self._shift_source(instr)
        self.regs.set_v(instr.x, source >> 1)
        self.regs.set_flag(source & 0x1)

    def _shl(self, instr: Instruction) -> None:
        source = self._shift_source(instr)
        self.regs.set_v(instr.x, source << 1)
        self.regs.set_flag((source >> 7) & 0x1)

    def _rnd(self, instr: Instruction) -> None:
        self.regs.set_v(instr.x, self.rng.randrange(256) & instr.nn)

    # ------------------------------------------------------------------ #
    # Address register, memory and display
    # ------------------------------------------------------------------ #
    def _ld_i(self, instr: Instruction) -> None:
        self.regs.i = instr.nnn

    def _add_i_v(self, instr: Instruction) -> None:
        self.regs.i = self.regs.i + self.regs.get_v(instr.x)

    def _ld_f_v(self, instr: Instruction) -> None:
        self.regs.i = self.memory.font_address(self.regs.get_v(instr.x))

    def _ld_b_v(self, instr: Instruction) -> None:
        value = self.regs.get_v(instr.x)
        base = self.regs.i
        self.memory.write_byte(base, value // 100)
        self.memory.write_byte(base + 1, (value // 10) % 10)
        self.memory.write_byte(base + 2, value % 10)

    def _ld_mem_v(self, instr: Instruction) -> None:
        base = self.regs.i
        for index in range(instr.x + 1):
            self.memory.write_byte(base + index, self.regs.get_v(index))
        if self.quirks.load_store_increments_i:
            self.regs.i = base + instr.x + 1

    def _ld_v_mem(self, instr: Instruction) -> None:
        base = self.regs.i
        for index, value in enumerate(self.memory.read_block(base, instr.x + 1)):
            self.regs.set_v(index, value)
        if self.quirks.load_store_increments_i:
            self.regs.i = base + instr.x + 1

    def _drw(self, instr: Instruction) -> None:
        sprite = self.memory.read_block(self.regs.i, instr.n)
        collision = self.framebuffer.draw_sprite(
            self.regs.get_v(instr.x), self.regs.get_v(instr.y), sprite
        )
        self.regs.set_flag(1 if collision else 0)

    # ------------------------------------------------------------------ #
    # Timers and keypad
    # ------------------------------------------------------------------ #
    def _ld_v_dt(self, instr: Instruction) -> None:
        self.regs.set_v(instr.x, self.timers.get_delay())

    def _ld_dt_v(self, instr: Instruction) -> None:
        self.timers.set_delay(self.regs.get_v(instr.x))

    def _ld_st_v(self, instr: Instruction) -> None:
        self.timers.set_sound(self.regs.get_v(instr.x))

    def _ld_v_k(self, instr: Instruction) -> None:
        # Park PC on this instruction; only presses from now on count.
        self.regs.pc = self.regs.pc - INSTRUCTION_SIZE
        self.keypad.discard_presses()
        self._key_wait = instr.x
        logger.debug("Waiting for key into V%X at 0x%03X", instr.x, self.regs.pc)


__all__ = ["CPU"]

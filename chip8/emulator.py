"""CHIP-8 machine: components, execution state and the host run loop."""

from __future__ import annotations

import logging
import random
import threading
import time
from typing import Optional

from .config import MachineConfig
from .constants import MAX_PROGRAM_SIZE, MachineState
from .cpu import CPU
from .display import Framebuffer
from .errors import ExecutionError, MachineHalted, ProgramTooLarge
from .instr import Instruction
from .keypad import Keypad
from .memory import Memory
from .registers import Registers
from .scheduler import Clock, TickScheduler, TimerThread
from .stack import CallStack
from .timers import Timers

logger = logging.getLogger(__name__)

# After a stall longer than this the pacer stops trying to catch up.
_MAX_PACING_LAG = 0.25


class Chip8Emulator:
    """CHIP-8 virtual machine with an integrated host clock driver.

    The opcode engine runs on the caller's thread. Timers tick either from
    the run loop (an elapsed-time accumulator) or from a background
    :class:`TimerThread` when ``config.timer_thread`` is set.
    """

    def __init__(
        self,
        config: Optional[MachineConfig] = None,
        *,
        clock: Clock = time.monotonic,
    ) -> None:
        self.config = config or MachineConfig()
        self._clock = clock

        self.memory = Memory()
        self.registers = Registers()
        self.stack = CallStack(self.config.stack_depth)
        self.timers = Timers()
        self.framebuffer = Framebuffer()
        self.keypad = Keypad()
        self.cpu = CPU(
            self.memory,
            self.registers,
            self.stack,
            self.timers,
            self.framebuffer,
            self.keypad,
            quirks=self.config.quirks,
            rng=random.Random(self.config.seed),
        )

        self.scheduler = TickScheduler(hz=self.config.timer_hz)
        self._timer_thread: Optional[TimerThread] = None
        if self.config.timer_thread:
            self._timer_thread = TimerThread(
                self.timers, hz=self.config.timer_hz, clock=clock
            )

        self._stop = threading.Event()
        self._closed = False
        self._halt_reason: Optional[ExecutionError] = None
        self.instruction_count = 0

    # ------------------------------------------------------------------ #
    # Lifecycle
    # ------------------------------------------------------------------ #
    def reset(self) -> None:
        """Return every component to its power-on state."""

        self.memory.clear()
        self.registers.reset()
        self.stack.clear()
        self.timers.reset()
        self.framebuffer.clear()
        self.keypad.reset()
        self.cpu.reset()
        self.cpu.rng.seed(self.config.seed)
        self.scheduler.reset()
        self._halt_reason = None
        self.instruction_count = 0
        self.resume()

    def load_program(self, data: bytes) -> None:
        """Reset the machine and load ``data`` at 0x200."""

        if len(data) > MAX_PROGRAM_SIZE:
            raise ProgramTooLarge(len(data), MAX_PROGRAM_SIZE)
        self.reset()
        self.memory.load_program(data)

    def close(self) -> None:
        """Stop for good; later :meth:`run` calls return immediately."""

        self._closed = True
        self.request_stop()
        if self._timer_thread is not None:
            self._timer_thread.stop()

    def __enter__(self) -> "Chip8Emulator":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    # ------------------------------------------------------------------ #
    # State
    # ------------------------------------------------------------------ #
    @property
    def state(self) -> MachineState:
        if self._halt_reason is not None:
            return MachineState.HALTED
        if self.cpu.waiting_for_key:
            return MachineState.WAITING_FOR_KEY
        return MachineState.RUNNING

    @property
    def halt_reason(self) -> Optional[ExecutionError]:
        return self._halt_reason

    @property
    def stop_requested(self) -> bool:
        return self._stop.is_set()

    def request_stop(self) -> None:
        """Ask :meth:`run` to return after the current cycle."""

        self._stop.set()

    def resume(self) -> None:
        """Clear a pending stop request. A closed emulator stays stopped."""

        if not self._closed:
            self._stop.clear()

    # ------------------------------------------------------------------ #
    # Execution
    # ------------------------------------------------------------------ #
    def step(self) -> Optional[Instruction]:
        """Execute one instruction; None while waiting for a key."""

        if self._halt_reason is not None:
            raise MachineHalted(self._halt_reason)
        try:
            instr = self.cpu.step()
        except ExecutionError as exc:
            self._halt_reason = exc
            logger.error("Machine halted: %s", exc)
            raise
        if instr is not None:
            self.instruction_count += 1
        return instr

    def tick_timers(self, count: int = 1) -> None:
        for _ in range(count):
            self.timers.tick()

    def run(self, max_cycles: Optional[int] = None, *, realtime: bool = True) -> int:
        """Drive the engine until stopped, halted or ``max_cycles`` elapse.

        Each cycle first delivers any due 60 Hz ticks (inline mode), then
        steps the engine. A cycle spent waiting for a key still counts
        toward ``max_cycles``. Returns the number of executed instructions.

        The tick origin is kept across calls, so a host may run in
        per-frame chunks without losing partial ticks. A pending stop
        request is honoured before the first cycle; see :meth:`resume`.
        """

        if self._stop.is_set():
            return 0

        period = 1.0 / self.config.instructions_per_second
        next_cycle = self._clock() if realtime else 0.0
        executed = 0
        cycles = 0

        if self._timer_thread is not None:
            self._timer_thread.start()
        try:
            while not self._stop.is_set():
                if max_cycles is not None and cycles >= max_cycles:
                    break
                if self._timer_thread is None:
                    self.tick_timers(self.scheduler.advance(self._clock()))
                if self.step() is not None:
                    executed += 1
                cycles += 1

                if realtime:
                    next_cycle += period
                    delay = next_cycle - self._clock()
                    if delay > 0:
                        self._stop.wait(delay)
                    elif delay < -_MAX_PACING_LAG:
                        next_cycle = self._clock()
        finally:
            if self._timer_thread is not None:
                self._timer_thread.stop()

        logger.debug("Run finished: %d cycles, %d instructions", cycles, executed)
        return executed

    # ------------------------------------------------------------------ #
    # Host conveniences
    # ------------------------------------------------------------------ #
    def press_key(self, index: int) -> None:
        self.keypad.set_key_down(index, True)

    def release_key(self, index: int) -> None:
        self.keypad.set_key_down(index, False)

    def is_sound_audible(self) -> bool:
        return self.timers.is_sound_audible()


__all__ = ["Chip8Emulator"]

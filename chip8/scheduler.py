"""Wall-clock scheduling of the 60 Hz timer tick."""

from __future__ import annotations

import logging
import math
import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional

from .constants import TIMER_HZ
from .timers import Timers

logger = logging.getLogger(__name__)

Clock = Callable[[], float]

# Absorbs float error when elapsed time lands exactly on a tick boundary.
_EPSILON = 1e-9


@dataclass
class TickScheduler:
    """Deterministic elapsed-time accumulator.

    Ticks are counted from a fixed origin rather than from the previous call,
    so a stalled host gets every missed tick back on the next ``advance``
    and the rate never drifts.
    """

    hz: float = TIMER_HZ
    max_catchup: int = 256
    enabled: bool = True

    def __post_init__(self) -> None:
        self.hz = float(self.hz)
        if self.hz <= 0:
            raise ValueError(f"tick rate must be positive, got {self.hz}")
        self._origin: Optional[float] = None
        self._fired = 0

    @property
    def period(self) -> float:
        return 1.0 / self.hz

    def reset(self, now: Optional[float] = None) -> None:
        """Start counting ticks from ``now``.

        With no ``now`` the origin is cleared and the next :meth:`advance`
        anchors it.
        """

        self._origin = now
        self._fired = 0

    def advance(self, now: float) -> int:
        """Return how many ticks became due up to ``now``."""

        if not self.enabled:
            return 0
        if self._origin is None:
            self.reset(now)
            return 0

        due_total = math.floor((now - self._origin) * self.hz + _EPSILON)
        due = due_total - self._fired
        if due <= 0:
            return 0
        self._fired = due_total
        if due > self.max_catchup:
            logger.debug("Dropping %d timer ticks after stall", due - self.max_catchup)
            return self.max_catchup
        return due

    def time_until_next(self, now: float) -> float:
        if self._origin is None:
            return self.period
        next_at = self._origin + (self._fired + 1) / self.hz
        return max(0.0, next_at - now)


class TimerThread:
    """Background task that ticks a :class:`Timers` instance at a fixed rate."""

    def __init__(
        self,
        timers: Timers,
        *,
        hz: float = TIMER_HZ,
        clock: Clock = time.monotonic,
    ) -> None:
        self._timers = timers
        self._scheduler = TickScheduler(hz=hz)
        self._clock = clock
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            return
        self._stop.clear()
        self._scheduler.reset(self._clock())
        self._thread = threading.Thread(
            target=self._run, name="chip8-timers", daemon=True
        )
        self._thread.start()
        logger.debug("Timer thread started at %.1f Hz", self._scheduler.hz)

    def stop(self, timeout: float = 1.0) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None

    def _run(self) -> None:
        while not self._stop.wait(self._scheduler.time_until_next(self._clock())):
            for _ in range(self._scheduler.advance(self._clock())):
                self._timers.tick()


__all__ = ["Clock", "TickScheduler", "TimerThread"]

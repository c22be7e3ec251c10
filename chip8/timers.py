"""Delay and sound countdown timers."""

from __future__ import annotations

import threading

from .constants import BYTE_MASK, SOUND_AUDIBLE_THRESHOLD


class Timers:
    """The two 60 Hz countdown counters.

    Every accessor takes the lock, so the engine and a background tick task
    can share one instance.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._delay = 0
        self._sound = 0
        self._ticks = 0

    def reset(self) -> None:
        with self._lock:
            self._delay = 0
            self._sound = 0
            self._ticks = 0

    def set_delay(self, value: int) -> None:
        with self._lock:
            self._delay = value & BYTE_MASK

    def set_sound(self, value: int) -> None:
        with self._lock:
            self._sound = value & BYTE_MASK

    def get_delay(self) -> int:
        with self._lock:
            return self._delay

    def get_sound(self) -> int:
        with self._lock:
            return self._sound

    def tick(self) -> None:
        """Decrement each non-zero counter by one."""

        with self._lock:
            if self._delay:
                self._delay -= 1
            if self._sound:
                self._sound -= 1
            self._ticks += 1

    def is_sound_audible(self) -> bool:
        with self._lock:
            return self._sound >= SOUND_AUDIBLE_THRESHOLD

    @property
    def tick_count(self) -> int:
        """Ticks delivered since the last reset."""

        with self._lock:
            return self._ticks


__all__ = ["Timers"]

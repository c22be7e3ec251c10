"""Logical 16-key keypad state."""

from __future__ import annotations

import threading
from collections import deque
from typing import Deque, List, Optional, Tuple

from .constants import NUM_KEYS


class Keypad:
    """Key-down flags indexed 0x0-0xF.

    The input collaborator writes through :meth:`set_key_down`; the engine
    only reads. Key-down transitions are queued so FX0A can resume on a
    press that happens after the wait started.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._down: List[bool] = [False] * NUM_KEYS
        # Bounded: outside a key wait nobody drains this, and a wait
        # discards older presses anyway.
        self._presses: Deque[int] = deque(maxlen=NUM_KEYS)

    @staticmethod
    def _check_index(index: int) -> int:
        if not 0 <= index < NUM_KEYS:
            raise ValueError(f"key index must be 0x0-0xF, got {index!r}")
        return index

    def set_key_down(self, index: int, down: bool) -> None:
        index = self._check_index(index)
        with self._lock:
            if down and not self._down[index]:
                self._presses.append(index)
            self._down[index] = bool(down)

    def is_key_down(self, index: int) -> bool:
        with self._lock:
            return self._down[self._check_index(index)]

    def pressed_keys(self) -> Tuple[int, ...]:
        with self._lock:
            return tuple(idx for idx, down in enumerate(self._down) if down)

    def pop_press(self) -> Optional[int]:
        """Oldest queued key-down transition, or None."""

        with self._lock:
            return self._presses.popleft() if self._presses else None

    def discard_presses(self) -> None:
        with self._lock:
            self._presses.clear()

    def release_all(self) -> None:
        with self._lock:
            self._down = [False] * NUM_KEYS

    def reset(self) -> None:
        with self._lock:
            self._down = [False] * NUM_KEYS
            self._presses.clear()


__all__ = ["Keypad"]

"""Sound-timer gate for host audio devices."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

from ..timers import Timers

Callback = Callable[[], None]


@dataclass
class ToneSnapshot:
    active: bool
    starts: int
    stops: int


class ToneGate:
    """Polls the sound timer and reports tone on/off edges.

    A host calls :meth:`poll` on its own cadence (typically once per display
    refresh) and gets ``on_start`` / ``on_stop`` callbacks on transitions.
    """

    def __init__(
        self,
        timers: Timers,
        *,
        on_start: Optional[Callback] = None,
        on_stop: Optional[Callback] = None,
    ) -> None:
        self._timers = timers
        self._on_start = on_start
        self._on_stop = on_stop
        self._active = False
        self._starts = 0
        self._stops = 0

    @property
    def active(self) -> bool:
        return self._active

    def poll(self) -> bool:
        """Sample the sound timer; returns whether the tone should play."""

        audible = self._timers.is_sound_audible()
        if audible and not self._active:
            self._active = True
            self._starts += 1
            if self._on_start is not None:
                self._on_start()
        elif not audible and self._active:
            self._active = False
            self._stops += 1
            if self._on_stop is not None:
                self._on_stop()
        return self._active

    def snapshot(self) -> ToneSnapshot:
        return ToneSnapshot(active=self._active, starts=self._starts, stops=self._stops)

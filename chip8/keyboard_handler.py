"""Host keyboard to keypad translation.

The interpreter core only knows logical key indices 0x0-0xF. This handler
is the input collaborator: it owns the mapping from host key names to
indices and forwards press/release events to a :class:`Keypad`.
"""

from __future__ import annotations

import logging
from typing import Dict, Mapping, Optional

from .keypad import Keypad

logger = logging.getLogger(__name__)

# Positional layout over the left-hand block of a QWERTY keyboard.
DEFAULT_LAYOUT = "1234qwerasdfzxcv"

DEFAULT_KEY_MAP: Dict[str, int] = {
    key: index for index, key in enumerate(DEFAULT_LAYOUT)
}


class KeyboardHandler:
    """Translates host key names to keypad presses."""

    def __init__(self, keypad: Keypad, key_map: Optional[Mapping[str, int]] = None):
        self._keypad = keypad
        self._key_map: Dict[str, int] = {
            name.lower(): index for name, index in (key_map or DEFAULT_KEY_MAP).items()
        }
        for name, index in self._key_map.items():
            if not 0 <= index <= 0xF:
                raise ValueError(f"key '{name}' maps to invalid index {index}")

    def key_index(self, key: str) -> Optional[int]:
        return self._key_map.get(key.lower())

    def press_key(self, key: str) -> bool:
        """Press ``key``; returns False for keys outside the mapping."""
        return self._forward(key, True)

    def release_key(self, key: str) -> bool:
        return self._forward(key, False)

    def release_all(self) -> None:
        self._keypad.release_all()

    def _forward(self, key: str, down: bool) -> bool:
        index = self.key_index(key)
        if index is None:
            logger.debug("Unsupported key %r", key)
            return False
        self._keypad.set_key_down(index, down)
        return True


__all__ = ["DEFAULT_LAYOUT", "DEFAULT_KEY_MAP", "KeyboardHandler"]

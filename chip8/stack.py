"""Bounded call stack of return addresses."""

from __future__ import annotations

from typing import List, Tuple

from .constants import ADDRESS_MASK, DEFAULT_STACK_DEPTH, MIN_STACK_DEPTH
from .errors import StackOverflow, StackUnderflow


class CallStack:
    def __init__(self, capacity: int = DEFAULT_STACK_DEPTH) -> None:
        if capacity < MIN_STACK_DEPTH:
            raise ValueError(
                f"stack capacity must be at least {MIN_STACK_DEPTH}, got {capacity}"
            )
        self._capacity = capacity
        self._entries: List[int] = []

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def depth(self) -> int:
        return len(self._entries)

    def call(self, return_address: int) -> None:
        """Push ``return_address``; a full stack is left untouched."""

        if len(self._entries) >= self._capacity:
            raise StackOverflow(
                f"call stack overflow (depth {len(self._entries)}/{self._capacity})"
            )
        self._entries.append(return_address & ADDRESS_MASK)

    def ret(self) -> int:
        if not self._entries:
            raise StackUnderflow("return with empty call stack")
        return self._entries.pop()

    def entries(self) -> Tuple[int, ...]:
        """Return addresses, bottom of the stack first."""

        return tuple(self._entries)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


__all__ = ["CallStack"]

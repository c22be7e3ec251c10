"""64x32 monochrome framebuffer with XOR sprite blits."""

from __future__ import annotations

from typing import Sequence

import numpy as np

from ..constants import (
    DISPLAY_HEIGHT,
    DISPLAY_WIDTH,
    MAX_SPRITE_HEIGHT,
    SPRITE_WIDTH,
)


class Framebuffer:
    """One byte per pixel (0 or 1), indexed ``[y, x]`` with (0, 0) top-left."""

    def __init__(self, width: int = DISPLAY_WIDTH, height: int = DISPLAY_HEIGHT):
        self._width = width
        self._height = height
        self._pixels = np.zeros((height, width), dtype=np.uint8)

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    def clear(self) -> None:
        self._pixels.fill(0)

    def draw_sprite(self, x: int, y: int, sprite: Sequence[int]) -> bool:
        """XOR ``sprite`` rows onto the screen and report a collision.

        The anchor is wrapped once; pixels that then fall past the right or
        bottom edge are clipped. Returns True when any lit pixel was erased.
        """

        rows = bytes(sprite[:MAX_SPRITE_HEIGHT])
        if not rows:
            return False

        x0 = x % self._width
        y0 = y % self._height
        visible_rows = min(len(rows), self._height - y0)
        visible_cols = min(SPRITE_WIDTH, self._width - x0)

        # MSB-first bit expansion: one row of 8 pixels per sprite byte.
        bits = np.unpackbits(np.frombuffer(rows, dtype=np.uint8)).reshape(-1, SPRITE_WIDTH)
        bits = bits[:visible_rows, :visible_cols]

        region = self._pixels[y0 : y0 + visible_rows, x0 : x0 + visible_cols]
        collision = bool(np.any(region & bits))
        region ^= bits
        return collision

    def get_pixel(self, x: int, y: int) -> int:
        return int(self._pixels[y, x])

    def get_display_buffer(self) -> np.ndarray:
        """Copy of the pixel grid for renderers; shape ``(height, width)``."""

        return self._pixels.copy()

    def pixel_count(self) -> int:
        return int(self._pixels.sum())

    def to_bytes(self) -> bytes:
        return self._pixels.tobytes()

    def load_bytes(self, data: bytes) -> None:
        pixels = np.frombuffer(data, dtype=np.uint8)
        if pixels.size != self._width * self._height:
            raise ValueError(
                f"expected {self._width * self._height} pixels, got {pixels.size}"
            )
        self._pixels[:] = pixels.reshape(self._height, self._width) & 1

    def __str__(self) -> str:
        return "\n".join(
            "".join("#" if px else "." for px in row) for row in self._pixels
        )


__all__ = ["Framebuffer"]

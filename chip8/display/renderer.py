"""Framebuffer to image rendering for headless hosts."""

from pathlib import Path
from typing import Tuple, Union

import numpy as np
from PIL import Image

from .framebuffer import Framebuffer

Color = Tuple[int, int, int]


class DisplayRenderer:
    """Renders the framebuffer with two fixed colours."""

    def __init__(
        self,
        scale: int = 10,
        off_color: Color = (0, 0, 0),
        on_color: Color = (255, 255, 255),
    ):
        if scale < 1:
            raise ValueError(f"scale must be at least 1, got {scale}")
        self.scale = scale
        self.off_color = off_color
        self.on_color = on_color

    def render(self, framebuffer: Framebuffer) -> Image.Image:
        """Render to a PIL Image of ``width*scale`` x ``height*scale`` pixels."""
        buffer = framebuffer.get_display_buffer().astype(bool)
        palette = np.array([self.off_color, self.on_color], dtype=np.uint8)
        rgb = palette[buffer.astype(np.uint8)]
        if self.scale > 1:
            rgb = rgb.repeat(self.scale, axis=0).repeat(self.scale, axis=1)
        return Image.fromarray(rgb)

    def save(self, framebuffer: Framebuffer, path: Union[str, Path]) -> Path:
        target = Path(path)
        self.render(framebuffer).save(target)
        return target


__all__ = ["DisplayRenderer"]

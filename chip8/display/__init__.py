"""Display framebuffer.

The Pillow renderer lives in :mod:`chip8.display.renderer` and is imported
only by host code.
"""

from .framebuffer import Framebuffer

__all__ = ["Framebuffer"]

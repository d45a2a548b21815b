"""Display subsystem.

Provides:
- FrameStreamer for paced, triple-buffered frame production
- DisplayManager for hardware (or mock) output
- TextPainter for drawing text into frames
- Colors and the hue gradient used by list pages
"""

from .graphics import Color, Colors
from .huegradient import HueGradient
from .manager import DisplayManager
from .renderer import TextDrawer, TextPainter
from .streamer import (
    FIFTEEN_FPS,
    ONE_FPS,
    SIXTY_FPS,
    TEN_FPS,
    THIRTY_FPS,
    TWENTY_FOUR_FPS,
    FrameStreamer,
    Renderer,
)

__all__ = [
    "Color",
    "Colors",
    "HueGradient",
    "DisplayManager",
    "TextDrawer",
    "TextPainter",
    "FrameStreamer",
    "Renderer",
    "ONE_FPS",
    "TEN_FPS",
    "FIFTEEN_FPS",
    "TWENTY_FOUR_FPS",
    "THIRTY_FPS",
    "SIXTY_FPS",
]

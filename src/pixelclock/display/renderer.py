"""PIL-based text drawing for the LED matrix.

Pages never touch fonts directly; they draw through a ``TextPainter``
injected into the page controller.
"""

import logging
from functools import lru_cache
from pathlib import Path
from typing import Protocol

from PIL import Image, ImageDraw, ImageFont

from .graphics import Color

logger = logging.getLogger(__name__)

Font = ImageFont.FreeTypeFont | ImageFont.ImageFont

# TrueType/OpenType fonts are scaled; anything else is treated as a PIL bitmap font
_SCALABLE_SUFFIXES = {".ttf", ".otf", ".ttc"}


class TextDrawer(Protocol):
    """Capability to draw a line of text into a frame."""

    def draw(self, image: Image.Image, x: int, y: int, text: str, color: Color) -> None:
        ...

    def text_width(self, text: str) -> int:
        ...


@lru_cache(maxsize=8)
def load_font(path: str, size: int) -> Font:
    """Load a font from path with caching.

    ``.ttf``/``.otf``/``.ttc`` files are loaded as scalable fonts at
    ``size``; other files (``.pil``) are loaded as bitmap fonts.

    Args:
        path: Path to font file
        size: Font size in pixels (scalable fonts only)

    Returns:
        PIL Font object, or PIL's default font if loading fails
    """
    try:
        if Path(path).suffix.lower() in _SCALABLE_SUFFIXES:
            return ImageFont.truetype(path, size)
        return ImageFont.load(path)
    except OSError as e:
        logger.warning("Failed to load font %s: %s", path, e)
        return ImageFont.load_default()


class TextPainter:
    """Draws text with a single PIL font."""

    def __init__(self, font: Font | None = None) -> None:
        self._font = font if font is not None else ImageFont.load_default()

    @classmethod
    def from_path(cls, path: str | None, size: int = 6) -> "TextPainter":
        """Build a painter from a font file, or PIL's default font when unset."""
        if not path:
            return cls()
        return cls(load_font(path, size))

    def draw(self, image: Image.Image, x: int, y: int, text: str, color: Color) -> None:
        """Draw ``text`` with its top-left corner at (x, y)."""
        draw = ImageDraw.Draw(image)
        draw.text((x, y), text, font=self._font, fill=color.to_tuple())

    def text_width(self, text: str) -> int:
        """Width in pixels of ``text`` in this font."""
        bbox = self._font.getbbox(text)
        return int(bbox[2] - bbox[0])

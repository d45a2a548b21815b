from __future__ import annotations

from dataclasses import dataclass

import pytest
from PIL import Image

from pixelclock.display.graphics import Color


@dataclass(frozen=True)
class DrawCall:
    x: int
    y: int
    text: str
    color: Color


class RecordingPainter:
    """Text drawer that records calls instead of rasterising glyphs."""

    def __init__(self) -> None:
        self.calls: list[DrawCall] = []

    def draw(self, image: Image.Image, x: int, y: int, text: str, color: Color) -> None:
        self.calls.append(DrawCall(x, y, text, color))

    def text_width(self, text: str) -> int:
        return 4 * len(text)

    @property
    def texts(self) -> list[str]:
        return [call.text for call in self.calls]

    def find(self, text: str) -> DrawCall:
        for call in self.calls:
            if call.text == text:
                return call
        raise AssertionError(f"{text!r} not drawn; got {self.texts}")


@pytest.fixture()
def painter() -> RecordingPainter:
    return RecordingPainter()


@pytest.fixture()
def frame() -> Image.Image:
    return Image.new("RGB", (64, 32))

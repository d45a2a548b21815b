"""Countdown to the next calendar event."""

from datetime import datetime
from typing import Protocol

from PIL import Image

from ..calendar import Event
from ..display.graphics import Colors
from ..display.renderer import TextDrawer
from .formatting import format_duration

IMAGE_OFFSET = (44, 9)
CENTRE_X = 32


class EventSource(Protocol):
    def next_upcoming_event(self, now: datetime) -> Event | None:
        ...


def render_countdown(
    target: Image.Image, text: TextDrawer, calendar: EventSource, now: datetime
) -> None:
    """Draw the next event's image, name and time remaining."""
    event = calendar.next_upcoming_event(now)
    if event is None:
        return

    if event.image is not None:
        overlay = event.image if event.image.mode == "RGBA" else event.image.convert("RGBA")
        target.paste(overlay, IMAGE_OFFSET, overlay)

    x = CENTRE_X - text.text_width(event.name) // 2
    text.draw(target, x, 15, event.name, Colors.EVENT_NAME)
    text.draw(target, 10, 22, format_duration(event.until(now)), Colors.EVENT_TIME)

"""Countdown events.

Events come from the config file. Timestamps must be full RFC 3339
date-times with an explicit offset; anything looser is rejected when the
calendar is built rather than silently misplaced on the timeline.
"""

import logging
import re
from dataclasses import dataclass
from datetime import datetime, timedelta
from pathlib import Path
from typing import Iterable

from PIL import Image

from .core.config import CalendarConfig
from .core.errors import ConfigurationError, ValidationError

logger = logging.getLogger(__name__)

_RFC3339 = re.compile(
    r"^\d{4}-\d{2}-\d{2}[Tt]\d{2}:\d{2}:\d{2}(\.\d+)?([Zz]|[+-]\d{2}:\d{2})$"
)


def parse_timestamp(value: str) -> datetime:
    """Parse an RFC 3339 timestamp into an aware datetime.

    Raises:
        ValidationError: If the value is not a complete RFC 3339 date-time
    """
    if not _RFC3339.match(value):
        raise ValidationError("Malformed event timestamp", details={"timestamp": value})
    normalized = value.replace("t", "T").replace("z", "Z")
    try:
        return datetime.fromisoformat(normalized.replace("Z", "+00:00"))
    except ValueError as e:
        raise ValidationError(
            "Malformed event timestamp",
            details={"timestamp": value},
            cause=e,
        ) from e


def load_image(path: str | Path) -> Image.Image:
    """Load an overlay image as RGBA.

    Raises:
        ConfigurationError: If the file cannot be read as an image
    """
    try:
        with Image.open(path) as img:
            return img.convert("RGBA")
    except OSError as e:
        raise ConfigurationError(
            "Failed to load event image",
            details={"path": str(path)},
            cause=e,
        ) from e


@dataclass(frozen=True)
class Event:
    """A named moment to count down to."""

    name: str
    starts_at: datetime
    image: Image.Image | None = None

    @classmethod
    def from_config(cls, name: str, timestamp: str, image_path: str | None = None) -> "Event":
        """Build an event from configured strings, loading its image if any."""
        image = load_image(image_path) if image_path else None
        return cls(name=name, starts_at=parse_timestamp(timestamp), image=image)

    def until(self, now: datetime) -> timedelta:
        """Time remaining from ``now`` (negative once started)."""
        return self.starts_at - now


class EventCalendar:
    """Events sorted by start time.

    Usage:
        calendar = EventCalendar.from_config(config.calendar)
        event = calendar.next_upcoming_event(now)
    """

    def __init__(self, events: Iterable[Event] = ()) -> None:
        self._events = tuple(sorted(events, key=lambda e: e.starts_at))

    @classmethod
    def from_config(cls, config: CalendarConfig) -> "EventCalendar":
        events = [Event.from_config(e.name, e.timestamp, e.image) for e in config.events]
        logger.info("Loaded %d calendar event(s)", len(events))
        return cls(events)

    @property
    def events(self) -> tuple[Event, ...]:
        return self._events

    def next_upcoming_event(self, now: datetime) -> Event | None:
        """First event starting at or after ``now``, or None."""
        for event in self._events:
            if event.starts_at >= now:
                return event
        return None

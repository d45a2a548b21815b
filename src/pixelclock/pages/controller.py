"""Page rotation controller.

Provides:
- The frame renderer handed to the FrameStreamer
- A persistent clock header over every page
- Timed rotation through the page set
- Overnight blanking of page content
"""

import logging
import threading
from datetime import datetime, timezone, tzinfo
from typing import Callable
from zoneinfo import ZoneInfo

from PIL import Image

from ..agents.diagnostics import DiagnosticsAgent
from ..agents.sensors import SensorAgent
from ..agents.weather import WeatherAgent
from ..core.errors import ConfigurationError
from ..core.threading import StoppableThread
from ..display.graphics import Colors
from ..display.renderer import TextDrawer
from .area import render_area
from .base import FIXED_PAGES, Page, PageKind
from .countdown import EventSource, render_countdown
from .diagnostics import render_diagnostics
from .weather import render_daylight, render_forecast

logger = logging.getLogger(__name__)

# Local hours [NIGHT_START, NIGHT_END) show only the header
NIGHT_START = 20
NIGHT_END = 6


def format_header(local: datetime) -> str:
    """``HH:MM Weekday Month Day``, e.g. ``09:05 Mon Jan 2``."""
    return f"{local:%H:%M %a %b} {local.day}"


def is_overnight(local: datetime) -> bool:
    return local.hour >= NIGHT_START or local.hour < NIGHT_END


class PageController:
    """Draws the clock header and the active page.

    Features:
    - Page set fixed at construction: five built-in pages plus one page
      per discovered sensor area
    - Rotation thread advancing every ``rotation_interval`` seconds
    - Overnight window with header only, unless ``debug`` is set

    Usage:
        controller = PageController(painter, weather, diagnostics, calendar)
        controller.start()
        streamer = FrameStreamer(64, 32, controller, ONE_FPS)
    """

    def __init__(
        self,
        text: TextDrawer,
        weather: WeatherAgent,
        diagnostics: DiagnosticsAgent,
        calendar: EventSource,
        sensors: SensorAgent | None = None,
        timezone: str | tzinfo = "Europe/London",
        rotation_interval: float = 5.0,
        debug: bool = False,
        clock: Callable[[], datetime] | None = None,
        shutdown: threading.Event | None = None,
    ) -> None:
        if rotation_interval <= 0:
            raise ConfigurationError(
                "Rotation interval must be positive",
                details={"rotation_interval": rotation_interval},
            )

        self._text = text
        self._weather = weather
        self._diagnostics = diagnostics
        self._calendar = calendar
        self._sensors = sensors
        self._tz = ZoneInfo(timezone) if isinstance(timezone, str) else timezone
        self._rotation_interval = rotation_interval
        self._debug = debug
        self._clock = clock or _utc_now
        self._shutdown = shutdown

        self._pages = self._build_pages()
        self._index = 0
        self._lock = threading.Lock()

        self._thread: StoppableThread | None = None
        logger.info(
            "Page rotation: %s", ", ".join(page.title for page in self._pages)
        )

    def _build_pages(self) -> tuple[Page, ...]:
        pages = list(FIXED_PAGES)
        if self._sensors is not None and self._sensors.areas_discovered:
            pages.extend(Page(PageKind.AREA, area.area) for area in self._sensors.get_areas())
        return tuple(pages)

    @property
    def pages(self) -> tuple[Page, ...]:
        return self._pages

    @property
    def index(self) -> int:
        with self._lock:
            return self._index

    @property
    def active_page(self) -> Page:
        """The page currently shown."""
        with self._lock:
            return self._pages[self._index]

    def advance(self) -> Page:
        """Move to the next page, wrapping around."""
        with self._lock:
            self._index = (self._index + 1) % len(self._pages)
            page = self._pages[self._index]
        logger.debug("Active page: %s", page.title)
        return page

    def start(self) -> None:
        """Start rotating pages. Calling it again has no effect."""
        if self._thread is not None:
            return
        self._thread = StoppableThread(
            target=self._rotate,
            name="PageRotation",
            stop_event=self._shutdown,
        )
        self._thread.start()

    def stop(self) -> None:
        """Stop rotating pages."""
        if self._thread is not None:
            self._thread.stop()

    def _rotate(self, thread: StoppableThread) -> None:
        while not thread.wait(self._rotation_interval):
            self.advance()

    def draw_frame(self, target: Image.Image) -> None:
        """Render the header and, outside the overnight window, the active page."""
        target.paste(Colors.BLACK.to_tuple(), (0, 0, target.width, target.height))

        now = self._clock()
        local = now.astimezone(self._tz)
        self._text.draw(target, 0, 0, format_header(local), Colors.WHITE)

        if is_overnight(local) and not self._debug:
            return

        self._render_page(target, self.active_page, now)

    def _render_page(self, target: Image.Image, page: Page, now: datetime) -> None:
        kind = page.kind
        if kind is PageKind.TODAY:
            render_forecast(target, self._text, "Today", self._weather.get_today())
        elif kind is PageKind.TOMORROW:
            render_forecast(target, self._text, "Tomorrow", self._weather.get_tomorrow())
        elif kind is PageKind.DAYLIGHT:
            render_daylight(target, self._text, self._weather.get_today(), self._tz)
        elif kind is PageKind.COUNTDOWN:
            render_countdown(target, self._text, self._calendar, now)
        elif kind is PageKind.DIAGNOSTICS:
            render_diagnostics(target, self._text, self._diagnostics.get_status(), now)
        elif kind is PageKind.AREA:
            readings = self._sensors.get_area(page.area) if self._sensors else None
            render_area(target, self._text, page.area, readings)
        else:
            raise ValueError(f"Unknown page kind: {kind}")


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)

"""Two-day forecast cache.

The agent fetches once at construction, so a clock that starts without a
forecast fails loudly, then refreshes in the background. A failed refresh
leaves the previous forecast in place.
"""

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime
from typing import Protocol

from ..core.errors import ConfigurationError
from ..core.threading import ReadWriteLock, StoppableThread

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DayWeather:
    """Summary of one day's forecast."""

    temperature_high: float = 0.0
    temperature_low: float = 0.0
    sunrise: datetime | None = None
    sunset: datetime | None = None
    rainy: bool = False
    windy: bool = False
    cloudy: bool = False
    snowy: bool = False
    humidity: float = 0.0


@dataclass(frozen=True)
class TwoDayWeather:
    """Forecast for today and tomorrow."""

    today: DayWeather = field(default_factory=DayWeather)
    tomorrow: DayWeather = field(default_factory=DayWeather)


@dataclass(frozen=True)
class WeatherOptions:
    """Where to forecast and how often (seconds)."""

    latitude: str
    longitude: str
    refresh: float = 600.0


class WeatherProvider(Protocol):
    """Source of two-day forecasts."""

    def get_two_day_weather(self, latitude: str, longitude: str) -> TwoDayWeather:
        ...


class WeatherAgent:
    """Keeps a two-day forecast fresh in the background.

    Usage:
        agent = WeatherAgent(client, WeatherOptions("51.5", "-0.12"), shutdown)
        today = agent.get_today()
        agent.stop()
    """

    def __init__(
        self,
        provider: WeatherProvider,
        options: WeatherOptions,
        shutdown: threading.Event | None = None,
    ) -> None:
        if options.refresh <= 0:
            raise ConfigurationError(
                "Weather refresh interval must be positive",
                details={"refresh": options.refresh},
            )

        self._provider = provider
        self._options = options
        self._lock = ReadWriteLock()

        # Initial fetch is fatal on failure
        self._cache = provider.get_two_day_weather(options.latitude, options.longitude)
        logger.info(
            "Weather loaded: today %.0f/%.0f, tomorrow %.0f/%.0f",
            self._cache.today.temperature_low,
            self._cache.today.temperature_high,
            self._cache.tomorrow.temperature_low,
            self._cache.tomorrow.temperature_high,
        )

        self._thread = StoppableThread(
            target=self._refresh_loop,
            name="WeatherAgent",
            stop_event=shutdown,
        )
        self._thread.start()

    def get_today(self) -> DayWeather:
        """Cached forecast for today."""
        with self._lock.read_locked():
            return self._cache.today

    def get_tomorrow(self) -> DayWeather:
        """Cached forecast for tomorrow."""
        with self._lock.read_locked():
            return self._cache.tomorrow

    def refresh(self) -> bool:
        """Fetch a new forecast, keeping the old one on failure.

        Returns:
            True if the cache was replaced
        """
        try:
            weather = self._provider.get_two_day_weather(
                self._options.latitude, self._options.longitude
            )
        except Exception as e:
            logger.error("Weather refresh failed: %s", e)
            return False

        with self._lock.write_locked():
            self._cache = weather
        logger.debug("Weather refreshed")
        return True

    def stop(self) -> None:
        """Stop the refresh thread."""
        self._thread.stop()

    def _refresh_loop(self, thread: StoppableThread) -> None:
        while not thread.wait(self._options.refresh):
            self.refresh()

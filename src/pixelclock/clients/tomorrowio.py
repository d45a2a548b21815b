"""tomorrow.io forecast client.

Fetches the daily timeline and reduces the first two days to DayWeather
summaries.
"""

import logging
from datetime import datetime
from typing import Any

import httpx

from ..agents.weather import DayWeather, TwoDayWeather
from ..core.errors import APIError

logger = logging.getLogger(__name__)

RAINY_PRECIPITATION_PROBABILITY = 25
WINDY_SPEED = 6
WINDY_GUST = 12
# cloudCoverAvg is reported in percent
CLOUDY_COVER = 60


def _parse_time(value: Any) -> datetime | None:
    if not isinstance(value, str) or not value:
        return None
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        logger.warning("Ignoring unparseable forecast time: %s", value)
        return None


def _number(values: dict[str, Any], key: str) -> float:
    value = values.get(key)
    return float(value) if isinstance(value, (int, float)) else 0.0


def day_from_values(values: dict[str, Any]) -> DayWeather:
    """Summarise one day of tomorrow.io ``values``."""
    return DayWeather(
        temperature_high=_number(values, "temperatureMax"),
        temperature_low=_number(values, "temperatureMin"),
        sunrise=_parse_time(values.get("sunriseTime")),
        sunset=_parse_time(values.get("sunsetTime")),
        rainy=_number(values, "precipitationProbabilityAvg") > RAINY_PRECIPITATION_PROBABILITY,
        windy=(
            _number(values, "windSpeedAvg") > WINDY_SPEED
            or _number(values, "windGustAvg") > WINDY_GUST
        ),
        cloudy=_number(values, "cloudCoverAvg") > CLOUDY_COVER,
        snowy=(
            _number(values, "snowAccumulationSum") > 0
            or _number(values, "snowIntensityMax") > 0
        ),
        humidity=_number(values, "humidityAvg"),
    )


class TomorrowIOClient:
    """Weather provider backed by the tomorrow.io v4 forecast API.

    Usage:
        client = TomorrowIOClient(api_key)
        weather = client.get_two_day_weather("51.5072", "-0.1276")
    """

    API_URL = "https://api.tomorrow.io/v4/weather/forecast"

    def __init__(self, api_key: str, client: httpx.Client | None = None) -> None:
        self._api_key = api_key
        self._client = client or httpx.Client(timeout=10.0)

    def get_two_day_weather(self, latitude: str, longitude: str) -> TwoDayWeather:
        """Fetch today's and tomorrow's forecast.

        Raises:
            APIError: On transport failure, error status or unexpected payload
        """
        try:
            response = self._client.get(
                self.API_URL,
                params={
                    "location": f"{latitude},{longitude}",
                    "fields": "core",
                    "units": "metric",
                    "timesteps": "1d",
                    "apikey": self._api_key,
                },
                headers={"accept": "application/json"},
            )
        except httpx.HTTPError as e:
            raise APIError("Forecast request failed", details={"error": str(e)}, cause=e) from e

        if response.status_code >= 400:
            raise APIError(
                self._error_message(response),
                details={"status": response.status_code},
            )

        try:
            data = response.json()
            daily = data["timelines"]["daily"]
            today, tomorrow = daily[0]["values"], daily[1]["values"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise APIError(
                "Unexpected forecast response",
                details={"error": str(e)},
                cause=e,
            ) from e

        weather = TwoDayWeather(today=day_from_values(today), tomorrow=day_from_values(tomorrow))
        logger.debug("Forecast fetched for %s,%s", latitude, longitude)
        return weather

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        if response.status_code < 500:
            try:
                message = response.json().get("message")
            except (ValueError, AttributeError):
                message = None
            if message:
                return str(message)
        return f"Forecast API error: {response.status_code} {response.reason_phrase}"

    def close(self) -> None:
        self._client.close()

"""Forecast and daylight pages."""

from datetime import datetime, tzinfo

from PIL import Image

from ..agents.weather import DayWeather
from ..display.graphics import Colors
from ..display.renderer import TextDrawer

TEMPERATURE_Y = 15
SUMMARY_X = 36
LINE_HEIGHT = 7


def render_forecast(
    target: Image.Image, text: TextDrawer, title: str, weather: DayWeather
) -> None:
    """Draw a title and one day's forecast summary."""
    text.draw(target, 0, 8, title, Colors.TITLE)

    y = TEMPERATURE_Y
    text.draw(target, 0, y, f"{weather.temperature_low:02.0f}oC", Colors.TEMP_LOW)
    text.draw(target, 17, y, f"{weather.temperature_high:02.0f}oC", Colors.TEMP_HIGH)

    # Always shown under the temperatures
    if weather.cloudy:
        text.draw(target, 0, y + LINE_HEIGHT, "Cloudy", Colors.CLOUDY)
    else:
        text.draw(target, 0, y + LINE_HEIGHT, "Sunny", Colors.SUNNY)

    # Precipitation: snow wins over rain
    if weather.snowy:
        text.draw(target, SUMMARY_X, y, "Snow", Colors.SNOW)
    elif weather.rainy:
        text.draw(target, SUMMARY_X, y, "Rain", Colors.RAIN)

    if weather.windy:
        text.draw(target, SUMMARY_X, y + LINE_HEIGHT, "Windy", Colors.WINDY)


def _clock_time(moment: datetime | None, tz: tzinfo) -> str:
    if moment is None:
        return "--:--"
    return moment.astimezone(tz).strftime("%H:%M")


def render_daylight(
    target: Image.Image, text: TextDrawer, weather: DayWeather, tz: tzinfo
) -> None:
    """Draw today's sunrise and sunset in local time."""
    text.draw(target, 4, 10, f"Sunrise {_clock_time(weather.sunrise, tz)}", Colors.SUNRISE)
    text.draw(target, 8, 18, f"Sunset {_clock_time(weather.sunset, tz)}", Colors.SUNSET)

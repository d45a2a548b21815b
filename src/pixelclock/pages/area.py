"""Sensor readings for one area."""

from PIL import Image

from ..agents.sensors import AreaSensors
from ..display.graphics import Color, Colors
from ..display.huegradient import HueGradient
from ..display.renderer import TextDrawer

SENSOR_GRADIENT = HueGradient(base_hue=60, step=50)
FIRST_ROW_Y = 12
ROW_HEIGHT = 6


def shorten_sensor_name(name: str) -> str:
    """Last word of the name, at most 4 characters.

    "Main Bedroom Temperature" -> "Temp".
    """
    words = name.split()
    if not words:
        return name
    return words[-1][:4]


def render_area(
    target: Image.Image, text: TextDrawer, area: str, readings: AreaSensors | None
) -> None:
    """Draw the area name and one colored line per sensor."""
    text.draw(target, 0, 5, area, Colors.TITLE)
    if readings is None:
        return

    for row, sensor in enumerate(readings.sensors):
        y = FIRST_ROW_Y + row * ROW_HEIGHT
        label = f"{shorten_sensor_name(sensor.name)} {sensor.state}{sensor.unit}"
        text.draw(target, 0, y, label, Color.from_tuple(SENSOR_GRADIENT.color(row)))

"""Color definitions for the pixel clock pages."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Color:
    """RGB color with utility methods."""

    r: int
    g: int
    b: int

    def __post_init__(self) -> None:
        # Clamp values
        object.__setattr__(self, "r", max(0, min(255, self.r)))
        object.__setattr__(self, "g", max(0, min(255, self.g)))
        object.__setattr__(self, "b", max(0, min(255, self.b)))

    @classmethod
    def from_tuple(cls, rgb: tuple[int, int, int]) -> "Color":
        """Create color from an (r, g, b) tuple."""
        return cls(*rgb)

    def to_tuple(self) -> tuple[int, int, int]:
        """Convert to RGB tuple."""
        return (self.r, self.g, self.b)


class Colors:
    """Palette used by the clock pages."""

    # Basic colors
    BLACK = Color(0, 0, 0)
    WHITE = Color(255, 255, 255)

    # Page titles
    TITLE = Color(215, 0, 88)

    # Weather
    TEMP_LOW = Color(80, 80, 255)
    TEMP_HIGH = Color(255, 150, 0)
    CLOUDY = Color(179, 161, 136)
    SUNNY = Color(255, 213, 0)
    SNOW = Color(255, 255, 255)
    RAIN = Color(0, 113, 237)
    WINDY = Color(0, 247, 255)
    SUNRISE = Color(152, 168, 27)
    SUNSET = Color(194, 27, 27)

    # Countdown
    EVENT_NAME = Color(60, 60, 215)
    EVENT_TIME = Color(215, 0, 0)

    # Status colors
    STATUS_GREEN = Color(0, 200, 0)
    STATUS_YELLOW = Color(200, 200, 0)
    STATUS_ORANGE = Color(255, 140, 0)
    STATUS_RED = Color(200, 0, 0)

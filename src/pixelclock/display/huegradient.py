"""Perceptually even color steps for list rows.

Walks the OKLCH hue wheel at a fixed lightness and chroma so each row of
a list gets a distinct color of similar brightness.
"""

import math
from dataclasses import dataclass

LIGHTNESS = 0.75
CHROMA = 0.12


def _oklab_to_linear_srgb(lightness: float, a: float, b: float) -> tuple[float, float, float]:
    l_ = lightness + 0.3963377774 * a + 0.2158037573 * b
    m_ = lightness - 0.1055613458 * a - 0.0638541728 * b
    s_ = lightness - 0.0894841775 * a - 1.2914855480 * b

    l, m, s = l_**3, m_**3, s_**3

    return (
        4.0767416621 * l - 3.3077115913 * m + 0.2309699292 * s,
        -1.2684380046 * l + 2.6097574011 * m - 0.3413193965 * s,
        -0.0041960863 * l - 0.7034186147 * m + 1.7076147010 * s,
    )


def _gamma_encode(v: float) -> float:
    if v <= 0.0031308:
        return 12.92 * v
    return 1.055 * v ** (1 / 2.4) - 0.055


def oklch_to_rgb(lightness: float, chroma: float, hue: float) -> tuple[int, int, int]:
    """Convert an OKLCH color to 8-bit sRGB, clamping out-of-gamut channels."""
    rad = math.radians(hue)
    linear = _oklab_to_linear_srgb(lightness, chroma * math.cos(rad), chroma * math.sin(rad))
    channels = (max(0.0, min(1.0, _gamma_encode(v))) for v in linear)
    r, g, b = (int(c * 255) for c in channels)
    return (r, g, b)


@dataclass(frozen=True)
class HueGradient:
    """Hue wheel stepper.

    Attributes:
        base_hue: Hue in degrees for index 0
        step: Degrees added per index
    """

    base_hue: float
    step: float

    def color(self, index: int) -> tuple[int, int, int]:
        """RGB color for the ``index``-th item."""
        hue = math.fmod(self.base_hue + index * self.step, 360)
        return oklch_to_rgb(LIGHTNESS, CHROMA, hue)

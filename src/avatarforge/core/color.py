"""Color space helpers for the avatar generators.

Two concerns live here:

- **HSL to RGB conversion**, used by the raster compositor for flood fills and
  part colorization.  Hue is given in degrees, saturation and lightness in
  percent, and every channel is rounded half away from zero.
- **RandomColor**, a seeded source of "bright" and "light" colors used by the
  vector generators.  It follows the luminosity model of the randomColor
  family of libraries: a hue is drawn first, then a saturation and brightness
  inside the bounds that make the hue look bright (or light) to the eye.

Both are pure with respect to their inputs; RandomColor draws every value from
the :class:`~avatarforge.core.number_generator.NumberGenerator` it is handed.
"""

from __future__ import annotations

import colorsys
import math
from typing import Literal

from avatarforge.core.number_generator import NumberGenerator

MAX_DEGREE = 360
MAX_RGB = 255
MAX_PERCENT = 100


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def hsl_to_rgb(hue: float, saturation: float, lightness: float) -> tuple[int, int, int]:
    """Convert an HSL color to RGB.

    Args:
        hue: Hue in degrees (0-359).
        saturation: Saturation in percent (0-100).
        lightness: Lightness in percent (0-100).

    Returns:
        Tuple of ``(red, green, blue)``, each in the range 0-255.
    """
    saturation = saturation / MAX_PERCENT
    lightness = lightness / MAX_PERCENT

    def channel(n: int) -> float:
        k = math.fmod(n + hue / 30, 12)
        a = saturation * min(lightness, 1 - lightness)
        return lightness - a * max(-1, min(k - 3, 9 - k, 1))

    return (
        _round_half_up(channel(0) * MAX_RGB),
        _round_half_up(channel(8) * MAX_RGB),
        _round_half_up(channel(4) * MAX_RGB),
    )


def normalize_hue(hue: float) -> float:
    """Map a hue in the range -360..360 onto 0..359.

    Negative hues are shifted by a full turn first, so -10 and 350 are equal.
    """
    return (MAX_DEGREE + hue if hue < 0 else hue) % MAX_DEGREE


# Hue ranges and the saturation/brightness lower bounds that keep a color of
# that hue from looking muddy.  Each bound is a (saturation, min brightness)
# pair in percent.
_COLOR_DICTIONARY: dict[str, tuple[tuple[int, int], list[tuple[int, int]]]] = {
    "red": (
        (-26, 18),
        [(20, 100), (30, 92), (40, 89), (50, 85), (60, 78), (70, 70), (80, 60), (90, 55), (100, 50)],
    ),
    "orange": (
        (18, 46),
        [(20, 100), (30, 93), (40, 88), (50, 86), (60, 85), (70, 70), (100, 70)],
    ),
    "yellow": (
        (46, 62),
        [(25, 100), (40, 94), (50, 89), (60, 86), (70, 84), (80, 82), (90, 80), (100, 75)],
    ),
    "green": (
        (62, 178),
        [(30, 100), (40, 90), (50, 85), (60, 81), (70, 74), (80, 64), (90, 50), (100, 40)],
    ),
    "blue": (
        (178, 257),
        [(20, 100), (30, 86), (40, 80), (50, 74), (60, 60), (70, 52), (80, 44), (90, 39), (100, 35)],
    ),
    "purple": (
        (257, 282),
        [(20, 100), (30, 87), (40, 79), (50, 70), (60, 65), (70, 59), (80, 52), (90, 45), (100, 42)],
    ),
    "pink": (
        (282, 334),
        [(20, 100), (30, 90), (40, 86), (60, 84), (80, 80), (90, 75), (100, 73)],
    ),
}

Luminosity = Literal["bright", "light", "dark", "random"]


class RandomColor:
    """Seeded generator of pleasant random colors.

    Example::

        rng = NumberGenerator(seed)
        colors = RandomColor(rng)
        foreground = colors.one(luminosity="bright")   # e.g. "#2fd07a"
        background = colors.one(luminosity="light")
    """

    def __init__(self, rng: NumberGenerator) -> None:
        self._rng = rng

    def one(self, luminosity: Luminosity = "bright") -> str:
        """Return one color as a ``#rrggbb`` string."""
        hue = self._pick_hue()
        saturation = self._pick_saturation(hue, luminosity)
        brightness = self._pick_brightness(hue, saturation, luminosity)

        return self._to_hex(hue, saturation, brightness)

    def _pick_hue(self) -> int:
        return self._rng.get(0, MAX_DEGREE)

    def _pick_saturation(self, hue: int, luminosity: Luminosity) -> int:
        if luminosity == "random":
            return self._rng.get(0, MAX_PERCENT)

        bounds = self._lower_bounds(hue)
        s_min, s_max = bounds[0][0], bounds[-1][0]

        if luminosity == "bright":
            s_min = 55
        elif luminosity == "dark":
            s_min = s_max - 10
        elif luminosity == "light":
            s_max = 55

        return self._rng.get(s_min, s_max)

    def _pick_brightness(self, hue: int, saturation: int, luminosity: Luminosity) -> int:
        b_min = self._minimum_brightness(hue, saturation)
        b_max = MAX_PERCENT

        if luminosity == "dark":
            b_max = b_min + 20
        elif luminosity == "light":
            b_min = (b_max + b_min) // 2
        elif luminosity == "random":
            b_min, b_max = 0, MAX_PERCENT

        return self._rng.get(b_min, b_max)

    def _minimum_brightness(self, hue: int, saturation: int) -> int:
        bounds = self._lower_bounds(hue)

        for (s1, v1), (s2, v2) in zip(bounds, bounds[1:]):
            if s1 <= saturation <= s2:
                slope = (v2 - v1) / (s2 - s1)
                intercept = v1 - slope * s1
                return int(slope * saturation + intercept)

        return 0

    @staticmethod
    def _lower_bounds(hue: int) -> list[tuple[int, int]]:
        # Reds wrap around the top of the wheel.
        if 334 <= hue <= MAX_DEGREE:
            hue -= MAX_DEGREE

        for hue_range, bounds in _COLOR_DICTIONARY.values():
            if hue_range[0] <= hue <= hue_range[1]:
                return bounds

        raise ValueError(f"No color information for hue {hue}")

    @staticmethod
    def _to_hex(hue: int, saturation: int, brightness: int) -> str:
        red, green, blue = colorsys.hsv_to_rgb(
            (hue % MAX_DEGREE) / MAX_DEGREE,
            saturation / MAX_PERCENT,
            brightness / MAX_PERCENT,
        )
        return "#{:02x}{:02x}{:02x}".format(
            _round_half_up(red * MAX_RGB),
            _round_half_up(green * MAX_RGB),
            _round_half_up(blue * MAX_RGB),
        )

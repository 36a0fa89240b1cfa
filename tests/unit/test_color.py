"""Tests for avatarforge.core.color: HSL conversion and RandomColor."""

from __future__ import annotations

import re

import pytest

from avatarforge.core.color import RandomColor, hsl_to_rgb, normalize_hue
from avatarforge.core.number_generator import NumberGenerator


class TestHslToRgb:
    """Verify the chroma-based HSL conversion."""

    def test_black(self):
        assert hsl_to_rgb(0, 0, 0) == (0, 0, 0)

    def test_white(self):
        assert hsl_to_rgb(0, 0, 100) == (255, 255, 255)

    @pytest.mark.parametrize(
        "hue, expected",
        [
            (0, (255, 0, 0)),
            (120, (0, 255, 0)),
            (240, (0, 0, 255)),
            (60, (255, 255, 0)),
        ],
    )
    def test_primary_hues(self, hue, expected):
        """Fully saturated mid-lightness colors hit the primaries exactly."""
        assert hsl_to_rgb(hue, 100, 50) == expected

    def test_gray_ignores_hue(self):
        """Without saturation every hue gives the same gray."""
        assert hsl_to_rgb(17, 0, 50) == hsl_to_rgb(300, 0, 50) == (128, 128, 128)

    def test_channels_in_range(self):
        for hue in range(0, 360, 7):
            for lightness in (0, 13, 50, 87, 100):
                assert all(0 <= channel <= 255 for channel in hsl_to_rgb(hue, 94, lightness))


class TestNormalizeHue:
    """Verify hue normalisation."""

    def test_negative_hue_wraps(self):
        assert normalize_hue(-10) == 350

    def test_hue_above_full_turn_wraps(self):
        assert normalize_hue(370) == 10

    def test_negative_and_positive_equivalents_match(self):
        assert normalize_hue(-10) == normalize_hue(350)

    def test_full_turn_is_zero(self):
        assert normalize_hue(360) == 0
        assert normalize_hue(-360) == 0


class TestRandomColor:
    """Verify the seeded random color source."""

    def test_returns_hex_color(self, seed):
        color = RandomColor(NumberGenerator(seed)).one("bright")
        assert re.fullmatch(r"#[0-9a-f]{6}", color)

    def test_same_seed_same_colors(self, seed):
        first = RandomColor(NumberGenerator(seed))
        second = RandomColor(NumberGenerator(seed))
        assert [first.one("bright"), first.one("light")] == [second.one("bright"), second.one("light")]

    def test_light_colors_are_light(self):
        """Light colors have a high brightness (HSV value) for every seed tried."""
        for prefix in ("00000000", "12345678", "deadbeef", "ffffffff"):
            color = RandomColor(NumberGenerator(prefix)).one("light")
            assert max(int(color[i : i + 2], 16) for i in (1, 3, 5)) >= 127

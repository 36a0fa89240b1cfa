"""Tests for avatarforge.generators.rings."""

from __future__ import annotations

import pytest

from avatarforge.generators.rings import SEGMENTS, SIZE, RingsGenerator, draw_arc, pick_segments
from avatarforge.imaging.editor import SVG_IMAGE


class FixedGenerator:
    """Number source that always returns the lower bound."""

    def __init__(self) -> None:
        self.calls: list[tuple[int, int]] = []

    def get(self, minimum: int, maximum: int) -> int:
        self.calls.append((minimum, maximum))
        return minimum


class TestPickSegments:
    def test_empty_ring_gets_one_arc(self):
        rng = FixedGenerator()
        segments = pick_segments(rng)

        assert segments == [True] + [False] * (SEGMENTS - 1)
        assert rng.calls[-1] == (0, SEGMENTS - 1)

    def test_one_draw_per_segment(self):
        rng = FixedGenerator()
        pick_segments(rng)
        assert rng.calls[:SEGMENTS] == [(0, 1)] * SEGMENTS


class TestDrawArc:
    def test_first_arc_of_outer_ring(self):
        assert draw_arc(216, 0) == "M472 256A216 216 0 0 1 408.7 408.7"

    def test_third_arc_of_inner_ring(self):
        assert draw_arc(88, 2) == "M256 344A88 88 0 0 1 193.8 318.2"


class TestRingsGenerator:
    def test_build_produces_svg(self, seed):
        rendered = RingsGenerator().build(seed, 100)
        assert rendered.mime_type == SVG_IMAGE
        assert rendered.data.startswith(b"<svg")
        assert f'viewBox="0 0 {SIZE} {SIZE}"'.encode() in rendered.data

    @pytest.mark.parametrize("seed_name", ["seed", "other_seed"])
    def test_every_ring_drawn(self, seed_name, request):
        data = RingsGenerator().build(request.getfixturevalue(seed_name), 100).data
        for radius in (216, 152, 88):
            assert f"A{radius} {radius} ".encode() in data

    def test_deterministic(self, seed):
        assert RingsGenerator().build(seed, 100) == RingsGenerator().build(seed, 100)

    def test_seeds_differ(self, seed, other_seed):
        assert RingsGenerator().build(seed, 100) != RingsGenerator().build(other_seed, 100)

    def test_size_is_ignored(self, seed):
        assert RingsGenerator().build(seed, 32) == RingsGenerator().build(seed, 512)

"""Rings: concentric broken rings around a dot, rendered as SVG.

Each of the three rings is divided into eight arcs, and the seeded number
generator decides which arcs are drawn.  A ring never ends up empty: if no
arc was picked, one is chosen from the same stream.  Colors come from the
seeded random color source, drawn before the arcs (background "light", then
foreground "bright").
"""

from __future__ import annotations

import math

from avatarforge.core.color import RandomColor
from avatarforge.core.number_generator import NumberGenerator
from avatarforge.generators.base import AvatarGenerator
from avatarforge.imaging.editor import SVG_IMAGE
from avatarforge.imaging.svg import render_template, svg_number

SIZE = 512
CENTER = SIZE // 2

RING_COUNT = 3
SEGMENTS = 8
STROKE_WIDTH = 48
OUTER_RADIUS = 216
RING_SPACING = 64
DOT_RADIUS = 40


def pick_segments(rng: NumberGenerator) -> list[bool]:
    """Which of the arcs of one ring are drawn; at least one always is."""
    segments = [rng.get(0, 1) == 1 for _ in range(SEGMENTS)]
    if not any(segments):
        segments[rng.get(0, SEGMENTS - 1)] = True

    return segments


def draw_arc(radius: float, segment: int) -> str:
    """SVG path of arc ``segment`` of a ring, clockwise from three o'clock."""
    start = 2 * math.pi * segment / SEGMENTS
    end = 2 * math.pi * (segment + 1) / SEGMENTS

    x0, y0 = CENTER + radius * math.cos(start), CENTER + radius * math.sin(start)
    x1, y1 = CENTER + radius * math.cos(end), CENTER + radius * math.sin(end)
    r = svg_number(radius)

    return f"M{svg_number(x0)} {svg_number(y0)}A{r} {r} 0 0 1 {svg_number(x1)} {svg_number(y1)}"


class RingsGenerator(AvatarGenerator):
    """Rings generator.  The requested size is ignored."""

    name = "rings"
    mime_type = SVG_IMAGE

    def render(self, seed: str, size: int) -> bytes:
        rng = NumberGenerator(seed)
        colors = RandomColor(rng)
        bg_color = colors.one(luminosity="light")
        color = colors.one(luminosity="bright")

        arcs = []
        for ring in range(RING_COUNT):
            radius = OUTER_RADIUS - ring * RING_SPACING
            segments = pick_segments(rng)
            arcs.extend(draw_arc(radius, index) for index, drawn in enumerate(segments) if drawn)

        svg = render_template(
            "rings.svg",
            size=SIZE,
            center=CENTER,
            bg_color=bg_color,
            color=color,
            stroke_width=STROKE_WIDTH,
            arcs=arcs,
            dot_radius=DOT_RADIUS,
        )
        return svg.encode("utf-8")

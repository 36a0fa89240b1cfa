"""Jdenticon: geometric identicons rendered as SVG.

The icon is a 4x4 grid of cells drawn in three passes: the eight side cells,
the four corners and the four center cells.  Each pass picks one shape and
one color, then stamps the shape into every cell of the pass, rotating it a
quarter turn from cell to cell.  Everything is read straight from the seed
digits; no random number generator is involved.

Seed digits used::

    1       center shape        8, 9, 10   color of sides, corners, center
    2, 3    side shape, turn    last 7     hue of the colored theme entries
    4, 5    corner shape, turn

Shapes of the same color end up in a single path, so an icon has at most
three ``<path>`` elements.  Inverted polygons and circles are drawn with the
opposite winding, which cuts holes into the filled cell underneath.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from avatarforge.core.color import hsl_to_rgb
from avatarforge.core.number_generator import seed_digits
from avatarforge.generators.base import AvatarGenerator
from avatarforge.imaging.editor import SVG_IMAGE
from avatarforge.imaging.svg import render_template, svg_number

SIZE = 128
PADDING = 0.08
SATURATION = 0.5

COLOR_LIGHTNESS = (0.4, 0.8)
GRAYSCALE_LIGHTNESS = (0.3, 0.9)

# Perceived middle lightness per sixth of the hue circle.
LIGHTNESS_CORRECTORS = (0.55, 0.5, 0.5, 0.46, 0.6, 0.55, 0.55)

# Theme entries.
DARK_GRAY = 0
MID_COLOR = 1
LIGHT_GRAY = 2
LIGHT_COLOR = 3
DARK_COLOR = 4

SIDES = ((1, 0), (2, 0), (2, 3), (1, 3), (0, 1), (3, 1), (3, 2), (0, 2))
CORNERS = ((0, 0), (3, 0), (3, 3), (0, 3))
CENTER = ((1, 1), (2, 1), (2, 2), (1, 2))

OUTER_SHAPES = 4
CENTER_SHAPES = 14

Point = tuple[float, float]


def _lightness(value: float, bounds: tuple[float, float]) -> float:
    lower, upper = bounds
    return min(max(lower + value * (upper - lower), 0.0), 1.0)


def _hex_color(hue: float, saturation: float, lightness: float) -> str:
    red, green, blue = hsl_to_rgb(hue * 360, saturation * 100, lightness * 100)
    return f"#{red:02x}{green:02x}{blue:02x}"


def _corrected_color(hue: float, saturation: float, lightness: float) -> str:
    corrector = LIGHTNESS_CORRECTORS[int(hue * 6 + 0.5)]
    if lightness < 0.5:
        lightness = lightness * corrector * 2
    else:
        lightness = corrector + (lightness - 0.5) * (1 - corrector) * 2

    return _hex_color(hue, saturation, lightness)


def theme_colors(hue: float) -> list[str]:
    """The five theme colors for ``hue`` (0-1), indexed by the theme constants."""
    return [
        _hex_color(0, 0, _lightness(0, GRAYSCALE_LIGHTNESS)),
        _corrected_color(hue, SATURATION, _lightness(0.5, COLOR_LIGHTNESS)),
        _hex_color(0, 0, _lightness(1, GRAYSCALE_LIGHTNESS)),
        _corrected_color(hue, SATURATION, _lightness(1, COLOR_LIGHTNESS)),
        _corrected_color(hue, SATURATION, _lightness(0, COLOR_LIGHTNESS)),
    ]


def select_colors(seed: str, count: int) -> list[int]:
    """Theme indexes for the side, corner and center passes.

    A dark gray is never combined with the dark color, nor a light gray with
    the light color; the mid color replaces the second of such a pair.
    """
    selected: list[int] = []

    for position in range(3):
        index = seed_digits(seed, 8 + position, 1, count)
        for pair in ((DARK_GRAY, DARK_COLOR), (LIGHT_GRAY, LIGHT_COLOR)):
            if index in pair and any(other in pair for other in selected):
                index = MID_COLOR
        selected.append(index)

    return selected


@dataclass(frozen=True)
class Transform:
    """Places cell-relative coordinates into one rotated grid cell."""

    x: float
    y: float
    size: float
    rotation: int

    def point(self, x: float, y: float, width: float = 0, height: float = 0) -> Point:
        right = self.x + self.size
        bottom = self.y + self.size

        if self.rotation == 1:
            return right - y - height, self.y + x
        if self.rotation == 2:
            return right - x - width, bottom - y - height
        if self.rotation == 3:
            return self.x + y, bottom - x - width

        return self.x + x, self.y + y


class Graphics:
    """Collects SVG path data per fill color."""

    def __init__(self) -> None:
        self.transform = Transform(0, 0, 0, 0)
        self._paths: dict[str, list[str]] = {}
        self._current: list[str] = []

    def begin_shape(self, color: str) -> None:
        self._current = self._paths.setdefault(color, [])

    def paths(self) -> list[tuple[str, str]]:
        return [(color, "".join(data)) for color, data in self._paths.items()]

    def add_polygon(self, points: list[Point], invert: bool = False) -> None:
        if invert:
            points = points[::-1]

        (first_x, first_y), *rest = [self.transform.point(x, y) for x, y in points]
        data = f"M{svg_number(first_x)} {svg_number(first_y)}"
        data += "".join(f"L{svg_number(x)} {svg_number(y)}" for x, y in rest)
        self._current.append(f"{data}Z")

    def add_circle(self, x: float, y: float, size: float, invert: bool = False) -> None:
        left, top = self.transform.point(x, y, size, size)
        sweep = 0 if invert else 1
        radius = svg_number(size / 2)
        diameter = svg_number(size)

        self._current.append(
            f"M{svg_number(left)} {svg_number(top + size / 2)}"
            f"a{radius},{radius} 0 1,{sweep} {diameter},0"
            f"a{radius},{radius} 0 1,{sweep} -{diameter},0"
        )

    def add_rectangle(self, x: float, y: float, width: float, height: float, invert: bool = False) -> None:
        self.add_polygon([(x, y), (x + width, y), (x + width, y + height), (x, y + height)], invert)

    def add_triangle(
        self, x: float, y: float, width: float, height: float, rotation: int, invert: bool = False
    ) -> None:
        points = [(x + width, y), (x + width, y + height), (x, y + height), (x, y)]
        del points[rotation % 4]
        self.add_polygon(points, invert)

    def add_rhombus(self, x: float, y: float, width: float, height: float, invert: bool = False) -> None:
        self.add_polygon(
            [(x + width / 2, y), (x + width, y + height / 2), (x + width / 2, y + height), (x, y + height / 2)],
            invert,
        )


def outer_shape(index: int, g: Graphics, cell: float, position: int) -> None:
    """Draw side or corner shape ``index`` into the current cell."""
    if index == 0:
        g.add_triangle(0, 0, cell, cell, 0)
    elif index == 1:
        g.add_triangle(0, cell / 2, cell, cell / 2, 0)
    elif index == 2:
        g.add_rhombus(0, 0, cell, cell)
    else:
        m = cell / 6
        g.add_circle(m, m, cell - 2 * m)


def center_shape(index: int, g: Graphics, cell: float, position: int) -> None:
    """Draw center shape ``index`` into the current cell.

    Small cells get fixed-width borders so the shapes stay visible.
    """
    if index == 0:
        k = cell * 0.42
        g.add_polygon([(0, 0), (cell, 0), (cell, cell - k * 2), (cell - k, cell), (0, cell)])
    elif index == 1:
        w = int(cell * 0.5)
        h = int(cell * 0.8)
        g.add_triangle(cell - w, 0, w, h, 2)
    elif index == 2:
        w = int(cell / 3)
        g.add_rectangle(w, w, cell - w, cell - w)
    elif index == 3:
        inner = cell * 0.1
        if inner > 1:
            inner = int(inner)
        elif inner > 0.5:
            inner = 1
        outer = 1 if cell < 6 else 2 if cell < 8 else int(cell * 0.25)
        g.add_rectangle(outer, outer, cell - inner - outer, cell - inner - outer)
    elif index == 4:
        m = int(cell * 0.15)
        w = int(cell * 0.5)
        g.add_circle(cell - w - m, cell - w - m, w)
    elif index == 5:
        inner = cell * 0.1
        outer = inner * 4
        if outer > 3:
            outer = int(outer)
        g.add_rectangle(0, 0, cell, cell)
        g.add_polygon(
            [(outer, outer), (cell - inner, outer), (outer + (cell - outer - inner) / 2, cell - inner)],
            invert=True,
        )
    elif index == 6:
        g.add_polygon(
            [(0, 0), (cell, 0), (cell, cell * 0.7), (cell * 0.4, cell * 0.4), (cell * 0.7, cell), (0, cell)]
        )
    elif index in (7, 11):
        g.add_triangle(cell / 2, cell / 2, cell / 2, cell / 2, 3)
    elif index == 8:
        g.add_rectangle(0, 0, cell, cell / 2)
        g.add_rectangle(0, cell / 2, cell / 2, cell / 2)
        g.add_triangle(cell / 2, cell / 2, cell / 2, cell / 2, 1)
    elif index == 9:
        inner = cell * 0.14
        if cell >= 8:
            inner = int(inner)
        outer = 1 if cell < 4 else 2 if cell < 6 else int(cell * 0.35)
        g.add_rectangle(0, 0, cell, cell)
        g.add_rectangle(outer, outer, cell - outer - inner, cell - outer - inner, invert=True)
    elif index == 10:
        inner = cell * 0.12
        outer = inner * 3
        g.add_rectangle(0, 0, cell, cell)
        g.add_circle(outer, outer, cell - inner - outer, invert=True)
    elif index == 12:
        m = cell * 0.25
        g.add_rectangle(0, 0, cell, cell)
        g.add_rhombus(m, m, cell - m, cell - m, invert=True)
    elif position == 0:
        # One large circle spanning the four center cells.
        m = cell * 0.4
        g.add_circle(m, m, cell * 1.2)


Shape = Callable[[int, Graphics, float, int], None]


class JdenticonGenerator(AvatarGenerator):
    """Jdenticon generator.  The requested size is ignored."""

    name = "jdenticon"
    mime_type = SVG_IMAGE

    def render(self, seed: str, size: int) -> bytes:
        padding = int(SIZE * PADDING)
        inner = SIZE - padding * 2
        cell = inner // 4

        # The integer cell size leaves a remainder; center the grid.
        x = y = padding + inner / 2 - cell * 2

        colors = theme_colors(int(seed[-7:], 16) / 0xFFFFFFF)
        selected = select_colors(seed, len(colors))
        graphics = Graphics()

        def render_shape(
            pass_index: int,
            shape: Shape,
            count: int,
            digit: int,
            turn_digit: int | None,
            cells: tuple[tuple[int, int], ...],
        ) -> None:
            index = seed_digits(seed, digit, 1, count)
            rotation = seed_digits(seed, turn_digit, 1, 16) if turn_digit is not None else 0

            graphics.begin_shape(colors[selected[pass_index]])
            for position, (column, row) in enumerate(cells):
                rotation += 1
                graphics.transform = Transform(x + column * cell, y + row * cell, cell, rotation % 4)
                shape(index, graphics, cell, position)

        render_shape(0, outer_shape, OUTER_SHAPES, 2, 3, SIDES)
        render_shape(1, outer_shape, OUTER_SHAPES, 4, 5, CORNERS)
        render_shape(2, center_shape, CENTER_SHAPES, 1, None, CENTER)

        svg = render_template("jdenticon.svg", size=SIZE, paths=graphics.paths())
        return svg.encode("utf-8")

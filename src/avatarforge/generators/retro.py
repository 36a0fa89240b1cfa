"""Retro: symmetric 5x5 pixel identicons rendered as SVG.

The pattern comes from the MD5 digest of the seed.  The first digit of each
of the first fifteen digit pairs sets one cell of the left half (columns 0-2)
of the grid, row by row, and is mirrored onto the right half::

    pair index  0  1  2 | 3  4  5 | ...
    columns     0+4 1+3 2 | 0+4 1+3 2 | ...

A cell is set when its digit is at least 5.  The set cells are traced into a
single path of unit squares, and the foreground and background colors come
from the seeded random color source (one "bright", one "light").
"""

from __future__ import annotations

import hashlib

from avatarforge.core.color import RandomColor
from avatarforge.core.number_generator import NumberGenerator
from avatarforge.generators.base import AvatarGenerator
from avatarforge.imaging.editor import SVG_IMAGE
from avatarforge.imaging.svg import render_template

GRID_SIZE = 5

# Columns set by the n-th digit of a row.
_MIRRORED_COLUMNS = {
    0: (0, 4),
    1: (1, 3),
    2: (2,),
}

_CELL_THRESHOLD = 5


def get_bitmap(digest: str) -> list[list[bool]]:
    """Build the mirrored 5x5 bitmap from a hex digest.

    Example:
        >>> get_bitmap("9737e3144aeeef544da072c45cbaf536")[0]
        [True, False, True, False, True]
    """
    digits = digest[0 : 2 * len(_MIRRORED_COLUMNS) * GRID_SIZE : 2]
    bitmap = [[False] * GRID_SIZE for _ in range(GRID_SIZE)]

    for index, digit in enumerate(digits):
        row, position = divmod(index, len(_MIRRORED_COLUMNS))
        for column in _MIRRORED_COLUMNS[position]:
            bitmap[row][column] = int(digit, 16) >= _CELL_THRESHOLD

    return bitmap


def draw_path(bitmap: list[list[bool]]) -> str:
    """Trace the set cells into one SVG path of unit squares, row by row."""
    return "".join(
        f"M{column},{row}h1v1h-1v-1"
        for row, cells in enumerate(bitmap)
        for column, filled in enumerate(cells)
        if filled
    )


class RetroGenerator(AvatarGenerator):
    """Retro identicon generator.  The requested size is ignored."""

    name = "retro"
    mime_type = SVG_IMAGE

    def render(self, seed: str, size: int) -> bytes:
        colors = RandomColor(NumberGenerator(seed))
        color = colors.one(luminosity="bright")
        bg_color = colors.one(luminosity="light")

        bitmap = get_bitmap(hashlib.md5(seed.encode("utf-8")).hexdigest())

        svg = render_template(
            "retro.svg",
            columns=GRID_SIZE,
            rows=GRID_SIZE,
            color=color,
            bg_color=bg_color,
            path=draw_path(bitmap),
        )
        return svg.encode("utf-8")

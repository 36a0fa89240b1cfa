"""Robohash: robots assembled from SVG fragments.

One fragment is chosen per category (``body, face, eyes, mouth, accessory``)
with the seeded number generator, followed by a body color and a background
color from fixed palettes.  Fragments are stored pre-processed in the part
catalog, so a build does no file I/O once the catalog is cached.
"""

from __future__ import annotations

from avatarforge.core.number_generator import NumberGenerator
from avatarforge.generators.base import AvatarGenerator
from avatarforge.imaging.editor import SVG_IMAGE
from avatarforge.imaging.svg import render_template, trusted
from avatarforge.parts.catalog import PartCatalog
from avatarforge.parts.selector import RandomPartSelector, randomize_parts

ROBOHASH_PARTS = ["body", "face", "eyes", "mouth", "accessory"]

COLORS = [
    "#ff9800",  # orange-500
    "#E53935",  # red-600
    "#FDD835",  # yellow-600
    "#3f51b5",  # indigo-500
    "#03a9f4",  # light-blue-500
    "#9c27b0",  # purple-500
    "#009688",  # teal-500
    "#EC407A",  # pink-400
    "#8bc34a",  # light-green-500
    "#795548",  # brown-500
]

BG_COLORS = [
    "#FF8A80",  # red-a100
    "#F48FB1",  # pink-200
    "#ea80fc",  # purple-a100
    "#8c9eff",  # indigo-a100
    "#80d8ff",  # light-blue-a100
    "#CFD8DC",  # blue-grey-100
    "#1DE9B6",  # teal-a400
    "#00C853",  # green-a700
    "#FF9E80",  # deep-orange-a100
    "#FFE57F",  # amber-a100
]


class RobohashGenerator(AvatarGenerator):
    """Robohash style generator.  The requested size is ignored.

    Args:
        catalog: Fragment catalog whose values are prepared SVG groups
            (see :func:`avatarforge.imaging.svg.read_fragment`).
    """

    name = "robohash"
    mime_type = SVG_IMAGE

    def __init__(self, catalog: PartCatalog) -> None:
        self.catalog = catalog

    def render(self, seed: str, size: int) -> bytes:
        rng = NumberGenerator(seed)
        parts = randomize_parts(self.catalog.get_parts(), RandomPartSelector(rng))

        color = COLORS[rng.get(0, len(COLORS) - 1)]
        bg_color = BG_COLORS[rng.get(0, len(BG_COLORS) - 1)]

        svg = render_template(
            "robohash.svg",
            color=color,
            bg_color=bg_color,
            **{part_type: trusted(parts[part_type]) for part_type in ROBOHASH_PARTS},
        )
        return svg.encode("utf-8")

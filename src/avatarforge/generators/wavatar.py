"""Wavatar: a blob-shaped face on a colored background.

Wavatars read every decision straight from the seed digits, without a random
number generator:

======  ======  ===================================
offset  digits  decides
======  ======  ===================================
1       2       face shape (``mask`` and ``shine``)
3       2       background hue
5       2       background fade
7       2       face hue
9       2       eyebrows
11      2       eyes
13      2       pupils
15      2       mouth
======  ======  ===================================

Hues are ``digits % 240`` scaled from 0..255 onto 0..360 degrees.
"""

from __future__ import annotations

from avatarforge.core.color import MAX_DEGREE, MAX_RGB
from avatarforge.core.number_generator import seed_digits
from avatarforge.generators.base import AvatarGenerator
from avatarforge.generators.layers import PartLayers
from avatarforge.imaging.editor import PNG_IMAGE
from avatarforge.parts.selector import SeedDigitPartSelector, randomize_parts

SIZE = 80

WAVATAR_PARTS = ["fade", "mask", "shine", "brow", "eyes", "pupils", "mouth"]

PART_OFFSETS = {
    "mask": 1,
    "shine": 1,
    "fade": 5,
    "brow": 9,
    "eyes": 11,
    "pupils": 13,
    "mouth": 15,
}

BACKGROUND_HUE_OFFSET = 3
FACE_HUE_OFFSET = 7
HUE_MODULO = 240

SATURATION = 94
BACKGROUND_LIGHTNESS = 20
FACE_LIGHTNESS = 66


def seed_hue(seed: str, offset: int) -> float:
    """Hue in degrees encoded by two seed digits."""
    return seed_digits(seed, offset, 2, HUE_MODULO) / MAX_RGB * MAX_DEGREE


class WavatarGenerator(AvatarGenerator):
    """Wavatar style generator.

    Args:
        layers: Part capabilities for the wavatar part directory.
    """

    name = "wavatar"
    mime_type = PNG_IMAGE

    def __init__(self, layers: PartLayers) -> None:
        self.layers = layers

    def render(self, seed: str, size: int) -> bytes:
        selector = SeedDigitPartSelector(seed, PART_OFFSETS)
        parts = randomize_parts(self.layers.catalog.get_parts(), selector)
        canvas = self.layers.canvas
        middle = self.layers.size // 2

        avatar = canvas.create("black", self.layers.size, self.layers.size)
        canvas.fill_hsl(avatar, seed_hue(seed, BACKGROUND_HUE_OFFSET), SATURATION, BACKGROUND_LIGHTNESS, 1, 1)

        self.layers.apply(avatar, parts["fade"])
        self.layers.apply(avatar, parts["mask"])
        canvas.fill_hsl(avatar, seed_hue(seed, FACE_HUE_OFFSET), SATURATION, FACE_LIGHTNESS, middle, middle)

        for part_type in ("shine", "brow", "eyes", "pupils", "mouth"):
            self.layers.apply(avatar, parts[part_type])

        return self.layers.encode(avatar, size)

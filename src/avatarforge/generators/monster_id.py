"""Monster ID: colorful monsters assembled from body part layers.

All choices come from the seeded number generator, drawn in a fixed order:

1. one part per category (``legs, hair, arms, body, eyes, mouth``)
2. the monster's hue (a real number in [0, 360)) and saturation
3. per part, in layering order, any extra hue/saturation a part needs

Parts are recolored according to their file name:

- the body and the *same color* parts take the monster's hue and saturation
- *random color* parts get a freshly drawn hue and saturation
- *specific color* parts get a hue from a fixed range and a fresh saturation
- everything else keeps its original colors
"""

from __future__ import annotations

from avatarforge.core.color import MAX_DEGREE, MAX_PERCENT
from avatarforge.core.number_generator import NumberGenerator
from avatarforge.generators.base import AvatarGenerator
from avatarforge.generators.layers import PartLayers
from avatarforge.imaging.editor import PNG_IMAGE
from avatarforge.parts.selector import RandomPartSelector, randomize_parts

SIZE = 120
BACKGROUND = "back.png"

MONSTER_PARTS = ["legs", "hair", "arms", "body", "eyes", "mouth"]

SAME_COLOR_PARTS = frozenset(
    {
        "arms_S8.png",
        "legs_S5.png",
        "legs_S13.png",
        "mouth_S5.png",
        "mouth_S4.png",
    }
)

# Hue ranges as fractions of a full turn.
SPECIFIC_COLOR_PARTS = {
    "hair_S4.png": (0.6, 0.75),
    "arms_S2.png": (-0.05, 0.05),
    "hair_S6.png": (-0.05, 0.05),
    "mouth_9.png": (-0.05, 0.05),
    "mouth_6.png": (-0.05, 0.05),
    "mouth_S2.png": (-0.05, 0.05),
}

RANDOM_COLOR_PARTS = frozenset(
    {
        "arms_3.png",
        "arms_4.png",
        "arms_5.png",
        "arms_S1.png",
        "arms_S3.png",
        "arms_S5.png",
        "arms_S6.png",
        "arms_S7.png",
        "arms_S9.png",
        "hair_S1.png",
        "hair_S2.png",
        "hair_S3.png",
        "hair_S5.png",
        "legs_1.png",
        "legs_2.png",
        "legs_3.png",
        "legs_5.png",
        "legs_S1.png",
        "legs_S2.png",
        "legs_S3.png",
        "legs_S4.png",
        "legs_S6.png",
        "legs_S7.png",
        "legs_S10.png",
        "legs_S12.png",
        "mouth_3.png",
        "mouth_4.png",
        "mouth_7.png",
        "mouth_10.png",
        "mouth_S6.png",
    }
)

_SPECIFIC_HUE_SCALE = 10000


def random_saturation(rng: NumberGenerator) -> float:
    """Saturation between 25 and 100 percent, in steps of 0.001."""
    return rng.get(25000, 100000) / 100000 * MAX_PERCENT


def random_hue(rng: NumberGenerator) -> float:
    return rng.real_halfopen() * MAX_DEGREE


class MonsterIdGenerator(AvatarGenerator):
    """Monster ID style generator.

    Args:
        layers: Part capabilities for the monster part directory, which must
            also contain the ``back.png`` background.
    """

    name = "monsterid"
    mime_type = PNG_IMAGE

    def __init__(self, layers: PartLayers) -> None:
        self.layers = layers

    def render(self, seed: str, size: int) -> bytes:
        rng = NumberGenerator(seed)
        parts = randomize_parts(self.layers.catalog.get_parts(), RandomPartSelector(rng))
        canvas = self.layers.canvas

        monster = canvas.create_from_file(BACKGROUND)

        hue = random_hue(rng)
        saturation = random_saturation(rng)

        for part_type, filename in parts.items():
            image = canvas.create_from_file(filename)

            if part_type == "body" or filename in SAME_COLOR_PARTS:
                image = canvas.colorize(image, hue, saturation)
            elif filename in RANDOM_COLOR_PARTS:
                image = canvas.colorize(image, random_hue(rng), random_saturation(rng))
            elif filename in SPECIFIC_COLOR_PARTS:
                low, high = SPECIFIC_COLOR_PARTS[filename]
                part_hue = (
                    rng.get(round(low * _SPECIFIC_HUE_SCALE), round(high * _SPECIFIC_HUE_SCALE))
                    / _SPECIFIC_HUE_SCALE
                    * MAX_DEGREE
                )
                image = canvas.colorize(image, part_hue, random_saturation(rng))

            self.layers.apply(monster, image)

        return self.layers.encode(monster, size)

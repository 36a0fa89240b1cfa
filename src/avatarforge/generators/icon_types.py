"""Icon types served by the default icons handler and their generators.

:class:`IconType` is the closed set of generated avatar styles.  Its values
are the ``type`` segment of cache paths.  :func:`create_generators` builds
one generator per member; :func:`check_generators` refuses any mapping that
misses a member, so adding a style without wiring up its generator fails at
startup instead of at the first request.
"""

from __future__ import annotations

import logging
from enum import Enum

from avatarforge.core.config import AvatarForgeConfig
from avatarforge.core.transients import FileTransientStore
from avatarforge.generators.base import AvatarGenerator
from avatarforge.generators.jdenticon import JdenticonGenerator
from avatarforge.generators.layers import BIRD_PARTS, CAT_PARTS, LayeredGenerator, PartLayers
from avatarforge.generators.monster_id import MONSTER_PARTS
from avatarforge.generators.monster_id import SIZE as MONSTER_SIZE
from avatarforge.generators.monster_id import MonsterIdGenerator
from avatarforge.generators.retro import RetroGenerator
from avatarforge.generators.rings import RingsGenerator
from avatarforge.generators.robohash import ROBOHASH_PARTS, RobohashGenerator
from avatarforge.generators.static import StaticIconGenerator
from avatarforge.generators.wavatar import SIZE as WAVATAR_SIZE
from avatarforge.generators.wavatar import WAVATAR_PARTS, WavatarGenerator
from avatarforge.imaging.editor import ImageEditor
from avatarforge.imaging.svg import read_fragment
from avatarforge.parts.catalog import PartCatalog

logger = logging.getLogger(__name__)

LAYERED_SIZE = 512


class IconType(str, Enum):
    """Generated avatar styles."""

    WAVATAR = "wavatar"
    MONSTER_ID = "monsterid"
    BIRD = "bird"
    CAT = "cat"
    RETRO = "retro"
    JDENTICON = "jdenticon"
    RINGS = "rings"
    ROBOHASH = "robohash"
    MYSTERY = "mystery"
    SILHOUETTE = "silhouette"
    BUBBLE = "bubble"

    @classmethod
    def from_type(cls, value: str) -> IconType | None:
        """Look up a cache path type (case-insensitive), or ``None``."""
        try:
            return cls(value.lower())
        except ValueError:
            return None


# Sub-directory of ``parts_dir`` holding each style's parts.
PART_DIRECTORIES = {
    IconType.WAVATAR: "wavatars",
    IconType.MONSTER_ID: "monster-id",
    IconType.BIRD: "birds",
    IconType.CAT: "cats",
    IconType.ROBOHASH: "robohash",
}


def check_generators(generators: dict[IconType, AvatarGenerator]) -> None:
    """Ensure every icon type has a generator.

    Raises:
        ValueError: Naming the icon types without a generator.
    """
    missing = [icon_type.value for icon_type in IconType if icon_type not in generators]
    if missing:
        raise ValueError(f"No generator for icon types: {', '.join(missing)}")


def create_generators(
    config: AvatarForgeConfig,
    transients: FileTransientStore,
    editor: ImageEditor,
) -> dict[IconType, AvatarGenerator]:
    """Build the generator of every icon type from configuration.

    Part catalogs are created lazily: no directory is scanned until the
    first build of a style.
    """
    ttl = config.parts_cache_ttl

    def layers(icon_type: IconType, part_types: list[str], size: int) -> PartLayers:
        parts_dir = config.parts_dir / PART_DIRECTORIES[icon_type]
        return PartLayers.create(parts_dir, part_types, size, transients, editor, ttl)

    robohash_catalog = PartCatalog(
        config.parts_dir / PART_DIRECTORIES[IconType.ROBOHASH],
        ROBOHASH_PARTS,
        transients,
        ttl,
        reader=read_fragment,
    )

    generators: dict[IconType, AvatarGenerator] = {
        IconType.WAVATAR: WavatarGenerator(layers(IconType.WAVATAR, WAVATAR_PARTS, WAVATAR_SIZE)),
        IconType.MONSTER_ID: MonsterIdGenerator(layers(IconType.MONSTER_ID, MONSTER_PARTS, MONSTER_SIZE)),
        IconType.BIRD: LayeredGenerator("bird", layers(IconType.BIRD, BIRD_PARTS, LAYERED_SIZE)),
        IconType.CAT: LayeredGenerator("cat", layers(IconType.CAT, CAT_PARTS, LAYERED_SIZE)),
        IconType.RETRO: RetroGenerator(),
        IconType.JDENTICON: JdenticonGenerator(),
        IconType.RINGS: RingsGenerator(),
        IconType.ROBOHASH: RobohashGenerator(robohash_catalog),
        IconType.MYSTERY: StaticIconGenerator("mystery"),
        IconType.SILHOUETTE: StaticIconGenerator("silhouette"),
        IconType.BUBBLE: StaticIconGenerator("bubble"),
    }

    check_generators(generators)
    logger.info(f"Initialised {len(generators)} avatar generators (parts in {config.parts_dir})")

    return generators

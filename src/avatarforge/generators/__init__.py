"""Avatar generators, one per style.

- **base.py**: ``AvatarGenerator`` base class and the ``RenderedImage`` result
- **layers.py**: Raster part capabilities and the plain layered style (birds, cats)
- **wavatar.py**: Wavatars (seed digit selection, HSL fills)
- **monster_id.py**: Monster ID (seeded selection, part colorization)
- **retro.py**: Retro identicons (bitmap traced to an SVG path)
- **robohash.py**: Robohash (SVG fragment assembly)
- **static.py**: Fixed SVG icons
- **icon_types.py**: ``IconType`` enum and the generator factory
"""

from avatarforge.generators.base import AvatarGenerator, RenderedImage
from avatarforge.generators.icon_types import IconType, check_generators, create_generators

__all__ = [
    "AvatarGenerator",
    "RenderedImage",
    "IconType",
    "check_generators",
    "create_generators",
]

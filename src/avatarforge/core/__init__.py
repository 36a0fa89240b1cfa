"""Core building blocks shared by all avatar generators.

- **config.py**: Configuration management using Pydantic Settings
- **exceptions.py**: Error hierarchy (catalog, composition, cache path, generation)
- **color.py**: HSL to RGB conversion and the seeded "random color" source
- **number_generator.py**: Seeded pseudo-random numbers and seed digit extraction
- **transients.py**: File-backed key/value store with expiry, shared by workers
"""

from avatarforge.core.config import AvatarForgeConfig, config
from avatarforge.core.exceptions import (
    AvatarForgeError,
    AvatarGenerationError,
    CompositionError,
    InvalidCachePathError,
    PartsNotFoundError,
)

__all__ = [
    "AvatarForgeConfig",
    "config",
    "AvatarForgeError",
    "AvatarGenerationError",
    "CompositionError",
    "InvalidCachePathError",
    "PartsNotFoundError",
]

"""Avatar Forge - deterministic procedural avatars with an on-demand render cache."""

__version__ = "0.3.0"

from avatarforge.core.config import AvatarForgeConfig, config

__all__ = [
    "AvatarForgeConfig",
    "config",
]

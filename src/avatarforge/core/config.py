"""Configuration management for Avatar Forge.

This module provides centralized configuration management using Pydantic Settings.
All configuration is loaded from environment variables with the AVATARFORGE_
prefix, allowing easy customization without code changes.

Environment Variable Loading
-----------------------------
Configuration values are loaded in the following priority order:
1. Environment variables (AVATARFORGE_* prefix)
2. .env file in the project root
3. Default values defined in AvatarForgeConfig

Example .env file:
    AVATARFORGE_CACHE_DIR=/var/cache/avatars
    AVATARFORGE_CACHE_URL_PREFIX=avatar-privacy
    AVATARFORGE_PARTS_DIR=/srv/avatar-parts
    AVATARFORGE_GRAVATARS_MAX_AGE=172800

Global Configuration Instance
------------------------------
A global `config` instance is created automatically at module import time.
This ensures a single source of truth for all configuration values across
the application.

Usage Example
-------------
    from avatarforge.core.config import config

    print(config.cache_dir)
    print(config.default_icon_size)

Directory Management
--------------------
The configuration automatically creates required directories on initialization:
- cache_dir: Generated and fetched avatar images
- transients_dir: Shared transient store (eviction locks, part catalogs)

Cache Eviction Settings
-----------------------
Two independent eviction jobs exist:
- gravatars: remote images, removed after ``gravatars_max_age`` seconds
- all images: every cached file, removed after ``all_images_max_age`` seconds

Each job runs at most once per its cleanup interval across all workers.

See Also
--------
- AvatarForgeConfig: Full configuration class documentation
- avatarforge.cache.janitor: The eviction jobs driven by these values
"""

from pathlib import Path
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Time units used by the cache settings.
MINUTE_IN_SECONDS = 60
HOUR_IN_SECONDS = 60 * MINUTE_IN_SECONDS
DAY_IN_SECONDS = 24 * HOUR_IN_SECONDS

# Bundled SVG templates, fragments, icons and (optionally) raster parts.
ASSETS_DIR = Path(__file__).resolve().parent.parent / "assets"


class AvatarForgeConfig(BaseSettings):
    """Main configuration for Avatar Forge.

    Values are loaded from environment variables with the AVATARFORGE_ prefix,
    with fallback to defaults defined here.

    Attributes
    ----------
    Cache Settings:
        cache_dir : Path
            Root directory of the on-disk avatar cache
        cache_url_prefix : str
            URL path segment the image proxy is mounted under
        transients_dir : Path
            Directory backing the shared transient store
        cache_lifetime : int
            Seconds added to the current time for the ``Expires`` header

    Generator Settings:
        parts_dir : Path
            Root directory containing one sub-directory of parts per style
        default_icon_size : int
            Icon size used when a cache path carries no explicit size
        max_icon_size : int
            Largest size accepted from a cache path or avatar request
        parts_cache_ttl : int
            Seconds a scanned part catalog stays cached

    Eviction Settings:
        gravatars_max_age : int
            Maximum age in seconds of cached remote images
        gravatars_cleanup_interval : int
            Minimum seconds between two runs of the remote image job
        all_images_max_age : int
            Maximum age in seconds of any cached image
        all_images_cleanup_interval : int
            Minimum seconds between two runs of the all-images job

    Remote Images:
        gravatar_rating : Literal["g", "pg", "r", "x"]
            Maximum rating requested from the remote avatar service
        gravatar_timeout : float
            HTTP timeout in seconds for remote fetches

    Server Settings:
        server_host : str
            Server bind address
        server_port : int
            Server port (1024-65535)

    Examples
    --------
        >>> custom_config = AvatarForgeConfig(
        ...     cache_dir="/tmp/avatars",
        ...     default_icon_size=64,
        ... )
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="AVATARFORGE_",
        case_sensitive=False,
    )

    # Cache settings
    cache_dir: Path = Field(
        default=Path("cache"),
        description="Root directory of the on-disk avatar cache",
    )
    cache_url_prefix: str = Field(
        default="avatar-privacy",
        description="URL path segment the image proxy is served from",
        pattern=r"^[A-Za-z0-9_\-]+(?:/[A-Za-z0-9_\-]+)*$",
    )
    transients_dir: Path = Field(
        default=Path("cache/.transients"),
        description="Directory of the shared transient store (locks, catalogs)",
    )
    cache_lifetime: int = Field(
        default=DAY_IN_SECONDS,
        description="Seconds until a served image expires in client caches",
        ge=0,
    )

    # Generator settings
    parts_dir: Path = Field(
        default=ASSETS_DIR,
        description="Root directory of per-style part images and fragments",
    )
    default_icon_size: int = Field(
        default=100,
        description="Icon size used when the cache path does not include one",
        ge=1,
        le=1024,
    )
    max_icon_size: int = Field(
        default=1024,
        description="Largest icon size a cache path or avatar request may ask for",
        ge=1,
        le=4096,
    )
    parts_cache_ttl: int = Field(
        default=7 * DAY_IN_SECONDS,
        description="Seconds a scanned part catalog stays cached",
        ge=1,
    )

    # Eviction settings
    gravatars_max_age: int = Field(
        default=2 * DAY_IN_SECONDS,
        description="Maximum age of cached remote images",
        ge=0,
    )
    gravatars_cleanup_interval: int = Field(
        default=DAY_IN_SECONDS,
        description="Minimum seconds between two remote image cleanups",
        ge=1,
    )
    all_images_max_age: int = Field(
        default=7 * DAY_IN_SECONDS,
        description="Maximum age of any cached image",
        ge=0,
    )
    all_images_cleanup_interval: int = Field(
        default=7 * DAY_IN_SECONDS,
        description="Minimum seconds between two full cache cleanups",
        ge=1,
    )

    # Remote images
    gravatar_rating: Literal["g", "pg", "r", "x"] = Field(
        default="g",
        description="Maximum rating requested from the remote avatar service",
    )
    gravatar_timeout: float = Field(
        default=10.0,
        description="HTTP timeout for remote avatar fetches",
        gt=0,
    )

    # Server settings
    server_host: str = Field(
        default="0.0.0.0",
        description="Server bind address (0.0.0.0 for local network)",
    )
    server_port: int = Field(
        default=7860,
        description="Server port",
        ge=1024,
        le=65535,
    )

    def __init__(self, **kwargs):
        """Initialize configuration and create required directories.

        Args:
            **kwargs: Configuration overrides (typically from environment variables)
        """
        super().__init__(**kwargs)

        self.cache_dir.mkdir(parents=True, exist_ok=True)
        self.transients_dir.mkdir(parents=True, exist_ok=True)

    @model_validator(mode="after")
    def check_icon_sizes(self) -> "AvatarForgeConfig":
        """Reject a default icon size above the maximum."""
        if self.default_icon_size > self.max_icon_size:
            raise ValueError(
                f"default_icon_size ({self.default_icon_size}) exceeds max_icon_size ({self.max_icon_size})"
            )
        return self


# Global configuration instance
# Loads values from environment variables (AVATARFORGE_* prefix) and .env file.
config = AvatarForgeConfig()

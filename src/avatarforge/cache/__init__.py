"""The on-disk avatar cache and its on-demand regeneration.

- **paths.py**: Cache path grammar (``CachePath``)
- **filesystem.py**: Atomic file storage and age-based invalidation
- **gravatar.py**: Remote avatar client (httpx)
- **handlers.py**: Handlers creating missing files (generated icons, remote avatars)
- **janitor.py**: Eviction jobs guarded by cross-worker locks
- **proxy.py**: Parses requested paths, regenerates misses, builds headers
"""

from avatarforge.cache.filesystem import FilesystemCache
from avatarforge.cache.gravatar import GravatarService
from avatarforge.cache.handlers import (
    DefaultIconsHandler,
    GravatarCacheHandler,
    IdentityResolver,
    MappingIdentityResolver,
)
from avatarforge.cache.janitor import CacheJanitor
from avatarforge.cache.paths import CachePath
from avatarforge.cache.proxy import CachedImage, ImageProxy

__all__ = [
    "FilesystemCache",
    "GravatarService",
    "DefaultIconsHandler",
    "GravatarCacheHandler",
    "IdentityResolver",
    "MappingIdentityResolver",
    "CacheJanitor",
    "CachePath",
    "CachedImage",
    "ImageProxy",
]

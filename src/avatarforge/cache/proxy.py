"""On-demand regeneration of cached avatar files.

The web server serves files that exist in the cache directly.  Requests for
files that do not exist (never generated, or evicted) end up here:

1. The relative path is parsed against the cache path grammar and its size
   is checked against the configured maximum.  Anything else is rejected
   before any work is done.
2. On a miss the handler for the path's type produces the file: remote
   avatars are downloaded, every other type goes to the default icon handler.
   A type that no generator knows fails there like any other generation error.
   A failure here is fatal for the request; no partial data is served.
3. The file is returned with caching headers.

Several workers may regenerate the same file at the same time.  They all
produce identical bytes, so the last atomic write simply wins.
"""

from __future__ import annotations

import hashlib
import logging
import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from email.utils import formatdate

from avatarforge.cache.filesystem import FilesystemCache
from avatarforge.cache.handlers import AvatarHandler
from avatarforge.cache.paths import CachePath
from avatarforge.core.exceptions import AvatarGenerationError, InvalidCachePathError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CachedImage:
    """A cache file ready to be sent, with its HTTP headers."""

    path: CachePath
    data: bytes
    headers: dict[str, str] = field(default_factory=dict)

    @property
    def media_type(self) -> str:
        return self.path.mime_type


def build_headers(data: bytes, mime_type: str, last_modified: float, expires: float) -> dict[str, str]:
    """HTTP headers for an image response.

    Dates are RFC 1123 (GMT) and the ETag is the MD5 of the content.
    """
    return {
        "Content-Type": mime_type,
        "Content-Length": str(len(data)),
        "Last-Modified": formatdate(last_modified, usegmt=True),
        "Expires": formatdate(expires, usegmt=True),
        "ETag": f'"{hashlib.md5(data).hexdigest()}"',
    }


class ImageProxy:
    """Serves cache files, regenerating them when they are missing.

    Args:
        file_cache: The avatar cache.
        handlers: Handlers keyed by cache path type.
        default_handler: Handler for every type not in ``handlers``.
        default_size: Size used when the path does not include one.
        max_size: Largest size a path may request.
        cache_lifetime: Seconds until a served image expires.
        clock: Callable returning the current Unix time.
    """

    def __init__(
        self,
        file_cache: FilesystemCache,
        handlers: Mapping[str, AvatarHandler],
        default_handler: AvatarHandler,
        default_size: int = 100,
        max_size: int = 1024,
        cache_lifetime: int = 86400,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._file_cache = file_cache
        self._handlers = dict(handlers)
        self._default_handler = default_handler
        self._default_size = default_size
        self._max_size = max_size
        self._cache_lifetime = cache_lifetime
        self._clock = clock

    def get_handler(self, path: CachePath) -> AvatarHandler:
        """Pick the handler for ``path``: its mapped handler, or the default one."""
        return self._handlers.get(path.type.lower(), self._default_handler)

    def load_cached_avatar(self, file_path: str) -> CachedImage:
        """Return the cache file at ``file_path``, creating it first if needed.

        Raises:
            InvalidCachePathError: If ``file_path`` is not a cache path or asks
                for an image larger than the maximum size.
            AvatarGenerationError: If the missing file could not be created.
        """
        path = CachePath.parse(file_path)
        if path.size is not None and path.size > self._max_size:
            raise InvalidCachePathError(f"Size {path.size} of {path.filename} exceeds {self._max_size}")

        handler = self.get_handler(path)
        filename = path.filename

        if not self._file_cache.exists(filename):
            size = path.size_or(self._default_size)
            logger.info(f"Regenerating {filename} ({size}px)")

            if not handler.cache_image(path, size):
                raise AvatarGenerationError(f"Error generating avatar file {filename}.")

        data = self._file_cache.get(filename)
        if not data:
            raise AvatarGenerationError(f"Error generating avatar file {filename}.")

        try:
            last_modified = self._file_cache.path(filename).stat().st_mtime
        except FileNotFoundError:
            # Evicted since it was read.
            last_modified = self._clock()

        headers = build_headers(data, path.mime_type, last_modified, self._clock() + self._cache_lifetime)

        return CachedImage(path=path, data=data, headers=headers)

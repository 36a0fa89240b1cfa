"""Avatar handlers: produce the file for a cache path that does not exist yet.

Two handlers exist:

- :class:`DefaultIconsHandler` renders generated icons with the generator of
  the path's icon type.
- :class:`GravatarCacheHandler` downloads remote avatars.  It needs to know
  the e-mail address behind a hash, which it asks an
  :class:`IdentityResolver` for.  Whether the hash belongs to a registered
  user or to a comment author is encoded in the first sub-directory of the
  cache path.

Handlers return ``True`` once the requested file exists in the cache, and
``False`` if it could not be produced, including paths they do not know how
to produce (an unknown icon type, a vector remote avatar).
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Protocol

from avatarforge.cache.filesystem import FilesystemCache
from avatarforge.cache.gravatar import GravatarService
from avatarforge.cache.paths import CachePath, identity_subdir
from avatarforge.generators.base import AvatarGenerator
from avatarforge.generators.icon_types import IconType, check_generators
from avatarforge.imaging.editor import FILE_EXTENSIONS, JPEG_IMAGE, PNG_IMAGE, SVG_IMAGE, ImageEditor

logger = logging.getLogger(__name__)

GRAVATAR_TYPE = "gravatar"

TYPE_USER = "user"
TYPE_COMMENT = "comment"

# First hash digit -> identity kind, alternating so both kinds spread evenly.
TYPE_MAPPING = {digit: TYPE_USER if index % 2 == 0 else TYPE_COMMENT for index, digit in enumerate("0123456789abcdef")}

# Directory used when the first hash digit encodes the wrong identity kind.
REVERSE_TYPE_MAPPING = {True: "a", False: "b"}


class AvatarHandler(Protocol):
    """Anything that can produce the file for a cache path."""

    def cache_image(self, path: CachePath, size: int) -> bool:
        """Create the file for ``path``.  Returns whether it now exists."""
        ...


class IdentityResolver(Protocol):
    """Looks up the e-mail address behind an identity hash."""

    def get_user_email(self, identity: str) -> str | None: ...

    def get_comment_author_email(self, identity: str) -> str | None: ...


class MappingIdentityResolver:
    """Identity resolver backed by two in-memory mappings of hash to e-mail."""

    def __init__(
        self,
        users: Mapping[str, str] | None = None,
        comment_authors: Mapping[str, str] | None = None,
    ) -> None:
        self._users = {key.lower(): value for key, value in (users or {}).items()}
        self._comment_authors = {key.lower(): value for key, value in (comment_authors or {}).items()}

    def get_user_email(self, identity: str) -> str | None:
        return self._users.get(identity.lower())

    def get_comment_author_email(self, identity: str) -> str | None:
        return self._comment_authors.get(identity.lower())


class DefaultIconsHandler:
    """Renders generated icons into the cache.

    Args:
        file_cache: Cache the icons are written to.
        generators: One generator per icon type.

    Raises:
        ValueError: If an icon type has no generator.
    """

    def __init__(self, file_cache: FilesystemCache, generators: Mapping[IconType, AvatarGenerator]) -> None:
        check_generators(dict(generators))
        self._file_cache = file_cache
        self._generators = dict(generators)

    def get_icon_path(self, icon_type: IconType, identity: str, size: int) -> CachePath:
        """Canonical cache path of an icon.  Vector icons carry no size."""
        mime_type = self._generators[icon_type].mime_type
        return CachePath(
            type=icon_type.value,
            subdir=f"{identity_subdir(identity)}/",
            hash=identity,
            size=None if mime_type == SVG_IMAGE else size,
            extension=FILE_EXTENSIONS[mime_type],
        )

    def get_icon(self, icon_type: IconType, identity: str, size: int) -> str | None:
        """Make sure the icon is cached and return its relative file name.

        Returns:
            The file name, or ``None`` if the icon could not be generated.
        """
        path = self.get_icon_path(icon_type, identity, size)
        if self._file_cache.exists(path.filename) or self.cache_image(path, size):
            return path.filename

        return None

    def cache_image(self, path: CachePath, size: int) -> bool:
        icon_type = IconType.from_type(path.type)
        if icon_type is None:
            logger.warning(f"No generator for icon type '{path.type}'")
            return False

        generator = self._generators[icon_type]
        if generator.mime_type != path.mime_type:
            logger.warning(f"{icon_type.value} icons are {generator.mime_type}, not {path.mime_type}")
            return False

        image = generator.build(path.hash.lower(), size)
        if image is None:
            return False

        return self._file_cache.set(path.filename, image.data)


class GravatarCacheHandler:
    """Downloads remote avatars into the cache.

    Args:
        file_cache: Cache the images are written to.
        gravatar: Remote avatar client.
        resolver: Identity lookup.
        editor: Used to convert images to the requested format.
        rating: Maximum rating requested from the remote service.
    """

    def __init__(
        self,
        file_cache: FilesystemCache,
        gravatar: GravatarService,
        resolver: IdentityResolver,
        editor: ImageEditor,
        rating: str = "g",
    ) -> None:
        self._file_cache = file_cache
        self._gravatar = gravatar
        self._resolver = resolver
        self._editor = editor
        self._rating = rating

    @staticmethod
    def get_sub_dir(identity: str, user: bool = False) -> str:
        """Sub-directory encoding the identity kind and spreading files.

        The first level is the first hash digit if that digit already maps to
        the right identity kind, and a fixed marker directory otherwise.
        """
        first, second = identity[0].lower(), identity[1].lower()
        expected = TYPE_USER if user else TYPE_COMMENT

        if TYPE_MAPPING.get(first) == expected:
            return f"{first}/{second}"

        return f"{REVERSE_TYPE_MAPPING[user]}/{second}"

    def get_path(self, identity: str, size: int, user: bool, mime_type: str) -> CachePath:
        """Canonical cache path of a remote avatar."""
        return CachePath(
            type=GRAVATAR_TYPE,
            subdir=f"{self.get_sub_dir(identity, user)}/",
            hash=identity,
            size=size,
            extension=FILE_EXTENSIONS[mime_type],
        )

    def get_avatar(self, identity: str, size: int, user: bool = False, age: int = 0) -> str | None:
        """Make sure the remote avatar of ``identity`` is cached and return its file name.

        Args:
            identity: Identity hash.
            size: Requested size in pixels.
            user: Whether the hash belongs to a registered user (otherwise a
                comment author).
            age: Age in seconds of the account or comment, used to decide how
                long a negative check is remembered.

        Returns:
            The relative file name, or ``None`` if the identity is unknown,
            has no remote avatar, or the download failed.
        """
        if user:
            email = self._resolver.get_user_email(identity)
        else:
            email = self._resolver.get_comment_author_email(identity)

        if not email:
            return None

        mime_type = self._gravatar.validate(email, age).split(";")[0].strip().lower()
        if not mime_type:
            return None

        # Other formats (GIF) are stored as PNG.
        if mime_type not in (JPEG_IMAGE, PNG_IMAGE):
            mime_type = PNG_IMAGE

        path = self.get_path(identity, size, user, mime_type)
        if self._file_cache.exists(path.filename) or self.cache_image(path, size):
            return path.filename

        return None

    def cache_image(self, path: CachePath, size: int) -> bool:
        if path.mime_type == SVG_IMAGE:
            logger.warning(f"Remote avatars are raster images only, not {path.filename}")
            return False

        kind = TYPE_MAPPING.get(path.subdir[:1].lower())
        if kind is None:
            logger.warning(f"Cannot tell identity kind of {path.filename}")
            return False

        if kind == TYPE_USER:
            email = self._resolver.get_user_email(path.hash)
        else:
            email = self._resolver.get_comment_author_email(path.hash)

        if not email:
            logger.info(f"No {kind} found for {path.hash[:8]}")
            return False

        data = self._gravatar.get_image(email, size, self._rating)
        if not data:
            return False

        if self._editor.get_mime_type(data) != path.mime_type:
            image = self._editor.create_from_string(data)
            data = self._editor.get_image_data(image, path.mime_type) if image is not None else b""

        return self._file_cache.set(path.filename, data)

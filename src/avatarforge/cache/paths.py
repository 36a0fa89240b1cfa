"""Canonical cache file paths.

Every cached avatar lives at a path that fully describes how to rebuild it::

    <type>/<subdir><hash>[-<size>].<extension>

    wavatar/3/f/3f0c...e9-128.png      generated icon, 128 px
    gravatar/a/8/a8c2...71-64.jpg      remote image of a registered user
    retro/9/7/9737...c2.svg            vector icon, size omitted

``subdir`` is zero or more single-character directories (each followed by a
slash), ``hash`` is a 64-digit hexadecimal identity hash and the optional
size defaults to the configured icon size.  Matching is case-insensitive.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from avatarforge.core.exceptions import InvalidCachePathError

CACHE_PATH_PATTERN = re.compile(
    r"^([a-z]+)/((?:[0-9a-z]/)*)([a-f0-9]{64})(?:-([0-9]+))?\.(jpg|png|svg)$",
    re.IGNORECASE,
)

IDENTITY_PATTERN = re.compile(r"^[a-f0-9]{64}$", re.IGNORECASE)

EXTENSION_MIME_TYPES = {
    "jpg": "image/jpeg",
    "png": "image/png",
    "svg": "image/svg+xml",
}


@dataclass(frozen=True)
class CachePath:
    """Components of a canonical cache path."""

    type: str
    subdir: str
    hash: str
    size: int | None
    extension: str

    @classmethod
    def parse(cls, path: str) -> CachePath:
        """Split a relative cache path into its components.

        Raises:
            InvalidCachePathError: If ``path`` does not follow the grammar.

        Example:
            >>> CachePath.parse("gravatar/1/9/" + "ab" * 32 + ".png").subdir
            '1/9/'
        """
        match = CACHE_PATH_PATTERN.match(path)
        if match is None:
            raise InvalidCachePathError(f"Not a cache path: {path!r}")

        icon_type, subdir, identity, size, extension = match.groups()

        return cls(
            type=icon_type,
            subdir=subdir,
            hash=identity,
            size=int(size) if size is not None else None,
            extension=extension,
        )

    @property
    def filename(self) -> str:
        """The canonical relative path, reconstructed from the components."""
        size = f"-{self.size}" if self.size is not None else ""
        return f"{self.type}/{self.subdir}{self.hash}{size}.{self.extension}"

    @property
    def mime_type(self) -> str:
        return EXTENSION_MIME_TYPES[self.extension.lower()]

    def size_or(self, default: int) -> int:
        """The encoded size, or ``default`` when the path has none."""
        return self.size or default


def identity_subdir(identity: str) -> str:
    """Sub-directory for a generated icon: the first two hash digits, one level each."""
    return "/".join(identity[:2])

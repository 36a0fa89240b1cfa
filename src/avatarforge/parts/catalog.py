"""Cached enumeration of the part files available to a generator.

A part directory holds one file per variant, named after its category:

    body_1.png  body_2.png  body_10.png  eyes_1.png ...   (raster parts)
    body-1.svg  body-2.svg  face-1.svg ...                (vector fragments)
    fade1.png   mask1.png   shine1.png ...                (no separator)

The category is the leading run of letters of the file name.  Files whose
category is not one of the generator's part types are ignored, which is how
background images such as ``back.png`` stay out of the random selection.

Each category is sorted in natural order (``body-2`` before ``body-10``) so
that every server builds the same ordering regardless of how the filesystem
returns directory entries.

Caching
-------
The scan result is stored in the shared transient store under a key derived
from the directory's basename and kept for ``ttl`` seconds.  Until it expires
the cached value is returned verbatim; the filesystem is not consulted again.
A scan that leaves any category empty raises :class:`PartsNotFoundError` and
is not cached.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from pathlib import Path

from avatarforge.core.exceptions import PartsNotFoundError
from avatarforge.core.transients import FileTransientStore

logger = logging.getLogger(__name__)

_CATEGORY = re.compile(r"^([A-Za-z]+)")
_NUMBERS = re.compile(r"(\d+)")


def natural_sort_key(filename: str) -> list[int | str]:
    """Sort key that orders embedded numbers by value, not character code.

    Example:
        >>> sorted(["body-10", "body-2", "body-1"], key=natural_sort_key)
        ['body-1', 'body-2', 'body-10']
    """
    return [int(chunk) if chunk.isdigit() else chunk for chunk in _NUMBERS.split(filename)]


class PartCatalog:
    """Provides the per-category part lists of one part directory.

    Args:
        parts_dir: Directory containing the part files.
        part_types: Category names, in the order parts are layered.
        transients: Shared store used to cache the scan result.
        ttl: Seconds the cached scan stays valid.
        reader: Optional callable turning a part file into the stored value.
            Defaults to storing the file name.  Vector generators use it to
            store pre-processed markup instead.
    """

    def __init__(
        self,
        parts_dir: Path,
        part_types: list[str],
        transients: FileTransientStore,
        ttl: int,
        reader: Callable[[Path], str] | None = None,
    ) -> None:
        self.parts_dir = Path(parts_dir)
        self.part_types = list(part_types)
        self._transients = transients
        self._ttl = ttl
        self._reader = reader

    @property
    def cache_key(self) -> str:
        return f"avatarforge_{self.parts_dir.name}_parts"

    def get_parts(self) -> dict[str, list[str]]:
        """Return the part lists keyed by category, in ``part_types`` order.

        Raises:
            PartsNotFoundError: If a fresh scan finds no file for a category.
        """
        cached = self._transients.get(self.cache_key)
        if isinstance(cached, dict) and cached:
            return cached

        parts = self.build_parts()
        self._transients.set(self.cache_key, parts, self._ttl)
        logger.info(f"Cached {sum(len(v) for v in parts.values())} parts from {self.parts_dir}")

        return parts

    def build_parts(self) -> dict[str, list[str]]:
        """Scan the part directory, bypassing the cache."""
        found: dict[str, list[tuple[str, str]]] = {part_type: [] for part_type in self.part_types}

        if self.parts_dir.is_dir():
            for path in self.parts_dir.iterdir():
                if not path.is_file():
                    continue

                match = _CATEGORY.match(path.name)
                if match is None or match.group(1) not in found:
                    continue

                value = self._reader(path) if self._reader else path.name
                found[match.group(1)].append((path.name, value))

        missing = [part_type for part_type, files in found.items() if not files]
        if missing:
            raise PartsNotFoundError(
                f"Could not find parts images in {self.parts_dir} for: {', '.join(missing)}"
            )

        return {
            part_type: [value for _, value in sorted(files, key=lambda f: natural_sort_key(f[0]))]
            for part_type, files in found.items()
        }

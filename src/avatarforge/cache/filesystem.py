"""On-disk storage for generated and fetched avatar images.

All paths handed to :class:`FilesystemCache` are relative to its base
directory.  Writes go to a temporary file in the target directory first and
are renamed into place, so concurrent readers see either the old state or the
complete new file.  Several workers writing the same path is harmless: the
content only depends on the path.

Entries whose name starts with a dot (temporary files, the transient store
directory) are never considered cache entries.
"""

from __future__ import annotations

import logging
import os
import tempfile
import time
from collections.abc import Callable, Iterator
from pathlib import Path

logger = logging.getLogger(__name__)


class FilesystemCache:
    """File cache rooted at ``base_dir``.

    Args:
        base_dir: Cache root.  Created if missing.
        clock: Callable returning the current Unix time (file ages).
    """

    def __init__(self, base_dir: Path, clock: Callable[[], float] = time.time) -> None:
        self.base_dir = Path(base_dir)
        self.base_dir.mkdir(parents=True, exist_ok=True)
        self._clock = clock

    def path(self, filename: str) -> Path:
        return self.base_dir / filename

    def exists(self, filename: str) -> bool:
        return self.path(filename).is_file()

    def get(self, filename: str) -> bytes | None:
        """Return the cached bytes, or ``None`` if the file does not exist."""
        try:
            return self.path(filename).read_bytes()
        except FileNotFoundError:
            return None

    def set(self, filename: str, data: bytes, force: bool = False) -> bool:
        """Store ``data`` under ``filename``.

        Args:
            filename: Relative path.
            data: File content.  Empty data is never stored.
            force: Overwrite an existing file.

        Returns:
            ``True`` if the file exists afterwards.
        """
        target = self.path(filename)
        if not data:
            return False

        if target.exists() and not force:
            return True

        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=target.parent, prefix=".tmp-")
        except OSError as exc:
            logger.error(f"Could not create cache directory for {filename}: {exc}")
            return False

        try:
            with os.fdopen(fd, "wb") as handle:
                handle.write(data)
            os.replace(tmp_name, target)
        except OSError as exc:
            Path(tmp_name).unlink(missing_ok=True)
            logger.error(f"Could not write cache file {filename}: {exc}")
            return False

        logger.debug(f"Cached {filename} ({len(data)} bytes)")
        return True

    def invalidate_files_older_than(self, age: int, subdir: str = "") -> int:
        """Delete files below ``subdir`` last modified more than ``age`` seconds ago.

        Returns:
            Number of deleted files.
        """
        now = self._clock()
        deleted = 0

        for path in self._files(self.base_dir / subdir):
            try:
                if now - path.stat().st_mtime > age:
                    path.unlink()
                    deleted += 1
            except FileNotFoundError:
                # Removed by a concurrent worker.
                continue

        logger.info(f"Deleted {deleted} cached files older than {age}s from {self.base_dir / subdir}")
        return deleted

    @staticmethod
    def _files(root: Path) -> Iterator[Path]:
        if not root.is_dir():
            return

        for directory, dirnames, filenames in os.walk(root):
            dirnames[:] = [name for name in dirnames if not name.startswith(".")]
            for name in filenames:
                if not name.startswith("."):
                    yield Path(directory) / name

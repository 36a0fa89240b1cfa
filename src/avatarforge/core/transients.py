"""File-backed transient store shared by all worker processes.

Transients are small JSON values with an expiry time.  Each key lives in its
own file inside the store directory, which makes the store usable by any
number of workers that share a filesystem without a separate service.

The store backs two kinds of state:

- cached part catalogs (so directories are not rescanned on every request)
- eviction locks (so only one worker trims the cache per interval)

Entry format on disk::

    {"expires": 1760000000.0, "value": <any JSON value>}

Expired entries behave exactly like missing ones and are removed lazily the
next time they are read.

Locking
-------
Every write to a key happens under an exclusive ``flock`` on a hidden sidecar
file next to the entry.  :meth:`FileTransientStore.add` takes that lock without
waiting and then creates the entry with an exclusive open, so at most one
caller wins while the key is live, including right after it expires.  Losers
are not blocked; they simply get ``False`` back.
"""

from __future__ import annotations

import fcntl
import hashlib
import json
import logging
import os
import re
import tempfile
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

_SAFE_KEY = re.compile(r"[^A-Za-z0-9_\-]")


class FileTransientStore:
    """Key/value store with per-entry expiry, backed by one JSON file per key.

    Args:
        directory: Directory holding the entry files.  Created if missing.
        clock: Callable returning the current Unix time.  Injected by tests.
    """

    def __init__(self, directory: Path, clock: Callable[[], float] = time.time) -> None:
        self._directory = Path(directory)
        self._directory.mkdir(parents=True, exist_ok=True)
        self._clock = clock

    @property
    def directory(self) -> Path:
        return self._directory

    def get(self, key: str, default: Any = None) -> Any:
        """Return the live value stored under ``key``, or ``default``."""
        path = self._path(key)
        entry = self._read(path)
        if entry is None:
            return default

        if entry["expires"] <= self._clock():
            self._discard_expired(key)
            return default

        return entry["value"]

    def set(self, key: str, value: Any, ttl: int) -> None:
        """Store ``value`` under ``key`` for ``ttl`` seconds, replacing any entry.

        The file is written to a temporary name first and renamed into place,
        so readers never observe a half-written entry.
        """
        path = self._path(key)
        payload = json.dumps({"expires": self._clock() + ttl, "value": value})

        with self._key_lock(key):
            fd, tmp_name = tempfile.mkstemp(dir=self._directory, prefix=".tmp-")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    handle.write(payload)
                os.replace(tmp_name, path)
            except OSError:
                self._unlink(Path(tmp_name))
                raise

    def add(self, key: str, value: Any, ttl: int) -> bool:
        """Store ``value`` only if ``key`` holds no live entry.

        Returns:
            ``True`` if this call created the entry, ``False`` if a live entry
            already existed or another worker is adding the same key.
        """
        path = self._path(key)

        with self._key_lock(key, blocking=False) as locked:
            if not locked:
                return False

            # Read and clear under the key lock, so a stale read can never
            # remove an entry another worker has just created.
            entry = self._read(path)
            if entry is not None and entry["expires"] <= self._clock():
                self._unlink(path)

            try:
                fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_EXCL, 0o644)
            except FileExistsError:
                return False

            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump({"expires": self._clock() + ttl, "value": value}, handle)

        return True

    def delete(self, key: str) -> None:
        """Remove ``key`` from the store.  Missing keys are ignored."""
        with self._key_lock(key):
            self._unlink(self._path(key))

    def _discard_expired(self, key: str) -> None:
        path = self._path(key)

        with self._key_lock(key, blocking=False) as locked:
            if not locked:
                # Someone is writing the key right now.
                return

            entry = self._read(path)
            if entry is not None and entry["expires"] <= self._clock():
                self._unlink(path)

    @contextmanager
    def _key_lock(self, key: str, blocking: bool = True) -> Iterator[bool]:
        """Hold an exclusive ``flock`` on the sidecar file of ``key``.

        Yields ``False`` without waiting if ``blocking`` is off and the lock
        is taken.
        """
        lock_path = self._directory / f".{self._path(key).stem}.lock"
        flags = fcntl.LOCK_EX if blocking else fcntl.LOCK_EX | fcntl.LOCK_NB

        with open(lock_path, "a") as handle:
            try:
                fcntl.flock(handle, flags)
            except BlockingIOError:
                yield False
                return

            try:
                yield True
            finally:
                fcntl.flock(handle, fcntl.LOCK_UN)

    def _path(self, key: str) -> Path:
        safe = _SAFE_KEY.sub("_", key)
        if safe != key:
            # Keep sanitised keys unique.
            safe = f"{safe}-{hashlib.md5(key.encode('utf-8')).hexdigest()[:8]}"
        return self._directory / f"{safe}.json"

    @staticmethod
    def _read(path: Path) -> dict | None:
        try:
            with open(path, encoding="utf-8") as handle:
                entry = json.load(handle)
        except FileNotFoundError:
            return None
        except (OSError, ValueError):
            logger.warning(f"Ignoring unreadable transient {path.name}")
            return None

        if not isinstance(entry, dict) or "expires" not in entry or "value" not in entry:
            return None

        return entry

    @staticmethod
    def _unlink(path: Path) -> None:
        try:
            path.unlink()
        except FileNotFoundError:
            pass

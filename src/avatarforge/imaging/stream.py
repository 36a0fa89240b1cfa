"""In-memory file streams for driving the image codec without touching disk.

Pillow reads and writes file objects.  Rather than round-tripping every
resize through temporary files, image bytes live in an
:class:`ImageStreamArena`: a table of named in-memory buffers ("handles")
that behave like files.

Addressing
----------
Streams are addressed by URL using the ``avfimg`` scheme::

    avfimg://<handle>/<path>

The host segment selects the handle.  The path segment is ignored, which
lets callers append a descriptive file name for log messages.

Lifecycle
---------
The arena is an explicit object owned by whoever creates it (typically one
:class:`~avatarforge.imaging.editor.ImageEditor`).  Nothing is global.  Use
:meth:`ImageStreamArena.scoped_handle` so a handle is released on every exit
path, including exceptions::

    arena = ImageStreamArena()
    with arena.scoped_handle() as handle:
        url = arena.url(handle)
        with arena.open(url, "w") as stream:
            stream.write(data)
        ...
    assert not arena.handle_exists(handle)

Modes
-----
The usual ``open()`` modes are understood (``b`` and ``t`` are ignored):

====  ========  ==========  =========  ==================
mode  readable  truncates   creates    initial position
====  ========  ==========  =========  ==================
r     yes       no          no         start
r+    yes       no          no         start
w     no        yes         yes        start
w+    yes       yes         yes        start
a     no        no          yes        end (append only)
a+    yes       no          yes        end (append only)
c     no        no          yes        start
c+    yes       no          yes        start
x     no        no          exclusive  start
x+    yes       no          exclusive  start
====  ========  ==========  =========  ==================
"""

from __future__ import annotations

import io
import itertools
import logging
import os
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import NamedTuple
from urllib.parse import urlsplit

logger = logging.getLogger(__name__)

PROTOCOL = "avfimg"

_MODES = {"r", "r+", "w", "w+", "a", "a+", "c", "c+", "x", "x+"}


class StreamStat(NamedTuple):
    """File status of one handle."""

    size: int
    atime: float
    mtime: float
    ctime: float


@dataclass
class _Buffer:
    data: bytearray = field(default_factory=bytearray)
    atime: float = 0.0
    mtime: float = 0.0
    ctime: float = 0.0


class ImageStreamArena:
    """Process-local table of in-memory file buffers.

    Args:
        clock: Callable returning the current Unix time, used for the
            access/modification/change times reported by :meth:`stat`.
    """

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._buffers: dict[str, _Buffer] = {}
        self._clock = clock
        self._counter = itertools.count(1)

    def __len__(self) -> int:
        return len(self._buffers)

    @staticmethod
    def url(handle: str, path: str = "image") -> str:
        """Build the stream URL for ``handle``."""
        return f"{PROTOCOL}://{handle}/{path}"

    @staticmethod
    def get_handle_from_url(url: str) -> str:
        """Extract the handle (host segment) from a stream URL.

        Raises:
            ValueError: If the URL does not use the stream scheme or has no host.
        """
        parts = urlsplit(url)
        if parts.scheme != PROTOCOL or not parts.netloc:
            raise ValueError(f"Not an image stream URL: {url}")

        return parts.netloc

    def new_handle(self, prefix: str = "img") -> str:
        """Return a handle name that is not in use."""
        while True:
            handle = f"{prefix}{next(self._counter)}-{os.getpid()}"
            if handle not in self._buffers:
                return handle

    @contextmanager
    def scoped_handle(self, prefix: str = "img") -> Iterator[str]:
        """Yield a fresh handle and delete its buffer when the block exits."""
        handle = self.new_handle(prefix)
        try:
            yield handle
        finally:
            self.delete_handle(handle)

    def handle_exists(self, handle: str) -> bool:
        return handle in self._buffers

    def open(self, url: str, mode: str = "r") -> ImageStream:
        """Open a stream on the handle named by ``url``.

        Raises:
            ValueError: If the URL or mode is invalid.
            FileNotFoundError: If the mode requires an existing handle.
            FileExistsError: If the mode is exclusive and the handle exists.
        """
        handle = self.get_handle_from_url(url)
        mode = mode.replace("b", "").replace("t", "")
        if mode not in _MODES:
            raise ValueError(f"Invalid stream mode '{mode}'")

        buffer = self._buffers.get(handle)
        kind = mode[0]

        if buffer is None:
            if kind == "r":
                raise FileNotFoundError(f"No image stream '{handle}'")

            now = self._clock()
            buffer = _Buffer(atime=now, mtime=now, ctime=now)
            self._buffers[handle] = buffer
        elif kind == "x":
            raise FileExistsError(f"Image stream '{handle}' already exists")
        elif kind == "w":
            del buffer.data[:]
            buffer.mtime = self._clock()

        return ImageStream(self, buffer, mode)

    def get_data(self, handle: str, delete: bool = False) -> bytes | None:
        """Return a copy of the bytes stored under ``handle``.

        Args:
            handle: Handle name.
            delete: Release the handle after reading.

        Returns:
            The bytes, or ``None`` if the handle does not exist.
        """
        buffer = self._buffers.get(handle)
        if buffer is None:
            return None

        data = bytes(buffer.data)
        if delete:
            self.delete_handle(handle)

        return data

    def delete_handle(self, handle: str) -> None:
        """Release ``handle``.  Unknown handles are ignored."""
        self._buffers.pop(handle, None)

    def stat(self, url: str) -> StreamStat | None:
        """Return the status of the handle named by ``url``, or ``None``."""
        buffer = self._buffers.get(self.get_handle_from_url(url))
        if buffer is None:
            return None

        return StreamStat(len(buffer.data), buffer.atime, buffer.mtime, buffer.ctime)

    def unlink(self, url: str) -> bool:
        """Delete the handle named by ``url``.  Returns whether it existed."""
        handle = self.get_handle_from_url(url)
        if handle not in self._buffers:
            return False

        self.delete_handle(handle)
        return True

    def _now(self) -> float:
        return self._clock()


class ImageStream(io.RawIOBase):
    """A file object reading and writing one arena buffer.

    Created through :meth:`ImageStreamArena.open`.  Seeking past the end pads
    the buffer with NUL bytes, as does truncating to a larger size.
    """

    def __init__(self, arena: ImageStreamArena, buffer: _Buffer, mode: str) -> None:
        super().__init__()
        self._arena = arena
        self._buffer = buffer
        self._mode = mode
        self._position = len(buffer.data) if mode[0] == "a" else 0

    @property
    def mode(self) -> str:
        return self._mode

    def readable(self) -> bool:
        return self._mode[0] == "r" or self._mode.endswith("+")

    def writable(self) -> bool:
        return self._mode != "r"

    def seekable(self) -> bool:
        return True

    def readinto(self, b) -> int:
        self._check_closed()
        if not self.readable():
            raise io.UnsupportedOperation("Stream not opened for reading")

        data = self._buffer.data
        chunk = data[self._position : self._position + len(b)]
        b[: len(chunk)] = chunk
        self._position += len(chunk)
        self._buffer.atime = self._arena._now()

        return len(chunk)

    def write(self, b) -> int:
        self._check_closed()
        if not self.writable():
            raise io.UnsupportedOperation("Stream not opened for writing")

        data = self._buffer.data
        if self._mode[0] == "a":
            self._position = len(data)

        chunk = bytes(b)
        end = self._position + len(chunk)
        if self._position > len(data):
            data.extend(b"\0" * (self._position - len(data)))
        data[self._position : end] = chunk
        self._position = end
        self._buffer.mtime = self._arena._now()

        return len(chunk)

    def seek(self, offset: int, whence: int = io.SEEK_SET) -> int:
        self._check_closed()
        data = self._buffer.data

        if whence == io.SEEK_SET:
            position = offset
        elif whence == io.SEEK_CUR:
            position = self._position + offset
        elif whence == io.SEEK_END:
            position = len(data) + offset
        else:
            raise ValueError(f"Invalid whence {whence}")

        if position < 0:
            raise OSError(f"Negative seek position {position}")

        if position > len(data) and self.writable():
            data.extend(b"\0" * (position - len(data)))
            self._buffer.mtime = self._arena._now()

        self._position = position
        return position

    def tell(self) -> int:
        self._check_closed()
        return self._position

    def truncate(self, size: int | None = None) -> int:
        self._check_closed()
        if not self.writable():
            raise io.UnsupportedOperation("Stream not opened for writing")

        if size is None:
            size = self._position
        if size < 0:
            raise ValueError(f"Negative size {size}")

        data = self._buffer.data
        if size < len(data):
            del data[size:]
        else:
            data.extend(b"\0" * (size - len(data)))
        self._buffer.mtime = self._arena._now()

        return size

    def stat(self) -> StreamStat:
        buffer = self._buffer
        return StreamStat(len(buffer.data), buffer.atime, buffer.mtime, buffer.ctime)

    def _check_closed(self) -> None:
        if self.closed:
            raise ValueError("I/O operation on closed image stream")

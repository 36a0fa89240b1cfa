"""Tests for avatarforge.cache.proxy: serving and regenerating cache files."""

from __future__ import annotations

import hashlib
import os
from email.utils import parsedate_to_datetime

import pytest

from avatarforge.cache.filesystem import FilesystemCache
from avatarforge.cache.paths import CachePath
from avatarforge.cache.proxy import ImageProxy, build_headers
from avatarforge.core.exceptions import AvatarGenerationError, InvalidCachePathError

HASH = "9737e3144aeeef544da072c45cbaf5369737e3144aeeef544da072c45cbaf536"


class RecordingHandler:
    """Handler double that writes fixed bytes and records its calls."""

    def __init__(self, file_cache: FilesystemCache, data: bytes = b"<svg/>") -> None:
        self.file_cache = file_cache
        self.data = data
        self.calls: list[tuple[str, int]] = []

    def cache_image(self, path: CachePath, size: int) -> bool:
        self.calls.append((path.filename, size))
        return self.file_cache.set(path.filename, self.data)


@pytest.fixture
def file_cache(temp_dir, clock) -> FilesystemCache:
    return FilesystemCache(temp_dir / "cache", clock=clock)


@pytest.fixture
def icons(file_cache) -> RecordingHandler:
    return RecordingHandler(file_cache)


@pytest.fixture
def remote(file_cache) -> RecordingHandler:
    return RecordingHandler(file_cache, data=b"jpeg")


@pytest.fixture
def proxy(file_cache, icons, remote, clock) -> ImageProxy:
    return ImageProxy(
        file_cache,
        {"gravatar": remote},
        icons,
        default_size=100,
        max_size=512,
        cache_lifetime=3600,
        clock=clock,
    )


class TestBuildHeaders:
    def test_headers(self):
        headers = build_headers(b"abc", "image/png", 0, 86400)
        assert headers["Content-Type"] == "image/png"
        assert headers["Content-Length"] == "3"
        assert headers["Last-Modified"] == "Thu, 01 Jan 1970 00:00:00 GMT"
        assert headers["Expires"] == "Fri, 02 Jan 1970 00:00:00 GMT"
        assert headers["ETag"] == f'"{hashlib.md5(b"abc").hexdigest()}"'


class TestImageProxyDispatch:
    """Verify handler selection."""

    def test_mapped_type(self, proxy, remote):
        assert proxy.get_handler(CachePath.parse(f"gravatar/9/7/{HASH}.jpg")) is remote

    def test_default_handler(self, proxy, icons):
        assert proxy.get_handler(CachePath.parse(f"retro/9/7/{HASH}.svg")) is icons

    def test_unknown_type_goes_to_default_handler(self, proxy, icons):
        assert proxy.get_handler(CachePath.parse(f"identicon/9/7/{HASH}.svg")) is icons


class TestLoadCachedAvatar:
    """Verify the miss, hit and failure paths."""

    def test_miss_regenerates(self, proxy, icons, file_cache):
        image = proxy.load_cached_avatar(f"retro/9/7/{HASH}.svg")

        assert image.data == b"<svg/>"
        assert image.media_type == "image/svg+xml"
        assert icons.calls == [(f"retro/9/7/{HASH}.svg", 100)]
        assert file_cache.exists(f"retro/9/7/{HASH}.svg")

    def test_hit_does_not_regenerate(self, proxy, icons):
        proxy.load_cached_avatar(f"retro/9/7/{HASH}.svg")
        proxy.load_cached_avatar(f"retro/9/7/{HASH}.svg")
        assert len(icons.calls) == 1

    def test_explicit_size_passed_to_handler(self, proxy, icons):
        proxy.load_cached_avatar(f"wavatar/9/7/{HASH}-48.png")
        assert icons.calls == [(f"wavatar/9/7/{HASH}-48.png", 48)]

    def test_headers_use_file_time(self, proxy, file_cache, clock):
        filename = f"retro/9/7/{HASH}.svg"
        file_cache.set(filename, b"<svg/>")
        os.utime(file_cache.path(filename), (clock.now - 60, clock.now - 60))

        image = proxy.load_cached_avatar(filename)
        assert parsedate_to_datetime(image.headers["Last-Modified"]).timestamp() == int(clock.now - 60)
        assert parsedate_to_datetime(image.headers["Expires"]).timestamp() == int(clock.now + 3600)
        assert image.headers["Content-Length"] == "6"

    def test_invalid_path_rejected_before_work(self, proxy, icons):
        with pytest.raises(InvalidCachePathError):
            proxy.load_cached_avatar(f"retro/9/7/{HASH[:-1]}x.svg")
        assert icons.calls == []

    def test_generation_failure_is_fatal(self, proxy, icons):
        icons.data = b""
        with pytest.raises(AvatarGenerationError, match="Error generating avatar file"):
            proxy.load_cached_avatar(f"retro/9/7/{HASH}.svg")

    def test_unknown_type_failure_is_fatal(self, proxy, icons):
        icons.data = b""
        with pytest.raises(AvatarGenerationError):
            proxy.load_cached_avatar(f"identicon/9/7/{HASH}.svg")
        assert icons.calls == [(f"identicon/9/7/{HASH}.svg", 100)]


class TestSizeLimit:
    """Verify the maximum size taken from a path."""

    def test_size_above_maximum_rejected_before_work(self, proxy, icons):
        with pytest.raises(InvalidCachePathError, match="exceeds 512"):
            proxy.load_cached_avatar(f"wavatar/9/7/{HASH}-513.png")
        assert icons.calls == []

    def test_size_at_maximum_accepted(self, proxy, icons):
        proxy.load_cached_avatar(f"wavatar/9/7/{HASH}-512.png")
        assert icons.calls == [(f"wavatar/9/7/{HASH}-512.png", 512)]

    def test_path_without_size_uses_default(self, proxy, icons):
        proxy.load_cached_avatar(f"retro/9/7/{HASH}.svg")
        assert icons.calls == [(f"retro/9/7/{HASH}.svg", 100)]

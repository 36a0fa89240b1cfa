"""Tests for avatarforge.imaging.stream: in-memory image file streams."""

from __future__ import annotations

import io

import pytest

from avatarforge.imaging.stream import ImageStreamArena


@pytest.fixture
def arena(clock) -> ImageStreamArena:
    return ImageStreamArena(clock=clock)


def write(arena: ImageStreamArena, url: str, data: bytes, mode: str = "w") -> None:
    with arena.open(url, mode) as stream:
        stream.write(data)


class TestArenaHandles:
    """Verify handle bookkeeping."""

    def test_url_and_handle_round_trip(self, arena):
        url = arena.url("img1", "avatar.png")
        assert url == "avfimg://img1/avatar.png"
        assert arena.get_handle_from_url(url) == "img1"

    @pytest.mark.parametrize("url", ["file://img1/x", "avfimg:///x", "img1"])
    def test_invalid_url_rejected(self, arena, url):
        with pytest.raises(ValueError):
            arena.get_handle_from_url(url)

    def test_new_handles_are_unique(self, arena):
        assert arena.new_handle() != arena.new_handle()

    def test_scoped_handle_released(self, arena):
        with arena.scoped_handle() as handle:
            write(arena, arena.url(handle), b"data")
            assert arena.handle_exists(handle)
        assert not arena.handle_exists(handle)
        assert len(arena) == 0

    def test_scoped_handle_released_on_error(self, arena):
        with pytest.raises(RuntimeError):
            with arena.scoped_handle() as handle:
                write(arena, arena.url(handle), b"data")
                raise RuntimeError("boom")
        assert len(arena) == 0

    def test_get_data_with_delete(self, arena):
        write(arena, arena.url("h"), b"payload")
        assert arena.get_data("h", delete=True) == b"payload"
        assert arena.get_data("h") is None

    def test_unlink(self, arena):
        write(arena, arena.url("h"), b"x")
        assert arena.unlink(arena.url("h")) is True
        assert arena.unlink(arena.url("h")) is False


class TestStreamModes:
    """Verify open() mode semantics."""

    def test_read_missing_handle(self, arena):
        with pytest.raises(FileNotFoundError):
            arena.open(arena.url("missing"), "r")

    def test_exclusive_create(self, arena):
        write(arena, arena.url("h"), b"x", "x")
        with pytest.raises(FileExistsError):
            arena.open(arena.url("h"), "x")

    def test_write_truncates(self, arena):
        write(arena, arena.url("h"), b"long content")
        write(arena, arena.url("h"), b"short")
        assert arena.get_data("h") == b"short"

    def test_create_mode_keeps_content(self, arena):
        write(arena, arena.url("h"), b"abcdef")
        write(arena, arena.url("h"), b"XY", "c")
        assert arena.get_data("h") == b"XYcdef"

    def test_append_always_writes_at_end(self, arena):
        write(arena, arena.url("h"), b"abc")
        with arena.open(arena.url("h"), "a+") as stream:
            stream.seek(0)
            stream.write(b"def")
        assert arena.get_data("h") == b"abcdef"

    def test_binary_flag_ignored(self, arena):
        write(arena, arena.url("h"), b"abc", "wb")
        with arena.open(arena.url("h"), "rb") as stream:
            assert stream.read() == b"abc"

    def test_invalid_mode(self, arena):
        with pytest.raises(ValueError):
            arena.open(arena.url("h"), "q")

    def test_read_only_stream_rejects_write(self, arena):
        write(arena, arena.url("h"), b"abc")
        with arena.open(arena.url("h"), "r") as stream:
            with pytest.raises(io.UnsupportedOperation):
                stream.write(b"x")

    def test_write_only_stream_rejects_read(self, arena):
        with arena.open(arena.url("h"), "w") as stream:
            with pytest.raises(io.UnsupportedOperation):
                stream.read(1)


class TestStreamPositioning:
    """Verify seek, tell and truncate."""

    def test_seek_past_end_pads(self, arena):
        with arena.open(arena.url("h"), "w+") as stream:
            stream.write(b"ab")
            stream.seek(5)
            stream.write(b"c")
        assert arena.get_data("h") == b"ab\0\0\0c"

    def test_seek_relative_and_from_end(self, arena):
        write(arena, arena.url("h"), b"0123456789")
        with arena.open(arena.url("h"), "r") as stream:
            stream.seek(-3, io.SEEK_END)
            assert stream.tell() == 7
            stream.seek(1, io.SEEK_CUR)
            assert stream.read(1) == b"8"

    def test_negative_seek_fails(self, arena):
        write(arena, arena.url("h"), b"abc")
        with arena.open(arena.url("h"), "r") as stream:
            with pytest.raises(OSError):
                stream.seek(-1)

    def test_truncate_shrinks_and_grows(self, arena):
        with arena.open(arena.url("h"), "w+") as stream:
            stream.write(b"abcdef")
            stream.truncate(2)
            assert arena.get_data("h") == b"ab"
            stream.truncate(4)
        assert arena.get_data("h") == b"ab\0\0"

    def test_stat_reports_size_and_times(self, arena, clock):
        write(arena, arena.url("h"), b"abc")
        clock.advance(10)
        write(arena, arena.url("h"), b"abcd", "a")
        status = arena.stat(arena.url("h"))
        assert status.size == 7
        assert status.mtime == status.ctime + 10

    def test_stat_missing_handle(self, arena):
        assert arena.stat(arena.url("missing")) is None

    def test_closed_stream_rejects_io(self, arena):
        stream = arena.open(arena.url("h"), "w+")
        stream.close()
        with pytest.raises(ValueError):
            stream.write(b"x")

"""Shared pytest fixtures for Avatar Forge tests."""

from __future__ import annotations

import hashlib
import io
import shutil
import tempfile
from collections.abc import Generator
from pathlib import Path

import httpx
import pytest
from PIL import Image, ImageDraw

from avatarforge.core.config import ASSETS_DIR, AvatarForgeConfig
from avatarforge.core.transients import FileTransientStore

SEED = "9737e3144aeeef544da072c45cbaf5369737e3144aeeef544da072c45cbaf536"
OTHER_SEED = "0c4f3e2a1b5d6f7081928374655647382910abcdefabcdef0123456789abcdef"


class FakeClock:
    """Manually advanced replacement for ``time.time``."""

    def __init__(self, now: float = 1_700_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def draw_part(
    path: Path,
    size: int,
    fill: tuple[int, int, int, int],
    box: tuple[int, int, int, int],
    shape: str = "ellipse",
    accent: tuple[int, int, int, int] | None = None,
) -> None:
    """Draw a one-shape RGBA part image (optionally with an accent stripe)."""
    image = Image.new("RGBA", (size, size), (0, 0, 0, 0))
    draw = ImageDraw.Draw(image)
    if shape == "ellipse":
        draw.ellipse(box, fill=fill)
    else:
        draw.rectangle(box, fill=fill)

    if accent is not None:
        left, top, right, bottom = box
        middle = (top + bottom) // 2
        draw.rectangle((left + 4, middle - 2, right - 4, middle + 2), fill=accent)

    image.save(path, format="PNG")


def build_wavatar_parts(directory: Path) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    for index in (1, 2):
        draw_part(directory / f"fade{index}.png", 80, (0, 0, 0, 60), (0, 0, 79, 20 * index), "rect")
    for index in (1, 2, 3):
        draw_part(directory / f"mask{index}.png", 80, (255, 255, 255, 255), (10 + index, 10, 70 - index, 72))
        draw_part(directory / f"shine{index}.png", 80, (255, 255, 255, 90), (24, 16, 40 + index, 30))
    for category, count in (("brow", 2), ("eyes", 3), ("pupils", 2), ("mouth", 3)):
        for index in range(1, count + 1):
            top = {"brow": 26, "eyes": 32, "pupils": 36, "mouth": 54}[category]
            draw_part(directory / f"{category}{index}.png", 80, (0, 0, 0, 255), (28, top, 52, top + index + 2), "rect")
    return directory


def build_monster_parts(directory: Path) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    Image.new("RGBA", (120, 120), (255, 255, 255, 255)).save(directory / "back.png")

    gray = (128, 128, 128, 255)
    specs = {
        "legs": ["legs_1.png", "legs_S5.png", "legs_4.png"],
        "hair": ["hair_1.png", "hair_S4.png"],
        "arms": ["arms_3.png", "arms_S2.png", "arms_1.png"],
        "body": ["body_1.png", "body_2.png", "body_10.png"],
        "eyes": ["eyes_1.png", "eyes_2.png"],
        "mouth": ["mouth_1.png", "mouth_6.png"],
    }
    boxes = {
        "legs": (30, 90, 90, 119),
        "hair": (30, 0, 90, 30),
        "arms": (0, 40, 119, 70),
        "body": (22, 17, 99, 100),
        "eyes": (40, 30, 80, 48),
        "mouth": (45, 56, 75, 80),
    }
    for category, names in specs.items():
        for index, name in enumerate(names):
            accent = (200, 60, 60, 255) if index % 2 else None
            draw_part(directory / name, 120, gray, boxes[category], accent=accent)
    return directory


def build_layered_parts(directory: Path, categories: list[str]) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    for position, category in enumerate(categories):
        for index in (1, 2):
            top = 40 + position * 50
            color = (40 * position % 256, 90, 160 + index * 20, 255)
            draw_part(directory / f"{category}_{index}.png", 512, color, (100, top, 400, top + 60 + index * 10))
    return directory


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files.

    Yields:
        Path to temporary directory

    Cleanup:
        Directory is removed after test completes
    """
    temp_path = Path(tempfile.mkdtemp())
    try:
        yield temp_path
    finally:
        shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def parts_dir(temp_dir: Path) -> Path:
    """A complete part tree: Pillow-drawn raster parts plus the bundled fragments."""
    root = temp_dir / "parts"
    build_wavatar_parts(root / "wavatars")
    build_monster_parts(root / "monster-id")
    build_layered_parts(root / "birds", ["tail", "hoop", "body", "wing", "eyes", "beak", "accessoire"])
    build_layered_parts(root / "cats", ["body", "fur", "eyes", "mouth", "accessoire"])
    shutil.copytree(ASSETS_DIR / "robohash", root / "robohash")
    return root


@pytest.fixture
def test_config(temp_dir: Path, parts_dir: Path) -> AvatarForgeConfig:
    """Create a test configuration with temporary directories.

    Args:
        temp_dir: Temporary directory from fixture
        parts_dir: Part tree from fixture

    Returns:
        AvatarForgeConfig instance for testing
    """
    return AvatarForgeConfig(
        _env_file=None,
        cache_dir=temp_dir / "cache",
        transients_dir=temp_dir / "cache" / ".transients",
        parts_dir=parts_dir,
    )


@pytest.fixture
def transients(temp_dir: Path, clock: FakeClock) -> FileTransientStore:
    return FileTransientStore(temp_dir / "transients", clock=clock)


@pytest.fixture
def png_bytes() -> bytes:
    """A small opaque PNG."""
    image = Image.new("RGB", (40, 20), (10, 200, 30))
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def jpeg_bytes() -> bytes:
    """A small JPEG."""
    image = Image.new("RGB", (64, 64), (200, 40, 30))
    buffer = io.BytesIO()
    image.save(buffer, format="JPEG")
    return buffer.getvalue()


@pytest.fixture
def gravatar_transport(jpeg_bytes: bytes) -> httpx.MockTransport:
    """Mock remote avatar service: every address has an avatar except ``nobody@example.org``."""
    missing = hashlib.md5(b"nobody@example.org").hexdigest()

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith(missing):
            return httpx.Response(404)
        if request.method == "HEAD":
            return httpx.Response(200, headers={"content-type": "image/jpeg"})
        return httpx.Response(200, content=jpeg_bytes, headers={"content-type": "image/jpeg"})

    return httpx.MockTransport(handler)


@pytest.fixture
def seed() -> str:
    return SEED


@pytest.fixture
def other_seed() -> str:
    return OTHER_SEED

"""Static icons: the same bundled SVG for every seed."""

from __future__ import annotations

from pathlib import Path

from avatarforge.core.config import ASSETS_DIR
from avatarforge.generators.base import AvatarGenerator
from avatarforge.imaging.editor import SVG_IMAGE

ICONS_DIR = ASSETS_DIR / "icons"


class StaticIconGenerator(AvatarGenerator):
    """Serves a fixed SVG file.  Seed and size are ignored.

    A missing icon file is a deployment error and raises ``OSError``.
    """

    mime_type = SVG_IMAGE

    def __init__(self, name: str, path: Path | None = None) -> None:
        self.name = name
        self.path = Path(path) if path is not None else ICONS_DIR / f"{name}.svg"

    def render(self, seed: str, size: int) -> bytes:
        return self.path.read_bytes()

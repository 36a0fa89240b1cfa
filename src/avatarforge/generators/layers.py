"""Shared plumbing for raster avatars assembled from PNG part layers.

:class:`PartLayers` bundles the three capabilities every raster style needs
(part catalog, canvas, image editor) together with the style's native canvas
size.  :class:`LayeredGenerator` is the simplest raster style built on it:
pick one part per category with the seeded number generator and stack them
on a transparent canvas.  The bird and cat avatars are both layered
generators that differ only in their part directory and categories.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from PIL import Image

from avatarforge.core.number_generator import NumberGenerator
from avatarforge.core.transients import FileTransientStore
from avatarforge.generators.base import AvatarGenerator
from avatarforge.imaging.canvas import Canvas
from avatarforge.imaging.editor import PNG_IMAGE, ImageEditor
from avatarforge.parts.catalog import PartCatalog
from avatarforge.parts.selector import RandomPartSelector, randomize_parts

BIRD_PARTS = ["tail", "hoop", "body", "wing", "eyes", "beak", "accessoire"]
CAT_PARTS = ["body", "fur", "eyes", "mouth", "accessoire"]


@dataclass
class PartLayers:
    """Capabilities of one raster style.

    Attributes
    ----------
    catalog : PartCatalog
        Part files available to the style
    canvas : Canvas
        Raster primitives resolving part names in the catalog's directory
    editor : ImageEditor
        Codec access for the final resize and PNG encoding
    size : int
        Edge length of the style's native canvas in pixels
    """

    catalog: PartCatalog
    canvas: Canvas
    editor: ImageEditor
    size: int

    @classmethod
    def create(
        cls,
        parts_dir: Path,
        part_types: list[str],
        size: int,
        transients: FileTransientStore,
        editor: ImageEditor,
        ttl: int,
    ) -> PartLayers:
        return cls(
            catalog=PartCatalog(parts_dir, part_types, transients, ttl),
            canvas=Canvas(parts_dir),
            editor=editor,
            size=size,
        )

    def apply(self, base: Image.Image, layer: Image.Image | str) -> None:
        """Copy a full-size layer onto ``base``."""
        self.canvas.apply_image(base, layer, self.size, self.size)

    def encode(self, image: Image.Image, size: int) -> bytes:
        """Scale the finished avatar to ``size`` and encode it as PNG."""
        return self.editor.get_resized_image_data(image, size, size, PNG_IMAGE)


class LayeredGenerator(AvatarGenerator):
    """Stacks one randomly chosen part per category on a transparent canvas.

    Args:
        name: Style name used in log messages.
        layers: The style's part capabilities.
    """

    mime_type = PNG_IMAGE

    def __init__(self, name: str, layers: PartLayers) -> None:
        self.name = name
        self.layers = layers

    def render(self, seed: str, size: int) -> bytes:
        selector = RandomPartSelector(NumberGenerator(seed))
        parts = randomize_parts(self.layers.catalog.get_parts(), selector)

        avatar = self.layers.canvas.create("transparent", self.layers.size, self.layers.size)
        for filename in parts.values():
            self.layers.apply(avatar, filename)

        return self.layers.encode(avatar, size)

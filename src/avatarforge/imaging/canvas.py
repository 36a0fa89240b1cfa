"""Raster canvas operations used by the layered avatar generators.

A :class:`Canvas` knows where one style's part images live and offers the
handful of primitives the generators compose avatars from:

- allocate a solid or transparent RGBA canvas
- load a part image
- copy a layer onto the canvas at the origin
- flood-fill a region with an HSL color
- recolor a part while keeping the lightness of every pixel

Every failure is raised as :class:`~avatarforge.core.exceptions.CompositionError`,
never ignored.

Colorization
------------
:meth:`Canvas.colorize` replaces the hue and saturation of every visible,
mid-tone pixel (not almost black, not almost white) and keeps its lightness
and alpha.  Most parts are drawn in a single flat color, in which case the
per-pixel loop is skipped: one replacement color is computed and painted
through a mask.  Both paths produce identical pixels.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Literal

from PIL import Image, ImageChops, ImageDraw

from avatarforge.core.color import MAX_PERCENT, MAX_RGB, hsl_to_rgb, normalize_hue
from avatarforge.core.exceptions import CompositionError

logger = logging.getLogger(__name__)

CanvasKind = Literal["white", "black", "transparent"]

_BACKGROUNDS: dict[str, tuple[int, int, int, int]] = {
    "white": (255, 255, 255, 255),
    "black": (0, 0, 0, 255),
    "transparent": (0, 0, 0, 0),
}

# Pixels darker or lighter than this (in percent) keep their color.
MIN_LIGHTNESS = 10
MAX_LIGHTNESS = 99

# Pixels more transparent than this keep their color.
MIN_ALPHA = 26


def pixel_lightness(red: int, green: int, blue: int) -> float:
    """Mean of the channels, in percent."""
    return (red + green + blue) / 3 / MAX_RGB * MAX_PERCENT


def _is_colorizable(red: int, green: int, blue: int, alpha: int) -> bool:
    return alpha >= MIN_ALPHA and MIN_LIGHTNESS < pixel_lightness(red, green, blue) < MAX_LIGHTNESS


class Canvas:
    """Raster primitives bound to one part directory.

    Args:
        parts_dir: Directory that part file names are resolved against.
    """

    def __init__(self, parts_dir: Path) -> None:
        self.parts_dir = Path(parts_dir)

    def create(self, kind: CanvasKind, width: int, height: int) -> Image.Image:
        """Allocate an RGBA canvas filled with white, opaque black or transparency.

        Raises:
            CompositionError: If ``kind`` is unknown or the size is invalid.
        """
        try:
            background = _BACKGROUNDS[kind]
        except KeyError:
            raise CompositionError(f"Invalid canvas type '{kind}'") from None

        if width <= 0 or height <= 0:
            raise CompositionError(f"Invalid canvas size {width}x{height}")

        return Image.new("RGBA", (width, height), background)

    def create_from_file(self, filename: str) -> Image.Image:
        """Load a part image as RGBA.

        Raises:
            CompositionError: If the file is missing or not a readable image.
        """
        path = self.parts_dir / filename
        try:
            with Image.open(path) as image:
                return image.convert("RGBA")
        except (OSError, ValueError) as exc:
            raise CompositionError(f"Could not load part image {path}: {exc}") from exc

    def apply_image(self, base: Image.Image, layer: Image.Image | str, width: int, height: int) -> None:
        """Composite ``layer`` onto ``base`` at the origin and close the layer.

        Args:
            base: Canvas receiving the layer, modified in place.
            layer: An image, or the file name of a part.
            width: Width of the copied region.
            height: Height of the copied region.

        Raises:
            CompositionError: If the layer cannot be loaded or copied.
        """
        if isinstance(layer, str):
            layer = self.create_from_file(layer)

        try:
            if layer.mode != "RGBA":
                layer = layer.convert("RGBA")

            source = (0, 0, min(width, layer.width, base.width), min(height, layer.height, base.height))
            base.alpha_composite(layer, dest=(0, 0), source=source)
        except (OSError, ValueError) as exc:
            raise CompositionError(f"Could not apply layer: {exc}") from exc
        finally:
            layer.close()

    def fill_hsl(
        self,
        image: Image.Image,
        hue: float,
        saturation: float,
        lightness: float,
        x: int,
        y: int,
    ) -> None:
        """Flood-fill the region containing ``(x, y)`` with an HSL color.

        Raises:
            CompositionError: If the seed point lies outside the image.
        """
        if not (0 <= x < image.width and 0 <= y < image.height):
            raise CompositionError(f"Fill point ({x}, {y}) outside {image.width}x{image.height} canvas")

        red, green, blue = hsl_to_rgb(hue, saturation, lightness)
        ImageDraw.floodfill(image, (x, y), (red, green, blue, 255))

    def colorize(self, image: Image.Image, hue: float, saturation: float) -> Image.Image:
        """Recolor the mid-tone pixels of ``image`` with the given hue and saturation.

        Args:
            image: RGBA part image.
            hue: Hue in degrees (-360 to 360), normalized to 0-359.
            saturation: Saturation in percent.

        Returns:
            The recolored image (a new object on the single-color path,
            ``image`` itself on the per-pixel path).
        """
        if image.mode != "RGBA":
            raise CompositionError(f"Cannot colorize {image.mode} image")

        hue = normalize_hue(hue)

        colors = image.getcolors(maxcolors=image.width * image.height)
        eligible = {rgba[:3] for _, rgba in colors if _is_colorizable(*rgba)}

        if not eligible:
            return image

        if len(eligible) == 1:
            return self._colorize_single(image, eligible.pop(), hue, saturation)

        return self._colorize_pixels(image, hue, saturation)

    @staticmethod
    def _colorize_single(
        image: Image.Image,
        color: tuple[int, int, int],
        hue: float,
        saturation: float,
    ) -> Image.Image:
        replacement = hsl_to_rgb(hue, saturation, pixel_lightness(*color))
        red, green, blue, alpha = image.split()

        mask = alpha.point(lambda v: 255 if v >= MIN_ALPHA else 0)
        for band, value in zip((red, green, blue), color):
            mask = ImageChops.multiply(mask, band.point(lambda v, value=value: 255 if v == value else 0))

        rgb = Image.composite(Image.new("RGB", image.size, replacement), image.convert("RGB"), mask)
        rgb.putalpha(alpha)

        return rgb

    @staticmethod
    def _colorize_pixels(image: Image.Image, hue: float, saturation: float) -> Image.Image:
        pixels = image.load()
        replacements: dict[tuple[int, int, int], tuple[int, int, int]] = {}

        for x in range(image.width):
            for y in range(image.height):
                red, green, blue, alpha = pixels[x, y]
                if not _is_colorizable(red, green, blue, alpha):
                    continue

                key = (red, green, blue)
                if key not in replacements:
                    replacements[key] = hsl_to_rgb(hue, saturation, pixel_lightness(*key))
                pixels[x, y] = (*replacements[key], alpha)

        return image

"""Image decoding, resizing and re-encoding through in-memory streams.

The editor is the only place where the image codec (Pillow) touches raw
bytes.  All input and output goes through the editor's
:class:`~avatarforge.imaging.stream.ImageStreamArena`, so no temporary files
are created and every handle is released before a call returns.

Codec failures never escape: decoding errors yield ``None`` and encoding
errors yield empty bytes.  Callers treat both as a failed build.

Resizing
--------
Images are brought to an exact target size by cropping the largest centred
rectangle with the destination aspect ratio and scaling that rectangle.  This
preserves the aspect ratio and works in both directions (enlarging small
remote avatars as well as shrinking generated ones).
"""

from __future__ import annotations

import logging

from PIL import Image, UnidentifiedImageError

from avatarforge.imaging.stream import ImageStreamArena

logger = logging.getLogger(__name__)

PNG_IMAGE = "image/png"
JPEG_IMAGE = "image/jpeg"
GIF_IMAGE = "image/gif"
SVG_IMAGE = "image/svg+xml"

# Pillow format name -> MIME type.
_FORMAT_MIME_TYPES = {
    "PNG": PNG_IMAGE,
    "JPEG": JPEG_IMAGE,
    "GIF": GIF_IMAGE,
}

# MIME type -> Pillow format name.
_MIME_FORMATS = {mime: fmt for fmt, mime in _FORMAT_MIME_TYPES.items()}

FILE_EXTENSIONS = {
    PNG_IMAGE: "png",
    JPEG_IMAGE: "jpg",
    GIF_IMAGE: "gif",
    SVG_IMAGE: "svg",
}


def crop_box(src_width: int, src_height: int, dst_width: int, dst_height: int) -> tuple[int, int, int, int]:
    """Return the largest centred crop of the source with the destination's aspect ratio.

    Args:
        src_width: Source width in pixels.
        src_height: Source height in pixels.
        dst_width: Target width in pixels.
        dst_height: Target height in pixels.

    Returns:
        ``(left, upper, right, lower)`` box in source coordinates.

    Example:
        >>> crop_box(200, 100, 50, 50)
        (50, 0, 150, 100)
    """
    aspect = dst_width / dst_height
    crop_width = min(src_width, round(src_height * aspect))
    crop_height = min(src_height, round(src_width / aspect))

    left = (src_width - crop_width) // 2
    upper = (src_height - crop_height) // 2

    return left, upper, left + crop_width, upper + crop_height


class ImageEditor:
    """Decode, resize and encode images entirely in memory.

    Args:
        arena: Stream arena used for codec I/O.  A private arena is created
            when none is given.
    """

    def __init__(self, arena: ImageStreamArena | None = None) -> None:
        self.arena = arena if arena is not None else ImageStreamArena()

    def create_from_string(self, data: bytes) -> Image.Image | None:
        """Decode image bytes.

        Returns:
            A fully loaded image, or ``None`` if the bytes are not an image
            Pillow understands.
        """
        if not data:
            return None

        with self.arena.scoped_handle("decode") as handle:
            url = self.arena.url(handle, "input")
            with self.arena.open(url, "w") as stream:
                stream.write(data)

            try:
                with self.arena.open(url, "r") as stream:
                    image = Image.open(stream)
                    image.load()
            except (UnidentifiedImageError, OSError, ValueError) as exc:
                logger.warning(f"Could not decode image data: {exc}")
                return None

        return image

    def get_image_data(self, image: Image.Image, mime_type: str = PNG_IMAGE) -> bytes:
        """Encode ``image`` in the format named by ``mime_type``.

        Returns:
            The encoded bytes, or ``b""`` on failure.
        """
        fmt = _MIME_FORMATS.get(mime_type)
        if fmt is None:
            logger.warning(f"Unsupported output format {mime_type}")
            return b""

        if fmt == "JPEG" and image.mode not in ("RGB", "L"):
            image = image.convert("RGB")

        with self.arena.scoped_handle("encode") as handle:
            url = self.arena.url(handle, f"output.{FILE_EXTENSIONS[mime_type]}")
            try:
                with self.arena.open(url, "w") as stream:
                    image.save(stream, format=fmt)
            except (OSError, ValueError) as exc:
                logger.warning(f"Could not encode image as {mime_type}: {exc}")
                return b""

            return self.arena.get_data(handle) or b""

    def get_resized_image_data(
        self,
        image: Image.Image,
        width: int,
        height: int,
        mime_type: str = PNG_IMAGE,
    ) -> bytes:
        """Crop and scale ``image`` to exactly ``width`` x ``height`` and encode it."""
        if width <= 0 or height <= 0:
            logger.warning(f"Invalid target size {width}x{height}")
            return b""

        if image.size != (width, height):
            box = crop_box(image.width, image.height, width, height)
            try:
                image = image.resize((width, height), Image.Resampling.LANCZOS, box=box)
            except (OSError, ValueError) as exc:
                logger.warning(f"Could not resize image to {width}x{height}: {exc}")
                return b""

        return self.get_image_data(image, mime_type)

    def get_mime_type(self, data: bytes) -> str | None:
        """Return the MIME type of encoded image bytes, or ``None``."""
        image = self.create_from_string(data)
        if image is None:
            return None

        return _FORMAT_MIME_TYPES.get(image.format or "")

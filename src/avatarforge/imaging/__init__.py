"""Imaging primitives: in-memory streams, codec access, raster canvas, SVG.

- **stream.py**: Arena of in-memory file buffers addressed by ``avfimg://`` URLs
- **editor.py**: Decode, crop-resize and encode images through the arena
- **canvas.py**: RGBA canvas allocation, layering, HSL fills and colorization
- **svg.py**: Fragment preparation and Jinja2 SVG templates
"""

from avatarforge.imaging.canvas import Canvas
from avatarforge.imaging.editor import ImageEditor, crop_box
from avatarforge.imaging.stream import ImageStream, ImageStreamArena

__all__ = ["Canvas", "ImageEditor", "crop_box", "ImageStream", "ImageStreamArena"]

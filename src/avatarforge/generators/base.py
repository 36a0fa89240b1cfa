"""Base class and result type for avatar generators.

Every avatar style is one concrete :class:`AvatarGenerator`.  Capabilities
(part catalog, canvas, image editor) are passed in by the caller rather than
inherited, so a generator is a thin recipe over shared building blocks.

Build contract
--------------
``build(seed, size)`` is a pure function of its arguments:

- The same seed and size always produce byte-identical output, in every
  process.  Each call creates its own number generator; no state survives
  between calls.
- Catalog and composition failures, and empty codec output, are contained:
  ``build()`` logs them and returns ``None`` so the caller can fall back to a
  different icon.  Other exceptions are programming errors and propagate.

Examples
--------
    >>> from avatarforge.generators.retro import RetroGenerator
    >>> generator = RetroGenerator()
    >>> image = generator.build("9737e3144aeeef544da072c45cbaf536" * 2, 100)
    >>> image.mime_type
    'image/svg+xml'
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass

from avatarforge.core.exceptions import CompositionError, PartsNotFoundError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RenderedImage:
    """Final artifact of one build: encoded bytes and their MIME type."""

    data: bytes
    mime_type: str

    def __len__(self) -> int:
        return len(self.data)


class AvatarGenerator(ABC):
    """Abstract base class for all avatar generators.

    Attributes
    ----------
    name : str
        Short identifier used in log messages
    mime_type : str
        MIME type of the produced images
    """

    name: str = "avatar"
    mime_type: str = "image/png"

    def build(self, seed: str, size: int) -> RenderedImage | None:
        """Render the avatar for ``seed`` at ``size`` x ``size`` pixels.

        Args:
            seed: Hexadecimal identity hash.
            size: Target edge length in pixels.  Vector styles ignore it.

        Returns:
            The rendered image, or ``None`` if generation failed.
        """
        try:
            data = self.render(seed, size)
        except (PartsNotFoundError, CompositionError) as exc:
            logger.warning(f"{self.name} generation failed for {seed[:8]}: {exc}")
            return None

        if not data:
            logger.warning(f"{self.name} generation produced no data for {seed[:8]}")
            return None

        return RenderedImage(data=data, mime_type=self.mime_type)

    @abstractmethod
    def render(self, seed: str, size: int) -> bytes:
        """Produce the encoded image.

        Raises:
            PartsNotFoundError: If the part catalog is incomplete.
            CompositionError: If a raster step fails.
        """

"""Client for the remote avatar service (gravatar.com).

Remote images are requested with ``d=404`` so the service never substitutes
its own default icon: an address without an avatar simply yields nothing, and
the caller falls back to a generated icon.

Responses are only trusted if the image editor recognises them as an image.
Proxies in front of the service occasionally answer with HTML error pages
and a 200 status.

Validation
----------
:meth:`GravatarService.validate` answers "does this address have an avatar?"
with a HEAD request and caches the answer in the transient store.  Positive
answers are cached for a week; negative answers for between ten minutes and a
week depending on the age of the object the address belongs to, since a
newly registered address is more likely to gain an avatar soon.
"""

from __future__ import annotations

import hashlib
import logging

import httpx

from avatarforge.core.config import DAY_IN_SECONDS, HOUR_IN_SECONDS, MINUTE_IN_SECONDS
from avatarforge.core.transients import FileTransientStore
from avatarforge.imaging.editor import ImageEditor

logger = logging.getLogger(__name__)

GRAVATAR_URL = "https://secure.gravatar.com/avatar/{hash}"

WEEK_IN_SECONDS = 7 * DAY_IN_SECONDS


def gravatar_hash(email: str) -> str:
    """MD5 of the trimmed, lower-cased address, as used by the remote service."""
    return hashlib.md5(email.strip().lower().encode("utf-8")).hexdigest()


def caching_duration(has_avatar: bool, age: int) -> int:
    """Seconds a validation result stays cached.

    Args:
        has_avatar: Whether the address has an avatar.
        age: Age in seconds of the object (comment, account) the address
            belongs to.
    """
    if has_avatar or age > WEEK_IN_SECONDS:
        return WEEK_IN_SECONDS
    if age > DAY_IN_SECONDS:
        return DAY_IN_SECONDS
    if age > HOUR_IN_SECONDS:
        return HOUR_IN_SECONDS

    return 10 * MINUTE_IN_SECONDS


class GravatarService:
    """Fetches and validates remote avatars.

    Args:
        client: HTTP client used for all requests.  Tests inject one with a
            mock transport.
        editor: Image editor used to check downloaded data.
        transients: Store caching validation results.
    """

    def __init__(
        self,
        client: httpx.Client,
        editor: ImageEditor,
        transients: FileTransientStore | None = None,
    ) -> None:
        self._client = client
        self._editor = editor
        self._transients = transients
        self._validation_cache: dict[str, str] = {}

    @staticmethod
    def get_url(email: str, size: int | None = 80, rating: str = "x") -> str:
        """Build the image URL for ``email``."""
        params = httpx.QueryParams({"d": "404", "s": str(size) if size else "", "r": rating})
        return f"{GRAVATAR_URL.format(hash=gravatar_hash(email))}?{params}"

    def get_image(self, email: str, size: int, rating: str) -> bytes:
        """Download the avatar of ``email``.

        Returns:
            The image bytes, or ``b""`` if there is no avatar, the request
            failed, or the response is not an image.
        """
        try:
            response = self._client.get(self.get_url(email, size, rating))
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            logger.info(f"No remote avatar ({exc.response.status_code}) for {gravatar_hash(email)[:8]}")
            return b""
        except httpx.HTTPError as exc:
            logger.warning(f"Remote avatar request failed: {exc}")
            return b""

        image = response.content
        if self._editor.get_mime_type(image) is None:
            logger.warning(f"Ignoring non-image response for {gravatar_hash(email)[:8]}")
            return b""

        return image

    def validate(self, email: str = "", age: int = 0) -> str:
        """Check whether ``email`` has a remote avatar.

        Returns:
            The avatar's MIME type, or ``""`` if there is none (or the
            address is empty).  Transient request errors also yield ``""``
            but are not cached.
        """
        if not email:
            return ""

        identity = gravatar_hash(email)
        if identity in self._validation_cache:
            return self._validation_cache[identity]

        key = f"check_{identity}"
        if self._transients is not None:
            cached = self._transients.get(key)
            if isinstance(cached, str):
                self._validation_cache[identity] = cached
                return cached

        result = self._ping(email)
        if result is None:
            return ""

        if self._transients is not None:
            self._transients.set(key, result, caching_duration(bool(result), age))
        self._validation_cache[identity] = result

        return result

    def _ping(self, email: str) -> str | None:
        try:
            response = self._client.head(self.get_url(email))
        except httpx.HTTPError as exc:
            logger.warning(f"Remote avatar check failed: {exc}")
            return None

        if response.status_code == 200:
            return response.headers.get("content-type", "")
        if response.status_code == 404:
            return ""

        return None

"""Pydantic request and response models for the Avatar Forge API.

Models
------
TrimRequest
    Payload for ``POST /api/cache/trim``: which eviction jobs to run.
TrimResponse
    Result of ``POST /api/cache/trim``: files deleted per job, or ``null``
    for a job that was skipped because it already ran in its interval.
ConfigResponse
    Payload of ``GET /api/config``.
AvatarResponse
    Payload of ``GET /api/avatar/{identity}``: where the avatar of an identity
    is served from.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field


class TrimRequest(BaseModel):
    """Request body for ``POST /api/cache/trim``.

    Attributes:
        scope: ``"gravatars"`` runs the remote image job, ``"images"`` the
            all-images job, and ``"all"`` (the default) both.
    """

    scope: Literal["all", "gravatars", "images"] = Field(
        default="all",
        description="Which eviction jobs to run",
    )


class TrimResponse(BaseModel):
    """Outcome of the eviction jobs."""

    gravatars: int | None = Field(
        default=None,
        description="Remote images deleted, or null if the job was skipped",
    )
    images: int | None = Field(
        default=None,
        description="Cached images deleted, or null if the job was skipped",
    )


class ConfigResponse(BaseModel):
    """Public configuration of a running server."""

    version: str
    cache_url_prefix: str
    default_icon_size: int
    max_icon_size: int
    icon_types: list[str]


class AvatarResponse(BaseModel):
    """Cached avatar of an identity."""

    type: str = Field(description="Avatar type: an icon type, or gravatar for a remote image")
    url: str = Field(description="Path of the cache file, under the cache URL prefix")

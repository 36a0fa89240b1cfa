"""Avatar Forge - FastAPI Application.

This module defines the application factory, the REST routes and the two
console entry points: ``main()`` launches the uvicorn server and
``trim_main()`` runs the cache eviction jobs once.

Architecture
------------
- **Cache files** are expected to be served by the front web server
  (nginx, a CDN, ...) straight from ``cache_dir``.  Requests for files that
  do not exist are forwarded to this application, which regenerates them.
- **Services** (cache, generators, handlers, janitor) are created once per
  worker in the lifespan handler and kept on ``app.state``.
- **Eviction** is triggered from outside, either with ``POST /api/cache/trim``
  or with the ``avatarforge-trim`` command.  Locks in the shared transient
  store keep concurrent workers from repeating a job within its interval.

Endpoints
---------
========  ===============================  ====================================
Method    Path                             Purpose
========  ===============================  ====================================
GET       ``/{prefix}/{file_path}``        Serve (and regenerate) a cache file
GET       ``/api/config``                  Version, icon types, URL prefix
GET       ``/api/avatar/{identity}``       Cache file of an identity's avatar
POST      ``/api/cache/trim``              Run the eviction jobs
========  ===============================  ====================================

``{prefix}`` is ``cache_url_prefix`` from the configuration.

Usage
-----
CLI (installed entry points)::

    avatarforge
    avatarforge-trim --scope gravatars

Direct invocation::

    python -m avatarforge.api.main
"""

from __future__ import annotations

import argparse
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import Response

from avatarforge import __version__
from avatarforge.api.models import AvatarResponse, ConfigResponse, TrimRequest, TrimResponse
from avatarforge.api.services import AvatarServices, build_services
from avatarforge.cache.handlers import IdentityResolver
from avatarforge.cache.janitor import CacheJanitor
from avatarforge.cache.paths import IDENTITY_PATTERN
from avatarforge.core.config import AvatarForgeConfig, config
from avatarforge.core.exceptions import AvatarGenerationError, InvalidCachePathError
from avatarforge.generators.icon_types import IconType

logger = logging.getLogger(__name__)


def run_trim(janitor: CacheJanitor, scope: str) -> TrimResponse:
    """Run the eviction jobs selected by ``scope``."""
    result = TrimResponse()

    if scope in ("all", "gravatars"):
        result.gravatars = janitor.trim_gravatar_cache()
    if scope in ("all", "images"):
        result.images = janitor.trim_image_cache()

    return result


def create_app(
    settings: AvatarForgeConfig | None = None,
    resolver: IdentityResolver | None = None,
    http_client: httpx.Client | None = None,
) -> FastAPI:
    """Create the FastAPI application.

    Args:
        settings: Configuration to use.  Defaults to the global ``config``.
        resolver: Identity lookup for remote avatars.
        http_client: HTTP client for remote avatars (tests inject a mock).

    Returns:
        The configured application.  Services are created when the
        application starts up.
    """
    settings = settings if settings is not None else config

    # -----------------------------------------------------------------------
    # Application lifecycle - service setup and teardown.
    # -----------------------------------------------------------------------
    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        """Create the per-worker services on startup and close them on shutdown."""
        app.state.services = build_services(settings, resolver=resolver, http_client=http_client)
        logger.info(f"Serving avatars under /{settings.cache_url_prefix}/")

        yield  # Application runs here.

        app.state.services.close()
        logger.info("Avatar services closed on shutdown.")

    app = FastAPI(
        title="Avatar Forge",
        description="Deterministic procedural avatars with an on-demand render cache.",
        version=__version__,
        lifespan=lifespan,
    )

    def services(request: Request) -> AvatarServices:
        return request.app.state.services

    # -----------------------------------------------------------------------
    # Routes.
    # -----------------------------------------------------------------------

    @app.get("/api/config", response_model=ConfigResponse)
    async def get_config() -> ConfigResponse:
        """Return the public configuration of this server."""
        return ConfigResponse(
            version=__version__,
            cache_url_prefix=settings.cache_url_prefix,
            default_icon_size=settings.default_icon_size,
            max_icon_size=settings.max_icon_size,
            icon_types=[icon_type.value for icon_type in IconType],
        )

    @app.get("/api/avatar/{identity}", response_model=AvatarResponse)
    def get_avatar(
        identity: str,
        request: Request,
        size: int | None = None,
        default: str = IconType.MYSTERY.value,
        gravatar: bool = True,
        user: bool = False,
        age: int = 0,
    ) -> AvatarResponse:
        """Make sure the avatar of an identity is cached and return its path.

        The remote avatar is preferred when ``gravatar`` is set and the
        identity resolves to an address that has one; otherwise the icon of
        type ``default`` is generated.

        Args:
            identity: 64-digit identity hash.
            size: Size in pixels.  Defaults to ``default_icon_size``.
            default: Icon type used when there is no remote avatar.
            gravatar: Whether to look for a remote avatar at all.
            user: Whether the hash belongs to a registered user (otherwise a
                comment author).
            age: Age in seconds of the account or comment.

        Raises:
            HTTPException: 404 for a malformed identity, 400 for invalid
                parameters, 500 if no avatar could be generated.
        """
        if not IDENTITY_PATTERN.match(identity):
            raise HTTPException(status_code=404, detail="Not an identity hash")

        size = size if size is not None else settings.default_icon_size
        if not 1 <= size <= settings.max_icon_size:
            raise HTTPException(status_code=400, detail=f"Size must be between 1 and {settings.max_icon_size}")
        if age < 0:
            raise HTTPException(status_code=400, detail="Age must not be negative")

        icon_type = IconType.from_type(default)
        if icon_type is None:
            raise HTTPException(status_code=400, detail=f"Unknown icon type '{default}'")

        identity = identity.lower()
        avatar_services = services(request)

        filename = None
        if gravatar:
            filename = avatar_services.gravatars.get_avatar(identity, size, user=user, age=age)
        if filename is None:
            filename = avatar_services.default_icons.get_icon(icon_type, identity, size)
        if filename is None:
            detail = f"Error generating {icon_type.value} avatar."
            logger.error(detail)
            raise HTTPException(status_code=500, detail=detail)

        return AvatarResponse(type=filename.split("/", 1)[0], url=f"/{settings.cache_url_prefix}/{filename}")

    @app.post("/api/cache/trim", response_model=TrimResponse)
    def trim_cache(req: TrimRequest, request: Request) -> TrimResponse:
        """Run the eviction jobs.

        A job that already ran within its cleanup interval (on any worker)
        is skipped and reported as ``null``.
        """
        return run_trim(services(request).janitor, req.scope)

    @app.get(f"/{settings.cache_url_prefix}/{{file_path:path}}")
    def get_cached_avatar(file_path: str, request: Request) -> Response:
        """Serve a cache file, generating it first if it does not exist.

        Declared synchronous so FastAPI runs the CPU-bound generation in its
        thread pool instead of on the event loop.

        Raises:
            HTTPException: 404 if the path is not a valid cache path, 500 if
                the missing file could not be generated.
        """
        try:
            image = services(request).proxy.load_cached_avatar(file_path)
        except InvalidCachePathError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        except AvatarGenerationError as exc:
            logger.error(str(exc))
            raise HTTPException(status_code=500, detail=str(exc)) from exc

        return Response(content=image.data, media_type=image.media_type, headers=image.headers)

    return app


# ---------------------------------------------------------------------------
# Application instance used by uvicorn.
# ---------------------------------------------------------------------------
app = create_app()


def main() -> None:
    """Launch the uvicorn ASGI server.

    Reads host and port from :data:`~avatarforge.core.config.config` (which
    loads from ``AVATARFORGE_SERVER_HOST`` and ``AVATARFORGE_SERVER_PORT``
    environment variables).  Defaults to ``0.0.0.0:7860``.

    This function is registered as the ``avatarforge`` console script in
    ``pyproject.toml``.
    """
    import uvicorn

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    uvicorn.run(
        "avatarforge.api.main:app",
        host=config.server_host,
        port=config.server_port,
        reload=False,
    )


def trim_main(argv: list[str] | None = None) -> int:
    """Run the eviction jobs once; for use from cron or a systemd timer.

    Registered as the ``avatarforge-trim`` console script.

    Returns:
        Process exit status.
    """
    parser = argparse.ArgumentParser(prog="avatarforge-trim", description="Evict stale avatar cache files.")
    parser.add_argument(
        "--scope",
        choices=["all", "gravatars", "images"],
        default="all",
        help="Which eviction jobs to run (default: all)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug messages")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    services = build_services(config)
    try:
        result = run_trim(services.janitor, args.scope)
    finally:
        services.close()

    for job, deleted in result.model_dump().items():
        if deleted is None:
            logger.info(f"{job}: skipped, already ran in this interval")
        else:
            logger.info(f"{job}: deleted {deleted} files")

    return 0


if __name__ == "__main__":
    main()

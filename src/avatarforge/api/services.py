"""Wiring of the cache, generators and handlers from configuration.

Both the web application and the ``avatarforge-trim`` command need the same
object graph.  :func:`build_services` creates it once per process; nothing in
it is global.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import httpx

from avatarforge.cache.filesystem import FilesystemCache
from avatarforge.cache.gravatar import GravatarService
from avatarforge.cache.handlers import (
    GRAVATAR_TYPE,
    DefaultIconsHandler,
    GravatarCacheHandler,
    IdentityResolver,
    MappingIdentityResolver,
)
from avatarforge.cache.janitor import CacheJanitor
from avatarforge.cache.proxy import ImageProxy
from avatarforge.core.config import AvatarForgeConfig
from avatarforge.core.transients import FileTransientStore
from avatarforge.generators.base import AvatarGenerator
from avatarforge.generators.icon_types import IconType, create_generators
from avatarforge.imaging.editor import ImageEditor

logger = logging.getLogger(__name__)


@dataclass
class AvatarServices:
    """Everything a worker process needs to serve and trim the cache."""

    config: AvatarForgeConfig
    transients: FileTransientStore
    file_cache: FilesystemCache
    editor: ImageEditor
    generators: dict[IconType, AvatarGenerator]
    default_icons: DefaultIconsHandler
    gravatars: GravatarCacheHandler
    proxy: ImageProxy
    janitor: CacheJanitor
    http_client: httpx.Client

    def close(self) -> None:
        self.http_client.close()


def build_services(
    config: AvatarForgeConfig,
    resolver: IdentityResolver | None = None,
    http_client: httpx.Client | None = None,
) -> AvatarServices:
    """Create the object graph for one process.

    Args:
        config: Application settings.
        resolver: Identity lookup for remote avatars.  Without one, no hash
            resolves and remote avatar requests fail.
        http_client: Client for remote requests.  Created from the configured
            timeout when omitted.
    """
    if http_client is None:
        http_client = httpx.Client(timeout=config.gravatar_timeout, follow_redirects=True)
    if resolver is None:
        resolver = MappingIdentityResolver()

    transients = FileTransientStore(config.transients_dir)
    file_cache = FilesystemCache(config.cache_dir)
    editor = ImageEditor()

    generators = create_generators(config, transients, editor)
    default_icons = DefaultIconsHandler(file_cache, generators)
    gravatars = GravatarCacheHandler(
        file_cache,
        GravatarService(http_client, editor, transients),
        resolver,
        editor,
        rating=config.gravatar_rating,
    )

    proxy = ImageProxy(
        file_cache,
        {GRAVATAR_TYPE: gravatars},
        default_icons,
        default_size=config.default_icon_size,
        max_size=config.max_icon_size,
        cache_lifetime=config.cache_lifetime,
    )
    janitor = CacheJanitor(file_cache, transients, config)

    logger.info(f"Avatar cache at {file_cache.base_dir}")

    return AvatarServices(
        config=config,
        transients=transients,
        file_cache=file_cache,
        editor=editor,
        generators=generators,
        default_icons=default_icons,
        gravatars=gravatars,
        proxy=proxy,
        janitor=janitor,
        http_client=http_client,
    )

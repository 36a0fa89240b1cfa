"""Periodic cache eviction.

An external scheduler (cron, a systemd timer, ``avatarforge-trim``) calls the
two jobs below on a fixed cadence, possibly from several hosts or workers at
once.  Each job first tries to claim a lock in the shared transient store.
The lock lives for the job's cleanup interval, so the filesystem scan runs at
most once per interval however often the job is invoked.  A worker that
loses the race does not wait; it skips the job.

==============  ==========================  ============  ==================
job             lock key                    scope         defaults
==============  ==========================  ============  ==================
gravatars       ``cron_job_lock_gravatars``   gravatar/     2 days / 2 days
all images      ``cron_job_lock_all_images``  whole cache   7 days / 7 days
==============  ==========================  ============  ==================
"""

from __future__ import annotations

import logging

from avatarforge.cache.filesystem import FilesystemCache
from avatarforge.cache.handlers import GRAVATAR_TYPE
from avatarforge.core.config import AvatarForgeConfig
from avatarforge.core.transients import FileTransientStore

logger = logging.getLogger(__name__)

CRON_JOB_LOCK_GRAVATARS = "cron_job_lock_gravatars"
CRON_JOB_LOCK_ALL_IMAGES = "cron_job_lock_all_images"


class CacheJanitor:
    """Runs the eviction jobs under their cross-worker locks.

    Args:
        file_cache: Cache to trim.
        transients: Shared store holding the locks.
        config: Source of the maximum ages and cleanup intervals.
    """

    def __init__(
        self,
        file_cache: FilesystemCache,
        transients: FileTransientStore,
        config: AvatarForgeConfig,
    ) -> None:
        self._file_cache = file_cache
        self._transients = transients
        self._config = config

    def trim_gravatar_cache(self) -> int | None:
        """Delete remote images older than their maximum age.

        Returns:
            Number of deleted files, or ``None`` if the job already ran in the
            current interval.
        """
        return self._invalidate_cached_images(
            CRON_JOB_LOCK_GRAVATARS,
            GRAVATAR_TYPE,
            self._config.gravatars_cleanup_interval,
            self._config.gravatars_max_age,
        )

    def trim_image_cache(self) -> int | None:
        """Delete any cached image older than the maximum age.

        Returns:
            Number of deleted files, or ``None`` if the job already ran in the
            current interval.
        """
        return self._invalidate_cached_images(
            CRON_JOB_LOCK_ALL_IMAGES,
            "",
            self._config.all_images_cleanup_interval,
            self._config.all_images_max_age,
        )

    def _invalidate_cached_images(self, lock: str, subdir: str, interval: int, max_age: int) -> int | None:
        if not self._transients.add(lock, True, interval):
            logger.debug(f"Skipping cache cleanup, '{lock}' is held")
            return None

        return self._file_cache.invalidate_files_older_than(max_age, subdir)

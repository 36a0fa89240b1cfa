"""Exception hierarchy for Avatar Forge.

Catalog and composition errors are contained at the generator boundary, which
turns them into a failed build.  Cache path and generation errors travel up to
the HTTP layer, where they become 404 and 500 responses respectively.
"""


class AvatarForgeError(Exception):
    """Base class for all Avatar Forge errors."""


class PartsNotFoundError(AvatarForgeError):
    """No candidate part files exist for at least one category."""


class CompositionError(AvatarForgeError):
    """A raster composition step failed (invalid layer, fill, copy)."""


class InvalidCachePathError(AvatarForgeError):
    """A requested file path does not follow the cache path grammar."""


class AvatarGenerationError(AvatarForgeError):
    """A missing cache file could not be regenerated.

    The request cannot continue without image bytes, so this error terminates
    it instead of serving partial output.
    """

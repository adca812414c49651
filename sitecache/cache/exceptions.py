"""Site cache exceptions.

Misses and expired entries are never errors - they surface as ``None``
return values and stats counters. These exceptions cover caller mistakes
only.
"""

from __future__ import annotations


class SiteCacheError(Exception):
    """Base class for site cache errors."""


class UnknownCacheProfileError(SiteCacheError, ValueError):
    """Raised when a Cache-Control profile name is not one of the presets."""

    def __init__(self, profile_name: str) -> None:
        self.profile_name = profile_name
        super().__init__(f"Unknown cache profile: {profile_name!r}")


class CacheSerializationError(SiteCacheError, TypeError):
    """Raised when a payload cannot be serialised to JSON for hashing."""

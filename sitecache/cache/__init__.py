"""Site Response Cache.

Public API:
    SiteCacheService         - Facade: get/set/delete/invalidate/stats/warm
    CacheEntry               - Cached payload plus etag and timestamps
    CacheOptions             - ttl_seconds / stale_while_revalidate / tags
    CacheStatus              - X-Cache-Status values
    CacheStats               - Counter snapshot returned by get_stats()

    generate_cache_key       - site:{id}:page:{slug}[:variant:{v}]
    generate_etag            - Content hash of the canonical JSON payload
    site_tag                 - Tag shared by all pages of a site

    CACHE_PROFILES           - STATIC / PAGE / API / DYNAMIC presets
    get_cache_control_header - Render Cache-Control for a preset
    generate_cache_headers   - Header set for a (possibly missing) entry
    is_not_modified          - If-None-Match check for 304 responses
"""

from sitecache.cache.entry import (
    CacheEntry,
    CacheOptions,
    CacheStatus,
    generate_cache_key,
    generate_etag,
    site_tag,
)
from sitecache.cache.exceptions import (
    CacheSerializationError,
    SiteCacheError,
    UnknownCacheProfileError,
)
from sitecache.cache.headers import (
    CACHE_PROFILES,
    CacheProfile,
    generate_cache_headers,
    get_cache_control_header,
    is_not_modified,
)
from sitecache.cache.service import SiteCacheService
from sitecache.cache.stats import CacheStats, StatsTracker
from sitecache.cache.store import CacheStore
from sitecache.cache.tags import TagIndex

__all__ = [
    "SiteCacheService",
    "CacheEntry",
    "CacheOptions",
    "CacheStatus",
    "CacheStats",
    "StatsTracker",
    "CacheStore",
    "TagIndex",
    "generate_cache_key",
    "generate_etag",
    "site_tag",
    "CACHE_PROFILES",
    "CacheProfile",
    "generate_cache_headers",
    "get_cache_control_header",
    "is_not_modified",
    "SiteCacheError",
    "UnknownCacheProfileError",
    "CacheSerializationError",
]

"""Site response cache service.

SiteCacheService is the single entry point the publishing HTTP handlers use.
It owns one CacheStore, one TagIndex and one StatsTracker and keeps them
consistent with each other:

- every store mutation that removes a key (delete, eviction, overwrite,
  invalidation, clear) also updates the tag index in the same critical
  section, so a concurrent reader never sees a tag pointing at a key that
  is gone, or a stored key missing from its tags
- a single RLock guards all three structures. FastAPI runs sync code in a
  thread pool, so mutual exclusion cannot be left to the event loop.

Entry lifecycle:

    absent --set()--> fresh --ttl elapses--> expired
    expired --get(allow_stale=True) within stale window--> stale-served
    any --delete / evict / overwrite / invalidate / clear--> absent

Expiry is evaluated lazily on read; there is no background sweep. Entries
read after expiry + stale window are purged at that point.

One instance per process, built at startup (see sitecache.main) and handed
to handlers by reference. Invalidation only affects the instance it is
called on; multiple server processes each keep an independent cache.
"""

from __future__ import annotations

import asyncio
import threading
import time
from collections.abc import Callable, Iterable, Sequence
from typing import Any, TypeVar

import structlog

from sitecache.cache.entry import (
    CacheEntry,
    CacheOptions,
    CacheStatus,
    generate_cache_key,
    generate_etag,
    site_tag,
)
from sitecache.cache.headers import (
    DEFAULT_VARY,
    CacheProfile,
    generate_cache_headers,
    is_not_modified,
)
from sitecache.cache.stats import CacheStats, StatsTracker
from sitecache.cache.store import CacheStore
from sitecache.cache.tags import TagIndex
from sitecache.config import Settings

log = structlog.get_logger(__name__)

T = TypeVar("T")

DEFAULT_MAX_SIZE = 1000
DEFAULT_TTL_SECONDS = 3600  # 1 hour
DEFAULT_STALE_WINDOW_SECONDS = 86400  # 24 hours
DEFAULT_WARM_CHUNK_SIZE = 100


class SiteCacheService:
    """In-process cache for published site pages."""

    def __init__(
        self,
        *,
        max_size: int = DEFAULT_MAX_SIZE,
        default_ttl_seconds: int = DEFAULT_TTL_SECONDS,
        stale_window_seconds: int = DEFAULT_STALE_WINDOW_SECONDS,
        vary: Sequence[str] = DEFAULT_VARY,
        warm_chunk_size: int = DEFAULT_WARM_CHUNK_SIZE,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._store = CacheStore(max_size)
        self._tags = TagIndex()
        self._stats = StatsTracker()
        self._lock = threading.RLock()
        self._default_ttl = max(default_ttl_seconds, 0)
        self._stale_window = max(stale_window_seconds, 0)
        self._vary = tuple(vary)
        self._warm_chunk_size = max(warm_chunk_size, 1)
        self._clock = clock

    @classmethod
    def from_settings(cls, settings: Settings) -> SiteCacheService:
        return cls(
            max_size=settings.site_cache_max_size,
            default_ttl_seconds=settings.site_cache_default_ttl_seconds,
            stale_window_seconds=settings.site_cache_stale_window_seconds,
            vary=settings.site_cache_vary,
            warm_chunk_size=settings.site_cache_warm_chunk_size,
        )

    @property
    def max_size(self) -> int:
        return self._store.max_size

    @property
    def default_ttl_seconds(self) -> int:
        return self._default_ttl

    @property
    def warm_chunk_size(self) -> int:
        return self._warm_chunk_size

    def now(self) -> float:
        return self._clock()

    # ------------------------------------------------------------------
    # Key helpers
    # ------------------------------------------------------------------

    @staticmethod
    def generate_cache_key(site_id: str, page_slug: str, variant: str | None = None) -> str:
        return generate_cache_key(site_id, page_slug, variant)

    @staticmethod
    def generate_etag(content: Any) -> str:
        return generate_etag(content)

    # ------------------------------------------------------------------
    # Core operations
    # ------------------------------------------------------------------

    def get(self, key: str, *, allow_stale: bool = False) -> CacheEntry[Any] | None:
        """Look up key.

        Strict by default: an expired entry is reported as a miss. With
        allow_stale=True an expired entry still inside the stale window is
        returned and counted as a stale hit; callers detect it through
        entry.is_expired().

        Only fresh hits refresh LRU recency.
        """
        with self._lock:
            now = self._clock()
            entry = self._store.peek(key)

            if entry is None:
                self._stats.record_miss()
                log.debug("site_cache.miss", key=key, reason="not_found")
                return None

            if not entry.is_expired(now):
                self._store.touch(key)
                self._stats.record_hit()
                log.debug("site_cache.hit", key=key)
                return entry

            if now >= entry.expires_at + self._stale_window:
                self._remove(key)
                self._stats.record_miss()
                log.debug("site_cache.miss", key=key, reason="expired_purged")
                return None

            if allow_stale:
                self._stats.record_stale_hit()
                log.debug("site_cache.stale_hit", key=key)
                return entry

            self._stats.record_miss()
            log.debug("site_cache.miss", key=key, reason="expired")
            return None

    def set(
        self,
        key: str,
        data: T,
        version: str,
        options: CacheOptions | None = None,
    ) -> CacheEntry[T]:
        """Store data under key, replacing any existing entry and its tags.

        ttl_seconds <= 0 stores an entry that is already expired. Evicts
        least recently used entries while the store is over max_size.

        Raises:
            CacheSerializationError: data is not JSON-serialisable.
        """
        options = options or CacheOptions()
        ttl = self._default_ttl if options.ttl_seconds is None else max(options.ttl_seconds, 0)
        etag = generate_etag(data)

        with self._lock:
            now = self._clock()
            entry: CacheEntry[T] = CacheEntry(
                data=data,
                created_at=now,
                expires_at=now + ttl,
                etag=etag,
                version=version,
                tags=frozenset(options.tags),
            )
            evicted = self._store.put(key, entry)
            self._tags.add(key, entry.tags)

            for evicted_key, _ in evicted:
                evicted_tags = self._tags.discard_key(evicted_key)
                self._stats.record_eviction()
                log.debug(
                    "site_cache.evicted",
                    key=evicted_key,
                    tags=sorted(evicted_tags),
                    reason="lru_full",
                )

        log.debug("site_cache.set", key=key, version=version, ttl_seconds=ttl)
        return entry

    def delete(self, key: str) -> bool:
        """Remove key and its tag associations. Returns whether it existed."""
        with self._lock:
            return self._remove(key)

    def clear(self) -> None:
        """Drop every entry and tag. Hit/miss counters are kept."""
        with self._lock:
            entries_cleared = len(self._store)
            self._store.clear()
            self._tags.clear()
        log.info("site_cache.cleared", entries_cleared=entries_cleared)

    def _remove(self, key: str) -> bool:
        # caller holds the lock
        removed = self._store.pop(key) is not None
        self._tags.discard_key(key)
        return removed

    # ------------------------------------------------------------------
    # Invalidation
    # ------------------------------------------------------------------

    def invalidate_by_tag(self, tag: str) -> int:
        """Delete every entry stored with tag. Unknown tags return 0."""
        with self._lock:
            count = 0
            for key in self._tags.keys_for(tag):
                if self._remove(key):
                    count += 1
        log.info("site_cache.tag_invalidated", tag=tag, entries_removed=count)
        return count

    def invalidate_site(self, site_id: str) -> int:
        """Delete every cached page of a site (entries tagged site:{site_id})."""
        count = self.invalidate_by_tag(site_tag(site_id))
        log.info("site_cache.site_invalidated", site_id=site_id, entries_removed=count)
        return count

    # ------------------------------------------------------------------
    # HTTP helpers
    # ------------------------------------------------------------------

    def generate_cache_headers(
        self,
        entry: CacheEntry[Any] | None,
        options: CacheOptions | None = None,
        *,
        profile: str | CacheProfile | None = None,
        status: CacheStatus | None = None,
    ) -> dict[str, str]:
        return generate_cache_headers(
            entry,
            options,
            profile=profile,
            vary=self._vary,
            status=status,
            now=self._clock(),
        )

    def is_not_modified(self, entry: CacheEntry[Any] | None, request_etag: str | None = None) -> bool:
        return is_not_modified(entry, request_etag, now=self._clock())

    # ------------------------------------------------------------------
    # Stats
    # ------------------------------------------------------------------

    def get_stats(self) -> CacheStats:
        with self._lock:
            return self._stats.snapshot(size=len(self._store), max_size=self._store.max_size)

    def reset_stats(self) -> None:
        """Zero hit/miss/stale/eviction counters. Stored entries are kept."""
        with self._lock:
            self._stats.reset()

    def keys(self) -> list[str]:
        """Cached keys from least to most recently used (no stats impact)."""
        with self._lock:
            return self._store.keys()

    def tags(self) -> list[str]:
        with self._lock:
            return self._tags.tags()

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._store

    # ------------------------------------------------------------------
    # Warming
    # ------------------------------------------------------------------

    async def warm_cache(
        self,
        site_id: str,
        pages: Iterable[tuple[str, Any]],
        version: str,
        options: CacheOptions | None = None,
        *,
        chunk_size: int | None = None,
    ) -> int:
        """Preload every page of a site.

        Each (slug, content) pair is stored under generate_cache_key(site_id,
        slug) with the site tag added to any tags in options. Control is
        handed back to the event loop after every chunk_size pages, so a
        cancelled caller stops the warm-up at the next chunk boundary.
        chunk_size defaults to the service's warm_chunk_size.

        Returns:
            Number of pages stored.
        """
        options = options or CacheOptions()
        tags = tuple(dict.fromkeys((*options.tags, site_tag(site_id))))
        page_options = CacheOptions(
            ttl_seconds=options.ttl_seconds,
            stale_while_revalidate=options.stale_while_revalidate,
            tags=tags,
        )
        chunk_size = self._warm_chunk_size if chunk_size is None else max(chunk_size, 1)

        stored = 0
        try:
            for slug, content in pages:
                self.set(generate_cache_key(site_id, slug), content, version, page_options)
                stored += 1
                if stored % chunk_size == 0:
                    await asyncio.sleep(0)
        except asyncio.CancelledError:
            log.warning("site_cache.warm_cancelled", site_id=site_id, pages_stored=stored)
            raise

        log.info("site_cache.warmed", site_id=site_id, pages_stored=stored, version=version)
        return stored

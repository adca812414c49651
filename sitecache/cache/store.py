"""Bounded key -> entry storage with LRU eviction.

CacheStore is the raw ordered map underneath SiteCacheService. It knows
nothing about tags, stats or expiry; it only keeps entries in recency order
and evicts from the cold end once the size bound is exceeded.

Recency is tracked explicitly with an OrderedDict: the head is the least
recently used key, the tail the most recently used. Keys that were never
read stay in insertion order, so among equally cold keys the earliest
inserted one is evicted first.

Not thread-safe on its own - SiteCacheService guards it with its lock.
"""

from __future__ import annotations

from collections import OrderedDict
from typing import Any

from sitecache.cache.entry import CacheEntry


class CacheStore:
    """In-memory LRU map of cache key to CacheEntry."""

    def __init__(self, max_size: int) -> None:
        if max_size < 1:
            raise ValueError("max_size must be at least 1")
        self.max_size = max_size
        self._entries: OrderedDict[str, CacheEntry[Any]] = OrderedDict()

    def peek(self, key: str) -> CacheEntry[Any] | None:
        """Return the entry without touching its recency."""
        return self._entries.get(key)

    def touch(self, key: str) -> None:
        """Mark key as most recently used."""
        self._entries.move_to_end(key)

    def put(self, key: str, entry: CacheEntry[Any]) -> list[tuple[str, CacheEntry[Any]]]:
        """Insert or overwrite key as the most recently used entry.

        Returns:
            The (key, entry) pairs evicted to get back under max_size.
        """
        self._entries[key] = entry
        self._entries.move_to_end(key)

        evicted: list[tuple[str, CacheEntry[Any]]] = []
        while len(self._entries) > self.max_size:
            evicted.append(self.evict_lru())
        return evicted

    def evict_lru(self) -> tuple[str, CacheEntry[Any]]:
        """Remove and return the least recently used entry."""
        return self._entries.popitem(last=False)

    def pop(self, key: str) -> CacheEntry[Any] | None:
        return self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()

    def keys(self) -> list[str]:
        """Keys ordered from least to most recently used."""
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

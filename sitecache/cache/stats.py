"""Cache statistics."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any


@dataclass(frozen=True)
class CacheStats:
    """Point-in-time snapshot of cache counters."""

    hits: int
    misses: int
    stale_hits: int
    evictions: int
    size: int
    max_size: int

    @property
    def hit_rate(self) -> float:
        lookups = self.hits + self.misses
        return self.hits / lookups if lookups > 0 else 0.0

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["hit_rate"] = round(self.hit_rate, 4)
        return data


class StatsTracker:
    """Cumulative hit/miss/stale/eviction counters.

    Counters only grow until reset(). Size is not tracked here; it is read
    from the store when a snapshot is taken so it can never drift.
    """

    __slots__ = ("hits", "misses", "stale_hits", "evictions")

    def __init__(self) -> None:
        self.hits = 0
        self.misses = 0
        self.stale_hits = 0
        self.evictions = 0

    def record_hit(self) -> None:
        self.hits += 1

    def record_miss(self) -> None:
        self.misses += 1

    def record_stale_hit(self) -> None:
        self.stale_hits += 1

    def record_eviction(self) -> None:
        self.evictions += 1

    def snapshot(self, size: int, max_size: int) -> CacheStats:
        return CacheStats(
            hits=self.hits,
            misses=self.misses,
            stale_hits=self.stale_hits,
            evictions=self.evictions,
            size=size,
            max_size=max_size,
        )

    def reset(self) -> None:
        self.hits = 0
        self.misses = 0
        self.stale_hits = 0
        self.evictions = 0

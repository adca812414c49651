"""Tests for CacheStore (LRU ordering) and TagIndex."""

from __future__ import annotations

import pytest

from sitecache.cache.entry import CacheEntry
from sitecache.cache.store import CacheStore
from sitecache.cache.tags import TagIndex


def _entry(data: object = None) -> CacheEntry:
    return CacheEntry(data=data, created_at=0.0, expires_at=60.0, etag="e", version="v1")


class TestCacheStore:
    """Recency ordering and eviction."""

    def test_rejects_zero_max_size(self):
        with pytest.raises(ValueError):
            CacheStore(0)

    def test_put_within_capacity_evicts_nothing(self):
        store = CacheStore(2)
        assert store.put("k1", _entry()) == []
        assert store.put("k2", _entry()) == []
        assert len(store) == 2

    def test_put_over_capacity_evicts_earliest_inserted(self):
        store = CacheStore(2)
        store.put("k1", _entry(1))
        store.put("k2", _entry(2))
        evicted = store.put("k3", _entry(3))
        assert [key for key, _ in evicted] == ["k1"]
        assert store.keys() == ["k2", "k3"]

    def test_touch_protects_key_from_eviction(self):
        store = CacheStore(2)
        store.put("k1", _entry())
        store.put("k2", _entry())
        store.touch("k1")
        evicted = store.put("k3", _entry())
        assert [key for key, _ in evicted] == ["k2"]
        assert "k1" in store

    def test_overwrite_does_not_grow_or_evict(self):
        store = CacheStore(2)
        store.put("k1", _entry(1))
        store.put("k2", _entry(2))
        assert store.put("k1", _entry("new")) == []
        assert store.peek("k1").data == "new"
        assert store.keys() == ["k2", "k1"]

    def test_peek_does_not_change_recency(self):
        store = CacheStore(3)
        store.put("k1", _entry())
        store.put("k2", _entry())
        store.peek("k1")
        assert store.keys() == ["k1", "k2"]

    def test_pop_missing_returns_none(self):
        assert CacheStore(1).pop("nope") is None


class TestTagIndex:
    """Bidirectional tag bookkeeping."""

    def test_add_and_lookup(self):
        index = TagIndex()
        index.add("k1", ["site:A", "lang:en"])
        index.add("k2", ["site:A"])
        assert index.keys_for("site:A") == {"k1", "k2"}
        assert index.keys_for("lang:en") == {"k1"}
        assert index.discard_key("k1") == {"site:A", "lang:en"}

    def test_unknown_tag_is_empty(self):
        assert TagIndex().keys_for("missing") == frozenset()

    def test_readd_replaces_previous_tags(self):
        index = TagIndex()
        index.add("k1", ["site:A"])
        index.add("k1", ["site:B"])
        assert index.keys_for("site:A") == frozenset()
        assert "site:A" not in index
        assert index.keys_for("site:B") == {"k1"}

    def test_discard_key_removes_from_every_tag(self):
        index = TagIndex()
        index.add("k1", ["t1", "t2"])
        index.add("k2", ["t2"])
        assert index.discard_key("k1") == {"t1", "t2"}
        assert "t1" not in index
        assert index.keys_for("t2") == {"k2"}

    def test_discard_unknown_key_is_noop(self):
        index = TagIndex()
        assert index.discard_key("ghost") == frozenset()

    def test_add_without_tags_tracks_nothing(self):
        index = TagIndex()
        index.add("k1", [])
        assert len(index) == 0
        assert index.discard_key("k1") == frozenset()

    def test_keys_for_returns_a_copy(self):
        index = TagIndex()
        index.add("k1", ["t"])
        members = index.keys_for("t")
        index.discard_key("k1")
        assert members == {"k1"}

    def test_clear(self):
        index = TagIndex()
        index.add("k1", ["t"])
        index.clear()
        assert index.tags() == []

"""Tag index - reverse lookup from tag to cache keys.

Tags give coarse-grained invalidation: every page of a published site is
stored with the ``site:{site_id}`` tag, so one call drops the whole site.

Both directions are kept (tag -> keys and key -> tags) so that removing a
single key touches only the tag sets it belongs to instead of scanning
every tag. Empty tag sets are dropped immediately; the index therefore
never holds a tag with no members nor a key that is not in the store, as
long as the owner calls discard_key() on every delete and eviction.
"""

from __future__ import annotations

from collections.abc import Iterable


class TagIndex:
    """Bidirectional tag <-> key mapping."""

    def __init__(self) -> None:
        self._keys_by_tag: dict[str, set[str]] = {}
        self._tags_by_key: dict[str, frozenset[str]] = {}

    def add(self, key: str, tags: Iterable[str]) -> None:
        """Associate key with exactly the given tags.

        Any previous associations of key are replaced, so an overwritten
        entry never keeps tags from the entry it replaced.
        """
        self.discard_key(key)
        tag_set = frozenset(tags)
        if not tag_set:
            return
        self._tags_by_key[key] = tag_set
        for tag in tag_set:
            self._keys_by_tag.setdefault(tag, set()).add(key)

    def discard_key(self, key: str) -> frozenset[str]:
        """Remove key from every tag set. Returns the tags it had."""
        tags = self._tags_by_key.pop(key, frozenset())
        for tag in tags:
            members = self._keys_by_tag.get(tag)
            if members is None:
                continue
            members.discard(key)
            if not members:
                del self._keys_by_tag[tag]
        return tags

    def keys_for(self, tag: str) -> frozenset[str]:
        return frozenset(self._keys_by_tag.get(tag, ()))

    def tags(self) -> list[str]:
        return sorted(self._keys_by_tag)

    def clear(self) -> None:
        self._keys_by_tag.clear()
        self._tags_by_key.clear()

    def __contains__(self, tag: object) -> bool:
        return tag in self._keys_by_tag

    def __len__(self) -> int:
        return len(self._keys_by_tag)

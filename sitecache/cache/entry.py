"""Cache entry types and content fingerprinting.

A CacheEntry wraps one cached page payload together with the metadata the
HTTP layer needs for conditional requests: a content hash (etag), the
creation time (Last-Modified) and an absolute expiry.

ETags are the SHA-256 of the canonical JSON form of the payload (sorted
keys, compact separators), so two structurally equal payloads always share
an etag regardless of object identity or dict insertion order. The etag is
stored unquoted; quoting happens when the ETag header is rendered.
"""

from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, Generic, TypeVar

from sitecache.cache.exceptions import CacheSerializationError

T = TypeVar("T")


class CacheStatus(StrEnum):
    """Values of the X-Cache-Status debugging header."""

    HIT = "HIT"
    MISS = "MISS"
    STALE = "STALE"
    BYPASS = "BYPASS"


def _escape_key_part(value: str) -> str:
    # ':' separates key segments, so it (and the escape char) must not leak in
    return value.replace("%", "%25").replace(":", "%3A")


def generate_cache_key(site_id: str, page_slug: str, variant: str | None = None) -> str:
    """Build the composite cache key for a published page.

    Returns:
        ``site:{site_id}:page:{page_slug}`` with ``:variant:{variant}``
        appended when a variant is given. An empty variant still gets
        its own segment, so it never shares a key with "no variant".
    """
    parts = ["site", _escape_key_part(site_id), "page", _escape_key_part(page_slug)]
    if variant is not None:
        parts.extend(["variant", _escape_key_part(variant)])
    return ":".join(parts)


def site_tag(site_id: str) -> str:
    """Tag attached to every cached page of a site."""
    return f"site:{site_id}"


def _reject_non_str_keys(value: Any) -> None:
    # json.dumps would coerce 1 and "1" to the same object key
    if isinstance(value, dict):
        for key, item in value.items():
            if not isinstance(key, str):
                raise CacheSerializationError(
                    f"Cache payload has a non-string object key: {key!r}"
                )
            _reject_non_str_keys(item)
    elif isinstance(value, (list, tuple)):
        for item in value:
            _reject_non_str_keys(item)


def generate_etag(content: Any) -> str:
    """Return the unquoted content hash used as the entry's etag.

    Raises:
        CacheSerializationError: content is not JSON, including dicts with
            non-string keys.
    """
    _reject_non_str_keys(content)
    try:
        canonical = json.dumps(
            content,
            sort_keys=True,
            separators=(",", ":"),
            ensure_ascii=False,
        )
    except (TypeError, ValueError) as exc:
        raise CacheSerializationError(f"Cache payload is not JSON-serialisable: {exc}") from exc
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


@dataclass(frozen=True)
class CacheOptions:
    """Per-call options for SiteCacheService.set() and header generation.

    ttl_seconds=None means "use the service default". stale_while_revalidate
    is only a hint rendered into Cache-Control; nothing refreshes entries in
    the background.
    """

    ttl_seconds: int | None = None
    stale_while_revalidate: int | None = None
    tags: tuple[str, ...] = ()


@dataclass(frozen=True)
class CacheEntry(Generic[T]):
    """A single cached payload plus its validators."""

    data: T
    created_at: float
    expires_at: float
    etag: str
    version: str
    tags: frozenset[str] = field(default_factory=frozenset)

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at

    def remaining_ttl(self, now: float) -> int:
        """Whole seconds until expiry, never negative."""
        return max(int(self.expires_at - now), 0)

    @property
    def quoted_etag(self) -> str:
        return f'"{self.etag}"'

    def to_dict(self) -> dict[str, Any]:
        return {
            "data": self.data,
            "created_at": self.created_at,
            "expires_at": self.expires_at,
            "etag": self.etag,
            "version": self.version,
            "tags": sorted(self.tags),
        }

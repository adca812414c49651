"""HTTP caching header generation.

Turns a (possibly missing) CacheEntry and a caching profile into the header
set browsers and CDNs expect:

- Cache-Control  - max-age from the remaining TTL (or an explicit override),
                   plus stale-while-revalidate / immutable where configured
- ETag           - the entry's content hash, quoted
- Last-Modified  - entry creation time as an IMF-fixdate
- Vary           - request dimensions the response depends on
- X-Cache-Status - HIT / MISS / STALE / BYPASS, for debugging

Named profiles are fixed presets:

  Profile  | max-age   | stale-while-revalidate | notes
  ---------|-----------|------------------------|----------
  STATIC   | 1 year    | -                      | immutable
  PAGE     | 5 min     | 24 h                   |
  API      | 1 min     | 5 min                  |
  DYNAMIC  | -         | -                      | no-store
"""

from __future__ import annotations

import time
from collections.abc import Sequence
from dataclasses import dataclass
from email.utils import formatdate
from typing import Any

from sitecache.cache.entry import CacheEntry, CacheOptions, CacheStatus
from sitecache.cache.exceptions import UnknownCacheProfileError

DEFAULT_VARY: tuple[str, ...] = ("Accept-Encoding", "Accept")

NO_STORE_DIRECTIVE = "no-store, no-cache, must-revalidate"
NO_CACHE_DIRECTIVE = "no-cache"


@dataclass(frozen=True)
class CacheProfile:
    """A named Cache-Control preset."""

    ttl_seconds: int
    stale_while_revalidate: int = 0
    immutable: bool = False
    no_store: bool = False


CACHE_PROFILES: dict[str, CacheProfile] = {
    "STATIC": CacheProfile(ttl_seconds=31_536_000, immutable=True),
    "PAGE": CacheProfile(ttl_seconds=300, stale_while_revalidate=86_400),
    "API": CacheProfile(ttl_seconds=60, stale_while_revalidate=300),
    "DYNAMIC": CacheProfile(ttl_seconds=0, no_store=True),
}


def get_cache_profile(profile_name: str) -> CacheProfile:
    """Look up a preset by name (case-insensitive)."""
    try:
        return CACHE_PROFILES[profile_name.upper()]
    except KeyError:
        raise UnknownCacheProfileError(profile_name) from None


def get_cache_control_header(profile_name: str) -> str:
    """Render the Cache-Control value for a named profile."""
    profile = get_cache_profile(profile_name)
    if profile.no_store:
        return NO_STORE_DIRECTIVE
    return _render_directives(
        max_age=profile.ttl_seconds,
        stale_while_revalidate=profile.stale_while_revalidate,
        immutable=profile.immutable,
    )


def format_http_date(timestamp: float) -> str:
    """Format an epoch timestamp as an HTTP-date (IMF-fixdate, GMT)."""
    return formatdate(timestamp, usegmt=True)


def _render_directives(*, max_age: int, stale_while_revalidate: int, immutable: bool) -> str:
    directives: list[str] = []
    if immutable:
        directives.append("immutable")
    directives.append("public")
    directives.append(f"max-age={max(max_age, 0)}")
    if stale_while_revalidate > 0:
        directives.append(f"stale-while-revalidate={stale_while_revalidate}")
    return ", ".join(directives)


def _resolve_profile(profile: str | CacheProfile | None) -> CacheProfile | None:
    if profile is None or isinstance(profile, CacheProfile):
        return profile
    return get_cache_profile(profile)


def generate_cache_headers(
    entry: CacheEntry[Any] | None,
    options: CacheOptions | None = None,
    *,
    profile: str | CacheProfile | None = None,
    vary: Sequence[str] = DEFAULT_VARY,
    status: CacheStatus | None = None,
    now: float | None = None,
) -> dict[str, str]:
    """Build the HTTP caching headers for a response.

    Args:
        entry: The cached entry being served, or None on a miss.
        options: Per-call overrides. ttl_seconds replaces the max-age derived
            from the entry's remaining TTL; stale_while_revalidate adds the
            matching directive.
        profile: Optional preset supplying defaults for both. A no-store
            profile always yields BYPASS headers.
        vary: Dimensions listed in the Vary header.
        status: Force the X-Cache-Status value (e.g. MISS for an entry that
            was stored while handling this very request).
        now: Evaluation time, defaults to the wall clock.
    """
    now = time.time() if now is None else now
    resolved = _resolve_profile(profile)
    vary_value = ", ".join(vary)

    if resolved is not None and resolved.no_store:
        return {
            "Cache-Control": NO_STORE_DIRECTIVE,
            "Last-Modified": format_http_date(now),
            "Vary": vary_value,
            "X-Cache-Status": str(CacheStatus.BYPASS),
        }

    if entry is None:
        return {
            "Cache-Control": NO_CACHE_DIRECTIVE,
            "Last-Modified": format_http_date(now),
            "Vary": vary_value,
            "X-Cache-Status": str(status or CacheStatus.MISS),
        }

    ttl_override: int | None = None
    if options is not None and options.ttl_seconds is not None:
        ttl_override = options.ttl_seconds
    elif resolved is not None:
        ttl_override = resolved.ttl_seconds

    stale_while_revalidate = 0
    if options is not None and options.stale_while_revalidate is not None:
        stale_while_revalidate = options.stale_while_revalidate
    elif resolved is not None:
        stale_while_revalidate = resolved.stale_while_revalidate

    expired = entry.is_expired(now)
    if expired:
        max_age = 0
        default_status = CacheStatus.STALE
    else:
        max_age = ttl_override if ttl_override is not None else entry.remaining_ttl(now)
        default_status = CacheStatus.HIT

    cache_control = _render_directives(
        max_age=max_age,
        stale_while_revalidate=stale_while_revalidate,
        immutable=bool(resolved and resolved.immutable and not expired),
    )

    return {
        "Cache-Control": cache_control,
        "ETag": entry.quoted_etag,
        "Last-Modified": format_http_date(entry.created_at),
        "Vary": vary_value,
        "X-Cache-Status": str(status or default_status),
    }


def _parse_entity_tags(header_value: str) -> list[str]:
    """Split an If-None-Match value into bare entity tags.

    Weak validator prefixes (W/) and surrounding quotes are stripped; weak
    comparison is what If-None-Match calls for.
    """
    tags: list[str] = []
    for part in header_value.split(","):
        tag = part.strip()
        if tag.startswith("W/"):
            tag = tag[2:]
        tag = tag.strip('"')
        if tag:
            tags.append(tag)
    return tags


def is_not_modified(
    entry: CacheEntry[Any] | None,
    request_etag: str | None = None,
    *,
    now: float | None = None,
) -> bool:
    """Return True when a 304 Not Modified response is appropriate.

    Requires a fresh entry and an If-None-Match value that names the entry's
    etag (or ``*``).
    """
    if entry is None or not request_etag:
        return False
    now = time.time() if now is None else now
    if entry.is_expired(now):
        return False
    candidates = _parse_entity_tags(request_etag)
    if "*" in candidates:
        return True
    return entry.etag.strip('"') in candidates

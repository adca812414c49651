"""Published site serving with response caching.

GET /sites/{site_id}                    - Site index page
GET /sites/{site_id}/pages/{page_slug}  - Any page (optional ?variant=)

Request flow:
1. Build the cache key from (site_id, page_slug, variant)
2. Look the key up, accepting stale entries inside the stale window
3. If-None-Match names the fresh entry's etag -> 304, no body
4. Cached entry (fresh or stale) -> cached body + HIT/STALE headers
5. Miss -> load from the content source, store with the site tag
   and the PAGE profile TTL, return the fresh body with MISS headers

Response headers follow the PAGE profile (5 min max-age, 24 h
stale-while-revalidate). Stale entries are served as-is; nothing refreshes
them in the background. Publishing a new version is expected to call the
site invalidation endpoint.
"""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, Header, HTTPException, Query, status
from fastapi.responses import JSONResponse, Response

from sitecache.api.dependencies import get_content_source, get_site_cache
from sitecache.cache import (
    CACHE_PROFILES,
    CacheOptions,
    CacheStatus,
    SiteCacheService,
    site_tag,
)
from sitecache.content import INDEX_SLUG, PublishedContentSource
from sitecache.telemetry.logging import bind_site_context

log = structlog.get_logger(__name__)

router = APIRouter(prefix="/sites", tags=["publishing"])

_RESPONSE_PROFILE = "PAGE"


async def _serve_page(
    *,
    site_id: str,
    page_slug: str,
    variant: str | None,
    if_none_match: str | None,
    cache: SiteCacheService,
    source: PublishedContentSource,
) -> Response:
    bind_site_context(site_id, page_slug)
    key = cache.generate_cache_key(site_id, page_slug, variant)

    entry = cache.get(key, allow_stale=True)

    if entry is not None and cache.is_not_modified(entry, if_none_match):
        log.debug("publishing.not_modified", key=key)
        headers = cache.generate_cache_headers(entry, profile=_RESPONSE_PROFILE)
        return Response(status_code=status.HTTP_304_NOT_MODIFIED, headers=headers)

    if entry is not None:
        headers = cache.generate_cache_headers(entry, profile=_RESPONSE_PROFILE)
        return JSONResponse(content=entry.data, headers=headers)

    page = await source.get_page(site_id, page_slug)
    if page is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Site not found")

    entry = cache.set(
        key,
        page.to_payload(),
        page.version,
        CacheOptions(
            ttl_seconds=CACHE_PROFILES[_RESPONSE_PROFILE].ttl_seconds,
            tags=(site_tag(site_id),),
        ),
    )
    log.debug("publishing.page_cached", key=key, version=page.version)

    headers = cache.generate_cache_headers(
        entry,
        profile=_RESPONSE_PROFILE,
        status=CacheStatus.MISS,
    )
    return JSONResponse(content=entry.data, headers=headers)


@router.get("/{site_id}", summary="Serve a published site's index page")
async def serve_site_index(
    site_id: str,
    variant: str | None = Query(default=None, max_length=64),
    if_none_match: str | None = Header(default=None),
    cache: SiteCacheService = Depends(get_site_cache),
    source: PublishedContentSource = Depends(get_content_source),
) -> Response:
    return await _serve_page(
        site_id=site_id,
        page_slug=INDEX_SLUG,
        variant=variant,
        if_none_match=if_none_match,
        cache=cache,
        source=source,
    )


@router.get("/{site_id}/pages/{page_slug}", summary="Serve a published page")
async def serve_site_page(
    site_id: str,
    page_slug: str,
    variant: str | None = Query(default=None, max_length=64),
    if_none_match: str | None = Header(default=None),
    cache: SiteCacheService = Depends(get_site_cache),
    source: PublishedContentSource = Depends(get_content_source),
) -> Response:
    return await _serve_page(
        site_id=site_id,
        page_slug=page_slug,
        variant=variant,
        if_none_match=if_none_match,
        cache=cache,
        source=source,
    )

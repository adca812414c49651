"""Cache management API endpoints.

GET    /api/v1/admin/cache/stats                - Cache statistics (admin only)
POST   /api/v1/sites/{site_id}/cache/invalidate - Drop one site's pages (admin only)
DELETE /api/v1/admin/cache                      - Clear the whole cache (admin only)
GET    /api/v1/admin/cache/profiles             - Cache-Control value per profile

The cache instance is retrieved via dependency injection so it can be
replaced in tests. Invalidation and clear only affect the process that
handles the request.
"""

from __future__ import annotations

from typing import Any

import structlog
from fastapi import APIRouter, Depends
from pydantic import BaseModel

from sitecache.api.dependencies import get_site_cache, require_admin
from sitecache.cache import CACHE_PROFILES, SiteCacheService, get_cache_control_header

log = structlog.get_logger(__name__)

router = APIRouter(tags=["cache"])


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class CacheStatsResponse(BaseModel):
    hits: int
    misses: int
    stale_hits: int
    evictions: int
    size: int
    max_size: int
    hit_rate: float


class InvalidateResponse(BaseModel):
    site_id: str
    invalidated: int
    message: str


class ClearResponse(BaseModel):
    message: str


class ProfilesResponse(BaseModel):
    profiles: dict[str, str]


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@router.get(
    "/admin/cache/stats",
    response_model=CacheStatsResponse,
    summary="Cache statistics (admin only)",
)
def get_cache_stats(
    _claims: dict[str, Any] = Depends(require_admin),
    cache: SiteCacheService = Depends(get_site_cache),
) -> CacheStatsResponse:
    """Return hit/miss/stale/eviction counters and current size."""
    stats = cache.get_stats()
    return CacheStatsResponse(**stats.to_dict())


@router.post(
    "/sites/{site_id}/cache/invalidate",
    response_model=InvalidateResponse,
    summary="Invalidate one site's cached pages (admin only)",
)
def invalidate_site_cache(
    site_id: str,
    claims: dict[str, Any] = Depends(require_admin),
    cache: SiteCacheService = Depends(get_site_cache),
) -> InvalidateResponse:
    """Remove every cached page of the site, e.g. after it is republished."""
    invalidated = cache.invalidate_site(site_id)

    log.info(
        "cache.api.site_invalidated",
        site_id=site_id,
        entries_removed=invalidated,
        admin_user=str(claims.get("sub", "")),
    )

    return InvalidateResponse(
        site_id=site_id,
        invalidated=invalidated,
        message=f"Invalidated {invalidated} cache entries for site {site_id}",
    )


@router.delete(
    "/admin/cache",
    response_model=ClearResponse,
    summary="Clear all cache (admin only)",
)
def clear_all_cache(
    claims: dict[str, Any] = Depends(require_admin),
    cache: SiteCacheService = Depends(get_site_cache),
) -> ClearResponse:
    """Remove ALL cached pages for every site. Counters are kept."""
    cache.clear()

    log.warning("cache.api.cleared_all", admin_user=str(claims.get("sub", "")))

    return ClearResponse(message="Cache cleared successfully")


@router.get(
    "/admin/cache/profiles",
    response_model=ProfilesResponse,
    summary="Cache-Control directives for each cache profile",
)
def get_cache_profiles() -> ProfilesResponse:
    return ProfilesResponse(
        profiles={name.lower(): get_cache_control_header(name) for name in CACHE_PROFILES},
    )

"""FastAPI dependencies shared by the site cache routers.

The cache and content source are created once in the application lifespan
and read from app.state here, so tests can swap either one through
app.dependency_overrides.

Authentication is not performed here. An upstream auth middleware is
expected to validate the caller and store its claims in
request.state.auth_claims; require_admin only checks the role claim.
"""

from __future__ import annotations

from typing import Any

import structlog
from fastapi import HTTPException, Request, status

from sitecache.cache.service import SiteCacheService
from sitecache.content import PublishedContentSource

log = structlog.get_logger(__name__)

ADMIN_ROLE = "admin"


def get_site_cache(request: Request) -> SiteCacheService:
    """Return the process-wide SiteCacheService built at startup."""
    return request.app.state.site_cache


def get_content_source(request: Request) -> PublishedContentSource:
    return request.app.state.content_source


def require_admin(request: Request) -> dict[str, Any]:
    """Allow only callers whose validated claims carry the admin role.

    Raises:
        HTTPException 401: no claims on the request (not authenticated)
        HTTPException 403: authenticated but not an admin
    """
    claims = getattr(request.state, "auth_claims", None)
    if not claims or not isinstance(claims, dict):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
        )

    role = claims.get("role")
    if role != ADMIN_ROLE:
        log.warning(
            "policy.permission_denied",
            role=role,
            permission="site_cache.admin",
            required_role=ADMIN_ROLE,
            path=request.url.path,
        )
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Permission denied: cache management requires role '{ADMIN_ROLE}'",
        )
    return claims

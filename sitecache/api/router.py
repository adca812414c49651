"""Main API router - aggregates all sub-routers.

Management routes are versioned under /api/v1. Published pages and health
checks are served from the root.
"""

from __future__ import annotations

from fastapi import APIRouter

from sitecache.api import cache, health, publishing

# Public router (no auth required)
public_router = APIRouter()
public_router.include_router(health.router)
public_router.include_router(publishing.router)

# Versioned API router
api_v1_router = APIRouter(prefix="/api/v1")
api_v1_router.include_router(cache.router)

"""FastAPI application entrypoint.

Application startup order:
1. Load settings (from environment)
2. Configure structured logging
3. Build the process-wide SiteCacheService and the content source
4. Register middleware (CORS, request ID)
5. Include all routers

The cache lives on app.state for the lifetime of the process and is never
rebuilt mid-process; shutdown simply drops it.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from sitecache import __version__
from sitecache.api.router import api_v1_router, public_router
from sitecache.cache import SiteCacheService
from sitecache.config import Settings, get_settings
from sitecache.content import InMemoryContentSource, PublishedContentSource
from sitecache.telemetry.logging import RequestIdMiddleware, configure_logging

log = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan: startup and shutdown."""
    settings: Settings = app.state.settings

    # Configure structured logging first (before any log calls)
    configure_logging(
        json_logs=settings.use_json_logs,
        log_level="DEBUG" if settings.debug else settings.log_level,
    )

    log.info("app.starting", environment=settings.environment)

    app.state.site_cache = SiteCacheService.from_settings(settings)
    log.info(
        "app.site_cache_initialized",
        max_size=settings.site_cache_max_size,
        default_ttl_seconds=settings.site_cache_default_ttl_seconds,
        stale_window_seconds=settings.site_cache_stale_window_seconds,
    )

    log.info("app.ready")
    yield

    stats = app.state.site_cache.get_stats()
    log.info("app.shutdown", **stats.to_dict())


def create_app(
    settings: Settings | None = None,
    content_source: PublishedContentSource | None = None,
) -> FastAPI:
    """Application factory.

    Args:
        settings: Overrides get_settings(), mainly for tests.
        content_source: Publishing data layer adapter. Defaults to an empty
            in-memory source so the service starts without a database.
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="Site Response Cache",
        description="Cached serving and cache management for published micro-sites.",
        version=__version__,
        docs_url="/docs" if settings.is_dev else None,
        redoc_url="/redoc" if settings.is_dev else None,
        openapi_url="/openapi.json" if settings.is_dev else None,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.content_source = content_source or InMemoryContentSource()

    # ------------------------------------------------------------------ #
    # Middleware (added in reverse order - last added = first executed)
    # ------------------------------------------------------------------ #

    cors_origins = ["*"] if settings.is_dev else settings.cors_allowed_origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=settings.is_prod,
        allow_methods=["GET", "POST", "DELETE"],
        allow_headers=["Authorization", "Content-Type", "If-None-Match"],
        expose_headers=["ETag", "X-Cache-Status", "X-Request-Id"],
    )

    # Unique request ID for log correlation
    app.add_middleware(RequestIdMiddleware)

    # ------------------------------------------------------------------ #
    # Routers
    # ------------------------------------------------------------------ #
    app.include_router(public_router)
    app.include_router(api_v1_router)

    # ------------------------------------------------------------------ #
    # Global exception handlers
    # ------------------------------------------------------------------ #

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        log.error(
            "app.unhandled_exception",
            path=request.url.path,
            method=request.method,
            error=str(exc),
            exc_info=True,
        )
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error"},
        )

    return app


# Module-level app instance for uvicorn
app = create_app()

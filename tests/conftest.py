"""
Shared test fixtures for pytest.

Provides common test doubles for all test modules:
- fake_settings: Test environment configuration
- fake_clock: Manually advanced clock injected into SiteCacheService
- cache: SiteCacheService wired to fake_clock
- content_source: InMemoryContentSource with one published site
- test_app: FastAPI app whose cache dependency resolves to `cache`
- client: TestClient (lifespan running) for test_app
- admin_headers, viewer_headers: headers the fake auth middleware turns
  into request.state.auth_claims
"""

from collections.abc import Iterator

import pytest
from fastapi import FastAPI, Request
from fastapi.testclient import TestClient

from sitecache.api.dependencies import get_site_cache
from sitecache.cache import SiteCacheService
from sitecache.config import Environment, Settings, get_settings
from sitecache.content import InMemoryContentSource, PublishedPage

SITE_ID = "site-123"
START_TIME = 1_700_000_000.0


# ------------------------------------------------------------------ #
# Session-scoped: clear settings cache between test sessions
# ------------------------------------------------------------------ #

@pytest.fixture(autouse=True, scope="session")
def _clear_settings_cache():
    """Clear the lru_cache on get_settings so test overrides take effect."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


# ------------------------------------------------------------------ #
# Clock & cache
# ------------------------------------------------------------------ #

class FakeClock:
    """Callable returning a controllable epoch timestamp."""

    def __init__(self, start: float = START_TIME) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def fake_settings() -> Settings:
    """Test environment settings with safe defaults."""
    return Settings(
        environment=Environment.TEST,
        debug=True,
        site_cache_max_size=100,
        site_cache_default_ttl_seconds=3600,
        site_cache_stale_window_seconds=600,
    )


@pytest.fixture
def cache(fake_clock: FakeClock) -> SiteCacheService:
    return SiteCacheService(
        max_size=100,
        default_ttl_seconds=3600,
        stale_window_seconds=600,
        clock=fake_clock,
    )


@pytest.fixture
def content_source() -> InMemoryContentSource:
    return InMemoryContentSource(
        [
            PublishedPage(
                site_id=SITE_ID,
                slug="index",
                content={"blocks": [{"type": "hero", "title": "Welcome"}]},
                version="v3",
                analytics_enabled=True,
            ),
            PublishedPage(
                site_id=SITE_ID,
                slug="about",
                content={"blocks": [{"type": "text", "body": "About us"}]},
                version="v3",
            ),
        ]
    )


# ------------------------------------------------------------------ #
# App Fixtures
# ------------------------------------------------------------------ #

@pytest.fixture
def test_app(
    fake_settings: Settings,
    cache: SiteCacheService,
    content_source: InMemoryContentSource,
) -> FastAPI:
    """FastAPI app with test settings, the fake-clock cache and a fake auth layer.

    The auth middleware stands in for the real upstream one: it turns the
    X-Test-Role / X-Test-Sub headers into request.state.auth_claims.
    """
    from sitecache.main import create_app

    app = create_app(settings=fake_settings, content_source=content_source)

    @app.middleware("http")
    async def fake_auth(request: Request, call_next):
        role = request.headers.get("x-test-role")
        if role:
            request.state.auth_claims = {
                "sub": request.headers.get("x-test-sub", "user-1"),
                "role": role,
            }
        return await call_next(request)

    app.dependency_overrides[get_site_cache] = lambda: cache
    return app


@pytest.fixture
def client(test_app: FastAPI) -> Iterator[TestClient]:
    with TestClient(test_app) as test_client:
        yield test_client


@pytest.fixture
def admin_headers() -> dict[str, str]:
    return {"X-Test-Role": "admin", "X-Test-Sub": "admin-1"}


@pytest.fixture
def viewer_headers() -> dict[str, str]:
    return {"X-Test-Role": "viewer", "X-Test-Sub": "viewer-1"}

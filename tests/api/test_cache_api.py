"""Tests for the cache management endpoints (admin-only enforcement)."""

from __future__ import annotations

import pytest

from sitecache.cache import CacheOptions

SITE_ID = "site-123"


class TestCacheStats:
    def test_stats_requires_authentication(self, client):
        resp = client.get("/api/v1/admin/cache/stats")
        assert resp.status_code == 401

    def test_stats_requires_admin_role(self, client, viewer_headers):
        resp = client.get("/api/v1/admin/cache/stats", headers=viewer_headers)
        assert resp.status_code == 403

    def test_stats_returns_counters_for_admin(self, client, cache, admin_headers):
        cache.set("k", 1, "v1")
        cache.get("k")
        cache.get("missing")

        resp = client.get("/api/v1/admin/cache/stats", headers=admin_headers)

        assert resp.status_code == 200
        data = resp.json()
        assert data["hits"] == 1
        assert data["misses"] == 1
        assert data["stale_hits"] == 0
        assert data["evictions"] == 0
        assert data["size"] == 1
        assert data["max_size"] == 100
        assert data["hit_rate"] == pytest.approx(0.5)


class TestInvalidateSite:
    def test_invalidate_without_claims_is_unauthenticated(self, client):
        resp = client.post(f"/api/v1/sites/{SITE_ID}/cache/invalidate")
        assert resp.status_code == 401

    def test_role_match_is_exact(self, client):
        """Any role other than the literal admin role is forbidden."""
        resp = client.post(
            f"/api/v1/sites/{SITE_ID}/cache/invalidate",
            headers={"X-Test-Role": "Admin"},
        )
        assert resp.status_code == 403

    def test_invalidate_requires_admin(self, client, viewer_headers):
        resp = client.post(f"/api/v1/sites/{SITE_ID}/cache/invalidate", headers=viewer_headers)
        assert resp.status_code == 403

    def test_invalidate_removes_site_pages(self, client, cache, admin_headers):
        client.get(f"/sites/{SITE_ID}/pages/about")
        client.get(f"/sites/{SITE_ID}")
        cache.set("other", 1, "v1", CacheOptions(tags=("site:other",)))

        resp = client.post(f"/api/v1/sites/{SITE_ID}/cache/invalidate", headers=admin_headers)

        assert resp.status_code == 200
        data = resp.json()
        assert data["site_id"] == SITE_ID
        assert data["invalidated"] == 2
        assert len(cache) == 1

    def test_invalidate_unknown_site_returns_zero(self, client, admin_headers):
        resp = client.post("/api/v1/sites/nobody/cache/invalidate", headers=admin_headers)
        assert resp.status_code == 200
        assert resp.json()["invalidated"] == 0


class TestClearCache:
    def test_clear_requires_admin(self, client, viewer_headers):
        resp = client.delete("/api/v1/admin/cache", headers=viewer_headers)
        assert resp.status_code == 403

    def test_clear_empties_cache_but_keeps_stats(self, client, cache, admin_headers):
        client.get(f"/sites/{SITE_ID}/pages/about")
        client.get(f"/sites/{SITE_ID}/pages/about")

        resp = client.delete("/api/v1/admin/cache", headers=admin_headers)

        assert resp.status_code == 200
        assert resp.json()["message"] == "Cache cleared successfully"
        assert len(cache) == 0
        assert cache.get_stats().hits == 1


class TestProfiles:
    def test_profiles_are_public(self, client):
        resp = client.get("/api/v1/admin/cache/profiles")
        assert resp.status_code == 200
        profiles = resp.json()["profiles"]
        assert profiles == {
            "static": "immutable, public, max-age=31536000",
            "page": "public, max-age=300, stale-while-revalidate=86400",
            "api": "public, max-age=60, stale-while-revalidate=300",
            "dynamic": "no-store, no-cache, must-revalidate",
        }

"""
Tests for the authorization gate.

Every request passes through one middleware; these pin down who gets in.
"""

from datetime import timedelta

import pytest

from orchlink.auth.policies import Access, PathPolicy
from orchlink.auth.roles import Role
from orchlink.core.utils import utc_now


def assert_cookie_cleared(response):
    header = response.headers.get("set-cookie", "")
    assert "auth-token=" in header
    assert "Max-Age=0" in header


# =============================================================================
# Path classification
# =============================================================================


class TestPathPolicy:
    @pytest.mark.parametrize("method,path", [
        ("GET", "/login"),
        ("POST", "/api/auth/login"),
        ("GET", "/api/auth/verify"),
        ("GET", "/health"),
        ("GET", "/static/app.css"),
        ("GET", "/favicon.ico"),
    ])
    def test_public(self, method, path):
        assert PathPolicy().classify(method, path) is Access.PUBLIC

    @pytest.mark.parametrize("method,path", [
        ("GET", "/admin"),
        ("GET", "/admin/concerts"),
        ("POST", "/api/concerts"),
        ("PUT", "/api/scores"),
        ("DELETE", "/api/attendance"),
        ("PATCH", "/api/practices"),
        ("PUT", "/api/contact"),
    ])
    def test_admin(self, method, path):
        assert PathPolicy().classify(method, path) is Access.ADMIN

    @pytest.mark.parametrize("method,path", [
        ("GET", "/api/concerts"),
        ("GET", "/api/scores"),
        ("GET", "/api/contact"),
        ("POST", "/api/auth/logout"),
        ("GET", "/"),
        ("GET", "/administrator"),
    ])
    def test_session(self, method, path):
        assert PathPolicy().classify(method, path) is Access.SESSION

    def test_is_api(self):
        policy = PathPolicy()
        assert policy.is_api("/api/concerts")
        assert not policy.is_api("/admin")
        assert not policy.is_api("/apiary")


# =============================================================================
# Enforcement
# =============================================================================


class TestGate:
    def test_public_path_needs_no_session(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_api_without_token_is_401(self, client):
        response = client.get("/api/concerts")

        assert response.status_code == 401
        assert response.json() == {"error": "Authentication required"}
        # Nothing to scrub when no token was sent.
        assert "set-cookie" not in response.headers

    def test_page_without_token_redirects_to_login(self, client):
        response = client.get("/admin", follow_redirects=False)

        assert response.status_code == 303
        assert response.headers["location"] == "/login"

    def test_invalid_token_is_401_and_cleared(self, client):
        client.cookies.set("auth-token", "garbage")
        response = client.get("/api/concerts")

        assert response.status_code == 401
        assert_cookie_cleared(response)

    def test_expired_token_is_401_and_cleared(self, client, tokens):
        stale = tokens.issue("admin-user", Role.ADMIN, now=utc_now() - timedelta(hours=25))
        client.cookies.set("auth-token", stale)
        response = client.post("/api/concerts", json={})

        assert response.status_code == 401
        assert_cookie_cleared(response)

    def test_invalid_token_on_page_redirects_and_clears(self, client):
        client.cookies.set("auth-token", "garbage")
        response = client.get("/admin", follow_redirects=False)

        assert response.status_code == 303
        assert_cookie_cleared(response)

    def test_viewer_can_read(self, viewer_client):
        response = viewer_client.get("/api/concerts")

        assert response.status_code == 200
        assert response.json() == {"success": True, "data": []}

    def test_viewer_cannot_write(self, viewer_client, repository):
        response = viewer_client.post("/api/concerts", json={
            "title": "Spring Concert",
            "date": "2026-04-01T18:00:00Z",
            "venue": "City Hall",
        })

        assert response.status_code == 403
        assert response.json() == {"error": "Administrator privileges required"}
        # 403 keeps the session
        assert "set-cookie" not in response.headers
        assert repository._concerts == {}

    def test_viewer_cannot_open_admin_pages(self, viewer_client):
        response = viewer_client.get("/admin", follow_redirects=False)

        assert response.status_code == 403

    def test_admin_can_write(self, admin_client):
        response = admin_client.post("/api/concerts", json={
            "title": "Spring Concert",
            "date": "2026-04-01T18:00:00Z",
            "venue": "City Hall",
        })

        assert response.status_code == 200

"""
Shared fixtures.

The app runs against the in-memory repository; each client fixture is a
separate browser with its own cookie jar.
"""

import pytest
from fastapi.testclient import TestClient

from orchlink.api.app import create_app
from orchlink.auth.jwt import TokenService
from orchlink.config import Settings
from orchlink.services.orchestra import OrchestraService
from orchlink.storage.local import InMemoryRepository

ADMIN_PASSWORD = "admin-pass"
VIEWER_PASSWORD = "viewer-pass"


# =============================================================================
# Configuration
# =============================================================================


@pytest.fixture
def settings():
    """Settings isolated from the developer's environment."""
    return Settings(
        environment="test",
        jwt_secret_key="test-secret-key-that-is-long-enough",
        admin_password=ADMIN_PASSWORD,
        viewer_password=VIEWER_PASSWORD,
        sentry_dsn="",
        cors_origins="http://localhost:3000",
    )


@pytest.fixture
def tokens(settings):
    return TokenService.from_settings(settings)


# =============================================================================
# Service layer
# =============================================================================


@pytest.fixture
def repository():
    return InMemoryRepository()


@pytest.fixture
def service(repository):
    return OrchestraService(repository)


# =============================================================================
# HTTP
# =============================================================================


@pytest.fixture
def app(settings, repository):
    return create_app(settings=settings, repository=repository)


@pytest.fixture
def client(app):
    """Anonymous client."""
    with TestClient(app) as c:
        yield c


def login(c: TestClient, role: str, password: str) -> TestClient:
    response = c.post("/api/auth/login", json={"role": role, "password": password})
    assert response.status_code == 200, response.text
    return c


@pytest.fixture
def admin_client(app):
    with TestClient(app) as c:
        yield login(c, "admin", ADMIN_PASSWORD)


@pytest.fixture
def viewer_client(app):
    with TestClient(app) as c:
        yield login(c, "viewer", VIEWER_PASSWORD)

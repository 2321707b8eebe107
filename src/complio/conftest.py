"""Pytest configuration and shared fixtures."""

import os

# Limits are exercised in their own tests, not across the whole suite
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("POSTHOG_API_KEY", "")

from uuid import UUID  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from src.complio.main import app  # noqa: E402
from src.complio.services.auth.dependencies import get_current_user  # noqa: E402
from src.complio.services.auth.models import AuthUser  # noqa: E402

TEST_USER = AuthUser(
    id=UUID("123e4567-e89b-12d3-a456-426614174000"),
    email="owner@example.com",
    user_metadata={"full_name": "Test Owner", "phone": "+15555550100"},
)


@pytest.fixture
def client() -> TestClient:
    """
    Provide FastAPI test client for API testing.

    Redirects are not followed so tests can assert on Location headers.

    Example:
        >>> def test_health(client):
        >>>     response = client.get("/health")
        >>>     assert response.status_code == 200
    """
    return TestClient(app, follow_redirects=False)


@pytest.fixture
def test_user() -> AuthUser:
    """Authenticated user injected by client_with_auth."""
    return TEST_USER


@pytest.fixture
def client_with_auth(client: TestClient, test_user: AuthUser):
    """Test client whose requests are authenticated as test_user."""
    app.dependency_overrides[get_current_user] = lambda: test_user
    yield client
    app.dependency_overrides = {}

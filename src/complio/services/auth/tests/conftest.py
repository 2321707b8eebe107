"""Shared fixtures for authentication tests."""

import time
from typing import Any
from uuid import UUID

import pytest
from jose import jwt

from src.complio.services.auth.jwt_validator import JWTValidator

JWT_SECRET = "unit-test-secret"
ISSUER = "https://test.supabase.co/auth/v1"


@pytest.fixture
def validator() -> JWTValidator:
    """Validator configured like the app, with the test secret."""
    return JWTValidator(secret=JWT_SECRET, issuer=ISSUER, audience="authenticated", leeway=10)


@pytest.fixture
def mock_user_id() -> UUID:
    """Provide a consistent test user ID."""
    return UUID("123e4567-e89b-12d3-a456-426614174000")


@pytest.fixture
def jwt_claims(mock_user_id: UUID) -> dict[str, Any]:
    """Claims of a valid Supabase access token."""
    now = int(time.time())
    return {
        "sub": str(mock_user_id),
        "email": "test@example.com",
        "role": "authenticated",
        "aud": "authenticated",
        "iss": ISSUER,
        "iat": now,
        "exp": now + 3600,
        "user_metadata": {"full_name": "Test User"},
    }


@pytest.fixture
def make_token():
    """Sign arbitrary claims with the test secret."""

    def _make(claims: dict[str, Any], secret: str = JWT_SECRET) -> str:
        return jwt.encode(claims, secret, algorithm="HS256")

    return _make

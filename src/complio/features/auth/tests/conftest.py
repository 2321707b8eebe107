"""Shared fixtures for session confirmation tests."""

from unittest.mock import MagicMock, Mock
from uuid import UUID

import pytest

from src.complio.services.auth.backend import SupabaseAuthBackend
from src.complio.services.auth.models import AuthUser, SessionTokens

USER_ID = UUID("9b2f4c1e-2d3a-4e5f-8a6b-7c8d9e0f1a2b")


@pytest.fixture
def session_tokens() -> SessionTokens:
    return SessionTokens(access_token="access-token", refresh_token="refresh-token", expires_in=3600)


@pytest.fixture
def signed_in_user() -> AuthUser:
    return AuthUser(id=USER_ID, email="owner@example.com")


@pytest.fixture
def mock_auth(session_tokens: SessionTokens, signed_in_user: AuthUser) -> Mock:
    """Auth backend that accepts every credential and resolves signed_in_user."""
    auth = Mock(spec=SupabaseAuthBackend)
    auth.exchange_code_for_session.return_value = session_tokens
    auth.verify_otp.return_value = session_tokens
    auth.get_user.return_value = signed_in_user
    return auth


@pytest.fixture
def mock_db() -> MagicMock:
    """Query builder whose onboarding row says completed=True."""
    db = MagicMock()
    db.get_by_field.return_value = {"user_id": str(USER_ID), "completed": True, "current_step": 5}
    return db

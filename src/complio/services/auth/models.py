"""Data models for authentication."""

from typing import Any
from uuid import UUID

from pydantic import BaseModel


class AuthUser(BaseModel):
    """
    Authenticated user resolved from a Supabase session or access token.

    Attributes:
        id: User UUID ('sub' claim / auth user id)
        email: User email, absent for phone-only accounts
        user_metadata: Additional metadata (full_name, phone, avatar_url, etc.)

    Example:
        >>> user = AuthUser(
        ...     id=UUID("123e4567-e89b-12d3-a456-426614174000"),
        ...     email="user@example.com",
        ...     user_metadata={"full_name": "Jane Doe"}
        ... )
    """

    id: UUID
    email: str | None = None
    user_metadata: dict[str, Any] = {}


class SessionTokens(BaseModel):
    """Tokens of a session established by the backend."""

    access_token: str
    refresh_token: str
    expires_in: int | None = None

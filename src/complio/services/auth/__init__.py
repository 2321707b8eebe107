"""Authentication services: Supabase session backend and access-token verification."""

from src.complio.services.auth.backend import SupabaseAuthBackend
from src.complio.services.auth.dependencies import (
    get_current_user,
    get_jwt_validator,
    get_optional_user,
    set_jwt_validator,
)
from src.complio.services.auth.exceptions import AuthenticationError, SessionExchangeError
from src.complio.services.auth.jwt_validator import JWTValidator
from src.complio.services.auth.models import AuthUser, SessionTokens

__all__ = [
    "SupabaseAuthBackend",
    "get_current_user",
    "get_jwt_validator",
    "get_optional_user",
    "set_jwt_validator",
    "AuthenticationError",
    "SessionExchangeError",
    "JWTValidator",
    "AuthUser",
    "SessionTokens",
]

"""Supabase Auth backend wrapper used to establish and inspect sessions."""

import logging
from typing import Any

from supabase import Client

from src.complio.services.auth.exceptions import SessionExchangeError
from src.complio.services.auth.models import AuthUser, SessionTokens

logger = logging.getLogger(__name__)


def _backend_message(error: Exception) -> str:
    return getattr(error, "message", None) or str(error) or error.__class__.__name__


def _to_tokens(session: Any) -> SessionTokens:
    return SessionTokens(
        access_token=session.access_token,
        refresh_token=session.refresh_token,
        expires_in=getattr(session, "expires_in", None),
    )


class SupabaseAuthBackend:
    """
    Per-request wrapper around a Supabase client's auth API.

    A session established by exchange_code_for_session() or verify_otp() is
    kept in the wrapped client's storage, so get_user() afterwards resolves the
    user of that session. Construct one instance per request.

    Attributes:
        client: Supabase client owned by this request
        code_verifier: PKCE code verifier from the browser, if the flow used PKCE
    """

    def __init__(self, client: Client, code_verifier: str | None = None) -> None:
        self.client = client
        self.code_verifier = code_verifier

    def exchange_code_for_session(self, code: str) -> SessionTokens:
        """
        Exchange an OAuth/PKCE authorization code for a session.

        Raises:
            SessionExchangeError: If the backend rejects the code
        """
        params: dict[str, Any] = {"auth_code": code}
        if self.code_verifier:
            params["code_verifier"] = self.code_verifier

        try:
            response = self.client.auth.exchange_code_for_session(params)
        except Exception as e:
            raise SessionExchangeError(_backend_message(e)) from e

        if response is None or response.session is None:
            raise SessionExchangeError("No session returned for authorization code")
        return _to_tokens(response.session)

    def verify_otp(self, otp_type: str, token_hash: str) -> SessionTokens:
        """
        Verify an email one-time-code token hash and establish a session.

        Raises:
            SessionExchangeError: If the backend rejects the token
        """
        try:
            response = self.client.auth.verify_otp({"type": otp_type, "token_hash": token_hash})
        except Exception as e:
            raise SessionExchangeError(_backend_message(e)) from e

        if response is None or response.session is None:
            raise SessionExchangeError("No session returned for one-time token")
        return _to_tokens(response.session)

    def get_user(self) -> AuthUser | None:
        """
        Fetch the user of the session held by this client.

        Returns:
            AuthUser, or None when the backend knows no user for the session

        Raises:
            SessionExchangeError: If the lookup itself fails
        """
        try:
            response = self.client.auth.get_user()
        except Exception as e:
            raise SessionExchangeError(_backend_message(e)) from e

        user = getattr(response, "user", None)
        if user is None:
            return None
        return AuthUser(
            id=user.id,
            email=user.email or None,
            user_metadata=user.user_metadata or {},
        )

    def sign_out(self, access_token: str) -> None:
        """
        Revoke the session behind an access token.

        Raises:
            SessionExchangeError: If the backend rejects the sign-out
        """
        try:
            self.client.auth.admin.sign_out(access_token)
        except Exception as e:
            raise SessionExchangeError(_backend_message(e)) from e

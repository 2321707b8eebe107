"""Pydantic models for the session-confirmation flow."""

from enum import Enum
from urllib.parse import urlsplit
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from src.complio.config import settings
from src.complio.services.auth.models import SessionTokens

NO_CREDENTIAL_MESSAGE = "No token hash or type"


class EmailOtpType(str, Enum):
    """Purposes a Supabase email one-time token can be issued for."""

    SIGNUP = "signup"
    INVITE = "invite"
    MAGICLINK = "magiclink"
    RECOVERY = "recovery"
    EMAIL_CHANGE = "email_change"
    EMAIL = "email"


class AuthorizationCode(BaseModel):
    """OAuth/PKCE authorization code returned to the callback."""

    model_config = ConfigDict(frozen=True)

    code: str


class OneTimeToken(BaseModel):
    """Email one-time token hash together with its purpose."""

    model_config = ConfigDict(frozen=True)

    token_hash: str
    otp_type: EmailOtpType


class InvalidCredential(BaseModel):
    """Neither credential form could be built from the request."""

    model_config = ConfigDict(frozen=True)

    message: str = NO_CREDENTIAL_MESSAGE


Credential = AuthorizationCode | OneTimeToken | InvalidCredential


class ConfirmationRequest(BaseModel):
    """
    Inbound parameters of GET /auth/confirm.

    Attributes:
        token_hash: Email one-time token hash
        type: One-time token purpose (raw query value, validated in credential())
        code: OAuth authorization code
        next: Intended post-login path
    """

    token_hash: str | None = None
    type: str | None = None
    code: str | None = None
    next: str = settings.auth_default_next

    def credential(self) -> Credential:
        """
        Decide which credential form this request carries.

        A code takes priority over a token hash. Empty values count as absent,
        and an unknown token type makes the token form unusable.
        """
        if self.code:
            return AuthorizationCode(code=self.code)

        if self.token_hash and self.type:
            try:
                otp_type = EmailOtpType(self.type)
            except ValueError:
                return InvalidCredential()
            return OneTimeToken(token_hash=self.token_hash, otp_type=otp_type)

        return InvalidCredential()

    def safe_next(self) -> str:
        """
        Return next as a path on this origin, or the default destination.

        Absolute URLs, scheme-relative URLs ('//host/...'), backslash tricks and
        anything urlsplit cannot parse all fall back to the default.
        """
        try:
            parts = urlsplit(self.next)
        except ValueError:
            return settings.auth_default_next

        if (
            parts.scheme
            or parts.netloc
            or not self.next.startswith("/")
            or self.next.startswith("//")
            or "\\" in self.next
        ):
            return settings.auth_default_next

        return self.next


class RedirectKind(str, Enum):
    """Terminal states of the confirmation flow."""

    ERROR = "error"
    ONBOARDING = "onboarding"
    NEXT = "next"


class ConfirmationOutcome(BaseModel):
    """
    Result of a confirmation: where to redirect and which session to persist.

    Attributes:
        kind: Which terminal state was reached
        location: Path (with query) to redirect to, relative to the request origin
        session: Tokens to store as cookies, only set when a user was resolved
        user_id: Signed-in user, only set when a user was resolved
    """

    kind: RedirectKind
    location: str
    session: SessionTokens | None = None
    user_id: UUID | None = None

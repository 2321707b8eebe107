"""Route handlers for session confirmation and sign-out."""

import logging
from urllib.parse import urljoin

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse, RedirectResponse
from fastapi.security import HTTPAuthorizationCredentials

from src.complio.config import settings
from src.complio.features.auth.confirmation import confirm_session
from src.complio.features.auth.models import (
    ConfirmationOutcome,
    ConfirmationRequest,
    RedirectKind,
)
from src.complio.services import PostHogService
from src.complio.services.auth.backend import SupabaseAuthBackend
from src.complio.services.auth.dependencies import security
from src.complio.services.auth.exceptions import SessionExchangeError
from src.complio.services.database import (
    SupabaseQueryBuilder,
    create_supabase_client,
    get_query_builder,
    get_supabase_admin_client,
)
from src.complio.services.rate_limiter import auth_rate_limit, write_rate_limit

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])

REFRESH_COOKIE_MAX_AGE = 60 * 60 * 24 * 30  # 30 days


def get_auth_backend(request: Request) -> SupabaseAuthBackend:
    """Build a fresh auth backend for this request, carrying the PKCE verifier cookie."""
    return SupabaseAuthBackend(
        create_supabase_client(),
        code_verifier=request.cookies.get(settings.code_verifier_cookie),
    )


def get_admin_auth_backend() -> SupabaseAuthBackend:
    """Auth backend on the service-role client, for revoking sessions."""
    return SupabaseAuthBackend(get_supabase_admin_client())


def get_onboarding_db() -> SupabaseQueryBuilder:
    """Query builder used for the onboarding gate lookup."""
    return get_query_builder()


def _set_session_cookies(response: RedirectResponse, outcome: ConfirmationOutcome) -> None:
    session = outcome.session
    if session is None:
        return

    response.set_cookie(
        settings.access_token_cookie,
        session.access_token,
        max_age=session.expires_in,
        httponly=True,
        secure=settings.cookie_secure,
        samesite="lax",
    )
    response.set_cookie(
        settings.refresh_token_cookie,
        session.refresh_token,
        max_age=REFRESH_COOKIE_MAX_AGE,
        httponly=True,
        secure=settings.cookie_secure,
        samesite="lax",
    )
    response.delete_cookie(settings.code_verifier_cookie)


@router.get("/confirm", response_class=RedirectResponse)
@auth_rate_limit
async def confirm(
    request: Request,
    token_hash: str | None = Query(None, description="Email one-time token hash"),
    otp_type: str | None = Query(None, alias="type", description="One-time token purpose"),
    code: str | None = Query(None, description="OAuth authorization code"),
    next_path: str = Query(settings.auth_default_next, alias="next"),
    auth: SupabaseAuthBackend = Depends(get_auth_backend),
    db: SupabaseQueryBuilder = Depends(get_onboarding_db),
) -> RedirectResponse:
    """
    Complete an OAuth callback or email link and redirect.

    Always answers with a redirect: to `next`, to the onboarding page for
    users who have not finished onboarding, or to the error page with the
    backend's message in the `error` query parameter.

    Examples:
        - /auth/confirm?code=abc123&next=/projects
        - /auth/confirm?token_hash=xyz&type=email
    """
    confirmation = ConfirmationRequest(
        token_hash=token_hash,
        type=otp_type,
        code=code,
        next=next_path,
    )
    outcome = confirm_session(confirmation, auth, db)

    analytics = PostHogService()
    if outcome.kind is RedirectKind.ERROR:
        analytics.track_confirmation_failed(outcome.location)
    else:
        analytics.track_sign_in(
            outcome.user_id,
            method="oauth" if code else "email_otp",
            onboarding_required=outcome.kind is RedirectKind.ONBOARDING,
        )

    response = RedirectResponse(url=urljoin(str(request.base_url), outcome.location))
    _set_session_cookies(response, outcome)
    return response


@router.post("/signout")
@write_rate_limit
async def signout(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    auth: SupabaseAuthBackend = Depends(get_admin_auth_backend),
) -> JSONResponse:
    """
    Sign out: revoke the backend session (best effort) and clear session cookies.

    Returns:
        {"success": true}, even when there was no session to revoke
    """
    token = (credentials.credentials if credentials else None) or request.cookies.get(
        settings.access_token_cookie
    )

    if token:
        try:
            auth.sign_out(token)
        except SessionExchangeError as e:
            logger.warning(f"Backend sign-out failed: {e.message}")

    response = JSONResponse({"success": True})
    response.delete_cookie(settings.access_token_cookie)
    response.delete_cookie(settings.refresh_token_cookie)
    return response

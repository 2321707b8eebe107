"""Session confirmation: establish a session, then route through the onboarding gate."""

import logging
from urllib.parse import quote

from src.complio.config import settings
from src.complio.features.auth.models import (
    AuthorizationCode,
    ConfirmationOutcome,
    ConfirmationRequest,
    InvalidCredential,
    OneTimeToken,
    RedirectKind,
)
from src.complio.features.onboarding.service import fetch_onboarding_status
from src.complio.services.auth.backend import SupabaseAuthBackend
from src.complio.services.auth.exceptions import SessionExchangeError
from src.complio.services.auth.models import SessionTokens
from src.complio.services.database import SupabaseQueryBuilder

logger = logging.getLogger(__name__)

USER_NOT_RESOLVED_MESSAGE = "Unable to resolve user for session"


def error_redirect(message: str) -> ConfirmationOutcome:
    """Build the error-page redirect carrying a URL-encoded message."""
    # Unreserved marks !~*'() stay literal, everything else is percent-encoded
    encoded = quote(message, safe="!~*'()")
    return ConfirmationOutcome(
        kind=RedirectKind.ERROR,
        location=f"{settings.auth_error_path}?error={encoded}",
    )


def check_onboarding_and_redirect(
    next_path: str,
    auth: SupabaseAuthBackend,
    db: SupabaseQueryBuilder,
    session: SessionTokens | None = None,
) -> ConfirmationOutcome:
    """
    Send the freshly signed-in user to next_path or to onboarding.

    Only a stored onboarding record with completed=True lets the user through
    to next_path. A missing record, completed=False, or a failed lookup all
    route to onboarding. A session with no resolvable user ends on the error
    page rather than next_path.

    Args:
        next_path: Intended destination
        auth: Backend holding the session just established
        db: Query builder for the onboarding table
        session: Tokens of the established session, passed through to the outcome

    Returns:
        Outcome redirecting to next_path, the onboarding page, or the error page
    """
    try:
        user = auth.get_user()
    except SessionExchangeError as e:
        logger.warning(
            f"User lookup failed after session exchange: {e.message}",
            extra={"error_type": "user_lookup_failed"},
        )
        user = None

    if user is None:
        return error_redirect(USER_NOT_RESOLVED_MESSAGE)

    try:
        status_record = fetch_onboarding_status(db, user.id)
    except Exception as e:
        logger.warning(
            f"Onboarding lookup failed for user {user.id}, routing to onboarding: {e}",
            extra={"error_type": "onboarding_lookup_failed"},
        )
        status_record = None

    if status_record is None or status_record.completed is not True:
        logger.info(f"User {user.id} has not completed onboarding")
        return ConfirmationOutcome(
            kind=RedirectKind.ONBOARDING,
            location=settings.onboarding_path,
            session=session,
            user_id=user.id,
        )

    return ConfirmationOutcome(
        kind=RedirectKind.NEXT, location=next_path, session=session, user_id=user.id
    )


def confirm_session(
    request: ConfirmationRequest,
    auth: SupabaseAuthBackend,
    db: SupabaseQueryBuilder,
) -> ConfirmationOutcome:
    """
    Exchange the request's credential for a session and pick the redirect.

    Exactly one backend exchange is attempted. Any failure resolves to an
    error redirect; nothing is raised to the caller. A next that is not a
    path on this origin is replaced by the default destination.

    Args:
        request: Parsed query parameters
        auth: Per-request auth backend
        db: Query builder used for the onboarding lookup

    Returns:
        Terminal outcome of the flow

    Example:
        >>> outcome = confirm_session(
        ...     ConfirmationRequest(code="abc123", next="/projects"), auth, db
        ... )
        >>> outcome.location
        '/projects'
    """
    credential = request.credential()

    if isinstance(credential, InvalidCredential):
        logger.warning("Confirmation request carried no usable credential")
        return error_redirect(credential.message)

    try:
        if isinstance(credential, AuthorizationCode):
            session = auth.exchange_code_for_session(credential.code)
        elif isinstance(credential, OneTimeToken):
            session = auth.verify_otp(credential.otp_type.value, credential.token_hash)
    except SessionExchangeError as e:
        logger.warning(
            f"Session confirmation rejected: {e.message}",
            extra={"error_type": "session_exchange_failed", "credential": type(credential).__name__},
        )
        return error_redirect(e.message)

    next_path = request.safe_next()
    if next_path != request.next:
        logger.warning(
            f"Ignoring off-origin or malformed next: {request.next!r}",
            extra={"error_type": "unsafe_next"},
        )

    logger.info(f"Session established via {type(credential).__name__}")
    return check_onboarding_and_redirect(next_path, auth, db, session=session)

"""FastAPI dependencies for authenticating API requests against Supabase tokens."""

import logging
from uuid import UUID

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError

from src.complio.config import settings
from src.complio.services.auth.jwt_validator import JWTValidator
from src.complio.services.auth.models import AuthUser

security = HTTPBearer(auto_error=False)
logger = logging.getLogger(__name__)

# Global JWT validator instance (initialized in main.py lifespan)
_jwt_validator: JWTValidator | None = None


def set_jwt_validator(validator: JWTValidator | None) -> None:
    """
    Set the global JWT validator instance.

    Called during application startup to initialize the JWT validator.
    """
    global _jwt_validator
    _jwt_validator = validator


def get_jwt_validator() -> JWTValidator:
    """
    Get the global JWT validator instance.

    Raises:
        RuntimeError: If JWT validator not initialized
    """
    if _jwt_validator is None:
        raise RuntimeError(
            "JWT validator not initialized. "
            "Ensure application startup calls set_jwt_validator()."
        )
    return _jwt_validator


def _extract_token(request: Request, credentials: HTTPAuthorizationCredentials | None) -> str | None:
    if credentials and credentials.credentials:
        return credentials.credentials
    return request.cookies.get(settings.access_token_cookie)


async def get_current_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> AuthUser:
    """
    Resolve the authenticated user from a bearer token or the session cookie.

    The bearer header wins over the access-token cookie written by
    /auth/confirm. The resolved user is stored on request.state for the
    rate limiter key function.

    Args:
        request: Incoming request (cookie fallback)
        credentials: Bearer token from Authorization header, if any

    Returns:
        AuthUser with id, email, and user_metadata

    Raises:
        HTTPException: 401 if token missing or invalid

    Example:
        @router.get("/me")
        async def me(current_user: AuthUser = Depends(get_current_user)):
            return {"user_id": current_user.id}
    """
    token = _extract_token(request, credentials)
    if not token:
        logger.warning("Auth failed: no bearer token or session cookie")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
        )

    try:
        claims = get_jwt_validator().verify_token(token)

        user_id = claims.get("sub")
        if not user_id:
            logger.warning(
                "Auth failed: missing user ID",
                extra={"error_type": "missing_sub_claim"},
            )
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid token: missing user ID",
            )

        user = AuthUser(
            id=UUID(user_id),
            email=claims.get("email") or None,
            user_metadata=claims.get("user_metadata") or {},
        )

    except HTTPException:
        raise
    except JWTError as e:
        logger.warning(f"JWT verification failed: {str(e)}", extra={"error": str(e)})
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials",
        )
    except Exception as e:
        logger.error(f"Auth failed: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials",
        )

    request.state.user = user
    logger.info(f"User authenticated: {user.id}")
    return user


async def get_optional_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> AuthUser | None:
    """
    Resolve the user when the request carries a valid token, else None.

    For endpoints that are public but personalise their response for
    signed-in users. A missing or rejected token reads as anonymous.
    """
    if not _extract_token(request, credentials):
        return None

    try:
        return await get_current_user(request, credentials)
    except HTTPException as e:
        logger.info(f"Treating request as anonymous: {e.detail}")
        return None

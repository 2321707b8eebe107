"""Rate limiting service for API endpoints."""

import logging

from fastapi import Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from src.complio.config import settings
from src.complio.services.auth.models import AuthUser

logger = logging.getLogger(__name__)


def get_user_id_or_ip(request: Request) -> str:
    """
    Extract user ID from the authenticated request or fall back to IP address.

    - Authenticated requests: Rate limited per user ID
    - Unauthenticated requests (e.g. /auth/confirm): Rate limited per IP address

    Args:
        request: FastAPI request object

    Returns:
        User ID string or IP address
    """
    user: AuthUser | None = getattr(request.state, "user", None)

    if user and user.id:
        return f"user:{user.id}"

    return f"ip:{get_remote_address(request)}"


limiter = Limiter(
    key_func=get_user_id_or_ip,
    default_limits=[],
    storage_uri="memory://",
    enabled=settings.rate_limit_enabled,
)


class RateLimitTiers:
    """
    Rate limit tiers for different endpoint categories.

    Authenticated endpoints are limited per user, the confirmation route per IP.
    """

    # Reads (GET)
    DEFAULT = ["100 per minute", "1000 per hour"]

    # State-changing operations (POST/PUT/DELETE)
    WRITE = ["30 per minute", "200 per hour"]

    # Session confirmation, guards code/OTP guessing
    AUTH = ["10 per minute", "50 per hour"]


# These decorators require the endpoint to have a 'request: Request' parameter
default_rate_limit = limiter.limit(";".join(RateLimitTiers.DEFAULT))
write_rate_limit = limiter.limit(";".join(RateLimitTiers.WRITE))
auth_rate_limit = limiter.limit(";".join(RateLimitTiers.AUTH))

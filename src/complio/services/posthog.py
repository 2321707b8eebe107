"""Product analytics: the compl.io events and the PostHog client that ships them."""

import logging
from enum import Enum
from functools import lru_cache
from uuid import UUID

from posthog import Posthog

from src.complio.config import settings

logger = logging.getLogger(__name__)

ANONYMOUS_DISTINCT_ID = "anonymous"


class AnalyticsEvent(str, Enum):
    """Events the API reports."""

    USER_SIGNED_IN = "user_signed_in"
    AUTH_CONFIRMATION_FAILED = "auth_confirmation_failed"
    ONBOARDING_COMPLETED = "onboarding_completed"
    FORUM_POST_CREATED = "forum_post_created"
    FORUM_REPLY_CREATED = "forum_reply_created"


@lru_cache
def get_posthog_client() -> Posthog | None:
    """Shared PostHog client, or None when no project key is configured."""
    if not settings.posthog_api_key:
        logger.info("PostHog key not configured, analytics disabled")
        return None
    return Posthog(settings.posthog_api_key, host=settings.posthog_host)


class PostHogService:
    """
    Reports compl.io product events.

    Every method is a no-op when analytics are disabled, so callers never
    need to check configuration themselves.
    """

    def __init__(self, client: Posthog | None = None) -> None:
        self.client = client if client is not None else get_posthog_client()

    @property
    def enabled(self) -> bool:
        return self.client is not None

    def capture(
        self, distinct_id: str | UUID, event: AnalyticsEvent, properties: dict | None = None
    ) -> None:
        if self.client is None:
            return

        self.client.capture(
            distinct_id=str(distinct_id), event=event.value, properties=properties or {}
        )

    def track_sign_in(self, user_id: UUID, method: str, onboarding_required: bool) -> None:
        """
        Record a completed /auth/confirm.

        Args:
            user_id: User the session belongs to
            method: "oauth" for a code exchange, "email_otp" for a token hash
            onboarding_required: True when the user was sent to onboarding
        """
        self.capture(
            user_id,
            AnalyticsEvent.USER_SIGNED_IN,
            {"method": method, "onboarding_required": onboarding_required},
        )

    def track_confirmation_failed(self, location: str) -> None:
        """Record a confirmation that ended on the error page. No user is known yet."""
        self.capture(
            ANONYMOUS_DISTINCT_ID,
            AnalyticsEvent.AUTH_CONFIRMATION_FAILED,
            {"location": location},
        )

    def track_onboarding_completed(self, user_id: UUID, current_step: int) -> None:
        self.capture(
            user_id, AnalyticsEvent.ONBOARDING_COMPLETED, {"current_step": current_step}
        )

    def track_post_created(self, user_id: UUID, post_id: str, board: str | None) -> None:
        self.capture(
            user_id, AnalyticsEvent.FORUM_POST_CREATED, {"post_id": post_id, "board": board}
        )

    def track_reply_created(self, user_id: UUID, post_id: str, nested: bool) -> None:
        self.capture(
            user_id, AnalyticsEvent.FORUM_REPLY_CREATED, {"post_id": post_id, "nested": nested}
        )

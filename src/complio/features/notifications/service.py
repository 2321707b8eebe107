"""Notification history: recording forum notifications and reading a user's feed."""

import logging
from typing import Any

from src.complio.services.database import SupabaseQueryBuilder

logger = logging.getLogger(__name__)

PREFERENCES_TABLE = "notification_preferences"
HISTORY_TABLE = "notification_history"

FORUM_NOTIFICATION_SUBJECTS = {
    "reply": "New reply to your post",
    "mention": "You were mentioned in the community",
    "like": "Someone liked your post",
    "follow": "You have a new follower",
}


def record_forum_notification(
    db: SupabaseQueryBuilder,
    recipient_id: str,
    kind: str,
    metadata: dict[str, Any],
    fallback_email: str | None = None,
) -> dict[str, Any] | None:
    """
    Queue an email notification about forum activity for a user.

    Users who turned email off get nothing. The row is written with status
    "queued" for the mail sender to pick up.

    Args:
        db: Query builder
        recipient_id: User to notify
        kind: One of FORUM_NOTIFICATION_SUBJECTS
        metadata: postId, replyId, actorUserId and similar context
        fallback_email: Address to use when the preferences hold none

    Returns:
        The history row, or None when the user opted out or has no address
    """
    prefs = db.get_by_field(PREFERENCES_TABLE, "user_id", recipient_id) or {}

    if prefs.get("email_enabled") is False:
        logger.info(f"User {recipient_id} has email notifications disabled")
        return None

    recipient = prefs.get("email_address") or fallback_email
    if not recipient:
        logger.info(f"No email address on file for user {recipient_id}")
        return None

    return db.insert_record(
        HISTORY_TABLE,
        {
            "user_id": recipient_id,
            "notification_type": f"forum_{kind}",
            "channel": "email",
            "recipient": recipient,
            "subject": FORUM_NOTIFICATION_SUBJECTS[kind],
            "metadata": metadata,
            "status": "queued",
        },
    )


def list_history(
    db: SupabaseQueryBuilder, user_id: str, limit: int, offset: int
) -> list[dict[str, Any]]:
    """A user's notifications, most recently sent first."""
    return db.list_records(
        HISTORY_TABLE,
        filters={"user_id": user_id},
        order_by="sent_at",
        order_desc=True,
        limit=limit,
        offset=offset,
    ) or []

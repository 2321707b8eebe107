"""API handlers for notification preferences and history."""

import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status

from src.complio.features.notifications.models import (
    NotificationHistoryResponse,
    NotificationPreferencesResponse,
    NotificationPreferencesSaveResponse,
    NotificationPreferencesUpdate,
)
from src.complio.features.notifications.service import PREFERENCES_TABLE, list_history
from src.complio.services.auth.dependencies import get_current_user
from src.complio.services.auth.models import AuthUser
from src.complio.services.database import get_query_builder
from src.complio.services.rate_limiter import default_rate_limit, write_rate_limit

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/notifications", tags=["notifications"])


def default_preferences(user: AuthUser) -> dict[str, Any]:
    """Preferences for a user who never saved any."""
    return {
        "email_enabled": True,
        "email_address": user.email,
        "sms_enabled": False,
        "phone_number": user.user_metadata.get("phone"),
        "reminder_30_days": True,
        "reminder_14_days": True,
        "reminder_7_days": True,
        "reminder_1_day": True,
        "weekly_digest_enabled": True,
        "weekly_digest_day": 1,  # Monday
        "weekly_digest_time": "09:00:00",
        "reminder_channels": ["email"],
    }


@router.get("/preferences", response_model=NotificationPreferencesResponse)
@default_rate_limit
async def get_preferences(
    request: Request,
    current_user: AuthUser = Depends(get_current_user),
) -> NotificationPreferencesResponse:
    """
    Get notification preferences, falling back to defaults for new users.

    Raises:
        HTTPException: 500 if database error
    """
    try:
        db = get_query_builder()
        preferences = db.get_by_field(
            table=PREFERENCES_TABLE, field="user_id", value=str(current_user.id)
        )
    except Exception as e:
        logger.error(f"Error fetching notification preferences for user {current_user.id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(e) or "An error occurred",
        ) from e

    if not preferences:
        return NotificationPreferencesResponse(preferences=default_preferences(current_user))

    if not preferences.get("email_address") and current_user.email:
        preferences["email_address"] = current_user.email

    return NotificationPreferencesResponse(preferences=preferences)


@router.post("/preferences", response_model=NotificationPreferencesSaveResponse)
@write_rate_limit
async def update_preferences(
    request: Request,
    req: NotificationPreferencesUpdate,
    current_user: AuthUser = Depends(get_current_user),
) -> NotificationPreferencesSaveResponse:
    """
    Create or update notification preferences (upsert on user_id).

    Raises:
        HTTPException: 400 if the backend rejects the upsert
    """
    updates = {"user_id": str(current_user.id), **req.model_dump(exclude_unset=True)}

    try:
        db = get_query_builder()
        preferences = db.upsert_record(
            table=PREFERENCES_TABLE,
            record=updates,
            conflict_columns=["user_id"],
        )
    except Exception as e:
        logger.error(f"Error updating notification preferences for user {current_user.id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=getattr(e, "message", None) or str(e),
        ) from e

    logger.info(f"Updated notification preferences for user {current_user.id}")
    return NotificationPreferencesSaveResponse(preferences=preferences)


@router.get("/history", response_model=NotificationHistoryResponse)
@default_rate_limit
async def get_history(
    request: Request,
    user_id: str | None = Query(None, alias="userId", description="Must be the caller's own id"),
    limit: int = Query(50, ge=1, le=100, description="Maximum notifications to return"),
    offset: int = Query(0, ge=0, description="Number of notifications to skip"),
    current_user: AuthUser = Depends(get_current_user),
) -> NotificationHistoryResponse:
    """
    List the notifications sent to the current user, newest first.

    Raises:
        HTTPException: 403 if userId names another user
        HTTPException: 500 if database query fails
    """
    if user_id and user_id != str(current_user.id):
        logger.warning(f"User {current_user.id} asked for notifications of {user_id}")
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Unauthorized")

    try:
        notifications = list_history(get_query_builder(), str(current_user.id), limit, offset)
    except Exception as e:
        logger.error(f"Error fetching notification history for user {current_user.id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch notification history",
        ) from e

    return NotificationHistoryResponse(notifications=notifications)

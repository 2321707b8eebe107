"""Onboarding record access shared by the onboarding API and the sign-in gate."""

from datetime import datetime, timezone
from typing import Any
from uuid import UUID

from src.complio.features.onboarding.models import OnboardingSaveRequest, OnboardingStatus
from src.complio.services.database import SupabaseQueryBuilder

ONBOARDING_TABLE = "onboarding"


def get_onboarding_record(db: SupabaseQueryBuilder, user_id: UUID) -> dict[str, Any] | None:
    """Return the raw onboarding row for a user, or None for new users."""
    return db.get_by_field(table=ONBOARDING_TABLE, field="user_id", value=str(user_id))


def fetch_onboarding_status(db: SupabaseQueryBuilder, user_id: UUID) -> OnboardingStatus | None:
    """
    Look up whether a user finished onboarding.

    Returns:
        OnboardingStatus, or None if the user has no onboarding row

    Raises:
        Exception: If the database lookup fails
    """
    record = get_onboarding_record(db, user_id)
    if not record:
        return None
    return OnboardingStatus(
        user_id=record.get("user_id", user_id),
        completed=record.get("completed") is True,
        current_step=record.get("current_step"),
    )


def save_onboarding(
    db: SupabaseQueryBuilder, user_id: UUID, req: OnboardingSaveRequest
) -> dict[str, Any]:
    """
    Upsert a user's onboarding progress.

    Raises:
        Exception: If the upsert is rejected
    """
    return db.upsert_record(
        table=ONBOARDING_TABLE,
        record={
            "user_id": str(user_id),
            "current_step": req.current_step,
            "completed": req.completed,
            "preferences": req.preferences,
            "updated_at": datetime.now(timezone.utc).isoformat(),
        },
        conflict_columns=["user_id"],
    )

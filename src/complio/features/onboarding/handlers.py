"""API handlers for onboarding endpoints."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status

from src.complio.features.onboarding.models import (
    OnboardingResponse,
    OnboardingSaveRequest,
    OnboardingSaveResponse,
)
from src.complio.features.onboarding.service import get_onboarding_record, save_onboarding
from src.complio.services import PostHogService
from src.complio.services.auth.dependencies import get_current_user
from src.complio.services.auth.models import AuthUser
from src.complio.services.database import get_query_builder
from src.complio.services.rate_limiter import default_rate_limit, write_rate_limit

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/onboarding", tags=["onboarding"])


@router.get("", response_model=OnboardingResponse)
@default_rate_limit
async def get_onboarding(
    request: Request,
    current_user: AuthUser = Depends(get_current_user),
) -> OnboardingResponse:
    """
    Get the current user's onboarding progress.

    New users have no onboarding row yet; that is returned as data=null,
    not as an error.

    Raises:
        HTTPException: 500 if database error
    """
    try:
        db = get_query_builder()
        record = get_onboarding_record(db, current_user.id)
        return OnboardingResponse(data=record)

    except Exception as e:
        logger.error(f"Error fetching onboarding for user {current_user.id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch onboarding. Please try again.",
        ) from e


@router.post("", response_model=OnboardingSaveResponse)
@write_rate_limit
async def post_onboarding(
    request: Request,
    req: OnboardingSaveRequest,
    current_user: AuthUser = Depends(get_current_user),
) -> OnboardingSaveResponse:
    """
    Save onboarding progress (upsert on user_id).

    Setting completed=true is what lets the user past the sign-in
    onboarding gate on their next confirmation.

    Args:
        req: Current step, completion flag and collected preferences
        current_user: User data from validated access token

    Returns:
        The stored onboarding row

    Raises:
        HTTPException: 400 if the backend rejects the upsert
    """
    db = get_query_builder()

    try:
        record = save_onboarding(db, current_user.id, req)
    except Exception as e:
        logger.error(f"Error saving onboarding for user {current_user.id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=getattr(e, "message", None) or str(e),
        ) from e

    logger.info(
        f"Saved onboarding step {req.current_step} for user {current_user.id}",
        extra={"completed": req.completed},
    )

    if req.completed:
        PostHogService().track_onboarding_completed(current_user.id, req.current_step)

    return OnboardingSaveResponse(data=record)

"""Pydantic models for onboarding feature."""

from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class OnboardingStatus(BaseModel):
    """Stored onboarding progress for one user (at most one row per user)."""

    model_config = ConfigDict(extra="ignore")

    user_id: UUID
    completed: bool = False
    current_step: int | None = None


class OnboardingSaveRequest(BaseModel):
    """Request model for saving onboarding progress."""

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "currentStep": 3,
                "completed": True,
                "preferences": {"industry": "restaurant", "state": "CA"},
            }
        },
    )

    current_step: int = Field(alias="currentStep", ge=0, description="Step the user reached")
    completed: bool = False
    preferences: dict[str, Any] = Field(default_factory=dict)


class OnboardingResponse(BaseModel):
    """Response model for GET /onboarding."""

    data: dict[str, Any] | None = None


class OnboardingSaveResponse(BaseModel):
    """Response model for POST /onboarding."""

    success: bool = True
    data: dict[str, Any]

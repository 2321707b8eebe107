"""Pydantic models for notification preferences."""

from typing import Any

from pydantic import BaseModel, Field


class NotificationPreferencesUpdate(BaseModel):
    """Partial update: only fields present in the request body are written."""

    email_enabled: bool | None = None
    email_address: str | None = None
    sms_enabled: bool | None = None
    phone_number: str | None = None
    reminder_30_days: bool | None = None
    reminder_14_days: bool | None = None
    reminder_7_days: bool | None = None
    reminder_1_day: bool | None = None
    weekly_digest_enabled: bool | None = None
    weekly_digest_day: int | None = Field(None, ge=0, le=6, description="0 = Sunday")
    weekly_digest_time: str | None = Field(None, description="HH:MM:SS")
    reminder_channels: list[str] | None = None


class NotificationPreferencesResponse(BaseModel):
    """Response model for GET /notifications/preferences."""

    preferences: dict[str, Any]


class NotificationPreferencesSaveResponse(BaseModel):
    """Response model for POST /notifications/preferences."""

    success: bool = True
    preferences: dict[str, Any]


class NotificationHistoryResponse(BaseModel):
    """Response model for GET /notifications/history."""

    notifications: list[dict[str, Any]]

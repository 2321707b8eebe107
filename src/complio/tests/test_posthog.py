"""Tests for the analytics service."""

from unittest.mock import Mock, patch
from uuid import UUID

import pytest

from src.complio.services.posthog import (
    AnalyticsEvent,
    PostHogService,
    get_posthog_client,
)

USER_ID = UUID("123e4567-e89b-12d3-a456-426614174000")


@pytest.fixture
def posthog_client():
    return Mock()


@pytest.fixture(autouse=True)
def clear_client_cache():
    get_posthog_client.cache_clear()
    yield
    get_posthog_client.cache_clear()


def test_no_client_without_api_key() -> None:
    with patch("src.complio.services.posthog.settings") as mock_settings:
        mock_settings.posthog_api_key = ""

        assert get_posthog_client() is None


def test_client_built_from_settings() -> None:
    with patch("src.complio.services.posthog.settings") as mock_settings, patch(
        "src.complio.services.posthog.Posthog"
    ) as mock_posthog:
        mock_settings.posthog_api_key = "phc_test"
        mock_settings.posthog_host = "https://eu.posthog.com"

        assert get_posthog_client() is mock_posthog.return_value
        mock_posthog.assert_called_once_with("phc_test", host="https://eu.posthog.com")


def test_disabled_service_sends_nothing() -> None:
    with patch("src.complio.services.posthog.get_posthog_client", return_value=None):
        service = PostHogService()

    assert service.enabled is False
    service.track_sign_in(USER_ID, "oauth", onboarding_required=False)


def test_track_sign_in(posthog_client) -> None:
    PostHogService(posthog_client).track_sign_in(USER_ID, "email_otp", onboarding_required=True)

    posthog_client.capture.assert_called_once_with(
        distinct_id=str(USER_ID),
        event="user_signed_in",
        properties={"method": "email_otp", "onboarding_required": True},
    )


def test_confirmation_failure_is_anonymous(posthog_client) -> None:
    PostHogService(posthog_client).track_confirmation_failed("/auth/error?error=bad%20code")

    posthog_client.capture.assert_called_once_with(
        distinct_id="anonymous",
        event="auth_confirmation_failed",
        properties={"location": "/auth/error?error=bad%20code"},
    )


def test_track_onboarding_completed(posthog_client) -> None:
    PostHogService(posthog_client).track_onboarding_completed(USER_ID, current_step=5)

    assert posthog_client.capture.call_args.kwargs["event"] == "onboarding_completed"
    assert posthog_client.capture.call_args.kwargs["properties"] == {"current_step": 5}


def test_forum_events(posthog_client) -> None:
    service = PostHogService(posthog_client)

    service.track_post_created(USER_ID, "post-1", board="general")
    service.track_reply_created(USER_ID, "post-1", nested=True)

    events = [call.kwargs["event"] for call in posthog_client.capture.call_args_list]
    assert events == [
        AnalyticsEvent.FORUM_POST_CREATED.value,
        AnalyticsEvent.FORUM_REPLY_CREATED.value,
    ]

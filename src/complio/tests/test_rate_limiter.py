"""Tests for rate limiter key selection."""

from types import SimpleNamespace
from uuid import uuid4

from starlette.requests import Request

from src.complio.services.auth.models import AuthUser
from src.complio.services.rate_limiter import get_user_id_or_ip


def make_request() -> Request:
    return Request(
        {"type": "http", "method": "GET", "path": "/", "headers": [], "client": ("10.0.0.7", 5000)}
    )


def test_authenticated_request_keyed_by_user() -> None:
    user_id = uuid4()
    request = make_request()
    request.state.user = AuthUser(id=user_id, email="a@b.co")

    assert get_user_id_or_ip(request) == f"user:{user_id}"


def test_anonymous_request_keyed_by_ip() -> None:
    assert get_user_id_or_ip(make_request()) == "ip:10.0.0.7"


def test_state_without_id_falls_back_to_ip() -> None:
    request = make_request()
    request.state.user = SimpleNamespace(id=None)

    assert get_user_id_or_ip(request) == "ip:10.0.0.7"

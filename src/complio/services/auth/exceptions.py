"""Custom exceptions for authentication and session handling."""


class AuthenticationError(Exception):
    """Raised when a request cannot be tied to an authenticated user."""

    pass


class SessionExchangeError(AuthenticationError):
    """
    Raised when the backend rejects a code exchange, OTP verification or user lookup.

    Attributes:
        message: Human-readable message reported by the backend
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

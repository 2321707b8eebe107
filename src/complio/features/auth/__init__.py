"""Session confirmation (OAuth code / email OTP) with onboarding gate."""

from src.complio.features.auth.handlers import router

__all__ = ["router"]

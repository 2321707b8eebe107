"""Onboarding feature: progress persistence and the sign-in onboarding gate lookup."""

from src.complio.features.onboarding.handlers import router

__all__ = ["router"]

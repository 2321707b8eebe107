"""Shared services module for external integrations."""

from src.complio.services.posthog import PostHogService

__all__ = [
    "PostHogService",
]

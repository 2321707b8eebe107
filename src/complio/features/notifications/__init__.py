"""Notifications feature: delivery preferences and sent-notification history."""

from src.complio.features.notifications.handlers import router

__all__ = ["router"]

"""Shared services module for external integrations."""

from src.cityrun.services.analytics import PostHogService

__all__ = [
    "PostHogService",
]

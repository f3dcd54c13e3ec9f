"""Product analytics integrations."""

from src.cityrun.services.analytics.posthog import PostHogService

__all__ = ["PostHogService"]

"""PostHog product analytics."""

import posthog

from src.cityrun.config import settings


class PostHogService:
    """
    Send product events through the posthog module client.

    Disabled unless ``POSTHOG_API_KEY`` is set, so local runs and tests
    never emit events.
    """

    def __init__(self) -> None:
        self.enabled = bool(settings.posthog_api_key)
        if self.enabled:
            posthog.api_key = settings.posthog_api_key
            posthog.host = settings.posthog_host

    def capture(self, distinct_id: str | int, event: str, properties: dict | None = None) -> None:
        """
        Send one event.

        Args:
            distinct_id: User ID, or "anonymous" before authentication
            event: ``user_registered``, ``user_logged_in``,
                ``authentication_failed`` or ``route_recommended``
            properties: Event properties; never emails, passwords or session IDs
        """
        if not self.enabled:
            return

        posthog.capture(distinct_id=str(distinct_id), event=event, properties=properties or {})

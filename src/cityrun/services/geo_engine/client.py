"""HTTP client for the external route-scoring geo-engine."""

import logging
from typing import Any

import httpx

from src.cityrun.services.geo_engine.exceptions import (
    InvalidRequestError,
    UpstreamProtocolError,
    UpstreamTimeoutError,
    UpstreamUnavailableError,
)

logger = logging.getLogger(__name__)

FALLBACK_ERROR_MESSAGE = (
    "No running route could be found from this starting point. Please choose a different origin."
)
MAX_LOGGED_BODY_CHARS = 500


def extract_error_message(response: httpx.Response) -> str | None:
    """
    Pull the user-safe message out of a geo-engine 4xx body.

    The engine's structured error body is ``{"errorCode": ..., "error": ...}``.
    Anything else (non-JSON, no ``errorCode``, blank or non-string ``error``)
    yields None so the caller can substitute the fallback message.
    """
    try:
        body = response.json()
    except ValueError:
        return None

    if not isinstance(body, dict) or "errorCode" not in body:
        return None

    message = body.get("error")
    if isinstance(message, str) and message.strip():
        return message.strip()
    return None


class GeoEngineClient:
    """
    Client for the geo-engine's scoring endpoint.

    Performs exactly one POST per call; there is no retry, since scoring is
    not guaranteed idempotent on the engine side. The underlying
    ``httpx.AsyncClient`` is owned by this object and must be closed on
    shutdown.

    Attributes:
        base_url: Geo-engine base URL
        score_path: Path of the scoring endpoint
        _http_client: HTTP client with a bounded response timeout

    Example:
        >>> engine = GeoEngineClient("http://cityrun-geo:3000")
        >>> route = await engine.score_route({"origin": [37.5, 127.0], "distanceKm": 5.0, "prefs": {}})
        >>> await engine.close()
    """

    def __init__(
        self,
        base_url: str,
        score_path: str = "/score-route",
        timeout: float = 60.0,
        connect_timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Initialize geo-engine client.

        Args:
            base_url: Geo-engine base URL
            score_path: Scoring endpoint path (default: /score-route)
            timeout: Read/write/pool timeout in seconds (default: 60)
            connect_timeout: Connect timeout in seconds (default: 10)
            transport: Optional transport override (used by tests)
        """
        if timeout <= 0:
            raise ValueError(f"timeout must be positive, got {timeout}")

        self.base_url = base_url
        self.score_path = score_path
        self._http_client = httpx.AsyncClient(
            base_url=base_url,
            timeout=httpx.Timeout(timeout, connect=connect_timeout),
            transport=transport,
        )

    async def score_route(self, payload: dict[str, Any]) -> dict[str, Any]:
        """
        Ask the geo-engine to score a route.

        Args:
            payload: Either ``{origin, distanceKm, prefs}`` or
                ``{distanceM, geometry, prefs}``

        Returns:
            The ``route`` object of the engine's success body

        Raises:
            InvalidRequestError: On a 4xx response (engine message or fallback)
            UpstreamProtocolError: On a 2xx body without a ``route`` object, or
                any other non-2xx status
            UpstreamTimeoutError: If the engine does not answer in time
            UpstreamUnavailableError: If the engine cannot be reached
        """
        try:
            response = await self._http_client.post(self.score_path, json=payload)
        except httpx.TimeoutException as e:
            logger.error(
                f"Geo-engine timed out: {e!r}",
                extra={"error_type": "geo_engine_timeout", "url": f"{self.base_url}{self.score_path}"},
            )
            raise UpstreamTimeoutError("Route engine did not respond in time") from e
        except httpx.TransportError as e:
            logger.error(
                f"Geo-engine unreachable: {e!r}",
                extra={"error_type": "geo_engine_unreachable", "url": f"{self.base_url}{self.score_path}"},
            )
            raise UpstreamUnavailableError("Route engine is unavailable") from e

        if response.is_success:
            return self._route_from(response)

        if response.is_client_error:
            message = extract_error_message(response)
            if message is None:
                logger.warning(
                    f"Geo-engine {response.status_code} without a structured error body",
                    extra={
                        "error_type": "geo_engine_unstructured_error",
                        "status_code": response.status_code,
                        "body": response.text[:MAX_LOGGED_BODY_CHARS],
                    },
                )
                message = FALLBACK_ERROR_MESSAGE
            else:
                logger.info(
                    f"Geo-engine rejected request: {message}",
                    extra={"status_code": response.status_code, "body": response.text[:MAX_LOGGED_BODY_CHARS]},
                )
            raise InvalidRequestError(message)

        logger.error(
            f"Geo-engine returned HTTP {response.status_code}",
            extra={
                "error_type": "geo_engine_bad_status",
                "status_code": response.status_code,
                "body": response.text[:MAX_LOGGED_BODY_CHARS],
            },
        )
        raise UpstreamProtocolError(f"Route engine returned HTTP {response.status_code}")

    def _route_from(self, response: httpx.Response) -> dict[str, Any]:
        try:
            body = response.json()
        except ValueError as e:
            logger.error(
                "Geo-engine success body is not JSON",
                extra={"error_type": "geo_engine_bad_body", "body": response.text[:MAX_LOGGED_BODY_CHARS]},
            )
            raise UpstreamProtocolError("Route engine response is not valid JSON") from e

        route = body.get("route") if isinstance(body, dict) else None
        if not isinstance(route, dict):
            logger.error(
                "Geo-engine response has no route object",
                extra={"error_type": "geo_engine_missing_route", "body": response.text[:MAX_LOGGED_BODY_CHARS]},
            )
            raise UpstreamProtocolError("Route engine response has no route")
        return route

    async def close(self) -> None:
        """
        Close HTTP client and cleanup resources.

        Should be called during application shutdown.
        """
        await self._http_client.aclose()
        logger.info("Geo-engine client closed")

"""Custom exceptions for the geo-engine client."""

from src.cityrun.exceptions import CityRunError


class InvalidRequestError(CityRunError):
    """Raised when the geo-engine rejects a request (4xx).

    The message is either the engine's own user-safe reason or a fixed
    fallback, never the raw response body.
    """

    code = "INVALID_REQUEST"
    status_code = 400


class UpstreamProtocolError(CityRunError):
    """Raised when the geo-engine responds outside its documented contract."""

    code = "UPSTREAM_PROTOCOL_ERROR"
    status_code = 502


class UpstreamUnavailableError(CityRunError):
    """Raised when the geo-engine cannot be reached."""

    code = "UPSTREAM_UNAVAILABLE"
    status_code = 503


class UpstreamTimeoutError(UpstreamUnavailableError):
    """Raised when the geo-engine does not answer within the response timeout."""

    code = "UPSTREAM_TIMEOUT"
    status_code = 504

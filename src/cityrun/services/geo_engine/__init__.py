"""Client for the external route-scoring geo-engine."""

from src.cityrun.services.geo_engine.client import FALLBACK_ERROR_MESSAGE, GeoEngineClient
from src.cityrun.services.geo_engine.exceptions import (
    InvalidRequestError,
    UpstreamProtocolError,
    UpstreamTimeoutError,
    UpstreamUnavailableError,
)

__all__ = [
    "FALLBACK_ERROR_MESSAGE",
    "GeoEngineClient",
    "InvalidRequestError",
    "UpstreamProtocolError",
    "UpstreamTimeoutError",
    "UpstreamUnavailableError",
]

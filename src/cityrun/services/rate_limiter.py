"""Rate limiting service for API endpoints."""

import logging

from fastapi import Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from src.cityrun.config import settings

logger = logging.getLogger(__name__)


def get_user_id_or_ip(request: Request) -> str:
    """
    Extract user ID from the validated session or fall back to IP address.

    This function is used as the key_func for rate limiting:
    - Authenticated requests: Rate limited per user ID
    - Unauthenticated requests: Rate limited per IP address

    Args:
        request: FastAPI request object

    Returns:
        User key or IP key
    """
    # Set by get_current_user_id once the session has been validated
    user_id: int | None = getattr(request.state, "user_id", None)

    if user_id is not None:
        return f"user:{user_id}"

    return f"ip:{get_remote_address(request)}"


# In-memory storage: limits are per process
limiter = Limiter(
    key_func=get_user_id_or_ip,
    default_limits=[],
    storage_uri="memory://",
    enabled=settings.rate_limit_enabled,
)


class RateLimitTiers:
    """
    Rate limit tiers for different endpoint categories.

    Authenticated endpoints are limited per user, the auth endpoints per IP.
    """

    # Standard authenticated reads
    DEFAULT = ["100 per minute", "1000 per hour"]

    # State-changing operations (register, login, save)
    WRITE = ["30 per minute", "200 per hour"]

    # Geo-engine scoring holds a worker for up to the engine timeout
    GEO_HEAVY = ["10 per minute", "60 per hour"]


# Note: decorated endpoints must take a 'request: Request' parameter
default_rate_limit = limiter.limit(";".join(RateLimitTiers.DEFAULT))
write_rate_limit = limiter.limit(";".join(RateLimitTiers.WRITE))
geo_heavy_rate_limit = limiter.limit(";".join(RateLimitTiers.GEO_HEAVY))

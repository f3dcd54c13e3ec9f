"""Redis connection management for the session store."""

import redis

from src.cityrun.config import settings


def create_redis_client(url: str | None = None) -> redis.Redis:
    """
    Create a Redis client for the session store.

    The caller owns the returned client and must close it on shutdown.

    Args:
        url: Redis URL (defaults to settings.redis_url)

    Returns:
        Redis client decoding responses to ``str``

    Example:
        >>> client = create_redis_client("redis://localhost:6379/0")
        >>> client.ping()
    """
    return redis.Redis.from_url(
        url or settings.redis_url,
        decode_responses=True,
        socket_timeout=settings.redis_socket_timeout_seconds,
        socket_connect_timeout=settings.redis_socket_timeout_seconds,
    )

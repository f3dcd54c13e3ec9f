"""Redis-backed session store.

Each session is one hash at ``<prefix><session_id>`` with the fields
``userId``, ``email``, ``createdAt`` and ``ttlSeconds``. The hash and its
expiry are written in a single MULTI/EXEC so a session never exists without
a TTL. Reads never touch the TTL; expiry is owned by Redis.
"""

import logging
from datetime import UTC, datetime

import redis
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import TimeoutError as RedisTimeoutError

from src.cityrun.exceptions import StoreUnavailableError
from src.cityrun.services.session_store.models import SessionRecord

logger = logging.getLogger(__name__)

_FIELDS = ("userId", "email", "createdAt", "ttlSeconds")


def _redacted(session_id: str) -> str:
    return f"{session_id[:6]}..."


class RedisSessionStore:
    """
    Session persistence on top of a shared Redis instance.

    Attributes:
        client: Redis client (responses decoded to str)
        key_prefix: Prefix prepended to every session identifier

    Example:
        >>> store = RedisSessionStore(create_redis_client())
        >>> store.save(record)
        >>> store.get(record.session_id)
    """

    def __init__(self, client: redis.Redis, key_prefix: str = "session:"):
        self.client = client
        self.key_prefix = key_prefix

    def key_for(self, session_id: str) -> str:
        """Return the Redis key holding the given session."""
        return f"{self.key_prefix}{session_id}"

    def save(self, session: SessionRecord) -> None:
        """
        Write a session and its TTL atomically.

        Args:
            session: Session to persist

        Raises:
            ValueError: If the session carries no positive TTL
            StoreUnavailableError: If Redis cannot be reached
        """
        if not session.ttl_seconds or session.ttl_seconds <= 0:
            raise ValueError("Sessions must be written with a positive TTL")

        key = self.key_for(session.session_id)
        created_at = session.created_at or datetime.now(UTC)
        mapping = {
            "userId": str(session.user_id),
            "email": session.email,
            "createdAt": created_at.isoformat(),
            "ttlSeconds": str(session.ttl_seconds),
        }
        try:
            pipe = self.client.pipeline(transaction=True)
            pipe.hset(key, mapping=mapping)
            pipe.expire(key, session.ttl_seconds)
            pipe.execute()
        except (RedisConnectionError, RedisTimeoutError) as e:
            logger.error(
                f"Session store unavailable on save: {e}",
                extra={"error_type": "session_store_unavailable", "operation": "save"},
            )
            raise StoreUnavailableError("Session store is unavailable") from e

        logger.debug(
            f"Session saved for user {session.user_id}",
            extra={"session": _redacted(session.session_id), "ttl": session.ttl_seconds},
        )

    def get(self, session_id: str) -> SessionRecord | None:
        """
        Look up a session without refreshing its TTL.

        Args:
            session_id: Opaque session identifier

        Returns:
            SessionRecord, or None if absent, expired or unreadable

        Raises:
            StoreUnavailableError: If Redis cannot be reached
        """
        try:
            values = self.client.hmget(self.key_for(session_id), list(_FIELDS))
        except (RedisConnectionError, RedisTimeoutError) as e:
            logger.error(
                f"Session store unavailable on read: {e}",
                extra={"error_type": "session_store_unavailable", "operation": "get"},
            )
            raise StoreUnavailableError("Session store is unavailable") from e

        fields = dict(zip(_FIELDS, values))
        if fields["userId"] is None:
            return None

        try:
            return SessionRecord(
                session_id=session_id,
                user_id=int(fields["userId"]),
                email=fields["email"] or "",
                created_at=(
                    datetime.fromisoformat(fields["createdAt"]) if fields["createdAt"] else None
                ),
                ttl_seconds=int(fields["ttlSeconds"]) if fields["ttlSeconds"] else None,
            )
        except ValueError:
            logger.warning(
                "Unreadable session hash, treating as absent",
                extra={"session": _redacted(session_id), "fields": list(fields)},
            )
            return None

    def delete(self, session_id: str) -> bool:
        """
        Delete a session if present.

        Args:
            session_id: Opaque session identifier

        Returns:
            True if a session was removed, False if none existed

        Raises:
            StoreUnavailableError: If Redis cannot be reached
        """
        try:
            removed = self.client.delete(self.key_for(session_id))
        except (RedisConnectionError, RedisTimeoutError) as e:
            logger.error(
                f"Session store unavailable on delete: {e}",
                extra={"error_type": "session_store_unavailable", "operation": "delete"},
            )
            raise StoreUnavailableError("Session store is unavailable") from e
        return bool(removed)

    def close(self) -> None:
        """Close the underlying Redis connection pool."""
        self.client.close()
        logger.info("Session store closed")

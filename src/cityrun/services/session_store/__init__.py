"""Shared, TTL-capable session storage."""

from src.cityrun.services.session_store.connection import create_redis_client
from src.cityrun.services.session_store.models import SessionRecord
from src.cityrun.services.session_store.store import RedisSessionStore

__all__ = ["create_redis_client", "RedisSessionStore", "SessionRecord"]

"""Data models for the session store."""

from datetime import datetime

from pydantic import BaseModel


class SessionRecord(BaseModel):
    """
    Session state stored under ``session:<session_id>``.

    A session maps to exactly one user until it is deleted or its TTL
    expires in the store.
    """

    session_id: str
    user_id: int
    email: str
    created_at: datetime | None = None
    ttl_seconds: int | None = None

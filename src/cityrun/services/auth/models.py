"""Data models for authentication."""

from datetime import datetime

from pydantic import BaseModel


class User(BaseModel):
    """
    User record held by the credential store.

    Attributes:
        id: Numeric user ID assigned by the store
        email: Unique, lower-cased login email
        password_hash: bcrypt hash of the password
        display_name: Name shown in the app
        created_at: Creation timestamp (set by the store)
    """

    id: int
    email: str
    password_hash: str
    display_name: str | None = None
    created_at: datetime | None = None

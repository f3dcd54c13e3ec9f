"""Pydantic schemas for user profile endpoints."""

from datetime import datetime

from pydantic import BaseModel, Field


class UserResponse(BaseModel):
    """Public view of a user; never includes the password hash."""

    id: int
    email: str
    display_name: str | None = None
    created_at: datetime | None = None


class UpdateProfileRequest(BaseModel):
    """Profile update; only the display name is editable."""

    display_name: str = Field(min_length=1, max_length=50)

"""Pydantic schemas for authentication endpoints."""

from pydantic import BaseModel, Field, field_validator

from src.cityrun.services.auth.service import MAX_PASSWORD_BYTES


class RegisterRequest(BaseModel):
    """Registration form. Blank email or password is rejected by the service."""

    email: str = Field(max_length=254)
    password: str = Field(description="At most 72 bytes in UTF-8; bcrypt ignores the rest")
    display_name: str | None = Field(default=None, max_length=50)

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value: str) -> str:
        if len(value.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValueError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
        return value


class LoginRequest(BaseModel):
    """Login form."""

    email: str
    password: str


class LoginResponse(BaseModel):
    """Issued session. The same identifier is also set as the session cookie."""

    session_id: str
    user_id: int


class SessionResponse(BaseModel):
    """Result of validating the caller's session."""

    user_id: int


class MessageResponse(BaseModel):
    """Plain acknowledgement."""

    message: str

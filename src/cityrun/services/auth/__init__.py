"""Session-based authentication."""

from src.cityrun.services.auth.dependencies import (
    get_auth_service,
    get_current_user_id,
    get_session_id,
)
from src.cityrun.services.auth.exceptions import InvalidCredentialsError, UnauthenticatedError
from src.cityrun.services.auth.models import User
from src.cityrun.services.auth.passwords import PasswordHasher
from src.cityrun.services.auth.repository import UserRepository
from src.cityrun.services.auth.service import AuthService
from src.cityrun.services.session_store.models import SessionRecord

__all__ = [
    "get_auth_service",
    "get_current_user_id",
    "get_session_id",
    "AuthService",
    "PasswordHasher",
    "UserRepository",
    "InvalidCredentialsError",
    "UnauthenticatedError",
    "SessionRecord",
    "User",
]

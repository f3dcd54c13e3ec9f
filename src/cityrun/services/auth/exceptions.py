"""Custom exceptions for authentication and session handling."""

from src.cityrun.exceptions import CityRunError


class InvalidCredentialsError(CityRunError):
    """Raised when an email/password pair does not match a stored user."""

    code = "INVALID_CREDENTIALS"
    status_code = 401


class UnauthenticatedError(CityRunError):
    """Raised when a session identifier is missing, blank, expired or unknown."""

    code = "UNAUTHENTICATED"
    status_code = 401

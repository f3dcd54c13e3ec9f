"""Custom exceptions for route features."""

from src.cityrun.exceptions import ValidationError


class MalformedGeometryError(ValidationError):
    """Raised when route geometry input cannot be normalized."""

    code = "MALFORMED_GEOMETRY"

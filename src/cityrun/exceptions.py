"""Error taxonomy shared by services and HTTP handlers.

Every error carries a stable ``code`` and the HTTP status it maps to, so the
application-level exception handler can render it without guessing.
"""


class CityRunError(Exception):
    """Base exception for all client-facing CityRun errors."""

    code = "INTERNAL_ERROR"
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(CityRunError):
    """Raised when caller input is malformed."""

    code = "VALIDATION_ERROR"
    status_code = 400


class ConflictError(CityRunError):
    """Raised when a record with the same unique key already exists."""

    code = "CONFLICT"
    status_code = 409


class NotFoundError(CityRunError):
    """Raised when a requested record does not exist."""

    code = "NOT_FOUND"
    status_code = 404


class ForbiddenError(CityRunError):
    """Raised when an authenticated user acts on a record they do not own."""

    code = "FORBIDDEN"
    status_code = 403


class StoreUnavailableError(CityRunError):
    """Raised when the session or credential store cannot be reached."""

    code = "STORE_UNAVAILABLE"
    status_code = 503

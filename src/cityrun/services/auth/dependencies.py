"""FastAPI dependencies for session-based authentication."""

import logging

from fastapi import Depends, Request

from src.cityrun.config import settings
from src.cityrun.services import PostHogService
from src.cityrun.services.auth.exceptions import UnauthenticatedError
from src.cityrun.services.auth.service import AuthService

logger = logging.getLogger(__name__)


def get_auth_service(request: Request) -> AuthService:
    """
    Return the AuthService owned by the application.

    The service is constructed in the lifespan handler and stored on
    ``app.state``; tests replace it via ``app.dependency_overrides``.
    """
    return request.app.state.auth_service


def get_session_id(request: Request) -> str | None:
    """
    Read the session identifier carried by the request.

    Browsers send it in the session cookie; other clients may use the
    session header instead.
    """
    return request.cookies.get(settings.session_cookie_name) or request.headers.get(
        settings.session_header_name
    )


def get_current_user_id(
    request: Request,
    session_id: str | None = Depends(get_session_id),
    auth_service: AuthService = Depends(get_auth_service),
) -> int:
    """
    Validate the request's session and return the user ID.

    Args:
        request: Incoming request (user ID is recorded on ``request.state``)
        session_id: Session identifier from cookie or header
        auth_service: Session owner

    Returns:
        Authenticated user ID

    Raises:
        UnauthenticatedError: If the session is missing, expired or unknown
        StoreUnavailableError: If the session store cannot be reached

    Example:
        @router.get("/me")
        def me(user_id: int = Depends(get_current_user_id)):
            return {"user_id": user_id}
    """
    try:
        user_id = auth_service.validate(session_id)
    except UnauthenticatedError:
        logger.warning(
            "Auth failed: no valid session",
            extra={"error_type": "unauthenticated", "path": request.url.path},
        )
        PostHogService().capture(
            distinct_id="anonymous",
            event="authentication_failed",
            properties={"error": "no_valid_session", "path": request.url.path},
        )
        raise

    request.state.user_id = user_id
    return user_id

"""API handlers for registration, login and session management."""

import logging

from fastapi import APIRouter, Depends, Request, Response, status

from src.cityrun.config import settings
from src.cityrun.features.auth.schemas import (
    LoginRequest,
    LoginResponse,
    MessageResponse,
    RegisterRequest,
    SessionResponse,
)
from src.cityrun.features.users.schemas import UserResponse
from src.cityrun.services import PostHogService
from src.cityrun.services.auth import (
    AuthService,
    get_auth_service,
    get_current_user_id,
    get_session_id,
)
from src.cityrun.services.rate_limiter import default_rate_limit, write_rate_limit

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


def _set_session_cookie(response: Response, session_id: str) -> None:
    response.set_cookie(
        key=settings.session_cookie_name,
        value=session_id,
        max_age=settings.session_ttl_seconds,
        path="/",
        httponly=True,
        samesite="lax",
        secure=settings.session_cookie_secure,
    )


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
@write_rate_limit
def register(
    request: Request,
    body: RegisterRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> UserResponse:
    """
    Register a new user.

    Registration does not log the user in; call ``/auth/login`` afterwards.

    Raises:
        ValidationError: 400 if email or password is blank
        ConflictError: 409 if the email is already registered

    Example Request:
        {"email": "runner@example.com", "password": "s3cret-pass", "display_name": "Runner"}
    """
    user = auth_service.register(body.email, body.password, body.display_name)

    PostHogService().capture(distinct_id=str(user.id), event="user_registered")
    return UserResponse.model_validate(user.model_dump(exclude={"password_hash"}))


@router.post("/login", response_model=LoginResponse)
@write_rate_limit
def login(
    request: Request,
    response: Response,
    body: LoginRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> LoginResponse:
    """
    Log in and start a session.

    The session identifier is returned in the body and set as an HttpOnly
    cookie; non-browser clients send it back in the session header.

    Raises:
        InvalidCredentialsError: 401 if the email is unknown or the password is wrong
        StoreUnavailableError: 503 if the session or credential store is down
    """
    session = auth_service.login(body.email, body.password)
    _set_session_cookie(response, session.session_id)

    PostHogService().capture(distinct_id=str(session.user_id), event="user_logged_in")
    return LoginResponse(session_id=session.session_id, user_id=session.user_id)


@router.post("/logout", response_model=MessageResponse)
@default_rate_limit
def logout(
    request: Request,
    response: Response,
    session_id: str | None = Depends(get_session_id),
    auth_service: AuthService = Depends(get_auth_service),
) -> MessageResponse:
    """Destroy the caller's session. Safe to call without one."""
    auth_service.logout(session_id)
    response.delete_cookie(
        key=settings.session_cookie_name,
        path="/",
        httponly=True,
        samesite="lax",
        secure=settings.session_cookie_secure,
    )
    return MessageResponse(message="Logged out")


@router.get("/session", response_model=SessionResponse)
@default_rate_limit
def get_session(
    request: Request,
    user_id: int = Depends(get_current_user_id),
) -> SessionResponse:
    """Validate the caller's session and return its user ID."""
    return SessionResponse(user_id=user_id)

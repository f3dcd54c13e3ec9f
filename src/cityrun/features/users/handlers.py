"""API handlers for the current user's profile."""

import logging

from fastapi import APIRouter, Depends, Request

from src.cityrun.exceptions import NotFoundError, ValidationError
from src.cityrun.features.users.schemas import UpdateProfileRequest, UserResponse
from src.cityrun.services.auth import User, UserRepository, get_current_user_id
from src.cityrun.services.rate_limiter import default_rate_limit, write_rate_limit

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"])


def get_user_repository(request: Request) -> UserRepository:
    """Return the credential store repository built in the application lifespan."""
    return request.app.state.user_repository


def _to_response(user: User) -> UserResponse:
    return UserResponse.model_validate(user.model_dump(exclude={"password_hash"}))


@router.get("/me", response_model=UserResponse)
@default_rate_limit
def get_profile(
    request: Request,
    user_id: int = Depends(get_current_user_id),
    users: UserRepository = Depends(get_user_repository),
) -> UserResponse:
    """
    Get the current user's profile.

    Raises:
        NotFoundError: 404 if the session outlived its user record
    """
    user = users.get_by_id(user_id)
    if user is None:
        logger.warning(f"Profile not found for user {user_id}")
        raise NotFoundError("User not found")
    return _to_response(user)


@router.put("/me", response_model=UserResponse)
@write_rate_limit
def update_profile(
    request: Request,
    body: UpdateProfileRequest,
    user_id: int = Depends(get_current_user_id),
    users: UserRepository = Depends(get_user_repository),
) -> UserResponse:
    """
    Update the current user's display name.

    Raises:
        ValidationError: 400 if the display name is blank
        NotFoundError: 404 if the user record no longer exists
    """
    display_name = body.display_name.strip()
    if not display_name:
        raise ValidationError("Display name must not be blank")

    user = users.update_display_name(user_id, display_name)
    if user is None:
        raise NotFoundError("User not found")

    logger.info(f"Profile updated for user {user_id}")
    return _to_response(user)

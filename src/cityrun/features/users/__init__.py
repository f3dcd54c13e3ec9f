"""Current user profile endpoints."""

from src.cityrun.features.users.handlers import router

__all__ = ["router"]

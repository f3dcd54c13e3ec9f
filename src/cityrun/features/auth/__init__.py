"""Registration, login and session endpoints."""

from src.cityrun.features.auth.handlers import router

__all__ = ["router"]

"""Route recommendation, geometry normalization and saved routes."""

from src.cityrun.features.routes.geometry import RouteGeometry, normalize_geometry
from src.cityrun.features.routes.handlers import router
from src.cityrun.features.routes.service import RouteRecommendationOrchestrator, SavedRouteService

__all__ = [
    "router",
    "RouteGeometry",
    "normalize_geometry",
    "RouteRecommendationOrchestrator",
    "SavedRouteService",
]

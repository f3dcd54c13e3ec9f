"""API handlers for route recommendation and saved routes."""

import logging

from fastapi import APIRouter, Depends, Request, Response, status

from src.cityrun.features.routes.schemas import (
    RecommendationRequest,
    RecommendedRoute,
    RenameRouteRequest,
    SavedRoute,
    SavedRouteListResponse,
    SaveRouteRequest,
)
from src.cityrun.features.routes.service import RouteRecommendationOrchestrator, SavedRouteService
from src.cityrun.services import PostHogService
from src.cityrun.services.auth import get_current_user_id
from src.cityrun.services.rate_limiter import (
    default_rate_limit,
    geo_heavy_rate_limit,
    write_rate_limit,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/routes", tags=["routes"])


def get_route_orchestrator(request: Request) -> RouteRecommendationOrchestrator:
    """Return the orchestrator built in the application lifespan."""
    return request.app.state.route_orchestrator


def get_saved_route_service(request: Request) -> SavedRouteService:
    """Return the saved-route service built in the application lifespan."""
    return request.app.state.saved_route_service


@router.post("/recommend", response_model=RecommendedRoute)
@geo_heavy_rate_limit
async def recommend_route(
    request: Request,
    body: RecommendationRequest,
    user_id: int = Depends(get_current_user_id),
    orchestrator: RouteRecommendationOrchestrator = Depends(get_route_orchestrator),
) -> RecommendedRoute:
    """
    Recommend a scored running route.

    Without a destination the engine builds a loop of ``distance_km``
    around the origin. With a destination or explicit geometry, the
    normalized line is scored instead.

    Args:
        body: Origin, optional destination/geometry, distance and prefs
        user_id: Authenticated user ID

    Returns:
        Route geometry, distance, sub-scores and endpoints

    Raises:
        MalformedGeometryError: 400 if supplied geometry is invalid
        InvalidRequestError: 400 if the engine cannot route the request
        UpstreamProtocolError: 502 on an unexpected engine response
        UpstreamUnavailableError: 503/504 if the engine is down or slow

    Example Request:
        {
            "origin": [37.5665, 126.978],
            "distance_km": 5.0,
            "prefs": {"avoidUphill": true, "preferRiverside": true}
        }
    """
    route = await orchestrator.recommend(body)

    PostHogService().capture(
        distinct_id=str(user_id),
        event="route_recommended",
        properties={
            "mode": "path" if body.destination or body.geometry else "loop",
            "distance_km": body.distance_km,
            "distance_m": route.distance_m,
            "pref_keys": sorted(body.prefs),
        },
    )
    return route


@router.post("", response_model=SavedRoute, status_code=status.HTTP_201_CREATED)
@write_rate_limit
def save_route(
    request: Request,
    body: SaveRouteRequest,
    user_id: int = Depends(get_current_user_id),
    routes: SavedRouteService = Depends(get_saved_route_service),
) -> SavedRoute:
    """
    Save a route for the current user.

    Geometry may be a LineString object, a WKT LINESTRING, or omitted in
    favour of an origin/destination pair.
    """
    return routes.create(user_id, body)


@router.get("/mine", response_model=SavedRouteListResponse)
@default_rate_limit
def list_my_routes(
    request: Request,
    user_id: int = Depends(get_current_user_id),
    routes: SavedRouteService = Depends(get_saved_route_service),
) -> SavedRouteListResponse:
    """List the current user's saved routes, newest first."""
    return SavedRouteListResponse(data=routes.list_mine(user_id))


@router.put("/{route_id}", response_model=SavedRoute)
@write_rate_limit
def rename_route(
    request: Request,
    route_id: int,
    body: RenameRouteRequest,
    user_id: int = Depends(get_current_user_id),
    routes: SavedRouteService = Depends(get_saved_route_service),
) -> SavedRoute:
    """Rename a saved route. A blank name leaves it unchanged."""
    return routes.rename(user_id, route_id, body.name)


@router.delete("/{route_id}", status_code=status.HTTP_204_NO_CONTENT)
@write_rate_limit
def delete_route(
    request: Request,
    route_id: int,
    user_id: int = Depends(get_current_user_id),
    routes: SavedRouteService = Depends(get_saved_route_service),
) -> Response:
    """Delete a saved route."""
    routes.delete(user_id, route_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

"""Pydantic schemas for route recommendation and saved routes."""

from datetime import datetime
from typing import Annotated, Any

from pydantic import BaseModel, Field, field_validator

from src.cityrun.features.routes.geometry import RouteGeometry

LatLng = Annotated[
    list[float],
    Field(min_length=2, max_length=2, description="[latitude, longitude]"),
]


def _check_lat_lng(value: list[float] | None) -> list[float] | None:
    if value is None:
        return value
    lat, lng = value
    if not -90.0 <= lat <= 90.0:
        raise ValueError(f"latitude {lat} is outside [-90, 90]")
    if not -180.0 <= lng <= 180.0:
        raise ValueError(f"longitude {lng} is outside [-180, 180]")
    return value


class RecommendationRequest(BaseModel):
    """
    Request for a scored running route.

    Without ``destination`` or ``geometry`` the engine builds a loop of
    ``distance_km`` around ``origin``. ``prefs`` is forwarded to the engine
    verbatim.
    """

    origin: LatLng
    destination: LatLng | None = None
    distance_km: float = Field(
        gt=0, allow_inf_nan=False, description="Target route length in kilometres"
    )
    prefs: dict[str, Any] = Field(default_factory=dict)
    geometry: dict[str, Any] | str | None = Field(
        default=None,
        description="Caller-supplied LineString object or WKT LINESTRING",
    )

    @field_validator("origin", "destination")
    @classmethod
    def check_endpoint_range(cls, value: list[float] | None) -> list[float] | None:
        return _check_lat_lng(value)


class RecommendedRoute(BaseModel):
    """Engine-scored route merged with the request's endpoints."""

    name: str | None = None
    geometry: RouteGeometry
    distance_m: float
    scores: dict[str, float] = Field(default_factory=dict)
    origin: list[float]
    destination: list[float]


class SaveRouteRequest(BaseModel):
    """Request to save a route to the caller's list."""

    name: str = Field(min_length=1, max_length=100)
    geometry: dict[str, Any] | str | None = None
    origin: LatLng | None = None
    destination: LatLng | None = None
    distance_m: float | None = Field(default=None, ge=0)
    scores: dict[str, float] = Field(default_factory=dict)

    @field_validator("origin", "destination")
    @classmethod
    def check_endpoint_range(cls, value: list[float] | None) -> list[float] | None:
        return _check_lat_lng(value)

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("name must not be blank")
        return value


class RenameRouteRequest(BaseModel):
    """Rename request; a missing or blank name leaves the route unchanged."""

    name: str | None = Field(default=None, max_length=100)


class SavedRoute(BaseModel):
    """A route saved by a user."""

    id: int
    user_id: int
    name: str
    geometry: RouteGeometry
    distance_m: float | None = None
    scores: dict[str, float] = Field(default_factory=dict)
    origin: list[float] | None = None
    destination: list[float] | None = None
    created_at: datetime | None = None


class SavedRouteListResponse(BaseModel):
    """Saved routes, newest first."""

    data: list[SavedRoute]

"""Route recommendation orchestration and saved-route management."""

import json
import logging
import math
from typing import Any

from src.cityrun.exceptions import ForbiddenError, NotFoundError
from src.cityrun.features.routes.exceptions import MalformedGeometryError
from src.cityrun.features.routes.geometry import RouteGeometry, normalize_geometry
from src.cityrun.features.routes.schemas import (
    RecommendationRequest,
    RecommendedRoute,
    SavedRoute,
    SaveRouteRequest,
)
from src.cityrun.services.database.utils import SupabaseQueryBuilder, database_call
from src.cityrun.services.geo_engine import GeoEngineClient, UpstreamProtocolError

logger = logging.getLogger(__name__)

# Route fields that are not sub-scores
NON_SCORE_FIELDS = frozenset({"distanceM", "originLat", "originLng", "destLat", "destLng"})


def _is_number(value: Any) -> bool:
    return isinstance(value, int | float) and not isinstance(value, bool) and math.isfinite(value)


def extract_scores(route: dict[str, Any]) -> dict[str, float]:
    """
    Collect the engine's numeric sub-scores from a route object.

    Both top-level numeric fields (``uphillM``, ``crosswalkCount``,
    ``finalScore``...) and a nested ``scores`` object are accepted;
    top-level values win on a name clash.
    """
    scores: dict[str, float] = {}
    nested = route.get("scores")
    if isinstance(nested, dict):
        scores.update({key: float(value) for key, value in nested.items() if _is_number(value)})
    for key, value in route.items():
        if key not in NON_SCORE_FIELDS and _is_number(value):
            scores[key] = float(value)
    return scores


def merge_line_parts(geometry: Any) -> Any:
    """
    Join a GeoJSON ``MultiLineString``, or a ``GeometryCollection`` of line
    geometries, into one LineString.

    Parts are concatenated in order and a part's first point is dropped when
    it repeats the previous point. Anything else is returned unchanged.
    """
    if not isinstance(geometry, dict):
        return geometry

    kind = geometry.get("type")
    if kind == "MultiLineString":
        parts = geometry.get("coordinates")
    elif kind == "GeometryCollection" and isinstance(geometry.get("geometries"), list):
        parts = []
        for member in geometry["geometries"]:
            if not isinstance(member, dict):
                return geometry
            if member.get("type") == "LineString":
                parts.append(member.get("coordinates"))
            elif member.get("type") == "MultiLineString" and isinstance(member.get("coordinates"), list):
                parts.extend(member["coordinates"])
            else:
                return geometry
    else:
        return geometry

    if not isinstance(parts, list) or not all(isinstance(part, list) for part in parts):
        return geometry

    merged: list = []
    for part in parts:
        for index, point in enumerate(part):
            if index == 0 and merged and point == merged[-1]:
                continue
            merged.append(point)
    return {"type": "LineString", "coordinates": merged}


def parse_engine_geometry(route: dict[str, Any]) -> RouteGeometry:
    """
    Read the route line from an engine route object.

    The engine sends either ``geometry`` or ``geomJson`` (a GeoJSON string).
    Its loop routes arrive as a ``MultiLineString`` of edges, which is merged
    into a single LineString.

    Raises:
        UpstreamProtocolError: If neither is present or the line is invalid
    """
    geometry = route.get("geometry")
    if geometry is None and isinstance(route.get("geomJson"), str):
        try:
            geometry = json.loads(route["geomJson"])
        except ValueError as e:
            raise UpstreamProtocolError("Route engine geometry is not valid JSON") from e

    if geometry is None:
        raise UpstreamProtocolError("Route engine response has no geometry")

    try:
        return normalize_geometry(merge_line_parts(geometry))
    except MalformedGeometryError as e:
        raise UpstreamProtocolError(f"Route engine geometry is invalid: {e.message}") from e


class RouteRecommendationOrchestrator:
    """
    Turn a RecommendationRequest into a RecommendedRoute via the geo-engine.

    Caller-supplied geometry (or a destination, which implies a straight
    line) is normalized before anything is sent, so the engine always
    receives a canonical ``[lon, lat]`` LineString. One outbound call per
    request; errors from the engine client propagate unchanged.
    """

    def __init__(self, engine: GeoEngineClient):
        self.engine = engine

    def build_payload(self, request: RecommendationRequest) -> dict[str, Any]:
        """
        Build the geo-engine request body.

        Returns:
            ``{distanceM, geometry, prefs}`` when a path is known, otherwise
            ``{origin, distanceKm, prefs}`` for a loop around the origin

        Raises:
            MalformedGeometryError: If the supplied geometry is invalid
        """
        if request.geometry is not None or request.destination is not None:
            geometry = normalize_geometry(request.geometry, request.origin, request.destination)
            return {
                "distanceM": round(request.distance_km * 1000),
                "geometry": geometry.model_dump(),
                "prefs": request.prefs,
            }

        return {
            "origin": list(request.origin),
            "distanceKm": request.distance_km,
            "prefs": request.prefs,
        }

    async def recommend(self, request: RecommendationRequest) -> RecommendedRoute:
        """
        Score a route with the geo-engine.

        Raises:
            MalformedGeometryError: Supplied geometry is invalid (no call is made)
            InvalidRequestError: Engine rejected the request
            UpstreamProtocolError: Engine answered outside its contract
            UpstreamUnavailableError: Engine unreachable or timed out
        """
        payload = self.build_payload(request)
        mode = "loop" if "origin" in payload else "path"
        logger.info(
            f"Requesting {mode} route from geo-engine",
            extra={"mode": mode, "distance_km": request.distance_km, "prefs": sorted(request.prefs)},
        )

        route = await self.engine.score_route(payload)
        return self.to_recommended_route(route, request)

    def to_recommended_route(
        self, route: dict[str, Any], request: RecommendationRequest
    ) -> RecommendedRoute:
        """
        Map an engine route object onto RecommendedRoute.

        The engine does not echo endpoints back reliably, so origin and
        destination come from the request; a loop ends where it starts.

        Raises:
            UpstreamProtocolError: If geometry or a numeric distanceM is missing
        """
        geometry = parse_engine_geometry(route)

        distance = route.get("distanceM")
        if not _is_number(distance):
            raise UpstreamProtocolError("Route engine response has no numeric distanceM")

        name = route.get("name")
        return RecommendedRoute(
            name=name if isinstance(name, str) else None,
            geometry=geometry,
            distance_m=float(distance),
            scores=extract_scores(route),
            origin=list(request.origin),
            destination=list(request.destination or request.origin),
        )


class SavedRouteService:
    """
    CRUD for routes saved by a user.

    Geometry is normalized before it is stored. Every operation on an
    existing route checks ownership first.
    """

    def __init__(self, db: SupabaseQueryBuilder, table: str = "user_routes"):
        self.db = db
        self.table = table

    def create(self, user_id: int, request: SaveRouteRequest) -> SavedRoute:
        """
        Save a route for ``user_id``.

        Raises:
            MalformedGeometryError: If no valid geometry can be derived
        """
        geometry = normalize_geometry(request.geometry, request.origin, request.destination)
        data = {
            "user_id": user_id,
            "name": request.name,
            "geometry": geometry.model_dump(),
            "distance_m": request.distance_m,
            "scores": request.scores,
            "origin_lat": request.origin[0] if request.origin else None,
            "origin_lng": request.origin[1] if request.origin else None,
            "dest_lat": request.destination[0] if request.destination else None,
            "dest_lng": request.destination[1] if request.destination else None,
        }

        with database_call("create_route"):
            row = self.db.insert_record(self.table, data)
        if row is None:
            raise RuntimeError(f"Insert into {self.table} returned no row")

        logger.info(f"Saved route {row['id']} for user {user_id}")
        return self._to_route(row)

    def list_mine(self, user_id: int) -> list[SavedRoute]:
        """List a user's saved routes, newest first."""
        with database_call("list_routes"):
            rows = self.db.list_records(
                self.table, filters={"user_id": user_id}, order_by="created_at", order_desc=True
            )
        return [self._to_route(row) for row in rows]

    def rename(self, user_id: int, route_id: int, name: str | None) -> SavedRoute:
        """
        Rename a saved route. A missing or blank name leaves it unchanged.

        Raises:
            NotFoundError: Unknown route
            ForbiddenError: Route belongs to another user
        """
        route = self._get_owned(user_id, route_id)
        if name is None or not name.strip():
            return route

        with database_call("rename_route"):
            row = self.db.update_record(self.table, route_id, {"name": name.strip()})
        if row is None:
            raise NotFoundError(f"Route {route_id} not found")
        return self._to_route(row)

    def delete(self, user_id: int, route_id: int) -> None:
        """
        Delete a saved route.

        Raises:
            NotFoundError: Unknown route
            ForbiddenError: Route belongs to another user
        """
        self._get_owned(user_id, route_id)
        with database_call("delete_route"):
            self.db.delete_record(self.table, route_id)
        logger.info(f"Deleted route {route_id} for user {user_id}")

    def _get_owned(self, user_id: int, route_id: int) -> SavedRoute:
        with database_call("get_route"):
            row = self.db.get_by_id(self.table, route_id)
        if row is None:
            raise NotFoundError(f"Route {route_id} not found")

        route = self._to_route(row)
        if route.user_id != user_id:
            logger.warning(
                f"User {user_id} attempted to modify route {route_id} owned by {route.user_id}"
            )
            raise ForbiddenError("You do not own this route")
        return route

    @staticmethod
    def _to_route(row: dict[str, Any]) -> SavedRoute:
        origin = None
        if row.get("origin_lat") is not None and row.get("origin_lng") is not None:
            origin = [row["origin_lat"], row["origin_lng"]]
        destination = None
        if row.get("dest_lat") is not None and row.get("dest_lng") is not None:
            destination = [row["dest_lat"], row["dest_lng"]]

        return SavedRoute(
            id=row["id"],
            user_id=row["user_id"],
            name=row["name"],
            geometry=row["geometry"],
            distance_m=row.get("distance_m"),
            scores=row.get("scores") or {},
            origin=origin,
            destination=destination,
            created_at=row.get("created_at"),
        )

"""Normalization of route geometry input into one canonical LineString.

Canonical coordinates are always ``[longitude, latitude]``. Three input
shapes are accepted:

1. A GeoJSON-style LineString (``{"type": "LineString", "coordinates": ...}``
   or a ``RouteGeometry``), already in canonical order. Validated only.
2. A WKT ``LINESTRING(lon lat, lon lat, ...)`` string.
3. A bare origin/destination pair, each ``[latitude, longitude]``. This is
   the one shape whose order differs from the canonical form, so the pair
   is swapped while building the straight two-point line.
"""

import math
from collections.abc import Sequence
from typing import Any

from pydantic import BaseModel

from src.cityrun.features.routes.exceptions import MalformedGeometryError

WKT_PREFIX = "LINESTRING"


class RouteGeometry(BaseModel):
    """Canonical route line: at least two ``[longitude, latitude]`` points."""

    type: str = "LineString"
    coordinates: list[list[float]]


def _to_float(value: Any, label: str) -> float:
    if isinstance(value, bool):
        raise MalformedGeometryError(f"{label} must be a number, got {value!r}")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise MalformedGeometryError(f"{label} must be a number, got {value!r}") from None
    if not math.isfinite(number):
        raise MalformedGeometryError(f"{label} must be finite, got {value!r}")
    return number


def _check_lon_lat(lon: float, lat: float) -> None:
    if not -180.0 <= lon <= 180.0:
        raise MalformedGeometryError(f"Longitude {lon} is outside [-180, 180]")
    if not -90.0 <= lat <= 90.0:
        raise MalformedGeometryError(f"Latitude {lat} is outside [-90, 90]")


def _build_line(points: list[list[float]]) -> RouteGeometry:
    """Range-check every point and require two distinct points."""
    for lon, lat in points:
        _check_lon_lat(lon, lat)
    if len({(lon, lat) for lon, lat in points}) < 2:
        raise MalformedGeometryError("Route geometry needs at least two distinct points")
    return RouteGeometry(coordinates=points)


def validate_line_string(geometry: RouteGeometry | dict[str, Any]) -> RouteGeometry:
    """
    Validate an already-canonical LineString and pass it through unchanged.

    Raises:
        MalformedGeometryError: If it is not a LineString of finite, in-range
            [lon, lat] pairs with at least two distinct points
    """
    if isinstance(geometry, RouteGeometry):
        geometry = geometry.model_dump()
    if not isinstance(geometry, dict):
        raise MalformedGeometryError("Geometry must be a LineString object")
    if geometry.get("type") != "LineString":
        raise MalformedGeometryError(f"Unsupported geometry type: {geometry.get('type')!r}")

    coordinates = geometry.get("coordinates")
    if not isinstance(coordinates, list | tuple):
        raise MalformedGeometryError("LineString coordinates must be a list")

    points = []
    for index, pair in enumerate(coordinates):
        if not isinstance(pair, list | tuple) or len(pair) != 2:
            raise MalformedGeometryError(f"Point {index} must be a [longitude, latitude] pair")
        lon = _to_float(pair[0], f"Point {index} longitude")
        lat = _to_float(pair[1], f"Point {index} latitude")
        points.append([lon, lat])
    return _build_line(points)


def parse_wkt_line_string(text: str) -> RouteGeometry:
    """
    Parse ``LINESTRING(lon lat, lon lat, ...)``.

    Raises:
        MalformedGeometryError: If the LINESTRING marker or parentheses are
            missing, a pair does not split into exactly two tokens, or a
            token is not a finite float
    """
    body = text.strip()
    if body[: len(WKT_PREFIX)].upper() != WKT_PREFIX:
        raise MalformedGeometryError("WKT geometry must start with LINESTRING")

    body = body[len(WKT_PREFIX) :].strip()
    if not (body.startswith("(") and body.endswith(")")):
        raise MalformedGeometryError("WKT LINESTRING must be wrapped in parentheses")

    points = []
    for index, pair in enumerate(body[1:-1].split(",")):
        tokens = pair.split()
        if len(tokens) != 2:
            raise MalformedGeometryError(
                f"WKT point {index} must have exactly two coordinates, got {pair.strip()!r}"
            )
        lon = _to_float(tokens[0], f"WKT point {index} longitude")
        lat = _to_float(tokens[1], f"WKT point {index} latitude")
        points.append([lon, lat])
    return _build_line(points)


def _lat_lng(value: Sequence[Any] | None, label: str) -> tuple[float, float]:
    if not isinstance(value, list | tuple) or len(value) != 2:
        raise MalformedGeometryError(f"{label} must be a [latitude, longitude] pair")
    return _to_float(value[0], f"{label} latitude"), _to_float(value[1], f"{label} longitude")


def line_from_endpoints(origin: Sequence[Any], destination: Sequence[Any]) -> RouteGeometry:
    """
    Build a straight two-point line from ``[lat, lng]`` endpoints.

    Each endpoint is swapped to ``[lng, lat]``.
    """
    origin_lat, origin_lng = _lat_lng(origin, "Origin")
    dest_lat, dest_lng = _lat_lng(destination, "Destination")
    return _build_line([[origin_lng, origin_lat], [dest_lng, dest_lat]])


def normalize_geometry(
    geometry: RouteGeometry | dict[str, Any] | str | None = None,
    origin: Sequence[Any] | None = None,
    destination: Sequence[Any] | None = None,
) -> RouteGeometry:
    """
    Produce the canonical RouteGeometry from any accepted input shape.

    An explicit ``geometry`` wins over endpoints.

    Args:
        geometry: LineString object or WKT LINESTRING string
        origin: ``[latitude, longitude]`` start point
        destination: ``[latitude, longitude]`` end point

    Returns:
        RouteGeometry in ``[longitude, latitude]`` order

    Raises:
        MalformedGeometryError: If the input cannot be normalized

    Example:
        >>> normalize_geometry("LINESTRING(127.0 37.5, 127.1 37.6)").coordinates
        [[127.0, 37.5], [127.1, 37.6]]
        >>> normalize_geometry(origin=[37.5, 127.0], destination=[37.6, 127.1]).coordinates
        [[127.0, 37.5], [127.1, 37.6]]
    """
    if isinstance(geometry, str):
        return parse_wkt_line_string(geometry)
    if geometry is not None:
        return validate_line_string(geometry)
    if origin is not None and destination is not None:
        return line_from_endpoints(origin, destination)
    raise MalformedGeometryError("Provide a geometry or both origin and destination")

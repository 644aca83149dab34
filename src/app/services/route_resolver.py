from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Mapping

from src.app.ports.output import IDirectionsProvider
from src.domain.exceptions import RouteResolutionFailed, UpstreamServiceError
from src.domain.models import Coordinate, RouteResult

logger = logging.getLogger(__name__)


def _number(value: Any, *, name: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise RouteResolutionFailed(f"Route {name} is missing or not a number")
    return float(value)


def decode_geometry(geometry: Any) -> tuple[Coordinate, ...]:
    """Decode a GeoJSON LineString geometry into latitude-first coordinates.

    The service sends [lng, lat] pairs; point order is preserved.
    """

    raw_points = geometry.get("coordinates") if isinstance(geometry, dict) else None
    if not isinstance(raw_points, list) or not raw_points:
        raise RouteResolutionFailed("Route geometry has no coordinates")

    points: list[Coordinate] = []
    for raw in raw_points:
        if not isinstance(raw, (list, tuple)) or len(raw) < 2:
            raise RouteResolutionFailed(f"Malformed geometry point: {raw!r}")
        lon, lat = raw[0], raw[1]
        if isinstance(lon, bool) or isinstance(lat, bool):
            raise RouteResolutionFailed(f"Malformed geometry point: {raw!r}")
        if not isinstance(lon, (int, float)) or not isinstance(lat, (int, float)):
            raise RouteResolutionFailed(f"Malformed geometry point: {raw!r}")
        try:
            points.append(Coordinate(latitude=float(lat), longitude=float(lon)))
        except ValueError as exc:
            raise RouteResolutionFailed(str(exc)) from exc

    return tuple(points)


def route_from_payload(payload: Mapping[str, Any]) -> RouteResult:
    """Build a RouteResult from the first route of a directions payload.

    Later routes are alternatives and are ignored. No rounding happens here.
    """

    routes = payload.get("routes") if isinstance(payload, Mapping) else None
    if not isinstance(routes, list) or not routes:
        raise RouteResolutionFailed("Directions service returned no routes")

    first = routes[0]
    if not isinstance(first, dict):
        raise RouteResolutionFailed("Directions service returned a malformed route")

    polyline = decode_geometry(first.get("geometry"))
    distance_m = _number(first.get("distance"), name="distance")
    duration_s = _number(first.get("duration"), name="duration")

    return RouteResult(
        polyline=polyline,
        distance_km=distance_m / 1000.0,
        duration_min=duration_s / 60.0,
    )


@dataclass(slots=True)
class RouteResolver:
    """Resolves a driving route between two coordinates.

    Every failure mode (transport, HTTP status, timeout, empty routes,
    malformed geometry) surfaces as RouteResolutionFailed.
    """

    directions: IDirectionsProvider
    timeout_s: float = 12.0

    async def resolve(self, origin: Coordinate, destination: Coordinate) -> RouteResult:
        try:
            payload = await asyncio.wait_for(
                self.directions.get_directions(origin=origin, destination=destination),
                timeout=self.timeout_s,
            )
        except asyncio.TimeoutError as exc:
            raise RouteResolutionFailed(
                f"Directions service timed out after {self.timeout_s}s"
            ) from exc
        except UpstreamServiceError as exc:
            raise RouteResolutionFailed(
                str(exc) or "Directions service unavailable"
            ) from exc

        route = route_from_payload(payload)
        logger.debug(
            "Resolved route: %d points, %.3f km, %.1f min",
            len(route.polyline),
            route.distance_km,
            route.duration_min,
        )
        return route

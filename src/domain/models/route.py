from __future__ import annotations

from dataclasses import dataclass, field

from .geo import Coordinate


@dataclass(frozen=True, slots=True)
class RouteResult:
    """A single driving route between one (origin, destination) pair.

    The polyline keeps the directions service's order: the first point is
    next to the origin, the last one next to the destination. Distance and
    duration are unrounded.
    """

    polyline: tuple[Coordinate, ...]
    distance_km: float
    duration_min: float


@dataclass(frozen=True, slots=True)
class EdgePadding:
    """Screen padding in pixels around a fitted region."""

    top: int = 100
    right: int = 50
    bottom: int = 100
    left: int = 50


@dataclass(frozen=True, slots=True)
class ViewportRegion:
    center: Coordinate
    north_east: Coordinate
    south_west: Coordinate
    padding: EdgePadding = field(default_factory=EdgePadding)


@dataclass(frozen=True, slots=True)
class CameraCommand:
    """One-shot request for the map surface to move its camera."""

    region: ViewportRegion
    animated: bool = True

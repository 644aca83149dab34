from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .geo import Coordinate
from .route import RouteResult


class PermissionState(str, Enum):
    UNKNOWN = "unknown"
    REQUESTING = "requesting"
    GRANTED = "granted"
    DENIED = "denied"


class ErrorKind(str, Enum):
    PERMISSION_DENIED = "permission_denied"
    LOCATION_UNAVAILABLE = "location_unavailable"
    ROUTE_RESOLUTION_FAILED = "route_resolution_failed"


@dataclass(frozen=True, slots=True)
class SelectionState:
    """Snapshot of what the map screen shows.

    Snapshots are immutable; the coordinator publishes a new one after
    every change.
    """

    origin: Coordinate | None = None
    selected_clinic_id: str | None = None
    route: RouteResult | None = None
    loading_route: bool = False
    route_error: ErrorKind | None = None

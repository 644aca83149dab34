from .clinic import Clinic
from .geo import Coordinate
from .route import CameraCommand, EdgePadding, RouteResult, ViewportRegion
from .selection import ErrorKind, PermissionState, SelectionState

__all__ = [
    "CameraCommand",
    "Clinic",
    "Coordinate",
    "EdgePadding",
    "ErrorKind",
    "PermissionState",
    "RouteResult",
    "SelectionState",
    "ViewportRegion",
]

from .routing import (
    CatalogFetchFailed,
    ClinicRoutingError,
    EmptyCoordinateSet,
    LocationUnavailable,
    PermissionDenied,
    RouteResolutionFailed,
    UpstreamServiceError,
)

__all__ = [
    "CatalogFetchFailed",
    "ClinicRoutingError",
    "EmptyCoordinateSet",
    "LocationUnavailable",
    "PermissionDenied",
    "RouteResolutionFailed",
    "UpstreamServiceError",
]

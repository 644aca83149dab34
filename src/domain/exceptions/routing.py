class ClinicRoutingError(Exception):
    """Base exception for the clinic routing engine."""


class UpstreamServiceError(ClinicRoutingError):
    """Raised by adapters when an external service cannot answer."""


class LocationUnavailable(ClinicRoutingError):
    """Raised when no device coordinate can be acquired."""


class PermissionDenied(LocationUnavailable):
    """Raised when location access has been denied by the user."""


class CatalogFetchFailed(ClinicRoutingError):
    """Raised when the clinic directory could not be fetched."""


class RouteResolutionFailed(ClinicRoutingError):
    """Raised when no route is available between origin and destination."""


class EmptyCoordinateSet(ClinicRoutingError, ValueError):
    """Raised when a viewport is fitted over zero coordinates."""

from .clinic_directory import IClinicDirectory
from .directions_provider import IDirectionsProvider
from .location_platform import ILocationPlatform

__all__ = [
    "IClinicDirectory",
    "IDirectionsProvider",
    "ILocationPlatform",
]

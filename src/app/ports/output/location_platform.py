from __future__ import annotations

from abc import ABC, abstractmethod

from src.domain.models import Coordinate


class ILocationPlatform(ABC):
    """Port for the device's location permission prompt and position fix."""

    @abstractmethod
    async def request_foreground_permission(self) -> bool:
        """Prompt for foreground location access; True when granted."""

    @abstractmethod
    async def get_current_position(self) -> Coordinate:
        """Return a single position fix or raise UpstreamServiceError."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Mapping

from src.domain.models import Coordinate


class IDirectionsProvider(ABC):
    """Port for an external driving-directions service."""

    @abstractmethod
    async def get_directions(
        self, *, origin: Coordinate, destination: Coordinate
    ) -> Mapping[str, Any]:
        """Return the decoded directions payload for one origin/destination pair."""

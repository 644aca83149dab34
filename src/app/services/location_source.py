from __future__ import annotations

import asyncio
from dataclasses import dataclass

from src.app.ports.output import ILocationPlatform
from src.app.services.permission_gate import PermissionGate
from src.domain.exceptions import (
    LocationUnavailable,
    PermissionDenied,
    UpstreamServiceError,
)
from src.domain.models import Coordinate, PermissionState


@dataclass(slots=True)
class LocationSource:
    """Acquires the current device coordinate once permission is granted.

    Every call goes back to the platform; nothing is cached here.
    """

    platform: ILocationPlatform
    permission_gate: PermissionGate
    timeout_s: float = 12.0

    async def get_current_coordinate(self) -> Coordinate:
        state = self.permission_gate.current_state()
        if state is PermissionState.DENIED:
            raise PermissionDenied("Location permission was denied")
        if state is not PermissionState.GRANTED:
            raise LocationUnavailable(
                f"Location permission is not granted (state: {state.value})"
            )

        try:
            return await asyncio.wait_for(
                self.platform.get_current_position(), timeout=self.timeout_s
            )
        except asyncio.TimeoutError as exc:
            raise LocationUnavailable(
                f"Timed out after {self.timeout_s}s waiting for a position fix"
            ) from exc
        except (UpstreamServiceError, ValueError) as exc:
            raise LocationUnavailable(str(exc) or "Position fix failed") from exc

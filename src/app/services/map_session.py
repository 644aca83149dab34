from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

from src.app.services.clinic_catalog import ClinicCatalog
from src.app.services.location_source import LocationSource
from src.app.services.permission_gate import PermissionGate
from src.app.services.selection_coordinator import SelectionCoordinator
from src.domain.exceptions import CatalogFetchFailed
from src.domain.models import Coordinate, ErrorKind, PermissionState

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class MapSession:
    """Session context for the clinic map.

    Permission gate and location source live as long as the app session;
    catalog and coordinator belong to the map screen and are dropped by
    close().
    """

    permission_gate: PermissionGate
    location_source: LocationSource
    catalog: ClinicCatalog
    coordinator: SelectionCoordinator

    async def start(self) -> PermissionState:
        """Load clinics and ask for location access, as on screen mount."""

        catalog_result, permission = await asyncio.gather(
            self.catalog.fetch_all(),
            self.permission_gate.request_permission(),
            return_exceptions=True,
        )

        if isinstance(permission, BaseException):
            raise permission
        if isinstance(catalog_result, CatalogFetchFailed):
            logger.warning("Starting without clinics: %s", catalog_result)
        elif isinstance(catalog_result, BaseException):
            raise catalog_result

        await self._after_permission(permission)
        return permission

    async def grant_permission(self) -> PermissionState:
        """Re-prompt for location access after the user asked for it."""

        state = await self.permission_gate.request_permission()
        await self._after_permission(state)
        return state

    async def refresh_location(self) -> Coordinate | None:
        return await self.coordinator.locate()

    async def refresh_clinics(self) -> None:
        await self.catalog.refresh()

    def close(self) -> None:
        self.coordinator.close()

    async def _after_permission(self, state: PermissionState) -> None:
        if self.coordinator.closed:
            return
        if state is PermissionState.GRANTED:
            await self.coordinator.locate()
        else:
            self.coordinator.record_error(ErrorKind.PERMISSION_DENIED)

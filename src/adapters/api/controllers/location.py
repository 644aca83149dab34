from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from src.adapters.api.dependencies import get_location_platform, get_map_session
from src.adapters.api.schemas.map import (
    CoordinateSchema,
    PermissionReportSchema,
    PermissionSchema,
    SelectionSchema,
    StartSessionSchema,
    selection_to_schema,
)
from src.adapters.location.reported_location_platform import ReportedLocationPlatform
from src.app.services.map_session import MapSession
from src.domain.models import ErrorKind

router = APIRouter(tags=["location"])


def _selection(session: MapSession) -> SelectionSchema:
    coordinator = session.coordinator
    return selection_to_schema(coordinator.state, coordinator.selected_clinic())


@router.post("/session/start", response_model=SelectionSchema)
async def start_session(
    req: StartSessionSchema,
    session: MapSession = Depends(get_map_session),
    platform: ReportedLocationPlatform = Depends(get_location_platform),
) -> SelectionSchema:
    if req.location_granted is not None:
        platform.report_permission(req.location_granted)
    if req.position is not None:
        platform.report_position(req.position.to_domain())

    await session.start()
    return _selection(session)


@router.get("/location/permission", response_model=PermissionSchema)
async def get_permission(
    session: MapSession = Depends(get_map_session),
) -> PermissionSchema:
    return PermissionSchema(state=session.permission_gate.current_state().value)


@router.post("/location/permission", response_model=PermissionSchema)
async def report_permission(
    req: PermissionReportSchema,
    session: MapSession = Depends(get_map_session),
    platform: ReportedLocationPlatform = Depends(get_location_platform),
) -> PermissionSchema:
    platform.report_permission(req.granted)
    state = await session.grant_permission()
    return PermissionSchema(state=state.value)


@router.post("/location", response_model=SelectionSchema)
async def report_position(
    req: CoordinateSchema,
    session: MapSession = Depends(get_map_session),
    platform: ReportedLocationPlatform = Depends(get_location_platform),
) -> SelectionSchema:
    platform.report_position(req.to_domain())
    coordinate = await session.refresh_location()
    if coordinate is None:
        error = session.coordinator.state.route_error
        if error is ErrorKind.PERMISSION_DENIED:
            raise HTTPException(status_code=403, detail="Location permission denied")
        raise HTTPException(status_code=503, detail="Location unavailable")
    return _selection(session)

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response

from src.adapters.api.dependencies import get_map_session
from src.adapters.api.schemas.map import (
    CameraCommandSchema,
    SelectClinicSchema,
    SelectionSchema,
    selection_to_schema,
)
from src.app.services.map_session import MapSession

router = APIRouter(prefix="/selection", tags=["selection"])


@router.get("", response_model=SelectionSchema)
async def get_selection(
    session: MapSession = Depends(get_map_session),
) -> SelectionSchema:
    coordinator = session.coordinator
    return selection_to_schema(coordinator.state, coordinator.selected_clinic())


@router.put("/clinic", response_model=SelectionSchema)
async def select_clinic(
    req: SelectClinicSchema,
    session: MapSession = Depends(get_map_session),
) -> SelectionSchema:
    if req.clinic_id is not None and session.catalog.get(req.clinic_id) is None:
        raise HTTPException(status_code=404, detail="Clinic not found")

    coordinator = session.coordinator
    coordinator.set_selected_clinic(req.clinic_id)
    return selection_to_schema(coordinator.state, coordinator.selected_clinic())


@router.get(
    "/camera",
    response_model=CameraCommandSchema,
    responses={204: {"description": "No pending camera command"}},
)
async def take_camera_command(
    session: MapSession = Depends(get_map_session),
):
    command = session.coordinator.take_camera_command()
    if command is None:
        return Response(status_code=204)
    return CameraCommandSchema.from_domain(command)

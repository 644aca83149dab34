from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query

from src.adapters.api.dependencies import get_map_session
from src.adapters.api.schemas.map import ClinicListSchema, ClinicSchema
from src.app.services.map_session import MapSession
from src.domain.exceptions import CatalogFetchFailed
from src.domain.models import Coordinate

router = APIRouter(prefix="/clinics", tags=["clinics"])


def _catalog_to_schema(session: MapSession, clinics) -> ClinicListSchema:
    catalog = session.catalog
    return ClinicListSchema(
        clinics=[ClinicSchema.from_domain(c) for c in clinics],
        loading=catalog.is_loading,
        error=str(catalog.last_error) if catalog.last_error else None,
    )


@router.get("", response_model=ClinicListSchema)
async def list_clinics(
    near_lat: float | None = Query(default=None, ge=-90.0, le=90.0),
    near_lon: float | None = Query(default=None, ge=-180.0, le=180.0),
    limit: int | None = Query(default=None, ge=1),
    session: MapSession = Depends(get_map_session),
) -> ClinicListSchema:
    if near_lat is not None and near_lon is not None:
        origin = Coordinate(latitude=near_lat, longitude=near_lon)
        clinics = session.catalog.nearest(origin, limit=limit)
    else:
        clinics = session.catalog.clinics
        if limit is not None:
            clinics = clinics[:limit]
    return _catalog_to_schema(session, clinics)


@router.post("/refresh", response_model=ClinicListSchema)
async def refresh_clinics(
    session: MapSession = Depends(get_map_session),
) -> ClinicListSchema:
    try:
        await session.refresh_clinics()
    except CatalogFetchFailed as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc
    return _catalog_to_schema(session, session.catalog.clinics)

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from src.domain.models import (
    CameraCommand,
    Clinic,
    Coordinate,
    RouteResult,
    SelectionState,
)


class CoordinateSchema(BaseModel):
    latitude: float = Field(..., ge=-90.0, le=90.0)
    longitude: float = Field(..., ge=-180.0, le=180.0)

    @classmethod
    def from_domain(cls, c: Coordinate) -> "CoordinateSchema":
        return cls(latitude=c.latitude, longitude=c.longitude)

    def to_domain(self) -> Coordinate:
        return Coordinate(latitude=self.latitude, longitude=self.longitude)


class ClinicSchema(BaseModel):
    id: str
    name: str
    address: str
    location: CoordinateSchema | None = None
    contact_info: str | None = None

    @classmethod
    def from_domain(cls, clinic: Clinic) -> "ClinicSchema":
        return cls(
            id=clinic.id,
            name=clinic.name,
            address=clinic.address,
            location=(
                CoordinateSchema.from_domain(clinic.location)
                if clinic.location is not None
                else None
            ),
            contact_info=clinic.contact_info,
        )


class ClinicListSchema(BaseModel):
    clinics: list[ClinicSchema] = []
    loading: bool = False
    error: str | None = None


class PermissionSchema(BaseModel):
    state: Literal["unknown", "requesting", "granted", "denied"]


class PermissionReportSchema(BaseModel):
    granted: bool


class StartSessionSchema(BaseModel):
    location_granted: bool | None = None
    position: CoordinateSchema | None = None


class RouteSchema(BaseModel):
    polyline: list[CoordinateSchema] = []
    distance_km: float
    duration_min: float

    @classmethod
    def from_domain(cls, route: RouteResult) -> "RouteSchema":
        return cls(
            polyline=[CoordinateSchema.from_domain(p) for p in route.polyline],
            distance_km=route.distance_km,
            duration_min=route.duration_min,
        )


class SelectionSchema(BaseModel):
    origin: CoordinateSchema | None = None
    selected_clinic_id: str | None = None
    route: RouteSchema | None = None
    loading_route: bool = False
    route_error: str | None = None
    eta_text: str | None = None


class SelectClinicSchema(BaseModel):
    clinic_id: str | None = None


class PaddingSchema(BaseModel):
    top: int
    right: int
    bottom: int
    left: int


class CameraCommandSchema(BaseModel):
    center: CoordinateSchema
    north_east: CoordinateSchema
    south_west: CoordinateSchema
    padding: PaddingSchema
    animated: bool = True

    @classmethod
    def from_domain(cls, command: CameraCommand) -> "CameraCommandSchema":
        region = command.region
        return cls(
            center=CoordinateSchema.from_domain(region.center),
            north_east=CoordinateSchema.from_domain(region.north_east),
            south_west=CoordinateSchema.from_domain(region.south_west),
            padding=PaddingSchema(
                top=region.padding.top,
                right=region.padding.right,
                bottom=region.padding.bottom,
                left=region.padding.left,
            ),
            animated=command.animated,
        )


def eta_text(clinic: Clinic | None, route: RouteResult | None) -> str | None:
    if clinic is None or route is None:
        return None
    return (
        f"Distance to {clinic.name}: {route.distance_km:.2f} km"
        f" | ETA: {route.duration_min:.1f} mins"
    )


def selection_to_schema(
    state: SelectionState, clinic: Clinic | None = None
) -> SelectionSchema:
    return SelectionSchema(
        origin=(
            CoordinateSchema.from_domain(state.origin)
            if state.origin is not None
            else None
        ),
        selected_clinic_id=state.selected_clinic_id,
        route=RouteSchema.from_domain(state.route) if state.route else None,
        loading_route=state.loading_route,
        route_error=state.route_error.value if state.route_error else None,
        eta_text=eta_text(clinic, state.route),
    )

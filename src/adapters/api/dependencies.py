from __future__ import annotations

from fastapi import Request

from src.adapters.clinics.http_clinic_directory import HttpClinicDirectory
from src.adapters.directions.mapbox_directions_adapter import MapboxDirectionsAdapter
from src.adapters.location.reported_location_platform import ReportedLocationPlatform
from src.adapters.settings import RuntimeConfig
from src.app.ports.output import ILocationPlatform
from src.app.services.clinic_catalog import ClinicCatalog
from src.app.services.location_source import LocationSource
from src.app.services.map_session import MapSession
from src.app.services.permission_gate import PermissionGate
from src.app.services.route_resolver import RouteResolver
from src.app.services.selection_coordinator import SelectionCoordinator


def build_map_session(config: RuntimeConfig, platform: ILocationPlatform) -> MapSession:
    gate = PermissionGate(platform=platform, timeout_s=config.timeout_s)
    location_source = LocationSource(
        platform=platform, permission_gate=gate, timeout_s=config.timeout_s
    )
    catalog = ClinicCatalog(
        directory=HttpClinicDirectory(
            url=config.clinics_api_url, timeout_s=config.timeout_s
        ),
        timeout_s=config.timeout_s,
    )
    resolver = RouteResolver(
        directions=MapboxDirectionsAdapter(
            access_token=config.mapbox_access_token,
            base_url=config.directions_url,
            profile=config.directions_profile,
            timeout_s=config.timeout_s,
        ),
        timeout_s=config.timeout_s,
    )
    coordinator = SelectionCoordinator(
        catalog=catalog,
        resolver=resolver,
        location_source=location_source,
        padding=config.viewport_padding,
    )
    return MapSession(
        permission_gate=gate,
        location_source=location_source,
        catalog=catalog,
        coordinator=coordinator,
    )


async def get_location_platform(request: Request) -> ReportedLocationPlatform:
    platform = getattr(request.app.state, "location_platform", None)
    if platform is None:
        platform = ReportedLocationPlatform()
        request.app.state.location_platform = platform
    return platform


async def get_map_session(request: Request) -> MapSession:
    # One session per process, created on first use. The check and the store
    # must not be split by an await.
    platform = await get_location_platform(request)
    session = getattr(request.app.state, "map_session", None)
    if session is None:
        session = build_map_session(RuntimeConfig.from_env(), platform)
        request.app.state.map_session = session
    return session

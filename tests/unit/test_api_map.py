from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from typing import Any

import httpx
import pytest

from src.adapters.api import dependencies
from src.adapters.api.dependencies import get_location_platform, get_map_session
from src.adapters.location.reported_location_platform import ReportedLocationPlatform
from src.app.services.clinic_catalog import ClinicCatalog
from src.app.services.location_source import LocationSource
from src.app.services.map_session import MapSession
from src.app.services.permission_gate import PermissionGate
from src.app.services.route_resolver import RouteResolver
from src.app.services.selection_coordinator import SelectionCoordinator
from src.domain.exceptions import UpstreamServiceError
from src.domain.models import Coordinate
from src.main import app

CLINICS = [
    {
        "_id": "naga",
        "clinic_name": "Naga Clinic",
        "contact_info": "0917-000-0000",
        "location": {"latitude": 13.63, "longitude": 123.205, "address": "Naga"},
    },
    {
        "_id": "pili",
        "clinic_name": "Pili Clinic",
        "location": {"latitude": 13.58, "longitude": 123.28, "address": "Pili"},
    },
    {"_id": "nogeo", "clinic_name": "Not Geocoded"},
]


@dataclass(slots=True)
class FakeDirectory:
    responses: list

    async def list_clinics(self) -> Any:
        response = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(response, Exception):
            raise response
        return response


@dataclass(slots=True)
class FakeDirections:
    async def get_directions(self, *, origin: Coordinate, destination: Coordinate) -> Any:
        return {
            "routes": [
                {
                    "geometry": {
                        "coordinates": [
                            [origin.longitude, origin.latitude],
                            [destination.longitude, destination.latitude],
                        ]
                    },
                    "distance": 1500,
                    "duration": 300,
                }
            ]
        }


def _install(directory_responses: list) -> tuple[MapSession, ReportedLocationPlatform]:
    platform = ReportedLocationPlatform()
    gate = PermissionGate(platform=platform)
    location_source = LocationSource(platform=platform, permission_gate=gate)
    catalog = ClinicCatalog(directory=FakeDirectory(directory_responses))
    session = MapSession(
        permission_gate=gate,
        location_source=location_source,
        catalog=catalog,
        coordinator=SelectionCoordinator(
            catalog=catalog,
            resolver=RouteResolver(directions=FakeDirections()),
            location_source=location_source,
        ),
    )

    app.dependency_overrides[get_map_session] = lambda: session
    app.dependency_overrides[get_location_platform] = lambda: platform
    return session, platform


@pytest.fixture(autouse=True)
def _clear_overrides():
    yield
    app.dependency_overrides.clear()


def _client() -> httpx.AsyncClient:
    transport = httpx.ASGITransport(app=app)
    return httpx.AsyncClient(transport=transport, base_url="http://test")


@pytest.mark.unit
@pytest.mark.anyio
async def test_health() -> None:
    async with _client() as client:
        resp = await client.get("/health")

    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


@pytest.mark.unit
@pytest.mark.anyio
async def test_full_flow_from_start_to_route_and_camera() -> None:
    session, _ = _install([CLINICS])

    async with _client() as client:
        resp = await client.post(
            "/session/start",
            json={
                "location_granted": True,
                "position": {"latitude": 13.621, "longitude": 123.194},
            },
        )
        assert resp.status_code == 200
        assert resp.json()["origin"] == {"latitude": 13.621, "longitude": 123.194}

        resp = await client.get("/clinics")
        assert [c["id"] for c in resp.json()["clinics"]] == ["naga", "pili", "nogeo"]

        resp = await client.put("/selection/clinic", json={"clinic_id": "naga"})
        assert resp.status_code == 200
        assert resp.json()["loading_route"] is True
        assert resp.json()["route"] is None

        await session.coordinator.wait_until_settled()

        resp = await client.get("/selection")
        payload = resp.json()
        assert payload["loading_route"] is False
        assert payload["route_error"] is None
        assert payload["route"]["distance_km"] == 1.5
        assert payload["route"]["duration_min"] == 5.0
        assert payload["eta_text"] == "Distance to Naga Clinic: 1.50 km | ETA: 5.0 mins"

        resp = await client.get("/selection/camera")
        assert resp.status_code == 200
        camera = resp.json()
        assert camera["south_west"] == {"latitude": 13.621, "longitude": 123.194}
        assert camera["north_east"] == {"latitude": 13.63, "longitude": 123.205}
        assert camera["padding"] == {"top": 100, "right": 50, "bottom": 100, "left": 50}

        resp = await client.get("/selection/camera")
        assert resp.status_code == 204


@pytest.mark.unit
@pytest.mark.anyio
async def test_nearest_clinics_query() -> None:
    session, _ = _install([CLINICS])
    await session.catalog.fetch_all()

    async with _client() as client:
        resp = await client.get(
            "/clinics", params={"near_lat": 13.58, "near_lon": 123.28, "limit": 1}
        )

    assert resp.status_code == 200
    assert [c["id"] for c in resp.json()["clinics"]] == ["pili"]


@pytest.mark.unit
@pytest.mark.anyio
async def test_unknown_clinic_is_404() -> None:
    _install([CLINICS])

    async with _client() as client:
        resp = await client.put("/selection/clinic", json={"clinic_id": "missing"})

    assert resp.status_code == 404


@pytest.mark.unit
@pytest.mark.anyio
async def test_refresh_failure_is_502_and_keeps_clinics() -> None:
    session, _ = _install([CLINICS, UpstreamServiceError("HTTP 503")])
    await session.catalog.fetch_all()

    async with _client() as client:
        resp = await client.post("/clinics/refresh")
        assert resp.status_code == 502

        resp = await client.get("/clinics")

    assert len(resp.json()["clinics"]) == 3
    assert "HTTP 503" in resp.json()["error"]


@pytest.mark.unit
@pytest.mark.anyio
async def test_position_report_without_permission_is_403() -> None:
    _install([CLINICS])

    async with _client() as client:
        resp = await client.post("/location/permission", json={"granted": False})
        assert resp.json() == {"state": "denied"}

        resp = await client.post(
            "/location", json={"latitude": 13.621, "longitude": 123.194}
        )

    assert resp.status_code == 403


@pytest.mark.unit
@pytest.mark.anyio
async def test_permission_grant_then_position_report() -> None:
    session, _ = _install([CLINICS])

    async with _client() as client:
        resp = await client.get("/location/permission")
        assert resp.json() == {"state": "unknown"}

        resp = await client.post("/location/permission", json={"granted": True})
        assert resp.json() == {"state": "granted"}

        resp = await client.post(
            "/location", json={"latitude": 13.6, "longitude": 123.19}
        )

    assert resp.status_code == 200
    assert session.coordinator.state.origin == Coordinate(latitude=13.6, longitude=123.19)


@pytest.mark.unit
@pytest.mark.anyio
async def test_out_of_range_position_is_rejected() -> None:
    _install([CLINICS])

    async with _client() as client:
        resp = await client.post("/location", json={"latitude": 91.0, "longitude": 0.0})

    assert resp.status_code == 422


@pytest.fixture
def fresh_app_state():
    def _reset() -> None:
        for name in ("map_session", "location_platform"):
            if hasattr(app.state, name):
                delattr(app.state, name)

    _reset()
    yield
    _reset()


@pytest.mark.unit
@pytest.mark.anyio
async def test_concurrent_first_requests_share_one_session(
    fresh_app_state, monkeypatch: pytest.MonkeyPatch
) -> None:
    built: list[MapSession] = []
    original = dependencies.build_map_session

    def _slow_build(config, platform):
        time.sleep(0.05)
        session = original(config, platform)
        built.append(session)
        return session

    monkeypatch.setattr(dependencies, "build_map_session", _slow_build)

    async with _client() as client:
        responses = await asyncio.gather(
            client.get("/selection"),
            client.get("/location/permission"),
            client.get("/selection/camera"),
            client.get("/clinics"),
        )

    assert [r.status_code for r in responses] == [200, 200, 204, 200]
    assert len(built) == 1
    assert app.state.map_session is built[0]


@pytest.mark.unit
@pytest.mark.anyio
async def test_refresh_without_selected_clinic_drops_its_route() -> None:
    session, platform = _install([CLINICS, [CLINICS[1]]])
    platform.report_permission(True)
    platform.report_position(Coordinate(latitude=13.621, longitude=123.194))
    await session.start()

    async with _client() as client:
        await client.put("/selection/clinic", json={"clinic_id": "naga"})
        await session.coordinator.wait_until_settled()
        assert (await client.get("/selection")).json()["route"] is not None

        resp = await client.post("/clinics/refresh")
        assert [c["id"] for c in resp.json()["clinics"]] == ["pili"]

        payload = (await client.get("/selection")).json()

    assert payload["selected_clinic_id"] is None
    assert payload["route"] is None
    assert payload["eta_text"] is None

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Mapping

import httpx

from src.adapters.settings import DEFAULT_DIRECTIONS_URL
from src.app.ports.output import IDirectionsProvider
from src.domain.exceptions import UpstreamServiceError
from src.domain.models import Coordinate


def directions_waypoints(origin: Coordinate, destination: Coordinate) -> str:
    """Format the 'lng,lat;lng,lat' path segment (longitude first)."""

    return (
        f"{origin.longitude},{origin.latitude};"
        f"{destination.longitude},{destination.latitude}"
    )


@dataclass(slots=True)
class MapboxDirectionsAdapter(IDirectionsProvider):
    """Fetches driving directions from the Mapbox Directions API.

    Env vars:
      - MAPBOX_ACCESS_TOKEN: access token (required for real calls)
      - MAPBOX_DIRECTIONS_URL: base URL (default Mapbox v5)
      - DIRECTIONS_PROFILE: routing profile (default driving)
      - EXTERNAL_TIMEOUT_S: request timeout (default 12)
    """

    access_token: str | None = None
    base_url: str | None = None
    profile: str | None = None
    timeout_s: float = 12.0
    transport: httpx.AsyncBaseTransport | None = None

    def __post_init__(self) -> None:
        if self.access_token is None:
            self.access_token = (os.getenv("MAPBOX_ACCESS_TOKEN") or "").strip() or None
        if self.base_url is None:
            self.base_url = os.getenv("MAPBOX_DIRECTIONS_URL") or DEFAULT_DIRECTIONS_URL
        if self.profile is None:
            self.profile = os.getenv("DIRECTIONS_PROFILE") or "driving"
        if os.getenv("EXTERNAL_TIMEOUT_S"):
            self.timeout_s = float(os.environ["EXTERNAL_TIMEOUT_S"])

    def _url(self, origin: Coordinate, destination: Coordinate) -> str:
        base = (self.base_url or DEFAULT_DIRECTIONS_URL).rstrip("/")
        return f"{base}/{self.profile}/{directions_waypoints(origin, destination)}"

    async def get_directions(
        self, *, origin: Coordinate, destination: Coordinate
    ) -> Mapping[str, Any]:
        if not self.access_token:
            raise UpstreamServiceError("Missing MAPBOX_ACCESS_TOKEN")

        params = {"geometries": "geojson", "access_token": self.access_token}
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout_s, transport=self.transport
            ) as client:
                resp = await client.get(self._url(origin, destination), params=params)
                resp.raise_for_status()
                data = resp.json()
        except httpx.HTTPStatusError as exc:
            raise UpstreamServiceError(
                f"Directions service answered HTTP {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise UpstreamServiceError(
                f"Directions request failed: {type(exc).__name__}"
            ) from exc
        except ValueError as exc:
            raise UpstreamServiceError("Directions response is not JSON") from exc

        if not isinstance(data, dict):
            raise UpstreamServiceError("Directions response is not a JSON object")
        return data

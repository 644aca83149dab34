from __future__ import annotations

import os
from dataclasses import dataclass

from src.domain.models import EdgePadding

DEFAULT_CLINICS_API_URL = "https://nagamedserver.onrender.com/api/clinic/"
DEFAULT_DIRECTIONS_URL = "https://api.mapbox.com/directions/v5/mapbox"


def env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def env_float(name: str, default: float) -> float:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    return float(raw)


def parse_padding(raw: str | None) -> EdgePadding:
    """Parse 'top,right,bottom,left' pixel padding."""

    raw = (raw or "").strip()
    if not raw:
        return EdgePadding()

    parts = [p.strip() for p in raw.split(",")]
    if len(parts) != 4:
        raise ValueError(f"Expected 4 comma-separated padding values, got: {raw}")
    top, right, bottom, left = (int(p) for p in parts)
    return EdgePadding(top=top, right=right, bottom=bottom, left=left)


@dataclass(frozen=True, slots=True)
class RuntimeConfig:
    clinics_api_url: str
    directions_url: str
    directions_profile: str
    mapbox_access_token: str | None
    timeout_s: float
    viewport_padding: EdgePadding

    @staticmethod
    def from_env() -> "RuntimeConfig":
        token = os.getenv("MAPBOX_ACCESS_TOKEN")
        if token is not None:
            token = token.strip() or None

        return RuntimeConfig(
            clinics_api_url=(os.getenv("CLINICS_API_URL") or "").strip()
            or DEFAULT_CLINICS_API_URL,
            directions_url=(os.getenv("MAPBOX_DIRECTIONS_URL") or "").strip()
            or DEFAULT_DIRECTIONS_URL,
            directions_profile=(os.getenv("DIRECTIONS_PROFILE") or "").strip()
            or "driving",
            mapbox_access_token=token,
            timeout_s=env_float("EXTERNAL_TIMEOUT_S", 12.0),
            viewport_padding=parse_padding(os.getenv("VIEWPORT_PADDING")),
        )

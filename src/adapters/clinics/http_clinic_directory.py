from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any

import httpx

from src.adapters.settings import DEFAULT_CLINICS_API_URL
from src.app.ports.output import IClinicDirectory
from src.domain.exceptions import UpstreamServiceError


@dataclass(slots=True)
class HttpClinicDirectory(IClinicDirectory):
    """Reads the clinic list from the clinic directory REST endpoint.

    Env vars:
      - CLINICS_API_URL: GET endpoint returning a JSON list of clinics
      - EXTERNAL_TIMEOUT_S: request timeout (default 12)
    """

    url: str | None = None
    timeout_s: float = 12.0
    transport: httpx.AsyncBaseTransport | None = None

    def __post_init__(self) -> None:
        if self.url is None:
            self.url = os.getenv("CLINICS_API_URL") or DEFAULT_CLINICS_API_URL
        if os.getenv("EXTERNAL_TIMEOUT_S"):
            self.timeout_s = float(os.environ["EXTERNAL_TIMEOUT_S"])

    async def list_clinics(self) -> Any:
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout_s, transport=self.transport
            ) as client:
                resp = await client.get(self.url or DEFAULT_CLINICS_API_URL)
                resp.raise_for_status()
                return resp.json()
        except httpx.HTTPStatusError as exc:
            raise UpstreamServiceError(
                f"Clinic directory answered HTTP {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise UpstreamServiceError(
                f"Clinic directory request failed: {type(exc).__name__}"
            ) from exc
        except ValueError as exc:
            raise UpstreamServiceError("Clinic directory response is not JSON") from exc

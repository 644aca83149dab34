from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Callable

from src.app.ports.output import IClinicDirectory
from src.domain.algorithms.geo_utils import rank_by_distance
from src.domain.exceptions import CatalogFetchFailed, UpstreamServiceError
from src.domain.models import Clinic, Coordinate

logger = logging.getLogger(__name__)

CatalogListener = Callable[[tuple[Clinic, ...]], None]


def _text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _parse_location(raw: Any) -> Coordinate | None:
    if not isinstance(raw, dict):
        return None

    lat = raw.get("latitude")
    lon = raw.get("longitude")
    # bool is an int subclass; a flag is never a coordinate.
    if isinstance(lat, bool) or isinstance(lon, bool):
        return None
    if not isinstance(lat, (int, float)) or not isinstance(lon, (int, float)):
        return None

    try:
        return Coordinate(latitude=float(lat), longitude=float(lon))
    except ValueError:
        return None


def parse_clinic_record(record: Any) -> Clinic | None:
    """Convert one clinic directory record into a Clinic.

    Returns None for records without an id. A record whose location is
    missing or unusable still becomes a Clinic, just without a location.
    """

    if not isinstance(record, dict):
        return None

    clinic_id = _text(record.get("_id"))
    if clinic_id is None:
        return None

    raw_location = record.get("location")
    address = None
    if isinstance(raw_location, dict):
        address = _text(raw_location.get("address"))

    return Clinic(
        id=clinic_id,
        name=_text(record.get("clinic_name")) or "",
        address=address or "",
        location=_parse_location(raw_location),
        contact_info=_text(record.get("contact_info")),
    )


def parse_clinic_directory(payload: Any) -> tuple[Clinic, ...]:
    # Anything but a list is treated as an empty directory.
    if not isinstance(payload, list):
        logger.warning(
            "Clinic directory returned %s instead of a list; treating as empty",
            type(payload).__name__,
        )
        return ()

    clinics: list[Clinic] = []
    skipped = 0
    for record in payload:
        clinic = parse_clinic_record(record)
        if clinic is None:
            skipped += 1
            continue
        clinics.append(clinic)

    if skipped:
        logger.warning("Skipped %d clinic records without an id", skipped)
    return tuple(clinics)


@dataclass(slots=True)
class ClinicCatalog:
    """Holds the clinic list shown on the map.

    - A successful fetch replaces the held set wholesale.
    - A failed fetch keeps the previous set and raises CatalogFetchFailed.
    - Concurrent fetch/refresh calls share one in-flight request.
    - Subscribers hear about every successful replacement.
    """

    directory: IClinicDirectory
    timeout_s: float = 12.0

    _clinics: tuple[Clinic, ...] = ()
    _by_id: dict[str, Clinic] = field(default_factory=dict, repr=False)
    _inflight: asyncio.Task[tuple[Clinic, ...]] | None = field(
        default=None, repr=False
    )
    _listeners: list[CatalogListener] = field(default_factory=list, repr=False)
    last_error: CatalogFetchFailed | None = None

    @property
    def clinics(self) -> tuple[Clinic, ...]:
        return self._clinics

    @property
    def is_loading(self) -> bool:
        return self._inflight is not None

    def get(self, clinic_id: str) -> Clinic | None:
        return self._by_id.get(clinic_id)

    def mappable(self) -> tuple[Clinic, ...]:
        """Clinics that can be drawn as markers and routed to."""

        return tuple(c for c in self._clinics if c.is_mappable)

    def nearest(self, origin: Coordinate, *, limit: int | None = None) -> tuple[Clinic, ...]:
        ranked = rank_by_distance(origin, self._clinics, lambda c: c.location)
        if limit is not None:
            ranked = ranked[: max(0, int(limit))]
        return tuple(ranked)

    def subscribe(self, listener: CatalogListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def fetch_all(self) -> tuple[Clinic, ...]:
        if self._inflight is None:
            self._inflight = asyncio.get_running_loop().create_task(self._fetch())
            self._inflight.add_done_callback(self._clear_inflight)

        # Shield so one caller giving up does not cancel the shared request.
        return await asyncio.shield(self._inflight)

    async def refresh(self) -> tuple[Clinic, ...]:
        return await self.fetch_all()

    def _clear_inflight(self, task: asyncio.Task[tuple[Clinic, ...]]) -> None:
        if self._inflight is task:
            self._inflight = None
        # Retrieve the outcome so an unawaited failure is not reported as lost.
        if not task.cancelled():
            task.exception()

    async def _fetch(self) -> tuple[Clinic, ...]:
        try:
            payload = await asyncio.wait_for(
                self.directory.list_clinics(), timeout=self.timeout_s
            )
        except asyncio.TimeoutError as exc:
            raise self._failed(
                f"Clinic directory timed out after {self.timeout_s}s"
            ) from exc
        except UpstreamServiceError as exc:
            raise self._failed(str(exc) or "Clinic directory unavailable") from exc

        clinics = parse_clinic_directory(payload)
        self._clinics = clinics
        self._by_id = {c.id: c for c in clinics}
        self.last_error = None
        logger.info(
            "Clinic catalog replaced: %d clinics (%d mappable)",
            len(clinics),
            len(self.mappable()),
        )
        for listener in list(self._listeners):
            listener(clinics)
        return clinics

    def _failed(self, message: str) -> CatalogFetchFailed:
        logger.warning(
            "Clinic catalog fetch failed, keeping %d clinics: %s",
            len(self._clinics),
            message,
        )
        self.last_error = CatalogFetchFailed(message)
        return self.last_error

from __future__ import annotations

from dataclasses import dataclass

from src.app.ports.output import ILocationPlatform
from src.domain.exceptions import UpstreamServiceError
from src.domain.models import Coordinate


@dataclass(slots=True)
class ReportedLocationPlatform(ILocationPlatform):
    """Location platform backed by what the client device reports.

    The device answers its own permission prompt and pushes position fixes;
    this adapter replays the latest report when the core asks for one.
    """

    consent: bool | None = None
    fix: Coordinate | None = None

    def report_permission(self, granted: bool) -> None:
        self.consent = bool(granted)
        if not granted:
            self.fix = None

    def report_position(self, coordinate: Coordinate) -> None:
        self.fix = coordinate

    async def request_foreground_permission(self) -> bool:
        if self.consent is None:
            raise UpstreamServiceError("Device has not answered the permission prompt")
        return self.consent

    async def get_current_position(self) -> Coordinate:
        if self.fix is None:
            raise UpstreamServiceError("Device has not reported a position fix")
        return self.fix

from __future__ import annotations

from dataclasses import dataclass

from .geo import Coordinate


@dataclass(frozen=True, slots=True)
class Clinic:
    id: str
    name: str
    address: str
    location: Coordinate | None = None  # None when the clinic is not geocoded
    contact_info: str | None = None

    @property
    def is_mappable(self) -> bool:
        return self.location is not None

from __future__ import annotations

import math
from typing import Callable, Iterable, TypeVar

from src.domain.models import Coordinate

T = TypeVar("T")

EARTH_RADIUS_M = 6371000.0


def haversine_distance_m(a: Coordinate, b: Coordinate) -> float:
    """Great-circle distance in meters."""

    phi_a = math.radians(a.latitude)
    phi_b = math.radians(b.latitude)
    d_phi = phi_b - phi_a
    d_lambda = math.radians(b.longitude - a.longitude)

    h = (
        math.sin(d_phi / 2.0) ** 2
        + math.cos(phi_a) * math.cos(phi_b) * math.sin(d_lambda / 2.0) ** 2
    )
    # Rounding can push h a hair above 1 for antipodal points.
    h = min(1.0, h)
    return 2.0 * EARTH_RADIUS_M * math.atan2(math.sqrt(h), math.sqrt(1.0 - h))


def rank_by_distance(
    origin: Coordinate,
    items: Iterable[T],
    location: Callable[[T], Coordinate | None],
) -> list[T]:
    """Order items nearest first; items without a location are left out.

    Equal distances keep their input order.
    """

    scored: list[tuple[float, int, T]] = []
    for index, item in enumerate(items):
        where = location(item)
        if where is None:
            continue
        scored.append((haversine_distance_m(origin, where), index, item))

    scored.sort(key=lambda x: (x[0], x[1]))
    return [item for _, _, item in scored]

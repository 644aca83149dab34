from __future__ import annotations

from typing import Iterable

from src.domain.exceptions import EmptyCoordinateSet
from src.domain.models import Coordinate, EdgePadding, ViewportRegion


def fit_viewport(
    coordinates: Iterable[Coordinate], padding: EdgePadding | None = None
) -> ViewportRegion:
    """Fit an axis-aligned region around every coordinate.

    The center is the midpoint of the bounding box and the padding is passed
    through untouched for the map camera. Routes crossing the antimeridian
    are not special-cased.
    """

    points = tuple(coordinates)
    if not points:
        raise EmptyCoordinateSet("Cannot fit a viewport over zero coordinates")

    min_lat = min(p.latitude for p in points)
    max_lat = max(p.latitude for p in points)
    min_lon = min(p.longitude for p in points)
    max_lon = max(p.longitude for p in points)

    return ViewportRegion(
        center=Coordinate(
            latitude=(min_lat + max_lat) / 2.0,
            longitude=(min_lon + max_lon) / 2.0,
        ),
        north_east=Coordinate(latitude=max_lat, longitude=max_lon),
        south_west=Coordinate(latitude=min_lat, longitude=min_lon),
        padding=padding or EdgePadding(),
    )

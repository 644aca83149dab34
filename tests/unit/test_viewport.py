from __future__ import annotations

import pytest

from src.domain.algorithms.viewport import fit_viewport
from src.domain.exceptions import EmptyCoordinateSet
from src.domain.models import Coordinate, EdgePadding


def test_single_point_collapses_region_to_that_point() -> None:
    p = Coordinate(latitude=13.63, longitude=123.205)

    region = fit_viewport([p])

    assert region.north_east == p
    assert region.south_west == p
    assert region.center == p


def test_two_points_bounding_box_and_midpoint() -> None:
    region = fit_viewport(
        [
            Coordinate(latitude=13.60, longitude=123.10),
            Coordinate(latitude=13.65, longitude=123.20),
        ]
    )

    assert region.south_west == Coordinate(latitude=13.60, longitude=123.10)
    assert region.north_east == Coordinate(latitude=13.65, longitude=123.20)
    assert region.center.latitude == pytest.approx(13.625)
    assert region.center.longitude == pytest.approx(123.15)


def test_box_covers_points_in_any_order() -> None:
    region = fit_viewport(
        [
            Coordinate(latitude=13.65, longitude=123.10),
            Coordinate(latitude=13.61, longitude=123.25),
            Coordinate(latitude=13.60, longitude=123.20),
        ]
    )

    assert region.south_west == Coordinate(latitude=13.60, longitude=123.10)
    assert region.north_east == Coordinate(latitude=13.65, longitude=123.25)


def test_padding_is_carried_through_unchanged() -> None:
    padding = EdgePadding(top=10, right=20, bottom=30, left=40)

    region = fit_viewport([Coordinate(latitude=0.0, longitude=0.0)], padding)

    assert region.padding == padding


def test_default_padding() -> None:
    region = fit_viewport([Coordinate(latitude=0.0, longitude=0.0)])
    assert region.padding == EdgePadding(top=100, right=50, bottom=100, left=50)


def test_empty_input_is_a_contract_violation() -> None:
    with pytest.raises(EmptyCoordinateSet):
        fit_viewport([])

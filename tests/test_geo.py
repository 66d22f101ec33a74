"""Tests for coordinate helpers."""

import pytest

from fieldforce.domain.geo import (
    UNSET_COORDINATE,
    Coordinate,
    distance_meters,
    is_unset,
)
from tests.fakes import FIFTEEN_METERS_NORTH, OFFICE


def test_distance_is_zero_for_same_point() -> None:
    assert distance_meters(OFFICE, OFFICE) == 0


def test_distance_is_symmetric() -> None:
    other = Coordinate(37.7849, -122.4294)
    assert distance_meters(OFFICE, other) == pytest.approx(distance_meters(other, OFFICE))


def test_one_degree_along_equator() -> None:
    distance = distance_meters(Coordinate(0, 0), Coordinate(0, 1))
    assert distance == pytest.approx(111_195, abs=1)


def test_short_distance() -> None:
    assert distance_meters(OFFICE, FIFTEEN_METERS_NORTH) == pytest.approx(15, abs=0.1)


def test_antipodal_points_do_not_overflow() -> None:
    distance = distance_meters(Coordinate(0, 0), Coordinate(0, 180))
    assert distance == pytest.approx(20_015_087, rel=1e-4)


def test_unset_sentinel() -> None:
    assert is_unset(UNSET_COORDINATE)
    assert is_unset(None)
    assert not is_unset(Coordinate(0, 1))


def test_coordinate_dict_round_trip() -> None:
    assert Coordinate.from_dict(OFFICE.as_dict()) == OFFICE
    assert Coordinate.from_dict(None) is None

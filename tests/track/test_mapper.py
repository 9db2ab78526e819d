"""Tests for SpatialMapper nearest-coordinate lookup."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from led_replay.telemetry.models import TelemetryRecord
from led_replay.track.layout import CoordinateSetError, coordinates_from_pairs
from led_replay.track.mapper import SpatialMapper, nearest
from led_replay.track.models import FixedCoordinate, MappedEvent

T0 = datetime(2023, 9, 17, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def mapper() -> SpatialMapper:
    return SpatialMapper(coordinates_from_pairs([(0, 0), (10, 0), (10, 10)]))


def test_exact_match_returns_same_coordinate(mapper):
    for coord in mapper.coordinates:
        assert mapper.map_point(coord.x, coord.y) == coord


def test_nearest_coordinate(mapper):
    assert mapper.map_point(9, 1) == FixedCoordinate(10, 0)
    assert mapper.map_point(11, 8) == FixedCoordinate(10, 10)
    assert mapper.map_point(-100, -100) == FixedCoordinate(0, 0)


def test_midpoint_tie_goes_to_earlier_coordinate(mapper):
    assert mapper.map_point(5, 0) == FixedCoordinate(0, 0)
    assert mapper.map_point(10, 5) == FixedCoordinate(10, 0)


def test_tie_break_follows_set_order():
    coords = coordinates_from_pairs([(10, 0), (0, 0)])
    assert nearest(coords, 5, 0) == FixedCoordinate(10, 0)


def test_map_record_keeps_entity_and_timestamp(mapper):
    record = TelemetryRecord(entity_id=7, timestamp=T0, x=9.0, y=1.0)
    assert mapper.map_record(record) == MappedEvent(7, T0, FixedCoordinate(10, 0))


def test_empty_set_is_rejected():
    with pytest.raises(CoordinateSetError):
        SpatialMapper([])
    with pytest.raises(CoordinateSetError):
        nearest((), 0, 0)


def test_single_coordinate_always_wins():
    mapper = SpatialMapper([FixedCoordinate(3, 4)])
    assert mapper.map_point(1e9, -1e9) == FixedCoordinate(3, 4)

"""Snap telemetry coordinates onto the fixed LED layout."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

from led_replay.track.layout import CoordinateSetError
from led_replay.track.models import FixedCoordinate, MappedEvent

if TYPE_CHECKING:
    from led_replay.telemetry.models import TelemetryRecord


def nearest(coords: Sequence[FixedCoordinate], x: float, y: float) -> FixedCoordinate:
    """Return the coordinate in *coords* closest to ``(x, y)``.

    Linear scan by squared Euclidean distance.  On a tie the coordinate that
    comes first in *coords* wins.
    """
    if not coords:
        raise CoordinateSetError("Cannot map onto an empty coordinate set")
    best = coords[0]
    best_d2 = (best.x - x) ** 2 + (best.y - y) ** 2
    for coord in coords[1:]:
        d2 = (coord.x - x) ** 2 + (coord.y - y) ** 2
        if d2 < best_d2:
            best = coord
            best_d2 = d2
    return best


class SpatialMapper:
    """Maps raw ``(x, y)`` telemetry positions onto a fixed coordinate set.

    Args:
        coords: Ordered, non-empty coordinate set.  Order decides ties.

    Raises:
        CoordinateSetError: If *coords* is empty.
    """

    def __init__(self, coords: Sequence[FixedCoordinate]) -> None:
        if not coords:
            raise CoordinateSetError("Fixed coordinate set is empty")
        self._coords = tuple(coords)

    @property
    def coordinates(self) -> tuple[FixedCoordinate, ...]:
        return self._coords

    def map_point(self, x: float, y: float) -> FixedCoordinate:
        """Return the nearest fixed coordinate to ``(x, y)``."""
        return nearest(self._coords, x, y)

    def map_record(self, record: TelemetryRecord) -> MappedEvent:
        """Snap *record* to the layout."""
        return MappedEvent(
            entity_id=record.entity_id,
            timestamp=record.timestamp,
            coordinate=self.map_point(record.x, record.y),
        )

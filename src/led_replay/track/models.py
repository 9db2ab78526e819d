"""Track layout data structures."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class FixedCoordinate:
    """One addressable LED position in the layout.

    Hashable; equal coordinates are the same LED.
    """

    x: float
    y: float


@dataclass(frozen=True)
class MappedEvent:
    """A telemetry sample snapped onto the LED layout.

    This is the unit stored in the :class:`~led_replay.playback.timeline.Timeline`.
    """

    entity_id: int
    timestamp: datetime
    coordinate: FixedCoordinate

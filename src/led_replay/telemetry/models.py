"""Telemetry data models."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class TelemetryRecord:
    """A single decoded position sample for one entity (car).

    Immutable once created.  ``z``, ``session_key`` and ``meeting_key`` are
    carried through from the wire format but are not used by playback.
    """

    entity_id: int
    """Stable entity identifier (the driver number)."""

    timestamp: datetime
    """UTC instant of the sample."""

    x: float
    """X coordinate in telemetry units."""

    y: float
    """Y coordinate in telemetry units."""

    z: float | None = None
    session_key: int | None = None
    meeting_key: int | None = None

    def is_origin(self) -> bool:
        """Return True for the ``(0, 0)`` sample the feed emits when no fix is available."""
        return self.x == 0.0 and self.y == 0.0

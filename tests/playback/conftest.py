"""Shared helpers for playback tests."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from led_replay.track.models import FixedCoordinate, MappedEvent

T0 = datetime(2023, 9, 17, 12, 0, tzinfo=timezone.utc)


def make_event(entity_id: int, seconds: float, x: float, y: float) -> MappedEvent:
    return MappedEvent(
        entity_id=entity_id,
        timestamp=T0 + timedelta(seconds=seconds),
        coordinate=FixedCoordinate(x, y),
    )


class FakeTime:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start
        self.origin = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds

    def mark(self) -> None:
        """Remember the current instant as the origin for :meth:`seek`."""
        self.origin = self.now

    def seek(self, seconds: float) -> None:
        self.now = self.origin + seconds

"""RaceClock — turns wall-clock time and a speed multiplier into playback state.

Lifecycle::

    IDLE ──start()──▶ RUNNING ──stop()──▶ IDLE

While running, every :meth:`RaceClock.tick` sets
``race_time = (now - zero_point) * speed`` and advances the cursor over all
timeline events whose offset from the *first* timeline event is
``<= race_time``.  The recording's absolute clock never matters.
"""

from __future__ import annotations

import enum
import threading
import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from led_replay.playback.timeline import Timeline
from led_replay.track.models import FixedCoordinate


class ClockStatus(enum.Enum):
    IDLE = "idle"
    RUNNING = "running"


@dataclass
class PlaybackState:
    """Mutable playback state; owned by a single :class:`RaceClock`."""

    race_time: float = 0.0
    """Elapsed race time in seconds."""

    cursor: int = 0
    """Number of timeline events that are due."""

    last_position: dict[int, FixedCoordinate] = field(default_factory=dict)
    """entity_id → coordinate of its latest due event, oldest update first."""

    active: dict[FixedCoordinate, int] = field(default_factory=dict)
    """coordinate → entity currently lit there."""

    def clear(self) -> None:
        self.race_time = 0.0
        self.cursor = 0
        self.last_position.clear()
        self.active.clear()


@dataclass(frozen=True)
class PlaybackSnapshot:
    """Read-only view of the playback state handed to the presentation layer."""

    race_time: float
    cursor: int
    timeline_length: int
    running: bool
    speed: int
    active: Mapping[FixedCoordinate, int]

    @property
    def race_time_text(self) -> str:
        return format_race_time(self.race_time)


def format_race_time(seconds: float) -> str:
    """Format *seconds* as ``HH:MM:SS.ss``."""
    seconds = max(seconds, 0.0)
    hours = int(seconds // 3600)
    minutes = int((seconds % 3600) // 60)
    return f"{hours:02d}:{minutes:02d}:{seconds % 60:05.2f}"


def _validate_speed(speed: int) -> int:
    if isinstance(speed, bool) or not isinstance(speed, int) or speed < 1:
        raise ValueError(f"speed must be a positive integer, got {speed!r}")
    return speed


class RaceClock:
    """Drives playback of a :class:`Timeline`.

    Parameters
    ----------
    timeline:
        The shared timeline.  The clock only reads it.
    speed:
        Initial playback speed multiplier (positive integer).
    time_source:
        Monotonic seconds source.  Injected for testability; defaults to
        :func:`time.monotonic`.
    """

    def __init__(
        self,
        timeline: Timeline,
        speed: int = 1,
        time_source: Callable[[], float] = time.monotonic,
    ) -> None:
        self._timeline = timeline
        self._speed = _validate_speed(speed)
        self._now = time_source
        self._status = ClockStatus.IDLE
        self._zero_point = 0.0
        self._state = PlaybackState()
        self._applied = 0            # events folded into last_position
        self._applied_version = -1   # timeline version they came from
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def status(self) -> ClockStatus:
        return self._status

    @property
    def running(self) -> bool:
        return self._status is ClockStatus.RUNNING

    @property
    def speed(self) -> int:
        return self._speed

    def start(self) -> PlaybackSnapshot:
        """Begin playback from race time zero.

        Calling ``start`` while already running restarts from zero.
        """
        with self._lock:
            self._zero_point = self._now()
            self._reset_state()
            self._status = ClockStatus.RUNNING
            return self._snapshot()

    def stop(self) -> PlaybackSnapshot:
        """Stop playback and clear all derived state.  Idempotent."""
        with self._lock:
            self._status = ClockStatus.IDLE
            self._reset_state()
            return self._snapshot()

    def set_speed(self, speed: int) -> PlaybackSnapshot:
        """Change the multiplier; takes effect on the next tick.

        Raises
        ------
        ValueError
            If *speed* is not a positive integer.
        """
        speed = _validate_speed(speed)
        with self._lock:
            self._speed = speed
            return self._snapshot()

    def tick(self) -> PlaybackSnapshot:
        """Advance playback to the current instant and return a snapshot.

        Does nothing but return the snapshot while idle.
        """
        with self._lock:
            if self._status is ClockStatus.RUNNING:
                self._advance()
            return self._snapshot()

    def snapshot(self) -> PlaybackSnapshot:
        """Return the current state without advancing."""
        with self._lock:
            return self._snapshot()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _reset_state(self) -> None:
        self._state.clear()
        self._applied = 0
        self._applied_version = -1

    def _advance(self) -> None:
        state = self._state
        version, events, first_changed = self._timeline.view_since(self._applied_version)
        state.race_time = (self._now() - self._zero_point) * self._speed

        # A cleared timeline is the only way the cursor can move back.
        cursor = min(state.cursor, len(events))
        if events:
            origin = events[0].timestamp
            while (
                cursor < len(events)
                and (events[cursor].timestamp - origin).total_seconds() <= state.race_time
            ):
                cursor += 1

        if first_changed < self._applied or cursor < self._applied:
            # Events landed inside the already-applied prefix; rebuild it.
            state.last_position.clear()
            start = 0
        else:
            start = self._applied

        last_position = state.last_position
        for event in events[start:cursor]:
            last_position.pop(event.entity_id, None)
            last_position[event.entity_id] = event.coordinate

        # Entities are visited oldest update first so the most recent
        # arrival at a shared coordinate owns it.
        state.active = {coord: entity for entity, coord in last_position.items()}
        state.cursor = cursor
        self._applied = cursor
        self._applied_version = version

    def _snapshot(self) -> PlaybackSnapshot:
        state = self._state
        return PlaybackSnapshot(
            race_time=state.race_time,
            cursor=state.cursor,
            timeline_length=len(self._timeline),
            running=self._status is ClockStatus.RUNNING,
            speed=self._speed,
            active=MappingProxyType(dict(state.active)),
        )

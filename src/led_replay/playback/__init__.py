"""Race playback: global timeline, race clock, and tick loop.

Public API
----------
Timeline          - thread-safe, timestamp-ordered event log
RaceClock         - start / stop / speed control and per-tick state derivation
PlaybackState     - mutable state owned by the clock
PlaybackSnapshot  - immutable view handed to presentation
PlaybackLoop      - background ticker with drop-oldest snapshot queue
format_race_time  - HH:MM:SS.ss rendering
"""

from led_replay.playback.clock import (
    ClockStatus,
    PlaybackSnapshot,
    PlaybackState,
    RaceClock,
    format_race_time,
)
from led_replay.playback.loop import PlaybackLoop
from led_replay.playback.timeline import Timeline

__all__ = [
    "ClockStatus",
    "PlaybackLoop",
    "PlaybackSnapshot",
    "PlaybackState",
    "RaceClock",
    "Timeline",
    "format_race_time",
]

"""Owns the timeline, race clock, tick loop and ingestion run for the control surface."""

from __future__ import annotations

import asyncio
import logging
import threading
import time
from collections.abc import Callable, Sequence

from led_replay.config import Settings
from led_replay.playback.clock import PlaybackSnapshot, RaceClock
from led_replay.playback.loop import PlaybackLoop
from led_replay.playback.timeline import Timeline
from led_replay.telemetry.ingest import RaceIngestor
from led_replay.telemetry.sources import HttpLocationSource, TelemetrySource
from led_replay.track.layout import load_coordinates
from led_replay.track.mapper import SpatialMapper
from led_replay.track.models import FixedCoordinate

_logger = logging.getLogger(__name__)


class ReplayService:
    """Wires the replay pipeline together for the control surface.

    Parameters
    ----------
    settings:
        Runtime configuration.
    coordinates:
        Fixed coordinate set.  Loaded from ``settings.layout_path`` (or the
        bundled layout) when None.
    source:
        Telemetry source.  Injected for testability; an
        :class:`HttpLocationSource` built from *settings* is used when None.
    time_source:
        Monotonic clock passed to the :class:`RaceClock`.

    Raises
    ------
    CoordinateSetError
        If the coordinate set is empty or cannot be loaded.
    """

    def __init__(
        self,
        settings: Settings,
        coordinates: Sequence[FixedCoordinate] | None = None,
        source: TelemetrySource | None = None,
        time_source: Callable[[], float] = time.monotonic,
    ) -> None:
        self._settings = settings
        if coordinates is None:
            coordinates = load_coordinates(settings.layout_path)
        self.mapper = SpatialMapper(coordinates)
        self.timeline = Timeline()
        self.clock = RaceClock(self.timeline, speed=settings.speed, time_source=time_source)
        self.loop = PlaybackLoop(self.clock, target_hz=settings.tick_hz)
        self._source = source
        self.ingestor: RaceIngestor | None = None
        self._ingest_thread: threading.Thread | None = None
        self._ingest_lock = threading.Lock()

    # ------------------------------------------------------------------
    # Ingestion
    # ------------------------------------------------------------------

    @property
    def ingesting(self) -> bool:
        return self._ingest_thread is not None and self._ingest_thread.is_alive()

    def start_ingestion(self) -> bool:
        """Start ingesting every configured driver on a background thread.

        Any events from a previous run are cleared first.  Returns False (and
        does nothing) if a run is already in progress.
        """
        with self._ingest_lock:
            if self.ingesting:
                return False
            self.timeline.clear()
            owned = self._source is None
            source = self._http_source() if owned else self._source
            self.ingestor = RaceIngestor(source, self.mapper, self.timeline)
            self._ingest_thread = threading.Thread(
                target=asyncio.run,
                args=(self._ingest(self.ingestor, source if owned else None),),
                daemon=True,
                name="Ingestion",
            )
            self._ingest_thread.start()
        return True

    def wait_ingestion(self, timeout: float | None = None) -> bool:
        """Block until the current ingestion run ends; True if it has."""
        if self._ingest_thread is not None:
            self._ingest_thread.join(timeout)
        return not self.ingesting

    # ------------------------------------------------------------------
    # Playback control
    # ------------------------------------------------------------------

    def start_playback(self) -> PlaybackSnapshot:
        self.loop.start()
        return self.clock.start()

    def stop_playback(self) -> PlaybackSnapshot:
        """Reset playback.  In-flight ingestion keeps running."""
        return self.clock.stop()

    def set_speed(self, speed: int) -> PlaybackSnapshot:
        return self.clock.set_speed(speed)

    def snapshot(self) -> PlaybackSnapshot:
        return self.clock.snapshot()

    def close(self) -> None:
        """Stop the tick loop."""
        self.loop.stop()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _http_source(self) -> HttpLocationSource:
        return HttpLocationSource(
            base_url=self._settings.api_url,
            session_key=self._settings.session_key,
            timeout=self._settings.timeout,
        )

    async def _ingest(
        self, ingestor: RaceIngestor, owned_source: HttpLocationSource | None
    ) -> None:
        try:
            await ingestor.run(self._settings.drivers)
        finally:
            if owned_source is not None:
                await owned_source.aclose()

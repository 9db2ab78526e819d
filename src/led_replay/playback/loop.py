"""PlaybackLoop — ticks a RaceClock at a fixed rate and publishes snapshots."""

from __future__ import annotations

import contextlib
import queue
import threading
import time

from led_replay.playback.clock import PlaybackSnapshot, RaceClock


class PlaybackLoop:
    """Calls :meth:`RaceClock.tick` at *target_hz* on a background thread.

    Snapshots are published into a bounded queue for the presentation layer.
    A full queue evicts its oldest snapshot, so a slow reader falls behind by
    at most *queue_maxsize* ticks.  While the clock is idle its state cannot
    change, so only the first idle snapshot after running (or after
    :meth:`start`) is published.

    Parameters
    ----------
    clock:
        The clock to drive.  The loop only ever calls ``tick``.
    target_hz:
        Tick frequency in Hz.
    queue_maxsize:
        Number of snapshots buffered before the oldest is evicted.
    """

    def __init__(
        self,
        clock: RaceClock,
        target_hz: float = 30.0,
        queue_maxsize: int = 4,
    ) -> None:
        if target_hz <= 0:
            raise ValueError("target_hz must be > 0")
        self._clock = clock
        self._interval = 1.0 / target_hz
        self._snapshots: queue.Queue[PlaybackSnapshot] = queue.Queue(maxsize=queue_maxsize)
        self._halt = threading.Event()
        self._worker: threading.Thread | None = None
        self._idle_published = False
        self.ticks = 0
        """Number of clock ticks performed since construction."""

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def is_alive(self) -> bool:
        return self._worker is not None and self._worker.is_alive()

    def start(self) -> None:
        """Start ticking.  A loop that is already running is left alone."""
        if self.is_alive:
            return
        self._halt.clear()
        self._idle_published = False
        self._worker = threading.Thread(target=self._run, daemon=True, name="PlaybackLoop")
        self._worker.start()

    def stop(self, timeout: float = 2.0) -> None:
        """Stop ticking and wait up to *timeout* seconds for the thread.

        Snapshots already queued stay readable.
        """
        self._halt.set()
        worker, self._worker = self._worker, None
        if worker is not None:
            worker.join(timeout)

    def get_snapshot(self, timeout: float = 0.1) -> PlaybackSnapshot | None:
        """Return the oldest unread snapshot, waiting up to *timeout* seconds."""
        try:
            return self._snapshots.get(timeout=timeout)
        except queue.Empty:
            return None

    def latest(self) -> PlaybackSnapshot | None:
        """Discard everything but the newest unread snapshot and return it."""
        newest = None
        while True:
            try:
                newest = self._snapshots.get_nowait()
            except queue.Empty:
                return newest

    def queue_size(self) -> int:
        return self._snapshots.qsize()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _run(self) -> None:
        deadline = time.monotonic()
        while not self._halt.is_set():
            self._publish(self._clock.tick())
            self.ticks += 1
            deadline += self._interval
            delay = deadline - time.monotonic()
            if delay > 0:
                self._halt.wait(delay)
            else:
                # Fell behind; resume the cadence from now instead of bursting.
                deadline = time.monotonic()

    def _publish(self, snapshot: PlaybackSnapshot) -> None:
        if snapshot.running:
            self._idle_published = False
        elif self._idle_published:
            return
        else:
            self._idle_published = True

        while True:
            try:
                self._snapshots.put_nowait(snapshot)
                return
            except queue.Full:
                with contextlib.suppress(queue.Empty):
                    self._snapshots.get_nowait()

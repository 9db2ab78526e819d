"""Timeline — the global, time-ordered log of mapped events."""

from __future__ import annotations

import bisect
import threading
from collections import deque
from collections.abc import Iterable
from operator import attrgetter

from led_replay.track.models import MappedEvent

_BY_TIMESTAMP = attrgetter("timestamp")

# Mutations remembered for view_since(); older readers fall back to index 0.
_CHANGE_HISTORY = 256


class Timeline:
    """Thread-safe, always-sorted sequence of :class:`MappedEvent`.

    Producers call :meth:`append` concurrently; readers call :meth:`view`,
    which returns an immutable tuple that is always fully sorted by
    ``timestamp``.  Equal timestamps keep arrival order (``list.sort`` is
    stable and appended events go to the end before sorting).

    Every mutation bumps :attr:`version` and records the lowest index it
    touched, so a reader that already consumed a prefix can ask
    :meth:`view_since` whether that prefix is still valid.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._events: list[MappedEvent] = []
        self._view: tuple[MappedEvent, ...] = ()
        self._version = 0
        self._changes: deque[tuple[int, int]] = deque(maxlen=_CHANGE_HISTORY)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def append(self, events: Iterable[MappedEvent]) -> int:
        """Insert *events* and re-establish timestamp order.

        Returns the number of events added.  The new ordering becomes
        visible to readers atomically.
        """
        new = list(events)
        if not new:
            return 0
        earliest = min(new, key=_BY_TIMESTAMP).timestamp
        with self._lock:
            stored = self._events
            if stored and earliest < stored[-1].timestamp:
                # Everything at or before ``earliest`` keeps its position.
                low = bisect.bisect_right(stored, earliest, key=_BY_TIMESTAMP)
                stored.extend(new)
                stored.sort(key=_BY_TIMESTAMP)
            else:
                low = len(stored)
                stored.extend(new)
                if not _is_sorted(new):
                    stored.sort(key=_BY_TIMESTAMP)
            self._commit(low)
        return len(new)

    def view(self) -> tuple[MappedEvent, ...]:
        """Return the current sorted snapshot."""
        with self._lock:
            return self._view

    def view_since(self, version: int) -> tuple[int, tuple[MappedEvent, ...], int]:
        """Return ``(version, snapshot, first_changed)``.

        *first_changed* is the lowest index of *snapshot* that may differ
        from the snapshot taken at *version*: ``len(snapshot)`` when nothing
        changed, 0 when *version* is unknown or too old to tell.
        """
        with self._lock:
            current, view = self._version, self._view
            if version == current:
                return current, view, len(view)
            if version < 0 or not self._changes or self._changes[0][0] > version + 1:
                return current, view, 0
            first = min(low for changed, low in self._changes if changed > version)
            return current, view, first

    @property
    def version(self) -> int:
        with self._lock:
            return self._version

    def clear(self) -> None:
        """Drop every event."""
        with self._lock:
            self._events.clear()
            self._commit(0)

    def __len__(self) -> int:
        with self._lock:
            return len(self._events)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _commit(self, low: int) -> None:
        self._view = tuple(self._events)
        self._version += 1
        self._changes.append((self._version, low))


def _is_sorted(events: list[MappedEvent]) -> bool:
    return all(a.timestamp <= b.timestamp for a, b in zip(events, events[1:]))

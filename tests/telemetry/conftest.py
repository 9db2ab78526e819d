"""Shared helpers for telemetry tests."""

from __future__ import annotations

import asyncio
import json
from datetime import datetime, timedelta, timezone

BASE_TIME = datetime(2023, 9, 17, 12, 0, 0, tzinfo=timezone.utc)


def make_sample(
    driver_number: int = 44,
    seconds: float = 0.0,
    x: float = 100.0,
    y: float = 200.0,
    **extra,
) -> dict:
    """Return one wire-format location object."""
    sample = {
        "x": x,
        "y": y,
        "z": 0,
        "date": (BASE_TIME + timedelta(seconds=seconds)).isoformat(),
        "driver_number": driver_number,
        "session_key": 9161,
        "meeting_key": 1219,
    }
    sample.update(extra)
    return sample


def encode_array(samples: list[dict], separator: str = ",") -> bytes:
    """Serialise *samples* as a JSON array the way the API does."""
    return ("[" + separator.join(json.dumps(s) for s in samples) + "]").encode("utf-8")


class FakeSource:
    """In-memory source: entity_id → list of fragments (or an exception to raise)."""

    def __init__(self, streams: dict[int, list]) -> None:
        self._streams = streams
        self.requested: list[int] = []

    async def stream(self, entity_id: int):
        self.requested.append(entity_id)
        for item in self._streams.get(entity_id, []):
            if isinstance(item, BaseException):
                raise item
            yield item
            await asyncio.sleep(0)


def split_every(data: bytes, size: int) -> list[bytes]:
    return [data[i : i + size] for i in range(0, len(data), size)]

"""Shared fixtures for web tests."""

from __future__ import annotations

import asyncio
import threading
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from led_replay.config import Settings
from led_replay.track.layout import coordinates_from_pairs
from led_replay.web.app import app
from led_replay.web.service import ReplayService
from tests.playback.conftest import FakeTime
from tests.telemetry.conftest import FakeSource, encode_array, make_sample

LAYOUT = coordinates_from_pairs([(0, 0), (100, 0), (100, 100), (0, 100)])


def race_streams() -> dict[int, list]:
    """Car 44 drives 0,0 → 100,0 → 100,100; car 16 sits near 0,100."""
    car44 = encode_array(
        [
            make_sample(44, 0, x=1, y=1),
            make_sample(44, 1, x=95, y=3),
            make_sample(44, 2, x=98, y=97),
        ]
    )
    car16 = encode_array([make_sample(16, 0.5, x=2, y=99)])
    return {44: [car44[:40], car44[40:]], 16: [car16]}


class GatedSource(FakeSource):
    """FakeSource that holds every stream open until :attr:`gate` is set."""

    def __init__(self, streams: dict[int, list]) -> None:
        super().__init__(streams)
        self.gate = threading.Event()

    async def stream(self, entity_id: int):
        while not self.gate.is_set():
            await asyncio.sleep(0.01)
        async for fragment in super().stream(entity_id):
            yield fragment


@pytest.fixture
def fake_time() -> FakeTime:
    return FakeTime()


@pytest.fixture
def source() -> FakeSource:
    return FakeSource(race_streams())


@pytest.fixture
def service(source, fake_time):
    svc = ReplayService(
        Settings(drivers=[44, 16], tick_hz=100),
        coordinates=LAYOUT,
        source=source,
        time_source=fake_time,
    )
    yield svc
    svc.close()
    svc.wait_ingestion(timeout=2.0)


@pytest.fixture
def client(service):
    """FastAPI test client wired to *service*."""
    with patch("led_replay.web.app.get_service", return_value=service):
        with TestClient(app) as c:
            yield c

"""POST/GET /api/ingestion."""

from __future__ import annotations

from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from led_replay.config import Settings
from led_replay.web.app import app
from led_replay.web.service import ReplayService
from tests.web.conftest import LAYOUT, GatedSource, race_streams


def test_status_before_start(client):
    data = client.get("/api/ingestion").json()
    assert data == {"started": False, "complete": False, "failed": [], "entities": []}


def test_start_then_complete(client, service):
    resp = client.post("/api/ingestion")
    assert resp.status_code == 200
    assert resp.json()["started"] is True

    assert service.wait_ingestion(timeout=5.0)
    data = client.get("/api/ingestion").json()

    assert data["complete"] is True
    assert data["failed"] == []
    by_id = {e["entity_id"]: e for e in data["entities"]}
    assert by_id[44]["state"] == "complete"
    assert by_id[44]["records"] == 3
    assert by_id[16]["records"] == 1
    assert len(service.timeline) == 4


def test_failed_entity_reported(client, service, source):
    source._streams[16] = [b'[{"x": 1', ConnectionResetError("peer reset")]
    client.post("/api/ingestion")
    assert service.wait_ingestion(timeout=5.0)

    data = client.get("/api/ingestion").json()
    assert data["complete"] is True
    assert data["failed"] == [16]
    by_id = {e["entity_id"]: e for e in data["entities"]}
    assert by_id[16]["state"] == "failed"
    assert "peer reset" in by_id[16]["error"]
    assert by_id[44]["records"] == 3


@pytest.fixture
def gated():
    return GatedSource(race_streams())


@pytest.fixture
def gated_service(gated, fake_time):
    svc = ReplayService(
        Settings(drivers=[44, 16]), coordinates=LAYOUT, source=gated, time_source=fake_time
    )
    yield svc
    gated.gate.set()
    svc.wait_ingestion(timeout=2.0)
    svc.close()


def test_second_start_while_running_is_409(gated_service, gated):
    with patch("led_replay.web.app.get_service", return_value=gated_service):
        with TestClient(app) as c:
            assert c.post("/api/ingestion").status_code == 200
            resp = c.post("/api/ingestion")
            assert resp.status_code == 409
            assert c.get("/api/ingestion").json()["complete"] is False

            gated.gate.set()
            assert gated_service.wait_ingestion(timeout=5.0)
            assert c.get("/api/ingestion").json()["complete"] is True

"""Tests for HttpLocationSource and FileLocationSource."""

from __future__ import annotations

import asyncio
import threading
from unittest.mock import patch

import httpx
import pytest

from led_replay.telemetry.sources import (
    FileLocationSource,
    HttpLocationSource,
    TelemetrySourceError,
)
from tests.telemetry.conftest import encode_array, make_sample


async def _collect(source, entity_id: int) -> list[bytes]:
    return [chunk async for chunk in source.stream(entity_id)]


def collect(source, entity_id: int) -> list[bytes]:
    return asyncio.run(_collect(source, entity_id))


def make_http_source(handler, **kwargs) -> HttpLocationSource:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return HttpLocationSource(base_url="https://api.test/v1/", client=client, **kwargs)


# ---------------------------------------------------------------------------
# HttpLocationSource
# ---------------------------------------------------------------------------


def test_http_stream_yields_response_body():
    body = encode_array([make_sample(driver_number=16), make_sample(driver_number=16, seconds=1)])

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=body)

    chunks = collect(make_http_source(handler, session_key=9161), 16)
    assert b"".join(chunks) == body


def test_http_request_targets_location_endpoint_with_filters():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, content=b"[]")

    source = make_http_source(
        handler,
        session_key=9161,
        date_start="2023-09-17T12:00:00",
        date_end="2023-09-17T14:00:00",
    )
    collect(source, 44)

    request = seen[0]
    assert request.url.path == "/v1/location"
    assert request.url.params["session_key"] == "9161"
    assert request.url.params["driver_number"] == "44"
    assert request.url.params["date>"] == "2023-09-17T12:00:00"
    assert request.url.params["date<"] == "2023-09-17T14:00:00"


def test_params_without_date_filters():
    source = HttpLocationSource(session_key="latest", client=httpx.AsyncClient())
    assert source.params_for(1) == {"session_key": "latest", "driver_number": "1"}


def test_http_error_status_raises_source_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, json={"detail": "No results found."})

    with pytest.raises(TelemetrySourceError, match="404"):
        collect(make_http_source(handler), 1)


def test_http_transport_error_propagates():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(httpx.HTTPError):
        collect(make_http_source(handler), 1)


def test_owned_client_closed_by_context_manager():
    async def run() -> bool:
        async with HttpLocationSource() as source:
            pass
        return source._client.is_closed

    assert asyncio.run(run()) is True


# ---------------------------------------------------------------------------
# FileLocationSource
# ---------------------------------------------------------------------------


def test_file_stream_yields_fixed_size_fragments(tmp_path):
    body = encode_array([make_sample(seconds=i) for i in range(3)])
    (tmp_path / "44.json").write_bytes(body)

    chunks = collect(FileLocationSource(tmp_path, chunk_size=10), 44)

    assert b"".join(chunks) == body
    assert all(len(c) == 10 for c in chunks[:-1])


def test_file_pattern(tmp_path):
    (tmp_path / "driver_81.json").write_bytes(b"[]")
    source = FileLocationSource(tmp_path, pattern="driver_{entity_id}.json")
    assert collect(source, 81) == [b"[]"]


def test_missing_file_raises_source_error(tmp_path):
    with pytest.raises(TelemetrySourceError, match="not found"):
        collect(FileLocationSource(tmp_path), 99)


def test_invalid_chunk_size():
    with pytest.raises(ValueError):
        FileLocationSource(".", chunk_size=0)


def test_file_reads_run_off_the_event_loop(tmp_path):
    (tmp_path / "44.json").write_bytes(b"[" + b" " * 30 + b"]")
    real_to_thread = asyncio.to_thread
    read_threads: list[int] = []

    async def spy(func, *args):
        def read(*a):
            read_threads.append(threading.get_ident())
            return func(*a)

        return await real_to_thread(read, *args)

    with patch("led_replay.telemetry.sources.asyncio.to_thread", side_effect=spy) as to_thread:
        chunks = collect(FileLocationSource(tmp_path, chunk_size=8), 44)

    assert b"".join(chunks).startswith(b"[")
    assert to_thread.call_count == len(chunks) + 1
    assert threading.get_ident() not in read_threads

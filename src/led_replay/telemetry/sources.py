"""Telemetry sources: asynchronous byte-fragment streams, one per entity.

A source only has to answer "next fragment or end-of-stream" for a given
entity.  Two implementations are provided:

- :class:`HttpLocationSource` streams the ``location`` endpoint of an
  OpenF1-compatible REST API (one JSON array per driver).
- :class:`FileLocationSource` replays pre-recorded JSON files in fixed-size
  fragments.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from pathlib import Path
from typing import Protocol

import httpx

_logger = logging.getLogger(__name__)


class TelemetrySourceError(Exception):
    """Raised when a source cannot deliver an entity's stream."""


class TelemetrySource(Protocol):
    def stream(self, entity_id: int) -> AsyncIterator[bytes]: ...


class HttpLocationSource:
    """Streams ``GET {base_url}/location`` for one driver at a time.

    Args:
        base_url: API root, e.g. ``"https://api.openf1.org/v1"``.
        session_key: Session filter (``"latest"`` or a numeric key).
        date_start: Optional ISO-8601 lower bound (``date>`` filter).
        date_end: Optional ISO-8601 upper bound (``date<`` filter).
        client: Shared :class:`httpx.AsyncClient`.  Injected for testability;
            when omitted the source creates and owns one.
        timeout: Request timeout in seconds for an owned client.
    """

    DEFAULT_BASE_URL = "https://api.openf1.org/v1"

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        session_key: str | int = "latest",
        date_start: str | None = None,
        date_end: str | None = None,
        client: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
    ) -> None:
        self._url = base_url.rstrip("/") + "/location"
        self._session_key = session_key
        self._date_start = date_start
        self._date_end = date_end
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)

    def params_for(self, entity_id: int) -> dict[str, str]:
        """Return the query parameters used for *entity_id*."""
        params = {
            "session_key": str(self._session_key),
            "driver_number": str(entity_id),
        }
        if self._date_start:
            params["date>"] = self._date_start
        if self._date_end:
            params["date<"] = self._date_end
        return params

    async def stream(self, entity_id: int) -> AsyncIterator[bytes]:
        """Yield raw response body chunks for *entity_id* as they arrive.

        Raises
        ------
        TelemetrySourceError
            If the server answers with a non-2xx status.
        httpx.HTTPError
            On transport failures.
        """
        params = self.params_for(entity_id)
        async with self._client.stream("GET", self._url, params=params) as response:
            if not response.is_success:
                raise TelemetrySourceError(
                    f"HTTP {response.status_code} fetching location for driver {entity_id}"
                )
            _logger.debug("Streaming location for driver %d", entity_id)
            async for chunk in response.aiter_bytes():
                yield chunk

    async def aclose(self) -> None:
        """Close the underlying client if this source created it."""
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> HttpLocationSource:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()


class FileLocationSource:
    """Replays ``<directory>/<pattern>`` files as fragment streams.

    Args:
        directory: Folder holding one JSON array file per entity.
        pattern: File name template; ``{entity_id}`` is substituted.
        chunk_size: Fragment size in bytes.
    """

    def __init__(
        self,
        directory: str | Path,
        pattern: str = "{entity_id}.json",
        chunk_size: int = 65536,
    ) -> None:
        if chunk_size < 1:
            raise ValueError("chunk_size must be >= 1")
        self._directory = Path(directory)
        self._pattern = pattern
        self._chunk_size = chunk_size

    def path_for(self, entity_id: int) -> Path:
        return self._directory / self._pattern.format(entity_id=entity_id)

    async def stream(self, entity_id: int) -> AsyncIterator[bytes]:
        """Yield the file for *entity_id* in ``chunk_size`` fragments.

        Raises
        ------
        TelemetrySourceError
            If the file does not exist.
        """
        path = self.path_for(entity_id)
        if not path.is_file():
            raise TelemetrySourceError(f"File not found: {str(path)!r}")
        with path.open("rb") as fh:
            while True:
                chunk = await asyncio.to_thread(fh.read, self._chunk_size)
                if not chunk:
                    break
                yield chunk

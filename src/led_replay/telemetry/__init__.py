"""Telemetry ingestion from fragmented JSON location streams.

Public API
----------
TelemetryRecord       - single decoded position sample
LocationSample        - pydantic wire schema for one sample
ChunkDecoder          - incremental decoder over arbitrary byte fragments
DecodeBatch           - records + per-object errors from one feed() call
RecordDecodeError     - one rejected object
TruncatedStreamError  - stream ended inside an object
HttpLocationSource    - OpenF1-style REST streaming source
FileLocationSource    - pre-recorded file source
TelemetrySourceError  - source could not deliver a stream
RaceIngestor          - concurrent per-entity ingestion into a Timeline
"""

from led_replay.telemetry.decoder import (
    ChunkDecoder,
    DecodeBatch,
    RecordDecodeError,
    TruncatedStreamError,
    decode_all,
)
from led_replay.telemetry.ingest import (
    EntityIngestStatus,
    EntityState,
    IngestionSummary,
    RaceIngestor,
)
from led_replay.telemetry.models import TelemetryRecord
from led_replay.telemetry.schemas import LocationSample
from led_replay.telemetry.sources import (
    FileLocationSource,
    HttpLocationSource,
    TelemetrySource,
    TelemetrySourceError,
)

__all__ = [
    "ChunkDecoder",
    "DecodeBatch",
    "EntityIngestStatus",
    "EntityState",
    "FileLocationSource",
    "HttpLocationSource",
    "IngestionSummary",
    "LocationSample",
    "RaceIngestor",
    "RecordDecodeError",
    "TelemetryRecord",
    "TelemetrySource",
    "TelemetrySourceError",
    "TruncatedStreamError",
    "decode_all",
]

"""One decode-and-ingest task per entity, merged into a shared Timeline.

Each entity task owns its own :class:`ChunkDecoder`; the only shared object
is the :class:`Timeline`.  A failing stream marks only its own entity as
failed, and the ingestion run completes once every entity task has set its
``done`` signal.
"""

from __future__ import annotations

import asyncio
import enum
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

import httpx

from led_replay.playback.timeline import Timeline
from led_replay.telemetry.decoder import ChunkDecoder, DecodeBatch, TruncatedStreamError
from led_replay.telemetry.sources import TelemetrySource, TelemetrySourceError
from led_replay.track.mapper import SpatialMapper

_logger = logging.getLogger(__name__)

# Expected stream failures; logged without a traceback.  Anything else is
# still absorbed at the entity task boundary but logged with one.
_STREAM_ERRORS = (TelemetrySourceError, TruncatedStreamError, httpx.HTTPError, OSError)


class EntityState(enum.Enum):
    PENDING = "pending"
    RUNNING = "running"
    COMPLETE = "complete"
    FAILED = "failed"


@dataclass
class EntityIngestStatus:
    """Progress of one entity's stream."""

    entity_id: int
    state: EntityState = EntityState.PENDING
    records: int = 0
    """Events appended to the timeline."""
    rejected: int = 0
    """Objects that failed JSON or schema validation."""
    dropped: int = 0
    """``(0, 0)`` samples discarded as sensor-invalid."""
    error: str | None = None
    done: asyncio.Event = field(default_factory=asyncio.Event, repr=False)

    @property
    def finished(self) -> bool:
        return self.done.is_set()


@dataclass
class IngestionSummary:
    """Totals for a finished ingestion run."""

    entities: int
    records: int
    rejected: int
    failed: list[int]


class RaceIngestor:
    """Runs the per-entity ingestion tasks.

    Parameters
    ----------
    source:
        Object with ``stream(entity_id) -> AsyncIterator[bytes]``.
    mapper:
        Spatial mapper onto the fixed LED layout.
    timeline:
        Shared destination timeline.
    """

    def __init__(
        self,
        source: TelemetrySource,
        mapper: SpatialMapper,
        timeline: Timeline,
    ) -> None:
        self._source = source
        self._mapper = mapper
        self._timeline = timeline
        self._statuses: dict[int, EntityIngestStatus] = {}

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def statuses(self) -> list[EntityIngestStatus]:
        return list(self._statuses.values())

    @property
    def complete(self) -> bool:
        """True once every registered entity task has finished."""
        return bool(self._statuses) and all(s.finished for s in self._statuses.values())

    @property
    def failed(self) -> list[int]:
        return [s.entity_id for s in self._statuses.values() if s.state is EntityState.FAILED]

    async def run(self, entity_ids: Iterable[int]) -> IngestionSummary:
        """Ingest every entity concurrently and return once all have finished."""
        statuses = [self._register(entity_id) for entity_id in dict.fromkeys(entity_ids)]
        await asyncio.gather(*(self.ingest_entity(s) for s in statuses))
        await self.wait()
        summary = IngestionSummary(
            entities=len(statuses),
            records=sum(s.records for s in statuses),
            rejected=sum(s.rejected for s in statuses),
            failed=[s.entity_id for s in statuses if s.state is EntityState.FAILED],
        )
        _logger.info(
            "Ingestion complete: %d entities, %d events, %d rejected, %d failed",
            summary.entities,
            summary.records,
            summary.rejected,
            len(summary.failed),
        )
        return summary

    async def wait(self) -> None:
        """Wait until every registered entity has signalled completion."""
        await asyncio.gather(*(s.done.wait() for s in self._statuses.values()))

    async def ingest_entity(self, status: EntityIngestStatus) -> None:
        """Decode, map and append one entity's stream.

        Never raises: any failure is recorded on *status* so the other
        entities keep running.  Cancellation propagates.
        """
        decoder = ChunkDecoder()
        status.state = EntityState.RUNNING
        try:
            async for fragment in self._source.stream(status.entity_id):
                self._absorb(status, decoder.feed(fragment))
            decoder.finish()
        except _STREAM_ERRORS as exc:
            status.state = EntityState.FAILED
            status.error = str(exc) or type(exc).__name__
            _logger.warning(
                "Stream for entity %d failed after %d events: %s",
                status.entity_id,
                status.records,
                status.error,
            )
        except asyncio.CancelledError:
            status.state = EntityState.FAILED
            status.error = "cancelled"
            raise
        except Exception as exc:
            status.state = EntityState.FAILED
            status.error = f"{type(exc).__name__}: {exc}"
            _logger.warning(
                "Stream for entity %d failed unexpectedly after %d events",
                status.entity_id,
                status.records,
                exc_info=True,
            )
        else:
            status.state = EntityState.COMPLETE
            if decoder.skipped_bytes:
                _logger.warning(
                    "Entity %d: skipped %d stray bytes between records",
                    status.entity_id,
                    decoder.skipped_bytes,
                )
            _logger.debug("Entity %d complete: %d events", status.entity_id, status.records)
        finally:
            status.done.set()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _register(self, entity_id: int) -> EntityIngestStatus:
        status = EntityIngestStatus(entity_id=entity_id)
        self._statuses[entity_id] = status
        return status

    def _absorb(self, status: EntityIngestStatus, batch: DecodeBatch) -> None:
        if batch.errors:
            status.rejected += len(batch.errors)
            _logger.debug("Entity %d: %d record(s) rejected", status.entity_id, len(batch.errors))

        events = []
        for record in batch.records:
            if record.is_origin():
                status.dropped += 1
                continue
            events.append(self._mapper.map_record(record))
        status.records += self._timeline.append(events)

"""FastAPI control surface: start/stop/speed commands and state read-out."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI, HTTPException

from led_replay import __version__
from led_replay.config import Settings
from led_replay.drivers import driver_color, get_driver, to_hex
from led_replay.playback.clock import PlaybackSnapshot
from led_replay.web.schemas import (
    Coordinate,
    EntityStatus,
    HealthResponse,
    IngestionResponse,
    LayoutResponse,
    LitLed,
    PlaybackResponse,
    SpeedRequest,
)
from led_replay.web.service import ReplayService

load_dotenv()  # loads .env from project root; must run before env vars are consumed

_service: ReplayService | None = None


def get_service() -> ReplayService:
    """Return the process-wide service, creating it on first use."""
    global _service
    if _service is None:
        _service = ReplayService(Settings.from_env())
    return _service


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    yield
    if _service is not None:
        _service.close()


app = FastAPI(title="F1 LED Replay", version=__version__, lifespan=lifespan)


def _playback_response(svc: ReplayService, snapshot: PlaybackSnapshot) -> PlaybackResponse:
    # Layout order keeps the response stable between polls.
    active = []
    for coord in svc.mapper.coordinates:
        number = snapshot.active.get(coord)
        if number is None:
            continue
        driver = get_driver(number)
        active.append(
            LitLed(
                x=coord.x,
                y=coord.y,
                driver_number=number,
                driver_name=driver.name if driver else None,
                color=to_hex(driver_color(number)),
            )
        )
    return PlaybackResponse(
        race_time=snapshot.race_time,
        race_time_text=snapshot.race_time_text,
        cursor=snapshot.cursor,
        timeline_length=snapshot.timeline_length,
        running=snapshot.running,
        speed=snapshot.speed,
        active=active,
    )


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@app.get("/health", response_model=HealthResponse)
def health() -> HealthResponse:
    return HealthResponse(status="ok", version=__version__)


@app.get("/api/playback", response_model=PlaybackResponse)
def playback() -> PlaybackResponse:
    svc = get_service()
    return _playback_response(svc, svc.snapshot())


@app.post("/api/playback/start", response_model=PlaybackResponse)
def start_playback() -> PlaybackResponse:
    svc = get_service()
    return _playback_response(svc, svc.start_playback())


@app.post("/api/playback/stop", response_model=PlaybackResponse)
def stop_playback() -> PlaybackResponse:
    svc = get_service()
    return _playback_response(svc, svc.stop_playback())


@app.put("/api/playback/speed", response_model=PlaybackResponse)
def set_speed(req: SpeedRequest) -> PlaybackResponse:
    svc = get_service()
    try:
        snapshot = svc.set_speed(req.speed)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return _playback_response(svc, snapshot)


@app.post("/api/ingestion", response_model=IngestionResponse)
def start_ingestion() -> IngestionResponse:
    """Start ingesting every configured driver in the background."""
    svc = get_service()
    if not svc.start_ingestion():
        raise HTTPException(status_code=409, detail="Ingestion already running")
    return _ingestion_response(svc)


@app.get("/api/ingestion", response_model=IngestionResponse)
def ingestion_status() -> IngestionResponse:
    return _ingestion_response(get_service())


@app.get("/api/layout", response_model=LayoutResponse)
def layout() -> LayoutResponse:
    coords = get_service().mapper.coordinates
    return LayoutResponse(
        count=len(coords),
        coordinates=[Coordinate(x=c.x, y=c.y) for c in coords],
    )


def _ingestion_response(svc: ReplayService) -> IngestionResponse:
    ingestor = svc.ingestor
    if ingestor is None:
        return IngestionResponse(started=False, complete=False, failed=[], entities=[])
    return IngestionResponse(
        started=True,
        complete=ingestor.complete,
        failed=ingestor.failed,
        entities=[
            EntityStatus(
                entity_id=s.entity_id,
                state=s.state.value,
                records=s.records,
                rejected=s.rejected,
                dropped=s.dropped,
                error=s.error,
            )
            for s in ingestor.statuses
        ],
    )

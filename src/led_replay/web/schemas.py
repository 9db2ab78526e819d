"""Pydantic request/response schemas for the control surface."""

from __future__ import annotations

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    status: str
    version: str


class SpeedRequest(BaseModel):
    speed: int = Field(ge=1, le=5)


class LitLed(BaseModel):
    x: float
    y: float
    driver_number: int
    driver_name: str | None = None
    color: str


class PlaybackResponse(BaseModel):
    race_time: float
    race_time_text: str
    cursor: int
    timeline_length: int
    running: bool
    speed: int
    active: list[LitLed]


class EntityStatus(BaseModel):
    entity_id: int
    state: str
    records: int
    rejected: int
    dropped: int
    error: str | None = None


class IngestionResponse(BaseModel):
    started: bool
    complete: bool
    failed: list[int]
    entities: list[EntityStatus]


class Coordinate(BaseModel):
    x: float
    y: float


class LayoutResponse(BaseModel):
    count: int
    coordinates: list[Coordinate]

"""Pydantic schema for one wire-format location sample."""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, StrictFloat, StrictInt, field_validator

from led_replay.telemetry.models import TelemetryRecord


class LocationSample(BaseModel):
    """One flat object of the ``location`` JSON array.

    Unknown keys are ignored.  ``date`` must be an ISO-8601 timestamp; naive
    timestamps are taken to be UTC.
    """

    model_config = ConfigDict(extra="ignore", frozen=True)

    x: StrictFloat | StrictInt
    y: StrictFloat | StrictInt
    z: StrictFloat | StrictInt | None = None
    date: datetime
    driver_number: StrictInt
    session_key: int | None = None
    meeting_key: int | None = None

    @field_validator("date")
    @classmethod
    def _as_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    def to_record(self) -> TelemetryRecord:
        """Convert to the immutable :class:`TelemetryRecord` used downstream."""
        return TelemetryRecord(
            entity_id=self.driver_number,
            timestamp=self.date,
            x=float(self.x),
            y=float(self.y),
            z=float(self.z) if self.z is not None else None,
            session_key=self.session_key,
            meeting_key=self.meeting_key,
        )

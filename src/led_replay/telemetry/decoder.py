"""ChunkDecoder — incremental decoder for a fragmented JSON array of records.

The telemetry feed delivers one JSON array of flat objects per car, split into
network chunks at arbitrary byte offsets (mid-field, mid-UTF-8 sequence,
between ``}`` and ``,{``).  :class:`ChunkDecoder` scans the bytes as they
arrive and hands back every object as soon as its closing brace is seen, so
nothing waits for the full array.

Scanner state::

    depth == 0   between objects: ``[``, ``]``, ``,`` and whitespace are framing
    depth  > 0   inside an object; braces inside string values do not count

Only the bytes of the object currently being scanned are retained between
calls.  Because an object is only parsed once it is complete, the output is
identical however the input is split.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field

from pydantic import ValidationError

from led_replay.telemetry.models import TelemetryRecord
from led_replay.telemetry.schemas import LocationSample

_logger = logging.getLogger(__name__)

_TOKEN = re.compile(rb'[{}"\\]')
_FRAMING = b" \t\r\n[],"

_OPEN = ord("{")
_CLOSE = ord("}")
_QUOTE = ord('"')
_BACKSLASH = ord("\\")


class RecordDecodeError(Exception):
    """A complete object that is not valid JSON or fails the record schema."""

    def __init__(self, message: str, raw: bytes) -> None:
        super().__init__(message)
        self.raw = raw


class TruncatedStreamError(Exception):
    """Raised by :meth:`ChunkDecoder.finish` when the stream ends inside an object."""


@dataclass
class DecodeBatch:
    """Output of one :meth:`ChunkDecoder.feed` call."""

    records: list[TelemetryRecord] = field(default_factory=list)
    errors: list[RecordDecodeError] = field(default_factory=list)

    def extend(self, other: DecodeBatch) -> None:
        self.records.extend(other.records)
        self.errors.extend(other.errors)


class ChunkDecoder:
    """Turns arbitrarily split byte fragments into :class:`TelemetryRecord` values.

    One instance per stream; instances are not thread-safe and must not be
    shared between streams.
    """

    def __init__(self) -> None:
        self._pending = bytearray()
        self._pos = 0            # next byte of _pending to scan
        self._start = -1         # offset of the open object's "{", or -1
        self._depth = 0
        self._in_string = False
        self._escaped = False
        self.skipped_bytes = 0
        """Count of non-framing bytes found between objects (and dropped)."""

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def pending_bytes(self) -> bytes:
        """Bytes received but not yet part of an emitted record."""
        return bytes(self._pending)

    @property
    def in_object(self) -> bool:
        """True while a partially received object is buffered."""
        return self._depth > 0

    def feed(self, fragment: bytes) -> DecodeBatch:
        """Consume *fragment* and return every record it completes.

        Objects that are complete but invalid are returned as
        :class:`RecordDecodeError` entries in ``errors``; scanning carries on
        with the next object.
        """
        batch = DecodeBatch()
        if fragment:
            self._pending += fragment
        buf = self._pending
        end = len(buf)
        pos = self._pos

        while pos < end:
            if self._escaped:
                self._escaped = False
                pos += 1
                continue

            match = _TOKEN.search(buf, pos)
            idx = match.start() if match is not None else end
            if self._depth == 0:
                self._skip_framing(buf[pos:idx])
            if match is None:
                pos = end
                break

            token = buf[idx]
            pos = idx + 1

            if self._in_string:
                if token == _BACKSLASH:
                    self._escaped = True
                elif token == _QUOTE:
                    self._in_string = False
                continue

            if token == _OPEN:
                if self._depth == 0:
                    self._start = idx
                self._depth += 1
            elif self._depth == 0:
                # "}", '"' or "\" outside any object
                self.skipped_bytes += 1
            elif token == _CLOSE:
                self._depth -= 1
                if self._depth == 0:
                    self._emit(bytes(buf[self._start:pos]), batch)
                    self._start = -1
            elif token == _QUOTE:
                self._in_string = True

        if self._start >= 0:
            del buf[: self._start]
            pos -= self._start
            self._start = 0
        else:
            buf.clear()
            pos = 0
        self._pos = pos
        return batch

    def finish(self) -> None:
        """Signal end-of-stream.

        Raises
        ------
        TruncatedStreamError
            If a partially received object is still buffered.
        """
        if self._depth > 0:
            raise TruncatedStreamError(
                f"Stream ended inside an object ({len(self._pending)} bytes pending)"
            )
        self._pending.clear()
        self._pos = 0

    def reset(self) -> None:
        """Drop all buffered state."""
        self._pending.clear()
        self._pos = 0
        self._start = -1
        self._depth = 0
        self._in_string = False
        self._escaped = False
        self.skipped_bytes = 0

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _skip_framing(self, gap: bytes | bytearray) -> None:
        if gap:
            self.skipped_bytes += len(gap.translate(None, _FRAMING))

    def _emit(self, raw: bytes, batch: DecodeBatch) -> None:
        try:
            sample = LocationSample.model_validate_json(raw)
        except ValidationError as exc:
            _logger.debug("Rejected record %r: %s", raw[:80], exc)
            batch.errors.append(
                RecordDecodeError(f"{exc.error_count()} validation error(s)", raw)
            )
            return
        batch.records.append(sample.to_record())


def decode_all(data: bytes) -> DecodeBatch:
    """Decode a complete byte sequence in one call."""
    decoder = ChunkDecoder()
    batch = decoder.feed(data)
    decoder.finish()
    return batch

"""Fixed coordinate set loading.

The default layout is the 96-LED circuit table bundled as
``track/data/led_coords.csv``.  Any CSV with an ``x_led,y_led`` (or ``x,y``)
header can replace it.
"""

from __future__ import annotations

import csv
import logging
from collections.abc import Iterable, Sequence
from importlib import resources
from pathlib import Path

from led_replay.track.models import FixedCoordinate

_logger = logging.getLogger(__name__)

_COLUMN_PAIRS: tuple[tuple[str, str], ...] = (
    ("x_led", "y_led"),
    ("x", "y"),
)

_LAYOUT_RESOURCE = "data/led_coords.csv"


class CoordinateSetError(Exception):
    """Raised when the fixed coordinate set is empty, missing, or malformed."""


def coordinates_from_pairs(pairs: Iterable[tuple[float, float]]) -> tuple[FixedCoordinate, ...]:
    """Build an ordered coordinate set from ``(x, y)`` pairs.

    Raises
    ------
    CoordinateSetError
        If *pairs* is empty.
    """
    coords = tuple(FixedCoordinate(float(x), float(y)) for x, y in pairs)
    if not coords:
        raise CoordinateSetError("Fixed coordinate set is empty")
    return coords


def read_coordinates(path: str | Path) -> tuple[FixedCoordinate, ...]:
    """Load a coordinate CSV from *path*, preserving row order.

    Raises
    ------
    CoordinateSetError
        If the file is missing, has no recognised header, contains a
        non-numeric value, or has no rows.
    """
    try:
        with open(path, newline="", encoding="utf-8") as fh:
            coords = _parse_rows(csv.DictReader(fh), str(path))
    except OSError as exc:
        raise CoordinateSetError(f"Cannot read coordinate file {str(path)!r}: {exc}") from exc
    _logger.info("Loaded %d fixed coordinates from %s", len(coords), path)
    return coords


def default_coordinates() -> tuple[FixedCoordinate, ...]:
    """Return the bundled LED layout."""
    resource = resources.files("led_replay.track").joinpath(_LAYOUT_RESOURCE)
    with resource.open("r", encoding="utf-8", newline="") as fh:
        return _parse_rows(csv.DictReader(fh), "bundled layout")


def load_coordinates(path: str | Path | None = None) -> tuple[FixedCoordinate, ...]:
    """Return the coordinate set from *path*, or the bundled layout when None."""
    if path is None:
        return default_coordinates()
    return read_coordinates(path)


def _parse_rows(reader: csv.DictReader, source: str) -> tuple[FixedCoordinate, ...]:
    fields: Sequence[str] = reader.fieldnames or ()
    for x_key, y_key in _COLUMN_PAIRS:
        if x_key in fields and y_key in fields:
            break
    else:
        raise CoordinateSetError(
            f"{source}: expected an 'x_led,y_led' or 'x,y' header, got {list(fields)!r}"
        )

    pairs = []
    for line_no, row in enumerate(reader, start=2):
        try:
            pairs.append((float(row[x_key]), float(row[y_key])))
        except (TypeError, ValueError) as exc:
            raise CoordinateSetError(f"{source}, line {line_no}: {exc}") from exc
    return coordinates_from_pairs(pairs)

"""Fixed LED layout and spatial mapping.

Public API
----------
FixedCoordinate     - one addressable LED position
MappedEvent         - telemetry sample snapped to the layout
SpatialMapper       - nearest-neighbour mapping onto the layout
CoordinateSetError  - raised on an empty or unreadable layout
load_coordinates    - bundled layout or CSV file
"""

from led_replay.track.layout import (
    CoordinateSetError,
    coordinates_from_pairs,
    default_coordinates,
    load_coordinates,
    read_coordinates,
)
from led_replay.track.mapper import SpatialMapper, nearest
from led_replay.track.models import FixedCoordinate, MappedEvent

__all__ = [
    "CoordinateSetError",
    "FixedCoordinate",
    "MappedEvent",
    "SpatialMapper",
    "coordinates_from_pairs",
    "default_coordinates",
    "load_coordinates",
    "nearest",
    "read_coordinates",
]

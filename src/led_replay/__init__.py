"""F1 LED replay: telemetry ingestion and race playback onto a fixed LED layout."""

__version__ = "0.1.0"

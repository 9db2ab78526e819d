"""Race replay on the LED layout, printed to the terminal.

Ingests every driver's location stream, starts the race clock immediately and
prints the lit LEDs on each tick.  Playback uses whatever has been ingested so
far; drivers whose stream fails simply never light up.

Usage:
    uv run python scripts/replay.py --session 9161
    uv run python scripts/replay.py --data-dir recordings/ --speed 5
    uv run python scripts/replay.py --layout my_leds.csv --drivers 1,16,44
"""

from __future__ import annotations

import argparse
import logging
import sys
import time

from dotenv import load_dotenv

load_dotenv()

from led_replay.config import Settings, parse_drivers  # noqa: E402
from led_replay.drivers import get_driver  # noqa: E402
from led_replay.telemetry.sources import FileLocationSource  # noqa: E402
from led_replay.track.layout import CoordinateSetError  # noqa: E402
from led_replay.web.service import ReplayService  # noqa: E402


def _parse_args(settings: Settings, argv: list[str] | None = None) -> argparse.Namespace:
    ap = argparse.ArgumentParser(description="Replay F1 telemetry on an LED circuit layout")
    ap.add_argument("--session", default=settings.session_key, help="Session key to stream")
    ap.add_argument("--drivers", default="", help="Comma-separated driver numbers")
    ap.add_argument("--layout", default=settings.layout_path, help="LED coordinate CSV")
    ap.add_argument("--data-dir", default=None, help="Replay <driver>.json files, not the API")
    ap.add_argument("--speed", type=int, default=settings.speed, choices=range(1, 6))
    ap.add_argument("--tick-hz", type=float, default=settings.tick_hz, help="Clock tick rate")
    ap.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return ap.parse_args(argv)


def _describe(snapshot, limit: int = 6) -> str:
    lit = sorted(snapshot.active.items(), key=lambda item: item[1])
    parts = []
    for coord, number in lit[:limit]:
        driver = get_driver(number)
        label = driver.name.split()[-1][:3].upper() if driver else str(number)
        parts.append(f"{label}@({coord.x:.0f},{coord.y:.0f})")
    if len(lit) > limit:
        parts.append(f"+{len(lit) - limit}")
    return " ".join(parts)


def main(argv: list[str] | None = None) -> int:
    try:
        settings = Settings.from_env()
    except ValueError as exc:
        print(f"Invalid configuration: {exc}", file=sys.stderr)
        return 2

    args = _parse_args(settings, argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    settings.session_key = args.session
    settings.layout_path = args.layout
    settings.speed = args.speed
    settings.tick_hz = args.tick_hz
    try:
        if args.drivers:
            settings.drivers = parse_drivers(args.drivers, "--drivers")
        settings.validate()
    except ValueError as exc:
        print(f"Invalid configuration: {exc}", file=sys.stderr)
        return 2

    source = None
    if args.data_dir:
        source = FileLocationSource(args.data_dir, chunk_size=settings.chunk_size)

    try:
        service = ReplayService(settings, source=source)
    except CoordinateSetError as exc:
        print(f"Cannot load LED layout: {exc}", file=sys.stderr)
        return 1

    print(f"LED layout : {len(service.mapper.coordinates)} coordinates")
    print(f"Session    : {settings.session_key}")
    print(f"Drivers    : {', '.join(str(n) for n in settings.drivers)}")
    print(f"Speed      : x{settings.speed}")
    print()

    service.start_ingestion()
    service.start_playback()
    print("Playback running. Press Ctrl+C to stop.\n", flush=True)

    try:
        while True:
            snapshot = service.loop.latest() or service.loop.get_snapshot(timeout=1.0)
            if snapshot is None:
                continue
            print(
                f"\r{snapshot.race_time_text}  {snapshot.cursor:>7}/{snapshot.timeline_length:<7}"
                f"  {_describe(snapshot):<80}",
                end="",
                flush=True,
            )
            ingestor = service.ingestor
            if (
                ingestor is not None
                and ingestor.complete
                and snapshot.cursor >= snapshot.timeline_length
            ):
                break
            time.sleep(0.25)
    except KeyboardInterrupt:
        pass
    finally:
        service.stop_playback()
        service.close()

    print("\n\nPlayback stopped.")
    if service.ingestor is not None:
        failed = service.ingestor.failed
        if failed:
            print(f"Failed streams: {', '.join(str(n) for n in failed)}")
    return 0


if __name__ == "__main__":
    sys.exit(main())

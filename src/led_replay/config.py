"""Runtime settings read from the environment (optionally via a ``.env`` file).

Entry points call :func:`dotenv.load_dotenv` before :meth:`Settings.from_env`.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field

from led_replay.drivers import driver_numbers
from led_replay.telemetry.sources import HttpLocationSource

_PREFIX = "LED_REPLAY_"


def parse_drivers(raw: str, source: str = _PREFIX + "DRIVERS") -> list[int]:
    """Parse a comma-separated list of driver numbers; *source* names it in errors."""
    try:
        return [int(part) for part in raw.replace(" ", "").split(",") if part]
    except ValueError as exc:
        raise ValueError(f"{source} must be comma-separated integers: {raw!r}") from exc


def _number(env: Mapping[str, str], name: str, default: float, cast=float):
    raw = env.get(_PREFIX + name)
    if raw is None or raw == "":
        return cast(default)
    try:
        return cast(raw)
    except ValueError as exc:
        raise ValueError(f"{_PREFIX}{name} must be a number, got {raw!r}") from exc


@dataclass
class Settings:
    """Replay configuration.

    Args:
        api_url: Base URL of the telemetry REST API.
        session_key: Session filter passed to the API.
        drivers: Entity ids to ingest.
        layout_path: CSV of fixed coordinates; ``None`` uses the bundled layout.
        tick_hz: Race clock tick frequency.
        speed: Initial playback speed multiplier.
        timeout: HTTP request timeout in seconds.
        chunk_size: Fragment size for file sources.
    """

    api_url: str = HttpLocationSource.DEFAULT_BASE_URL
    session_key: str = "latest"
    drivers: list[int] = field(default_factory=driver_numbers)
    layout_path: str | None = None
    tick_hz: float = 30.0
    speed: int = 1
    timeout: float = 30.0
    chunk_size: int = 65536

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> Settings:
        """Build settings from ``LED_REPLAY_*`` variables.

        Raises
        ------
        ValueError
            If a numeric variable cannot be parsed or is out of range.
        """
        env = os.environ if env is None else env
        defaults = cls()
        drivers_raw = env.get(_PREFIX + "DRIVERS", "")
        settings = cls(
            api_url=env.get(_PREFIX + "API_URL") or defaults.api_url,
            session_key=env.get(_PREFIX + "SESSION_KEY") or defaults.session_key,
            drivers=parse_drivers(drivers_raw) if drivers_raw else defaults.drivers,
            layout_path=env.get(_PREFIX + "LAYOUT") or None,
            tick_hz=_number(env, "TICK_HZ", defaults.tick_hz),
            speed=_number(env, "SPEED", defaults.speed, int),
            timeout=_number(env, "TIMEOUT", defaults.timeout),
            chunk_size=_number(env, "CHUNK_SIZE", defaults.chunk_size, int),
        )
        settings.validate()
        return settings

    def validate(self) -> None:
        if self.tick_hz <= 0:
            raise ValueError("tick_hz must be > 0")
        if self.speed < 1:
            raise ValueError("speed must be >= 1")
        if self.timeout <= 0:
            raise ValueError("timeout must be > 0")
        if self.chunk_size < 1:
            raise ValueError("chunk_size must be >= 1")
        if not self.drivers:
            raise ValueError("at least one driver is required")

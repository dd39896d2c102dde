"""Environment-driven settings for ReliaSim tooling."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from reliasim._internal.errors import ConfigError

_TRUTHY = frozenset({"1", "true", "yes", "on"})
_FALSY = frozenset({"0", "false", "no", "off", ""})


@dataclass(frozen=True)
class ReliaSimSettings:
    """Process-wide ReliaSim settings.

    These only affect the tooling around the engine (storage location,
    log format, live pacing). Simulation behaviour is governed entirely
    by :class:`~reliasim.engine.config.SimulationConfig` and the seed.

    Attributes:
        data_dir: Directory holding the SQLite run database.
        json_logs: Emit structured JSON logs instead of human-readable ones.
        live_speed: Default speed multiplier for live runs (2.0 = twice
            as fast as simulated time).
    """

    data_dir: Path = Path("./reliasim-data")
    json_logs: bool = False
    live_speed: float = 1.0


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUTHY:
        return True
    if value in _FALSY:
        return False
    msg = f"{name} must be a boolean (1/0, true/false, yes/no), got: {raw!r}"
    raise ConfigError(msg)


def load_settings() -> ReliaSimSettings:
    """Load settings from environment variables with defaults.

    Environment variables:
        RELIASIM_DATA_DIR: Directory for stored scenarios and runs.
        RELIASIM_LOG_JSON: Emit JSON logs when truthy (default: false).
        RELIASIM_LIVE_SPEED: Live pacing multiplier (default: 1.0).

    Returns:
        Populated ReliaSimSettings instance.

    Raises:
        ConfigError: If an environment variable has an invalid value.
    """
    speed_str = os.environ.get("RELIASIM_LIVE_SPEED", "1.0")
    try:
        speed = float(speed_str)
    except ValueError:
        msg = f"RELIASIM_LIVE_SPEED must be a number, got: {speed_str!r}"
        raise ConfigError(msg) from None

    if speed <= 0:
        msg = f"RELIASIM_LIVE_SPEED must be positive, got: {speed}"
        raise ConfigError(msg)

    return ReliaSimSettings(
        data_dir=Path(os.environ.get("RELIASIM_DATA_DIR", "./reliasim-data")),
        json_logs=_parse_bool("RELIASIM_LOG_JSON", os.environ.get("RELIASIM_LOG_JSON", "")),
        live_speed=speed,
    )

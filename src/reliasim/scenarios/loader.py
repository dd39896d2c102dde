"""Load scenarios from JSON files."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from reliasim._internal.errors import ConfigError
from reliasim._internal.logging import get_logger
from reliasim.engine.config import SimulationConfig
from reliasim.scenarios.presets import Scenario

logger = get_logger("scenarios.loader")


def scenario_from_dict(data: Any, default_name: str = "Custom Scenario") -> Scenario:
    """Build a :class:`Scenario` from a decoded JSON document.

    Accepts either ``{"name": ..., "config": {...}}`` or a bare config
    mapping.

    Raises:
        ConfigError: If the document is not a mapping or the config is invalid.
    """
    if not isinstance(data, dict):
        msg = f"scenario must be a JSON object, got {type(data).__name__}"
        raise ConfigError(msg)
    if "config" in data:
        name = str(data.get("name") or default_name)
        return Scenario(name=name, config=SimulationConfig.from_dict(data["config"]))
    return Scenario(name=default_name, config=SimulationConfig.from_dict(data))


def load_scenario_file(path: str | Path) -> Scenario:
    """Read and validate a scenario JSON file.

    Args:
        path: Path to the ``.json`` file.

    Returns:
        The parsed scenario. A bare config file is named after the file stem.

    Raises:
        ConfigError: If the file cannot be read, is not valid JSON, or
            holds an invalid configuration.
    """
    resolved = Path(path)
    try:
        text = resolved.read_text(encoding="utf-8")
    except OSError as exc:
        msg = f"Cannot read scenario file {resolved}: {exc}"
        raise ConfigError(msg) from exc

    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        msg = f"Scenario file {resolved} is not valid JSON: {exc}"
        raise ConfigError(msg) from exc

    scenario = scenario_from_dict(data, default_name=resolved.stem)
    logger.debug("Loaded scenario %r from %s", scenario.name, resolved)
    return scenario

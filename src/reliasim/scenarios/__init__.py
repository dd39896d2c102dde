"""Built-in preset scenarios and scenario files.

A scenario is a named :class:`~reliasim.engine.config.SimulationConfig`.
Presets reproduce common failure modes; scenario files use the same
camelCase JSON layout as stored scenarios.
"""

from __future__ import annotations

from reliasim.scenarios.loader import load_scenario_file, scenario_from_dict
from reliasim.scenarios.presets import PRESETS, Scenario, get_preset, preset_names

__all__ = [
    "PRESETS",
    "Scenario",
    "get_preset",
    "load_scenario_file",
    "preset_names",
    "scenario_from_dict",
]

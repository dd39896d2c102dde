"""Integration tests for recording runs into a repository."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from sqlalchemy import event

from reliasim._internal.errors import NotFoundError
from reliasim.engine.config import SimulationConfig
from reliasim.engine.simulator import simulate
from reliasim.storage.models import RunStatus
from reliasim.storage.recorder import run_and_record
from reliasim.storage.sql_store import SqlRunRepository

if TYPE_CHECKING:
    from pathlib import Path

    from reliasim.storage.repository import InMemoryRunRepository


def test_recorded_run_matches_direct_run(
    memory_repository: InMemoryRunRepository, short_config: SimulationConfig
) -> None:
    scenario_id = memory_repository.save_scenario("Short", short_config)
    stored = run_and_record(memory_repository, scenario_id, seed=5)
    expected = simulate(short_config, seed=5)

    assert stored.status is RunStatus.COMPLETED
    assert stored.seed == 5
    assert stored.metrics == expected.metrics
    assert stored.events == expected.events
    assert stored.summary == expected.summary


def test_unseeded_recording_stores_seed(
    memory_repository: InMemoryRunRepository, short_config: SimulationConfig
) -> None:
    scenario_id = memory_repository.save_scenario("Short", short_config)
    stored = run_and_record(memory_repository, scenario_id)
    assert simulate(short_config, seed=stored.seed).summary == stored.summary


def test_recording_survives_reload(tmp_path: Path, short_config: SimulationConfig) -> None:
    repository = SqlRunRepository(tmp_path)
    scenario_id = repository.save_scenario("Short", short_config)
    stored = run_and_record(repository, scenario_id, seed=11)

    reloaded = SqlRunRepository(tmp_path).load_run(stored.id)
    assert reloaded == stored
    assert len(reloaded.metrics) == short_config.total_ticks


def test_unknown_scenario(memory_repository: InMemoryRunRepository) -> None:
    with pytest.raises(NotFoundError):
        run_and_record(memory_repository, "missing", seed=1)


def test_recording_writes_grow_with_ticks_only(tmp_path: Path) -> None:
    config = SimulationConfig(duration=20, tick_interval_ms=50, base_failure_probability=0.3)
    repository = SqlRunRepository(tmp_path)
    scenario_id = repository.save_scenario("Long", config)

    writes: list[str] = []

    @event.listens_for(repository.engine, "before_cursor_execute", named=True)
    def _record_write(**kw: object) -> None:
        verb = str(kw["statement"]).lstrip().split(None, 1)[0].upper()
        if verb in {"INSERT", "UPDATE", "DELETE"}:
            writes.append(verb)

    stored = run_and_record(repository, scenario_id, seed=21)

    ticks = config.total_ticks
    assert len(stored.metrics) == ticks
    assert writes.count("UPDATE") == 1
    assert writes.count("DELETE") == 0
    # One run row, one metric row per tick, event rows on top.
    assert ticks + 1 <= writes.count("INSERT") <= ticks + 1 + len(stored.events)

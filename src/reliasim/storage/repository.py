"""Persistence interface for scenarios and runs, plus an in-memory store.

The engine never depends on this module. Drivers receive a
:class:`RunRepository` and push each tick's output into it.
"""

from __future__ import annotations

import threading
import time
import uuid
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from reliasim._internal.errors import NotFoundError, StorageError
from reliasim.storage.models import RunStatus, StoredScenario, _RunBuilder

if TYPE_CHECKING:
    from collections.abc import Sequence

    from reliasim.engine.config import SimulationConfig
    from reliasim.metrics.models import Event, Summary, TickMetric
    from reliasim.storage.models import StoredRun


def new_id() -> str:
    """Return a short random identifier."""
    return uuid.uuid4().hex[:10]


@runtime_checkable
class RunRepository(Protocol):
    """Save and load scenarios, and record runs as they progress."""

    def save_scenario(self, name: str, config: SimulationConfig) -> str: ...

    def update_scenario(self, scenario_id: str, name: str, config: SimulationConfig) -> None: ...

    def load_scenario(self, scenario_id: str) -> StoredScenario: ...

    def list_scenarios(self) -> list[StoredScenario]: ...

    def delete_scenario(self, scenario_id: str) -> None: ...

    def duplicate_scenario(self, scenario_id: str) -> str: ...

    def create_run(self, scenario_id: str, seed: int) -> str: ...

    def append_tick(self, run_id: str, metric: TickMetric, events: Sequence[Event] = ()) -> None: ...

    def save_summary(self, run_id: str, summary: Summary) -> None: ...

    def load_run(self, run_id: str) -> StoredRun: ...

    def list_runs(self, scenario_id: str) -> list[StoredRun]: ...


class InMemoryRunRepository:
    """Thread-safe in-memory :class:`RunRepository`.

    A ``threading.Lock`` guards every read and write, so a live driver can
    append ticks while another thread reads the run back. Nothing survives
    the process; use :class:`~reliasim.storage.sql_store.SqlRunRepository`
    for durable storage.
    """

    def __init__(self) -> None:
        self._scenarios: dict[str, StoredScenario] = {}
        self._runs: dict[str, _RunBuilder] = {}
        self._lock = threading.Lock()

    # -- scenarios --------------------------------------------------------

    def save_scenario(self, name: str, config: SimulationConfig) -> str:
        now = time.time()
        scenario = StoredScenario(
            id=new_id(), name=name, config=config, created_at=now, updated_at=now
        )
        with self._lock:
            self._scenarios[scenario.id] = scenario
        return scenario.id

    def update_scenario(self, scenario_id: str, name: str, config: SimulationConfig) -> None:
        with self._lock:
            current = self._get_scenario(scenario_id)
            updated = StoredScenario(
                id=current.id,
                name=name,
                config=config,
                created_at=current.created_at,
                updated_at=time.time(),
            )
            self._scenarios[scenario_id] = updated

    def load_scenario(self, scenario_id: str) -> StoredScenario:
        with self._lock:
            return self._get_scenario(scenario_id)

    def list_scenarios(self) -> list[StoredScenario]:
        """Return every scenario, most recently updated first."""
        with self._lock:
            return sorted(self._scenarios.values(), key=lambda s: s.updated_at, reverse=True)

    def delete_scenario(self, scenario_id: str) -> None:
        """Delete a scenario and every run started from it."""
        with self._lock:
            self._get_scenario(scenario_id)
            del self._scenarios[scenario_id]
            run_ids = [rid for rid, run in self._runs.items() if run.scenario_id == scenario_id]
            for run_id in run_ids:
                del self._runs[run_id]

    def duplicate_scenario(self, scenario_id: str) -> str:
        """Copy a scenario under the name ``"<name> (copy)"``."""
        original = self.load_scenario(scenario_id)
        return self.save_scenario(f"{original.name} (copy)", original.config)

    # -- runs -------------------------------------------------------------

    def create_run(self, scenario_id: str, seed: int) -> str:
        with self._lock:
            scenario = self._get_scenario(scenario_id)
            run = _RunBuilder(
                id=new_id(),
                scenario_id=scenario_id,
                seed=seed,
                duration=scenario.config.duration,
                tick_interval_ms=scenario.config.tick_interval_ms,
                started_at=time.time(),
            )
            self._runs[run.id] = run
        return run.id

    def append_tick(self, run_id: str, metric: TickMetric, events: Sequence[Event] = ()) -> None:
        """Append one tick's metric and the events it emitted.

        Raises:
            NotFoundError: If the run does not exist.
            StorageError: If the run is already completed.
        """
        with self._lock:
            run = self._get_running(run_id)
            run.metrics.append(metric)
            run.events.extend(events)

    def save_summary(self, run_id: str, summary: Summary) -> None:
        """Store the summary and mark the run completed."""
        with self._lock:
            run = self._get_running(run_id)
            run.summary = summary
            run.status = RunStatus.COMPLETED
            run.completed_at = time.time()

    def load_run(self, run_id: str) -> StoredRun:
        with self._lock:
            return self._get_run(run_id).freeze()

    def list_runs(self, scenario_id: str) -> list[StoredRun]:
        """Return the scenario's runs, most recently started first."""
        with self._lock:
            runs = [run.freeze() for run in self._runs.values() if run.scenario_id == scenario_id]
        return sorted(runs, key=lambda r: r.started_at, reverse=True)

    # -- lookups (lock held) ----------------------------------------------

    def _get_scenario(self, scenario_id: str) -> StoredScenario:
        try:
            return self._scenarios[scenario_id]
        except KeyError:
            msg = f"Scenario not found: {scenario_id}"
            raise NotFoundError(msg) from None

    def _get_run(self, run_id: str) -> _RunBuilder:
        try:
            return self._runs[run_id]
        except KeyError:
            msg = f"Run not found: {run_id}"
            raise NotFoundError(msg) from None

    def _get_running(self, run_id: str) -> _RunBuilder:
        run = self._get_run(run_id)
        if run.status is not RunStatus.RUNNING:
            msg = f"Run is not active: {run_id}"
            raise StorageError(msg)
        return run

"""Stored scenario and run records."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from reliasim.engine.config import SimulationConfig
    from reliasim.metrics.models import Event, Summary, TickMetric


class RunStatus(str, Enum):
    RUNNING = "running"
    COMPLETED = "completed"


@dataclass(frozen=True)
class StoredScenario:
    """A saved, named configuration.

    Attributes:
        id: Repository-assigned identifier.
        name: Display name.
        config: Run configuration.
        created_at: Unix timestamp of creation.
        updated_at: Unix timestamp of the last update.
    """

    id: str
    name: str
    config: SimulationConfig
    created_at: float
    updated_at: float


@dataclass(frozen=True)
class StoredRun:
    """A run as persisted: its identity, history so far and summary.

    Attributes:
        id: Repository-assigned identifier.
        scenario_id: Scenario the run was started from.
        seed: Seed the engine was constructed with.
        status: ``running`` until a summary is saved, then ``completed``.
        duration: Configured duration in seconds.
        tick_interval_ms: Configured tick length.
        metrics: Tick metrics appended so far.
        events: Events appended so far.
        summary: Final summary, once completed.
        started_at: Unix timestamp when the run was created.
        completed_at: Unix timestamp when the summary was saved.
    """

    id: str
    scenario_id: str
    seed: int
    status: RunStatus
    duration: float
    tick_interval_ms: float
    metrics: tuple[TickMetric, ...] = ()
    events: tuple[Event, ...] = ()
    summary: Summary | None = None
    started_at: float = 0.0
    completed_at: float | None = None

    @property
    def is_completed(self) -> bool:
        return self.status is RunStatus.COMPLETED


@dataclass
class _RunBuilder:
    """Mutable run record held inside a repository."""

    id: str
    scenario_id: str
    seed: int
    duration: float
    tick_interval_ms: float
    started_at: float
    status: RunStatus = RunStatus.RUNNING
    metrics: list[TickMetric] = field(default_factory=list)
    events: list[Event] = field(default_factory=list)
    summary: Summary | None = None
    completed_at: float | None = None

    def freeze(self) -> StoredRun:
        return StoredRun(
            id=self.id,
            scenario_id=self.scenario_id,
            seed=self.seed,
            status=self.status,
            duration=self.duration,
            tick_interval_ms=self.tick_interval_ms,
            metrics=tuple(self.metrics),
            events=tuple(self.events),
            summary=self.summary,
            started_at=self.started_at,
            completed_at=self.completed_at,
        )


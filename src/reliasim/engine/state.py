"""Mutable per-run engine state and the state enumerations."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from reliasim.engine.window import RollingWindow


class CircuitState(str, Enum):
    """Circuit breaker position."""

    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


class SystemState(str, Enum):
    """Qualitative service health, independent of the circuit breaker."""

    STABLE = "stable"
    DEGRADED = "degraded"
    DOWN = "down"


@dataclass
class EngineState:
    """Everything a run mutates between ticks.

    Owned by exactly one :class:`~reliasim.engine.simulator.SimulationEngine`
    and never shared across runs.

    Attributes:
        tick: Index of the tick currently being (or next to be) simulated.
        system_state: Current health classification.
        circuit_state: Current circuit breaker position.
        error_window: Recent per-tick error rates (percent).
        circuit_opened_at: Tick index at which the breaker last opened.
        probe_count: Requests admitted since the breaker went half-open.
        queue_depth: Backlog carried between ticks (never negative).
        total_requests: Requests generated so far.
        total_successes: Requests whose final attempt succeeded.
        total_failures: Requests whose final attempt failed.
        total_retries: Retries consumed so far.
    """

    error_window: RollingWindow
    tick: int = 0
    system_state: SystemState = SystemState.STABLE
    circuit_state: CircuitState = CircuitState.CLOSED
    circuit_opened_at: int | None = None
    probe_count: int = 0
    queue_depth: int = 0
    total_requests: int = 0
    total_successes: int = 0
    total_failures: int = 0
    total_retries: int = 0

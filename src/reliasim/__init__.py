"""ReliaSim — deterministic reliability simulations."""

from __future__ import annotations

from reliasim._internal.errors import (
    ConfigError,
    NotFoundError,
    ReliaSimError,
    SimulationStateError,
    StorageError,
)
from reliasim.engine.config import (
    BackoffKind,
    CircuitBreakerPolicy,
    RetryPolicy,
    SimulationConfig,
)
from reliasim.engine.simulator import SimulationEngine, simulate
from reliasim.engine.state import CircuitState, SystemState
from reliasim.metrics.models import Event, RunResult, Summary, TickMetric

__version__ = "0.1.0"

__all__ = [
    "BackoffKind",
    "CircuitBreakerPolicy",
    "CircuitState",
    "ConfigError",
    "Event",
    "NotFoundError",
    "ReliaSimError",
    "RetryPolicy",
    "RunResult",
    "SimulationConfig",
    "SimulationEngine",
    "SimulationStateError",
    "StorageError",
    "Summary",
    "SystemState",
    "TickMetric",
    "simulate",
]

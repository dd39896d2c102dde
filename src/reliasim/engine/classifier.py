"""Per-tick system health classification."""

from __future__ import annotations

from typing import TYPE_CHECKING

from reliasim.engine.state import SystemState

if TYPE_CHECKING:
    from reliasim.engine.config import SimulationConfig
    from reliasim.metrics.models import TickMetric

RETRY_STORM_MESSAGE = "Retry storm detected (retries exceed original requests)"

_STATE_PENALTY = {
    SystemState.STABLE: 0.0,
    SystemState.DEGRADED: 0.10,
    SystemState.DOWN: 0.40,
}

_STATE_LATENCY_MULTIPLIER = {
    SystemState.STABLE: 1.0,
    SystemState.DEGRADED: 1.5,
    SystemState.DOWN: 3.0,
}


def classify(
    metric: TickMetric,
    queue_depth: int,
    config: SimulationConfig,
    previous: SystemState,
) -> SystemState:
    """Derive the system state from one tick's metrics.

    Rules are checked in order and are not exhaustive: a tick matching
    none of them keeps *previous*.

    - DOWN: error rate > 50% or queue > 2x capacity.
    - DEGRADED: error rate > 20% or p95 > 3x base latency.
    - STABLE: error rate < 10% and p95 < 1.5x base latency.
    """
    if metric.error_rate > 50 or queue_depth > config.capacity * 2:
        return SystemState.DOWN
    if metric.error_rate > 20 or metric.p95_latency > config.base_latency_ms * 3:
        return SystemState.DEGRADED
    if metric.error_rate < 10 and metric.p95_latency < config.base_latency_ms * 1.5:
        return SystemState.STABLE
    return previous


def is_retry_storm(metric: TickMetric) -> bool:
    """True when retries in the tick outnumber the requests that caused them."""
    return metric.retry_count > metric.success_count + metric.failure_count


def transition_message(old: SystemState, new: SystemState) -> str:
    return f"State transition: {old.value} → {new.value}"


def failure_penalty(state: SystemState) -> float:
    return _STATE_PENALTY[state]


def latency_multiplier(state: SystemState) -> float:
    return _STATE_LATENCY_MULTIPLIER[state]

"""Run summary and root-cause classification."""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

import numpy as np

from reliasim.engine.state import SystemState
from reliasim.metrics.models import Summary
from reliasim.metrics.percentile import percentile

if TYPE_CHECKING:
    from collections.abc import Sequence

    from reliasim.engine.config import SimulationConfig
    from reliasim.metrics.models import Event, TickMetric

CAUSE_RETRY_STORM = "Retry storm caused cascading failures and increased load"
CAUSE_HIGH_FAILURE_RATE = "High base failure rate overwhelmed system capacity"
CAUSE_EXTENDED_DOWNTIME = "Extended downtime due to capacity saturation"
CAUSE_UNSTABLE_BREAKER = "Multiple circuit breaker trips indicate unstable conditions"
CAUSE_NORMAL = "System operated normally"

_CIRCUIT_OPENED = "Circuit opened"
_RETRY_STORM = "Retry storm"


def count_events(events: Sequence[Event], needle: str) -> int:
    return sum(1 for event in events if needle in event.message)


def main_cause(
    config: SimulationConfig,
    error_rate: float,
    downtime_sec: float,
    circuit_trips: int,
    retry_storms: int,
) -> str:
    """Pick the first matching explanation, in fixed priority order."""
    if retry_storms > 0 and config.retry.max_retries > 0:
        return CAUSE_RETRY_STORM
    if error_rate > 40:
        return CAUSE_HIGH_FAILURE_RATE
    if downtime_sec > config.duration * 0.3:
        return CAUSE_EXTENDED_DOWNTIME
    if circuit_trips > 2:
        return CAUSE_UNSTABLE_BREAKER
    return CAUSE_NORMAL


def summarize_run(
    config: SimulationConfig,
    metrics: Sequence[TickMetric],
    events: Sequence[Event],
) -> Summary:
    """Aggregate a finished run into a :class:`Summary`.

    Mean latency is the mean of per-tick means (each tick weighs the same).
    p95 and max come from the flattened distribution in which every tick's
    mean latency counts once per request that tick handled.

    Args:
        config: Configuration the run used.
        metrics: Every tick's metrics, in order. Must not be empty.
        events: Every event, in emission order.

    Returns:
        The run summary.

    Raises:
        ValueError: If *metrics* is empty.
    """
    if not metrics:
        msg = "cannot summarize a run without tick metrics"
        raise ValueError(msg)

    total_successes = sum(m.success_count for m in metrics)
    total_failures = sum(m.failure_count for m in metrics)
    total_requests = total_successes + total_failures

    success_rate = total_successes / total_requests * 100 if total_requests else 0.0
    error_rate = total_failures / total_requests * 100 if total_requests else 0.0

    down_ticks = sum(1 for m in metrics if m.system_state is SystemState.DOWN)
    downtime_sec = down_ticks * config.tick_interval_ms / 1000

    circuit_trips = count_events(events, _CIRCUIT_OPENED)
    retry_storms = count_events(events, _RETRY_STORM)

    flattened = np.repeat(
        np.array([m.avg_latency for m in metrics], dtype=np.float64),
        [m.success_count + m.failure_count for m in metrics],
    )
    if flattened.size:
        p95_latency = percentile(flattened, 0.95)
        max_latency = float(np.max(flattened))
    else:
        p95_latency = max_latency = 0.0

    return Summary(
        total_requests=total_requests,
        total_successes=total_successes,
        total_failures=total_failures,
        success_rate=success_rate,
        error_rate=error_rate,
        avg_latency=math.fsum(m.avg_latency for m in metrics) / len(metrics),
        p95_latency=p95_latency,
        max_latency=max_latency,
        downtime_sec=downtime_sec,
        circuit_trips=circuit_trips,
        main_cause=main_cause(config, error_rate, downtime_sec, circuit_trips, retry_storms),
    )

"""Outcome of one synthetic request, including retries and backoff."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING

from reliasim.engine.backoff import backoff_delay
from reliasim.engine.capacity import queue_failure_penalty, queue_latency_multiplier
from reliasim.engine.circuit import FAST_FAIL_LATENCY_MS
from reliasim.engine.classifier import failure_penalty, latency_multiplier

if TYPE_CHECKING:
    from reliasim._internal.types import EventSink
    from reliasim.engine.circuit import CircuitBreaker
    from reliasim.engine.config import SimulationConfig
    from reliasim.engine.random import XorShift32
    from reliasim.engine.state import EngineState

MAX_FAILURE_PROBABILITY = 0.95


@dataclass(frozen=True)
class RequestOutcome:
    """Result of simulating one request.

    Attributes:
        succeeded: Whether the final attempt succeeded.
        total_latency: Latency across every attempt plus backoff delays (ms).
        retries_used: Retries consumed after the first attempt.
    """

    succeeded: bool
    total_latency: float
    retries_used: int


def attempt_latency(state: EngineState, config: SimulationConfig, rng: XorShift32) -> float:
    """Sample one attempt's latency in whole milliseconds (at least 1).

    Base latency plus symmetric jitter, scaled by backlog pressure and by
    the current system state.
    """
    jitter = (rng.next_float() * 2 - 1) * config.latency_jitter_ms
    latency = config.base_latency_ms + jitter
    latency *= queue_latency_multiplier(state.queue_depth, config.capacity)
    latency *= latency_multiplier(state.system_state)
    return float(max(1, math.floor(latency)))


def failure_probability(state: EngineState, config: SimulationConfig) -> float:
    """Per-attempt failure probability, capped at 0.95."""
    probability = (
        config.base_failure_probability
        + queue_failure_penalty(state.queue_depth, config.capacity)
        + failure_penalty(state.system_state)
    )
    return min(probability, MAX_FAILURE_PROBABILITY)


def simulate_request(
    state: EngineState,
    config: SimulationConfig,
    rng: XorShift32,
    breaker: CircuitBreaker,
    emit: EventSink,
) -> RequestOutcome:
    """Simulate one request against the current engine state.

    An open breaker rejects the request immediately without touching the
    retry budget. A half-open breaker counts the request as a probe and
    then lets it through. Otherwise up to ``max_retries + 1`` attempts are
    made, with backoff added between failed attempts.

    Args:
        state: Engine state (queue depth, system and circuit state).
        config: Run configuration.
        rng: The run's random source.
        breaker: Circuit breaker bound to this run.
        emit: Receives event messages (breaker closing).

    Returns:
        The request's outcome.
    """
    if breaker.is_open(state):
        return RequestOutcome(succeeded=False, total_latency=FAST_FAIL_LATENCY_MS, retries_used=0)

    breaker.admit_probe(state, emit)

    max_retries = config.retry.max_retries
    retries = 0
    latency = 0.0
    succeeded = False

    while retries <= max_retries:
        latency += attempt_latency(state, config, rng)

        if rng.next_float() >= failure_probability(state, config):
            succeeded = True
            break

        if retries < max_retries:
            latency += backoff_delay(retries, config.retry)
            retries += 1
        else:
            break

    return RequestOutcome(succeeded=succeeded, total_latency=latency, retries_used=retries)

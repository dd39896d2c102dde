"""Discrete-tick simulation engine.

One :class:`SimulationEngine` owns one run. Each :meth:`advance_tick`
call is a synchronous, atomic step: generate load, simulate every request,
update the backlog and circuit breaker, record metrics, then classify the
system state. The engine performs no I/O and never sleeps; callers decide
the cadence.
"""

from __future__ import annotations

import secrets
from typing import TYPE_CHECKING

from reliasim._internal.errors import SimulationStateError
from reliasim._internal.logging import get_logger
from reliasim.engine.capacity import next_queue_depth, requests_for_tick
from reliasim.engine.circuit import CircuitBreaker
from reliasim.engine.classifier import (
    RETRY_STORM_MESSAGE,
    classify,
    is_retry_storm,
    transition_message,
)
from reliasim.engine.outcome import simulate_request
from reliasim.engine.random import XorShift32
from reliasim.engine.state import EngineState
from reliasim.engine.window import RollingWindow
from reliasim.metrics.models import Event, RunResult, TickMetric
from reliasim.metrics.percentile import latency_stats
from reliasim.metrics.summary import summarize_run

if TYPE_CHECKING:
    from reliasim.engine.config import SimulationConfig
    from reliasim.metrics.models import Summary

logger = get_logger("engine.simulator")


class SimulationEngine:
    """Runs one scenario configuration tick by tick.

    The same ``(config, seed)`` pair always yields identical metrics and
    events.

    Args:
        config: Validated run configuration.
        seed: Integer seed. When None a seed is drawn from the OS entropy
            pool; read it back from :attr:`seed` to replay the run.

    Example::

        engine = SimulationEngine(SimulationConfig(duration=5), seed=7)
        while not engine.is_complete:
            metric = engine.advance_tick()
        summary = engine.summarize()
    """

    def __init__(self, config: SimulationConfig, seed: int | None = None) -> None:
        self.config = config
        self.seed = seed if seed is not None else secrets.randbits(32)
        self.total_ticks = config.total_ticks

        self._rng = XorShift32(self.seed)
        self._breaker = CircuitBreaker(config.circuit_breaker, config.tick_interval_ms)
        self._state = EngineState(error_window=RollingWindow(config.circuit_breaker.window_ticks))
        self._metrics: list[TickMetric] = []
        self._events: list[Event] = []
        self._summary: Summary | None = None

    # -- read-only views ------------------------------------------------

    @property
    def state(self) -> EngineState:
        """The live engine state. Treat as read-only."""
        return self._state

    @property
    def metrics(self) -> tuple[TickMetric, ...]:
        return tuple(self._metrics)

    @property
    def events(self) -> tuple[Event, ...]:
        return tuple(self._events)

    def events_since(self, index: int) -> tuple[Event, ...]:
        """Return the events emitted after the first *index* events."""
        return tuple(self._events[index:])

    @property
    def event_count(self) -> int:
        return len(self._events)

    @property
    def ticks_completed(self) -> int:
        return len(self._metrics)

    @property
    def is_complete(self) -> bool:
        return len(self._metrics) >= self.total_ticks

    # -- operations -----------------------------------------------------

    def advance_tick(self) -> TickMetric:
        """Simulate exactly one tick and return its metrics.

        Events emitted during the tick are appended to :attr:`events`.

        Raises:
            SimulationStateError: If every configured tick has already run.
        """
        if self.is_complete:
            msg = f"run already completed all {self.total_ticks} ticks"
            raise SimulationStateError(msg)

        config = self.config
        state = self._state
        tick_time = state.tick * config.tick_interval_ms / 1000

        def emit(message: str) -> None:
            self._events.append(Event(time=tick_time, message=message))

        generated = requests_for_tick(config, self._rng)

        successes = 0
        failures = 0
        retries = 0
        latencies: list[float] = []
        for _ in range(generated):
            outcome = simulate_request(state, config, self._rng, self._breaker, emit)
            if outcome.succeeded:
                successes += 1
            else:
                failures += 1
            latencies.append(outcome.total_latency)
            retries += outcome.retries_used

        state.queue_depth = next_queue_depth(state.queue_depth, generated, config.capacity)

        error_rate = failures / generated * 100
        avg_latency, p95_latency, max_latency = latency_stats(latencies)

        state.total_requests += generated
        state.total_successes += successes
        state.total_failures += failures
        state.total_retries += retries

        self._breaker.record_tick(state, error_rate, emit)

        metric = TickMetric(
            time=tick_time,
            requests_per_sec=generated / config.tick_seconds,
            success_count=successes,
            failure_count=failures,
            error_rate=error_rate,
            avg_latency=avg_latency,
            p95_latency=p95_latency,
            max_latency=max_latency,
            retry_count=retries,
            queue_depth=state.queue_depth,
            circuit_state=state.circuit_state,
            system_state=state.system_state,
        )

        previous = state.system_state
        state.system_state = classify(metric, state.queue_depth, config, previous)
        if state.system_state is not previous:
            logger.debug(
                "Tick %d: %s -> %s",
                state.tick,
                previous.value,
                state.system_state.value,
                extra={"seed": self.seed, "tick": state.tick},
            )
            emit(transition_message(previous, state.system_state))
        if is_retry_storm(metric):
            emit(RETRY_STORM_MESSAGE)

        self._metrics.append(metric)
        state.tick += 1
        return metric

    def summarize(self) -> Summary:
        """Return the run summary, computing it on first call.

        Raises:
            SimulationStateError: If the run has not completed every tick.
        """
        if not self.is_complete:
            msg = (
                f"cannot summarize before completion "
                f"({self.ticks_completed}/{self.total_ticks} ticks advanced)"
            )
            raise SimulationStateError(msg)
        if self._summary is None:
            self._summary = summarize_run(self.config, self._metrics, self._events)
            logger.info(
                "Run complete: seed=%d, ticks=%d, requests=%d, error_rate=%.2f%%, cause=%s",
                self.seed,
                self.total_ticks,
                self._summary.total_requests,
                self._summary.error_rate,
                self._summary.main_cause,
                extra={"seed": self.seed, "tick": self.total_ticks},
            )
        return self._summary

    def run(self) -> RunResult:
        """Advance every remaining tick, then summarize.

        Returns:
            The full metric and event history plus the summary.
        """
        while not self.is_complete:
            self.advance_tick()
        return RunResult(
            seed=self.seed,
            metrics=self.metrics,
            events=self.events,
            summary=self.summarize(),
        )


def simulate(config: SimulationConfig, seed: int | None = None) -> RunResult:
    """Run *config* to completion with a fresh engine."""
    return SimulationEngine(config, seed=seed).run()

"""Tests for single-request outcomes."""

from __future__ import annotations

import pytest

from reliasim.engine.circuit import FAST_FAIL_LATENCY_MS, CircuitBreaker
from reliasim.engine.config import (
    BackoffKind,
    CircuitBreakerPolicy,
    RetryPolicy,
    SimulationConfig,
)
from reliasim.engine.outcome import (
    MAX_FAILURE_PROBABILITY,
    attempt_latency,
    failure_probability,
    simulate_request,
)
from reliasim.engine.random import XorShift32
from reliasim.engine.state import CircuitState, EngineState, SystemState
from reliasim.engine.window import RollingWindow


def _state(**overrides: object) -> EngineState:
    state = EngineState(error_window=RollingWindow(8))
    for name, value in overrides.items():
        setattr(state, name, value)
    return state


def _breaker(config: SimulationConfig) -> CircuitBreaker:
    return CircuitBreaker(config.circuit_breaker, config.tick_interval_ms)


def _ignore(message: str) -> None:
    pass


class TestAttemptLatency:
    """Tests for attempt_latency."""

    def test_within_jitter_band(self) -> None:
        config = SimulationConfig(base_latency_ms=50, latency_jitter_ms=20)
        rng = XorShift32(11)
        for _ in range(500):
            latency = attempt_latency(_state(), config, rng)
            assert 30 <= latency < 70
            assert latency == int(latency)

    def test_scaled_by_queue_and_state(self) -> None:
        config = SimulationConfig(base_latency_ms=50, latency_jitter_ms=0, capacity=10)
        state = _state(queue_depth=10, system_state=SystemState.DOWN)
        # 50 * (1 + 10/10) * 3
        assert attempt_latency(state, config, XorShift32(1)) == 300

    def test_at_least_one_ms(self) -> None:
        config = SimulationConfig(base_latency_ms=0, latency_jitter_ms=0)
        assert attempt_latency(_state(), config, XorShift32(1)) == 1


class TestFailureProbability:
    """Tests for failure_probability."""

    def test_base_only(self) -> None:
        config = SimulationConfig(base_failure_probability=0.08)
        assert failure_probability(_state(), config) == 0.08

    def test_penalties_add(self) -> None:
        config = SimulationConfig(base_failure_probability=0.1, capacity=10)
        state = _state(queue_depth=6, system_state=SystemState.DEGRADED)
        assert failure_probability(state, config) == pytest.approx(0.35)

    def test_capped(self) -> None:
        config = SimulationConfig(base_failure_probability=0.9, capacity=10)
        state = _state(queue_depth=100, system_state=SystemState.DOWN)
        assert failure_probability(state, config) == MAX_FAILURE_PROBABILITY


class TestSimulateRequest:
    """Tests for simulate_request."""

    def test_open_breaker_fast_fails_without_randomness(self) -> None:
        config = SimulationConfig()
        rng = XorShift32(5)
        before = rng.state
        outcome = simulate_request(
            _state(circuit_state=CircuitState.OPEN), config, rng, _breaker(config), _ignore
        )
        assert outcome.succeeded is False
        assert outcome.total_latency == FAST_FAIL_LATENCY_MS
        assert outcome.retries_used == 0
        assert rng.state == before

    def test_open_state_ignored_when_breaker_disabled(self) -> None:
        config = SimulationConfig(
            base_failure_probability=0.0, circuit_breaker=CircuitBreakerPolicy(enabled=False)
        )
        outcome = simulate_request(
            _state(circuit_state=CircuitState.OPEN),
            config,
            XorShift32(5),
            _breaker(config),
            _ignore,
        )
        assert outcome.succeeded is True

    def test_zero_failure_probability_always_succeeds_first_try(self) -> None:
        config = SimulationConfig(base_failure_probability=0.0)
        rng = XorShift32(5)
        for _ in range(200):
            outcome = simulate_request(_state(), config, rng, _breaker(config), _ignore)
            assert outcome.succeeded is True
            assert outcome.retries_used == 0

    def test_latency_accounts_for_attempts_and_backoff(self) -> None:
        config = SimulationConfig(
            base_latency_ms=50,
            latency_jitter_ms=0,
            base_failure_probability=0.6,
            retry=RetryPolicy(max_retries=3, backoff=BackoffKind.EXPONENTIAL, backoff_delay_ms=100),
            circuit_breaker=CircuitBreakerPolicy(enabled=False),
        )
        rng = XorShift32(21)
        seen_retries = set()
        for _ in range(300):
            outcome = simulate_request(_state(), config, rng, _breaker(config), _ignore)
            retries = outcome.retries_used
            assert 0 <= retries <= 3
            backoff = sum(100 * 2**i for i in range(retries))
            assert outcome.total_latency == 50 * (retries + 1) + backoff
            seen_retries.add(retries)
        assert seen_retries == {0, 1, 2, 3}

    def test_failure_uses_full_retry_budget(self) -> None:
        config = SimulationConfig(
            base_failure_probability=0.9,
            retry=RetryPolicy(max_retries=2),
            circuit_breaker=CircuitBreakerPolicy(enabled=False),
        )
        rng = XorShift32(8)
        for _ in range(200):
            outcome = simulate_request(_state(), config, rng, _breaker(config), _ignore)
            if not outcome.succeeded:
                assert outcome.retries_used == 2

    def test_half_open_counts_probe(self) -> None:
        config = SimulationConfig()
        state = _state(circuit_state=CircuitState.HALF_OPEN)
        simulate_request(state, config, XorShift32(5), _breaker(config), _ignore)
        assert state.probe_count == 1

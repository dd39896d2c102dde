"""Tests for run comparison."""

from __future__ import annotations

from dataclasses import replace

from reliasim.engine.config import CircuitBreakerPolicy, RetryPolicy, SimulationConfig
from reliasim.metrics.compare import NO_MAJOR_DIFFERENCES, compare_runs, config_differences
from reliasim.metrics.models import Summary

BASE_SUMMARY = Summary(
    total_requests=1000,
    total_successes=900,
    total_failures=100,
    success_rate=90.0,
    error_rate=10.0,
    avg_latency=55.0,
    p95_latency=80.0,
    max_latency=120.0,
    downtime_sec=0.0,
    circuit_trips=0,
    main_cause="System operated normally",
)


class TestConfigDifferences:
    """Tests for config_differences."""

    def test_identical(self) -> None:
        assert config_differences(SimulationConfig(), SimulationConfig()) == []

    def test_retries_breaker_and_rps(self) -> None:
        config_b = SimulationConfig(
            rps=80,
            retry=RetryPolicy(max_retries=0),
            circuit_breaker=CircuitBreakerPolicy(enabled=False),
        )
        assert config_differences(SimulationConfig(), config_b) == [
            "Retries changed from 2 to 0",
            "Circuit breaker disabled",
            "RPS changed from 40 to 80",
        ]

    def test_breaker_enabled(self) -> None:
        config_a = SimulationConfig(circuit_breaker=CircuitBreakerPolicy(enabled=False))
        assert config_differences(config_a, SimulationConfig()) == ["Circuit breaker enabled"]

    def test_other_fields_ignored(self) -> None:
        assert config_differences(SimulationConfig(), SimulationConfig(capacity=99)) == []


class TestCompareRuns:
    """Tests for compare_runs."""

    def test_similar_runs(self) -> None:
        summary_b = replace(BASE_SUMMARY, error_rate=14.0, p95_latency=100.0, downtime_sec=0.5)
        result = compare_runs(SimulationConfig(), BASE_SUMMARY, SimulationConfig(), summary_b)
        assert result.analysis == NO_MAJOR_DIFFERENCES
        assert result.differences == []

    def test_all_deltas_reported(self) -> None:
        summary_b = replace(BASE_SUMMARY, error_rate=30.0, p95_latency=200.0, downtime_sec=3.5)
        result = compare_runs(SimulationConfig(), BASE_SUMMARY, SimulationConfig(), summary_b)
        assert result.analysis == (
            "Error rate increased by 20.0%. "
            "P95 latency increased by 120ms. "
            "Downtime increased by 3.5s."
        )
        assert result.error_rate_delta == 20.0
        assert result.p95_latency_delta == 120.0
        assert result.downtime_delta == 3.5

    def test_decreases(self) -> None:
        summary_a = replace(BASE_SUMMARY, error_rate=50.0, downtime_sec=10.0)
        result = compare_runs(SimulationConfig(), summary_a, SimulationConfig(), BASE_SUMMARY)
        assert result.analysis == "Error rate decreased by 40.0%. Downtime decreased by 10.0s."

    def test_latency_threshold_uses_baseline_base_latency(self) -> None:
        config_a = SimulationConfig(base_latency_ms=200)
        summary_b = replace(BASE_SUMMARY, p95_latency=170.0)
        result = compare_runs(config_a, BASE_SUMMARY, SimulationConfig(), summary_b)
        assert result.analysis == NO_MAJOR_DIFFERENCES

    def test_to_dict(self) -> None:
        result = compare_runs(SimulationConfig(), BASE_SUMMARY, SimulationConfig(), BASE_SUMMARY)
        assert result.to_dict() == {
            "differences": [],
            "analysis": NO_MAJOR_DIFFERENCES,
            "errorRateDelta": 0.0,
            "p95LatencyDelta": 0.0,
            "downtimeDelta": 0.0,
        }

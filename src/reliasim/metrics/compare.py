"""Side-by-side comparison of two completed runs."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from reliasim._internal.types import Record
    from reliasim.engine.config import SimulationConfig
    from reliasim.metrics.models import Summary

NO_MAJOR_DIFFERENCES = "Results are similar with no major differences."

# Thresholds below which a change is not worth reporting.
_ERROR_RATE_DELTA = 5.0
_DOWNTIME_DELTA_SEC = 1.0
_LATENCY_DELTA_FRACTION = 0.5


@dataclass(frozen=True)
class RunComparison:
    """Configuration differences and a narrative of outcome changes.

    Attributes:
        differences: Human-readable configuration changes from A to B.
        analysis: Sentences describing how B's outcome differs from A's.
        error_rate_delta: B's error rate minus A's (percentage points).
        p95_latency_delta: B's p95 latency minus A's (ms).
        downtime_delta: B's downtime minus A's (seconds).
    """

    differences: list[str] = field(default_factory=list)
    analysis: str = NO_MAJOR_DIFFERENCES
    error_rate_delta: float = 0.0
    p95_latency_delta: float = 0.0
    downtime_delta: float = 0.0

    def to_dict(self) -> Record:
        return {
            "differences": list(self.differences),
            "analysis": self.analysis,
            "errorRateDelta": self.error_rate_delta,
            "p95LatencyDelta": self.p95_latency_delta,
            "downtimeDelta": self.downtime_delta,
        }


def _direction(delta: float) -> str:
    return "increased" if delta > 0 else "decreased"


def config_differences(config_a: SimulationConfig, config_b: SimulationConfig) -> list[str]:
    """List the configuration changes that usually explain outcome shifts."""
    differences: list[str] = []
    if config_a.retry.max_retries != config_b.retry.max_retries:
        differences.append(
            f"Retries changed from {config_a.retry.max_retries} to {config_b.retry.max_retries}"
        )
    if config_a.circuit_breaker.enabled != config_b.circuit_breaker.enabled:
        toggled = "disabled" if config_a.circuit_breaker.enabled else "enabled"
        differences.append(f"Circuit breaker {toggled}")
    if config_a.rps != config_b.rps:
        differences.append(f"RPS changed from {config_a.rps:g} to {config_b.rps:g}")
    return differences


def compare_runs(
    config_a: SimulationConfig,
    summary_a: Summary,
    config_b: SimulationConfig,
    summary_b: Summary,
) -> RunComparison:
    """Compare run B against baseline run A.

    Args:
        config_a: Baseline configuration.
        summary_a: Baseline summary.
        config_b: Candidate configuration.
        summary_b: Candidate summary.

    Returns:
        The comparison. ``analysis`` falls back to
        :data:`NO_MAJOR_DIFFERENCES` when no delta crosses its threshold.
    """
    error_delta = summary_b.error_rate - summary_a.error_rate
    latency_delta = summary_b.p95_latency - summary_a.p95_latency
    downtime_delta = summary_b.downtime_sec - summary_a.downtime_sec

    sentences: list[str] = []
    if abs(error_delta) > _ERROR_RATE_DELTA:
        sentences.append(f"Error rate {_direction(error_delta)} by {abs(error_delta):.1f}%.")
    if abs(latency_delta) > config_a.base_latency_ms * _LATENCY_DELTA_FRACTION:
        sentences.append(f"P95 latency {_direction(latency_delta)} by {abs(latency_delta):.0f}ms.")
    if abs(downtime_delta) > _DOWNTIME_DELTA_SEC:
        sentences.append(f"Downtime {_direction(downtime_delta)} by {abs(downtime_delta):.1f}s.")

    return RunComparison(
        differences=config_differences(config_a, config_b),
        analysis=" ".join(sentences) if sentences else NO_MAJOR_DIFFERENCES,
        error_rate_delta=error_delta,
        p95_latency_delta=latency_delta,
        downtime_delta=downtime_delta,
    )

"""Records produced by a simulation run.

All records are immutable. ``to_dict`` produces the field-named camelCase
wire form used for persistence and transmission; ``from_dict`` reverses it
and ignores unknown keys.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from reliasim.engine.state import CircuitState, SystemState

if TYPE_CHECKING:
    from collections.abc import Mapping

    from reliasim._internal.types import Record

__all__ = [
    "Event",
    "RunResult",
    "Summary",
    "TickMetric",
]


@dataclass(frozen=True)
class TickMetric:
    """Aggregated metrics for one tick.

    Attributes:
        time: Simulated time at the start of the tick, in seconds.
        requests_per_sec: Requests generated this tick, scaled to one second.
        success_count: Requests whose final attempt succeeded.
        failure_count: Requests whose final attempt failed.
        error_rate: Failures as a percentage of requests (0 to 100).
        avg_latency: Mean request latency in milliseconds.
        p95_latency: Nearest-rank 95th percentile latency (ms).
        max_latency: Largest request latency (ms).
        retry_count: Retries consumed by this tick's requests.
        queue_depth: Backlog after this tick.
        circuit_state: Breaker position after this tick's breaker update.
        system_state: Health state in effect while the tick ran.
    """

    time: float
    requests_per_sec: float
    success_count: int
    failure_count: int
    error_rate: float
    avg_latency: float
    p95_latency: float
    max_latency: float
    retry_count: int
    queue_depth: int
    circuit_state: CircuitState
    system_state: SystemState

    @property
    def request_count(self) -> int:
        return self.success_count + self.failure_count

    def to_dict(self) -> Record:
        return {
            "time": self.time,
            "requestsPerSec": self.requests_per_sec,
            "successCount": self.success_count,
            "failureCount": self.failure_count,
            "errorRate": self.error_rate,
            "avgLatency": self.avg_latency,
            "p95Latency": self.p95_latency,
            "maxLatency": self.max_latency,
            "retryCount": self.retry_count,
            "queueDepth": self.queue_depth,
            "circuitState": self.circuit_state.value,
            "systemState": self.system_state.value,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> TickMetric:
        return cls(
            time=float(data["time"]),
            requests_per_sec=float(data["requestsPerSec"]),
            success_count=int(data["successCount"]),
            failure_count=int(data["failureCount"]),
            error_rate=float(data["errorRate"]),
            avg_latency=float(data["avgLatency"]),
            p95_latency=float(data["p95Latency"]),
            max_latency=float(data["maxLatency"]),
            retry_count=int(data["retryCount"]),
            queue_depth=int(data["queueDepth"]),
            circuit_state=CircuitState(data["circuitState"]),
            system_state=SystemState(data["systemState"]),
        )


@dataclass(frozen=True)
class Event:
    """Something notable that happened during a tick.

    Attributes:
        time: Simulated time of the tick that emitted it, in seconds.
        message: Human-readable description.
    """

    time: float
    message: str

    def to_dict(self) -> Record:
        return {"time": self.time, "message": self.message}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Event:
        return cls(time=float(data["time"]), message=str(data["message"]))


@dataclass(frozen=True)
class Summary:
    """Run-level KPIs and the root-cause verdict.

    Attributes:
        total_requests: Requests generated over the run.
        total_successes: Requests that ultimately succeeded.
        total_failures: Requests that ultimately failed.
        success_rate: Successes as a percentage of requests.
        error_rate: Failures as a percentage of requests.
        avg_latency: Mean of the per-tick mean latencies (ms).
        p95_latency: Nearest-rank p95 over every request's latency (ms).
        max_latency: Largest request latency over the run (ms).
        downtime_sec: Simulated seconds spent in the DOWN state.
        circuit_trips: Number of times the breaker opened.
        main_cause: Rule-based explanation of the run's behaviour.
    """

    total_requests: int
    total_successes: int
    total_failures: int
    success_rate: float
    error_rate: float
    avg_latency: float
    p95_latency: float
    max_latency: float
    downtime_sec: float
    circuit_trips: int
    main_cause: str

    def to_dict(self) -> Record:
        return {
            "totalRequests": self.total_requests,
            "totalSuccesses": self.total_successes,
            "totalFailures": self.total_failures,
            "successRate": self.success_rate,
            "errorRate": self.error_rate,
            "avgLatency": self.avg_latency,
            "p95Latency": self.p95_latency,
            "maxLatency": self.max_latency,
            "downtimeSec": self.downtime_sec,
            "circuitTrips": self.circuit_trips,
            "mainCause": self.main_cause,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Summary:
        return cls(
            total_requests=int(data["totalRequests"]),
            total_successes=int(data["totalSuccesses"]),
            total_failures=int(data["totalFailures"]),
            success_rate=float(data["successRate"]),
            error_rate=float(data["errorRate"]),
            avg_latency=float(data["avgLatency"]),
            p95_latency=float(data["p95Latency"]),
            max_latency=float(data["maxLatency"]),
            downtime_sec=float(data["downtimeSec"]),
            circuit_trips=int(data["circuitTrips"]),
            main_cause=str(data["mainCause"]),
        )


@dataclass(frozen=True)
class RunResult:
    """Complete output of a run.

    Attributes:
        seed: Seed the run was constructed with.
        metrics: One TickMetric per tick, in tick order.
        events: Events in emission order.
        summary: Summary computed after the last tick.
    """

    seed: int
    metrics: tuple[TickMetric, ...]
    events: tuple[Event, ...]
    summary: Summary

    def to_dict(self) -> Record:
        return {
            "seed": self.seed,
            "metrics": [m.to_dict() for m in self.metrics],
            "events": [e.to_dict() for e in self.events],
            "summary": self.summary.to_dict(),
        }

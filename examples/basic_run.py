"""Basic run — simulate one configuration and print its verdict.

Every run is reproducible from its seed. Run it with:

    python examples/basic_run.py
"""

from __future__ import annotations

from reliasim import BackoffKind, RetryPolicy, SimulationConfig, simulate

config = SimulationConfig(
    rps=60,
    duration=20,
    capacity=12,
    base_failure_probability=0.12,
    retry=RetryPolicy(max_retries=3, backoff=BackoffKind.LINEAR, backoff_delay_ms=50),
)

result = simulate(config, seed=2024)
summary = result.summary

print(f"seed={result.seed} ticks={len(result.metrics)}")
print(f"error rate {summary.error_rate:.1f}%, p95 {summary.p95_latency:.0f}ms")
print(f"downtime {summary.downtime_sec:.2f}s, breaker trips {summary.circuit_trips}")
print(f"main cause: {summary.main_cause}")
for event in result.events[:10]:
    print(f"  {event.time:6.2f}s  {event.message}")

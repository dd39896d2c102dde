"""Compare presets — what a circuit breaker buys you under a retry storm.

Runs two presets with the same seed and prints the comparison. Run it with:

    python examples/compare_presets.py
"""

from __future__ import annotations

from reliasim import simulate
from reliasim.metrics.compare import compare_runs
from reliasim.scenarios import get_preset

baseline = get_preset("Retry Storm")
candidate = get_preset("Circuit Breaker Saves You")

summary_a = simulate(baseline.config, seed=7).summary
summary_b = simulate(candidate.config, seed=7).summary
comparison = compare_runs(baseline.config, summary_a, candidate.config, summary_b)

print(f"A: {baseline.name:<28} error {summary_a.error_rate:5.1f}%  {summary_a.main_cause}")
print(f"B: {candidate.name:<28} error {summary_b.error_rate:5.1f}%  {summary_b.main_cause}")
for difference in comparison.differences:
    print(f"  - {difference}")
print(comparison.analysis)

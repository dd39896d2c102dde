"""Load generation and the backlog pressure signal."""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from reliasim.engine.config import SimulationConfig
    from reliasim.engine.random import XorShift32


def requests_for_tick(config: SimulationConfig, rng: XorShift32) -> int:
    """Return the number of synthetic requests generated this tick.

    ``base = floor(rps * tick_interval_ms / 1000)``, plus up to 20% random
    variance, minus a fixed 10% dampening, rounded up and floored at 1.
    The dampened total is computed in integer tenths so the count does not
    depend on float rounding.
    """
    base = math.floor((config.rps * config.tick_interval_ms) / 1000)
    variance = math.floor(rng.next_float() * base * 0.2)
    tenths = 9 * base + 10 * variance
    return max(1, -(-tenths // 10))


def next_queue_depth(queue_depth: int, generated: int, capacity: int) -> int:
    """Carry the unprocessed part of this tick's load into the backlog.

    ``processed = min(generated, capacity)`` and the backlog grows by the
    difference. The backlog is never drained explicitly; it only acts as a
    pressure signal on later ticks.
    """
    processed = min(generated, capacity)
    return max(0, queue_depth + generated - processed)


def queue_failure_penalty(queue_depth: int, capacity: int) -> float:
    """Extra failure probability from backlog pressure (additive)."""
    penalty = 0.0
    if queue_depth > capacity * 0.5:
        penalty += 0.15
    if queue_depth > capacity:
        penalty += 0.25
    return penalty


def queue_latency_multiplier(queue_depth: int, capacity: int) -> float:
    """Latency multiplier from backlog pressure: ``1 + queue / capacity``."""
    if queue_depth > 0:
        return 1 + queue_depth / capacity
    return 1.0

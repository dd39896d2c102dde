"""Nearest-rank percentiles and latency statistics."""

from __future__ import annotations

import math
from collections.abc import Sequence

import numpy as np


def percentile(values: Sequence[float], p: float) -> float:
    """Return the nearest-rank percentile of *values*.

    Values are sorted ascending and the element at ``ceil(n * p) - 1``
    (clamped to 0) is returned. No interpolation is performed, so
    ``percentile([10, 20, 30, 40, 50], 0.95) == 50``.

    Args:
        values: Samples to rank. Must not be empty.
        p: Percentile as a fraction in ``[0, 1]``.

    Raises:
        ValueError: If *values* is empty or *p* is out of range.
    """
    if len(values) == 0:
        msg = "cannot compute a percentile of an empty sample"
        raise ValueError(msg)
    if not 0.0 <= p <= 1.0:
        msg = f"p must be between 0 and 1, got {p}"
        raise ValueError(msg)
    ordered = np.sort(np.asarray(values, dtype=np.float64))
    index = max(0, math.ceil(len(ordered) * p) - 1)
    return float(ordered[index])


def latency_stats(latencies: Sequence[float]) -> tuple[float, float, float]:
    """Compute ``(mean, p95, max)`` of a non-empty latency sample.

    Args:
        latencies: Latency values in milliseconds.

    Returns:
        Mean, nearest-rank p95 and maximum, in milliseconds.

    Raises:
        ValueError: If *latencies* is empty.
    """
    if len(latencies) == 0:
        msg = "cannot compute statistics of an empty latency sample"
        raise ValueError(msg)
    arr = np.asarray(latencies, dtype=np.float64)
    return (
        math.fsum(latencies) / len(latencies),
        percentile(latencies, 0.95),
        float(np.max(arr)),
    )

"""Retry backoff delays."""

from __future__ import annotations

from typing import TYPE_CHECKING

from reliasim.engine.config import BackoffKind

if TYPE_CHECKING:
    from reliasim.engine.config import RetryPolicy


def backoff_delay(attempt: int, policy: RetryPolicy) -> float:
    """Return the delay in milliseconds inserted before retry *attempt*.

    ``attempt`` is the zero-based index of the retry being scheduled, so
    the first retry uses ``attempt=0``. No jitter is applied.

    Args:
        attempt: Zero-based retry index.
        policy: Retry policy supplying the backoff kind and base delay.

    Returns:
        ``0`` for ``none``, ``delay * (attempt + 1)`` for ``linear`` and
        ``delay * 2**attempt`` for ``exponential``.
    """
    base = policy.backoff_delay_ms
    if policy.backoff is BackoffKind.NONE:
        return 0.0
    if policy.backoff is BackoffKind.LINEAR:
        return float(base * (attempt + 1))
    return float(base * 2**attempt)

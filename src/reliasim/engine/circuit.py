"""Circuit breaker state machine.

Transitions are CLOSED -> OPEN -> HALF_OPEN -> CLOSED. OPEN never goes
straight back to CLOSED. The breaker closes again after a fixed quota of
half-open probes, regardless of whether those probes succeeded.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from reliasim._internal.logging import get_logger
from reliasim.engine.state import CircuitState

if TYPE_CHECKING:
    from reliasim._internal.types import EventSink
    from reliasim.engine.config import CircuitBreakerPolicy
    from reliasim.engine.state import EngineState

logger = get_logger("engine.circuit")

# Probes admitted while half-open before the breaker closes.
PROBE_QUOTA = 5

# Latency reported for a request rejected by an open breaker.
FAST_FAIL_LATENCY_MS = 5.0

CLOSED_MESSAGE = "Circuit closed after successful test traffic"
HALF_OPEN_MESSAGE = "Circuit half-open, testing recovery"


class CircuitBreaker:
    """Drives the breaker fields of an :class:`EngineState`.

    Args:
        policy: Breaker tuning from the run configuration.
        tick_interval_ms: Tick length, used to convert the cooldown.
    """

    def __init__(self, policy: CircuitBreakerPolicy, tick_interval_ms: float) -> None:
        self._policy = policy
        self._tick_interval_ms = tick_interval_ms

    @property
    def enabled(self) -> bool:
        return self._policy.enabled

    def is_open(self, state: EngineState) -> bool:
        """True when requests must fast-fail."""
        return self._policy.enabled and state.circuit_state is CircuitState.OPEN

    def admit_probe(self, state: EngineState, emit: EventSink) -> None:
        """Count one request admitted while half-open.

        Once more than :data:`PROBE_QUOTA` probes have been admitted the
        breaker closes. The probes' own outcomes are not consulted.
        """
        if not self._policy.enabled or state.circuit_state is not CircuitState.HALF_OPEN:
            return
        state.probe_count += 1
        if state.probe_count > PROBE_QUOTA:
            state.circuit_state = CircuitState.CLOSED
            state.circuit_opened_at = None
            logger.debug("Circuit closed at tick %d", state.tick, extra={"tick": state.tick})
            emit(CLOSED_MESSAGE)

    def record_tick(self, state: EngineState, error_rate: float, emit: EventSink) -> None:
        """Feed one tick's error rate into the window and apply transitions.

        Args:
            state: Engine state to update.
            error_rate: The tick's error rate in percent.
            emit: Receives event messages for any transition.
        """
        if not self._policy.enabled:
            return

        state.error_window.push(error_rate)
        mean = state.error_window.mean()

        if state.circuit_state is CircuitState.CLOSED:
            if mean > self._policy.error_threshold:
                state.circuit_state = CircuitState.OPEN
                state.circuit_opened_at = state.tick
                logger.debug(
                    "Circuit opened at tick %d (mean error %.1f%%)",
                    state.tick,
                    mean,
                    extra={"tick": state.tick},
                )
                emit(f"Circuit opened (error rate {mean:.1f}% over {len(state.error_window)} ticks)")
        elif state.circuit_state is CircuitState.OPEN:
            opened_at = state.circuit_opened_at if state.circuit_opened_at is not None else state.tick
            elapsed_ms = (state.tick - opened_at) * self._tick_interval_ms
            if elapsed_ms >= self._policy.cooldown_seconds * 1000:
                state.circuit_state = CircuitState.HALF_OPEN
                state.probe_count = 0
                logger.debug("Circuit half-open at tick %d", state.tick, extra={"tick": state.tick})
                emit(HALF_OPEN_MESSAGE)

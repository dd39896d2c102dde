"""Scenario configuration for a simulation run.

Configurations are immutable and validated on construction: an invalid
value raises :class:`ConfigError` naming the field, it is never clamped.
``from_dict``/``to_dict`` use the camelCase wire keys of stored scenarios.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

from reliasim._internal.errors import ConfigError

if TYPE_CHECKING:
    from collections.abc import Mapping

    from reliasim._internal.types import Record


class BackoffKind(str, Enum):
    """Delay policy between a failed attempt and its retry."""

    NONE = "none"
    LINEAR = "linear"
    EXPONENTIAL = "exponential"


# ---------------------------------------------------------------------------
# Validation helpers
# ---------------------------------------------------------------------------


def _require_number(value: Any, name: str) -> None:
    if isinstance(value, bool) or not isinstance(value, int | float):
        msg = f"{name} must be a number, got {value!r}"
        raise ConfigError(msg)
    if not math.isfinite(value):
        msg = f"{name} must be finite, got {value}"
        raise ConfigError(msg)


def _require_count(value: Any, name: str, minimum: int) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        msg = f"{name} must be an integer, got {value!r}"
        raise ConfigError(msg)
    if value < minimum:
        msg = f"{name} must be >= {minimum}, got {value}"
        raise ConfigError(msg)


def _validate_positive(value: Any, name: str) -> None:
    """Raise :class:`ConfigError` if *value* is not a strictly positive number."""
    _require_number(value, name)
    if value <= 0:
        msg = f"{name} must be positive, got {value}"
        raise ConfigError(msg)


def _validate_non_negative(value: Any, name: str) -> None:
    """Raise :class:`ConfigError` if *value* is not a number >= 0."""
    _require_number(value, name)
    if value < 0:
        msg = f"{name} must be non-negative, got {value}"
        raise ConfigError(msg)


def _validate_range(value: Any, name: str, lo: float, hi: float) -> None:
    _require_number(value, name)
    if not lo <= value <= hi:
        msg = f"{name} must be between {lo} and {hi}, got {value}"
        raise ConfigError(msg)


def _parse_backoff(value: Any) -> BackoffKind:
    if isinstance(value, BackoffKind):
        return value
    try:
        return BackoffKind(value)
    except ValueError:
        choices = ", ".join(kind.value for kind in BackoffKind)
        msg = f"backoff must be one of: {choices}, got {value!r}"
        raise ConfigError(msg) from None


def _section(data: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    section = data.get(key, {})
    if not isinstance(section, dict):
        msg = f"{key} must be a mapping, got {type(section).__name__}"
        raise ConfigError(msg)
    return section


# ---------------------------------------------------------------------------
# Policies
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RetryPolicy:
    """Client retry behaviour for each synthetic request.

    Attributes:
        max_retries: Retries allowed after the first attempt (>= 0).
        backoff: Backoff kind applied between attempts.
        backoff_delay_ms: Base backoff delay in milliseconds (>= 0).
    """

    max_retries: int = 2
    backoff: BackoffKind = BackoffKind.EXPONENTIAL
    backoff_delay_ms: float = 100.0

    def __post_init__(self) -> None:
        _require_count(self.max_retries, "max_retries", 0)
        object.__setattr__(self, "backoff", _parse_backoff(self.backoff))
        _validate_non_negative(self.backoff_delay_ms, "backoff_delay_ms")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> RetryPolicy:
        defaults = cls()
        return cls(
            max_retries=data.get("maxRetries", defaults.max_retries),
            backoff=data.get("backoffType", defaults.backoff),
            backoff_delay_ms=data.get("backoffDelay", defaults.backoff_delay_ms),
        )

    def to_dict(self) -> Record:
        return {
            "maxRetries": self.max_retries,
            "backoffType": self.backoff.value,
            "backoffDelay": self.backoff_delay_ms,
        }


@dataclass(frozen=True)
class CircuitBreakerPolicy:
    """Circuit breaker tuning.

    Attributes:
        enabled: When False the breaker is bypassed and always reports closed.
        error_threshold: Mean error rate (percent) over the window that
            trips the breaker.
        window_ticks: Number of recent ticks averaged (>= 1).
        cooldown_seconds: Simulated seconds the breaker stays open before
            admitting probe traffic.
    """

    enabled: bool = True
    error_threshold: float = 35.0
    window_ticks: int = 8
    cooldown_seconds: float = 5.0

    def __post_init__(self) -> None:
        if not isinstance(self.enabled, bool):
            msg = f"enabled must be a boolean, got {self.enabled!r}"
            raise ConfigError(msg)
        _validate_range(self.error_threshold, "error_threshold", 0, 100)
        _require_count(self.window_ticks, "window_ticks", 1)
        _validate_non_negative(self.cooldown_seconds, "cooldown_seconds")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> CircuitBreakerPolicy:
        defaults = cls()
        return cls(
            enabled=data.get("enabled", defaults.enabled),
            error_threshold=data.get("errorThreshold", defaults.error_threshold),
            window_ticks=data.get("windowTicks", defaults.window_ticks),
            cooldown_seconds=data.get("cooldownTime", defaults.cooldown_seconds),
        )

    def to_dict(self) -> Record:
        return {
            "enabled": self.enabled,
            "errorThreshold": self.error_threshold,
            "windowTicks": self.window_ticks,
            "cooldownTime": self.cooldown_seconds,
        }


# ---------------------------------------------------------------------------
# Simulation config
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SimulationConfig:
    """Immutable configuration for one simulation run.

    Attributes:
        rps: Target requests per second.
        duration: Simulated run length in seconds.
        tick_interval_ms: Length of one tick in milliseconds.
        base_latency_ms: Latency of an unloaded, healthy attempt.
        latency_jitter_ms: Amplitude of the symmetric jitter on each attempt.
        capacity: Maximum requests processed per tick.
        base_failure_probability: Per-attempt failure probability before
            queue and state penalties (0 to 1).
        retry: Client retry policy.
        circuit_breaker: Circuit breaker policy.
    """

    rps: float = 40.0
    duration: float = 30.0
    tick_interval_ms: float = 250.0
    base_latency_ms: float = 50.0
    latency_jitter_ms: float = 20.0
    capacity: int = 15
    base_failure_probability: float = 0.08
    retry: RetryPolicy = field(default_factory=RetryPolicy)
    circuit_breaker: CircuitBreakerPolicy = field(default_factory=CircuitBreakerPolicy)

    def __post_init__(self) -> None:
        _validate_positive(self.rps, "rps")
        _validate_positive(self.duration, "duration")
        _validate_positive(self.tick_interval_ms, "tick_interval_ms")
        _validate_non_negative(self.base_latency_ms, "base_latency_ms")
        _validate_non_negative(self.latency_jitter_ms, "latency_jitter_ms")
        _require_count(self.capacity, "capacity", 1)
        _validate_range(self.base_failure_probability, "base_failure_probability", 0, 1)
        if not isinstance(self.retry, RetryPolicy):
            msg = f"retry must be a RetryPolicy, got {type(self.retry).__name__}"
            raise ConfigError(msg)
        if not isinstance(self.circuit_breaker, CircuitBreakerPolicy):
            msg = (
                f"circuit_breaker must be a CircuitBreakerPolicy, "
                f"got {type(self.circuit_breaker).__name__}"
            )
            raise ConfigError(msg)

    @property
    def total_ticks(self) -> int:
        """Number of ticks in a full run: ``ceil(duration * 1000 / tick_interval_ms)``."""
        return math.ceil((self.duration * 1000) / self.tick_interval_ms)

    @property
    def tick_seconds(self) -> float:
        return self.tick_interval_ms / 1000

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> SimulationConfig:
        """Build a config from a camelCase wire mapping.

        Missing keys take their defaults; unknown keys are ignored.

        Raises:
            ConfigError: If any value is invalid.
        """
        if not isinstance(data, dict):
            msg = f"config must be a mapping, got {type(data).__name__}"
            raise ConfigError(msg)
        defaults = cls()
        return cls(
            rps=data.get("rps", defaults.rps),
            duration=data.get("duration", defaults.duration),
            tick_interval_ms=data.get("tickInterval", defaults.tick_interval_ms),
            base_latency_ms=data.get("baseLatency", defaults.base_latency_ms),
            latency_jitter_ms=data.get("latencyJitter", defaults.latency_jitter_ms),
            capacity=data.get("capacity", defaults.capacity),
            base_failure_probability=data.get(
                "baseFailureProbability", defaults.base_failure_probability
            ),
            retry=RetryPolicy.from_dict(_section(data, "retry")),
            circuit_breaker=CircuitBreakerPolicy.from_dict(_section(data, "circuitBreaker")),
        )

    def to_dict(self) -> Record:
        return {
            "rps": self.rps,
            "duration": self.duration,
            "tickInterval": self.tick_interval_ms,
            "baseLatency": self.base_latency_ms,
            "latencyJitter": self.latency_jitter_ms,
            "capacity": self.capacity,
            "baseFailureProbability": self.base_failure_probability,
            "retry": self.retry.to_dict(),
            "circuitBreaker": self.circuit_breaker.to_dict(),
        }

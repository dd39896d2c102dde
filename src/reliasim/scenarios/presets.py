"""Built-in scenarios that each illustrate one reliability failure mode."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from reliasim._internal.errors import ConfigError
from reliasim.engine.config import (
    BackoffKind,
    CircuitBreakerPolicy,
    RetryPolicy,
    SimulationConfig,
)

if TYPE_CHECKING:
    from reliasim._internal.types import Record


@dataclass(frozen=True)
class Scenario:
    """A named configuration.

    Attributes:
        name: Display name.
        config: Run configuration.
        description: One-line explanation of what the scenario shows.
    """

    name: str
    config: SimulationConfig
    description: str = ""

    def to_dict(self) -> Record:
        return {"name": self.name, "config": self.config.to_dict()}


PRESETS: tuple[Scenario, ...] = (
    Scenario(
        name="Healthy System",
        description="Low failure rate with headroom; the baseline everything else is compared to.",
        config=SimulationConfig(
            rps=30,
            duration=30,
            tick_interval_ms=250,
            base_latency_ms=50,
            latency_jitter_ms=15,
            capacity=20,
            base_failure_probability=0.02,
            retry=RetryPolicy(max_retries=1, backoff=BackoffKind.EXPONENTIAL, backoff_delay_ms=100),
            circuit_breaker=CircuitBreakerPolicy(
                enabled=True, error_threshold=40, window_ticks=8, cooldown_seconds=5
            ),
        ),
    ),
    Scenario(
        name="Retry Storm",
        description="Aggressive linear retries against a saturated service with no breaker.",
        config=SimulationConfig(
            rps=50,
            duration=30,
            tick_interval_ms=250,
            base_latency_ms=80,
            latency_jitter_ms=30,
            capacity=12,
            base_failure_probability=0.15,
            retry=RetryPolicy(max_retries=4, backoff=BackoffKind.LINEAR, backoff_delay_ms=50),
            circuit_breaker=CircuitBreakerPolicy(
                enabled=False, error_threshold=35, window_ticks=8, cooldown_seconds=5
            ),
        ),
    ),
    Scenario(
        name="Circuit Breaker Saves You",
        description="Same pressure as a retry storm, but a breaker sheds load.",
        config=SimulationConfig(
            rps=60,
            duration=30,
            tick_interval_ms=250,
            base_latency_ms=100,
            latency_jitter_ms=40,
            capacity=15,
            base_failure_probability=0.18,
            retry=RetryPolicy(max_retries=3, backoff=BackoffKind.EXPONENTIAL, backoff_delay_ms=100),
            circuit_breaker=CircuitBreakerPolicy(
                enabled=True, error_threshold=30, window_ticks=6, cooldown_seconds=8
            ),
        ),
    ),
    Scenario(
        name="Capacity Saturation",
        description="Offered load far above capacity; the backlog drives the service down.",
        config=SimulationConfig(
            rps=100,
            duration=30,
            tick_interval_ms=250,
            base_latency_ms=60,
            latency_jitter_ms=20,
            capacity=10,
            base_failure_probability=0.05,
            retry=RetryPolicy(max_retries=2, backoff=BackoffKind.EXPONENTIAL, backoff_delay_ms=100),
            circuit_breaker=CircuitBreakerPolicy(
                enabled=True, error_threshold=45, window_ticks=10, cooldown_seconds=5
            ),
        ),
    ),
    Scenario(
        name="Network Spike",
        description="High, noisy latency with moderate failures.",
        config=SimulationConfig(
            rps=45,
            duration=30,
            tick_interval_ms=250,
            base_latency_ms=120,
            latency_jitter_ms=60,
            capacity=18,
            base_failure_probability=0.12,
            retry=RetryPolicy(max_retries=2, backoff=BackoffKind.EXPONENTIAL, backoff_delay_ms=150),
            circuit_breaker=CircuitBreakerPolicy(
                enabled=True, error_threshold=35, window_ticks=8, cooldown_seconds=6
            ),
        ),
    ),
)


def preset_names() -> list[str]:
    return [preset.name for preset in PRESETS]


def get_preset(name: str) -> Scenario:
    """Look up a preset by name, ignoring case and surrounding whitespace.

    Raises:
        ConfigError: If no preset has that name.
    """
    wanted = name.strip().lower()
    for preset in PRESETS:
        if preset.name.lower() == wanted:
            return preset
    msg = f"preset must be one of: {', '.join(preset_names())}, got {name!r}"
    raise ConfigError(msg)

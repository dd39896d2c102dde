"""Shared test fixtures for the ReliaSim test suite."""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING

import pytest

from reliasim.engine.config import CircuitBreakerPolicy, RetryPolicy, SimulationConfig
from reliasim.storage.repository import InMemoryRunRepository

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator
    from pathlib import Path


# =============================================================================
# Pytest configuration
# =============================================================================


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Auto-apply markers based on test directory structure."""
    for item in items:
        test_path = str(item.fspath)
        if "/unit/" in test_path:
            item.add_marker(pytest.mark.unit)
        elif "/integration/" in test_path:
            item.add_marker(pytest.mark.integration)
        elif "/e2e/" in test_path:
            item.add_marker(pytest.mark.e2e)


@pytest.fixture(autouse=True)
def _reset_reliasim_logger() -> Iterator[None]:
    """Drop handlers installed by ``setup_logging`` so each test starts clean."""
    yield
    logger = logging.getLogger("reliasim")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


# =============================================================================
# Configurations
# =============================================================================


@pytest.fixture
def healthy_config() -> SimulationConfig:
    """Four one-second ticks, ample capacity, no failures, no retries."""
    return SimulationConfig(
        rps=40,
        duration=4,
        tick_interval_ms=1000,
        capacity=1000,
        base_failure_probability=0.0,
        retry=RetryPolicy(max_retries=0),
        circuit_breaker=CircuitBreakerPolicy(enabled=False),
    )


@pytest.fixture
def failing_config() -> SimulationConfig:
    """Mostly failing traffic with a sensitive, fast-recovering breaker."""
    return SimulationConfig(
        rps=40,
        duration=10,
        tick_interval_ms=250,
        capacity=1000,
        base_failure_probability=0.9,
        retry=RetryPolicy(max_retries=0),
        circuit_breaker=CircuitBreakerPolicy(
            enabled=True, error_threshold=20, window_ticks=2, cooldown_seconds=1
        ),
    )


@pytest.fixture
def short_config() -> SimulationConfig:
    """Ten 100 ms ticks with default behaviour, for live and storage tests."""
    return SimulationConfig(duration=1, tick_interval_ms=100)


# =============================================================================
# Storage
# =============================================================================


@pytest.fixture
def memory_repository() -> InMemoryRunRepository:
    return InMemoryRunRepository()


@pytest.fixture
def write_scenario(tmp_path: Path) -> Callable[[str, dict], Path]:
    """Return a helper that writes a scenario JSON document under tmp_path."""

    def _write(filename: str, document: dict) -> Path:
        path = tmp_path / filename
        path.write_text(json.dumps(document), encoding="utf-8")
        return path

    return _write

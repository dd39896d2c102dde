"""Scenario and run persistence.

:class:`RunRepository` is the interface drivers depend on;
:class:`InMemoryRunRepository` and :class:`SqlRunRepository` implement it.
"""

from __future__ import annotations

from reliasim.storage.models import RunStatus, StoredRun, StoredScenario
from reliasim.storage.recorder import run_and_record
from reliasim.storage.repository import InMemoryRunRepository, RunRepository
from reliasim.storage.sql_store import SqlRunRepository

__all__ = [
    "InMemoryRunRepository",
    "RunRepository",
    "RunStatus",
    "SqlRunRepository",
    "StoredRun",
    "StoredScenario",
    "run_and_record",
]

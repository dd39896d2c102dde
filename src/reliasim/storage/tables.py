"""SQLAlchemy ORM tables backing :class:`~reliasim.storage.sql_store.SqlRunRepository`.

TABLES:
- scenarios: saved configurations (config stored as its camelCase JSON form)
- runs: one row per run, with the summary as JSON once completed
- run_metrics: one row per tick, ordered by ``id``
- run_events: one row per event, ordered by ``id``
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import JSON, BigInteger, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from reliasim.engine.state import CircuitState, SystemState
from reliasim.metrics.models import Event, TickMetric


class Base(DeclarativeBase):
    """Declarative base for ReliaSim tables."""


class ScenarioRow(Base):
    __tablename__ = "scenarios"

    id: Mapped[str] = mapped_column(String(32), primary_key=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    config: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)
    created_at: Mapped[float] = mapped_column(Float, nullable=False)
    updated_at: Mapped[float] = mapped_column(Float, nullable=False, index=True)


class RunRow(Base):
    __tablename__ = "runs"

    id: Mapped[str] = mapped_column(String(32), primary_key=True)
    scenario_id: Mapped[str] = mapped_column(
        String(32), ForeignKey("scenarios.id", ondelete="CASCADE"), nullable=False, index=True
    )
    seed: Mapped[int] = mapped_column(BigInteger, nullable=False)
    status: Mapped[str] = mapped_column(String(16), nullable=False)
    duration: Mapped[float] = mapped_column(Float, nullable=False)
    tick_interval_ms: Mapped[float] = mapped_column(Float, nullable=False)
    summary: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    started_at: Mapped[float] = mapped_column(Float, nullable=False)
    completed_at: Mapped[float | None] = mapped_column(Float, nullable=True)


class MetricRow(Base):
    __tablename__ = "run_metrics"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    run_id: Mapped[str] = mapped_column(
        String(32), ForeignKey("runs.id", ondelete="CASCADE"), nullable=False, index=True
    )
    time: Mapped[float] = mapped_column(Float, nullable=False)
    requests_per_sec: Mapped[float] = mapped_column(Float, nullable=False)
    success_count: Mapped[int] = mapped_column(Integer, nullable=False)
    failure_count: Mapped[int] = mapped_column(Integer, nullable=False)
    error_rate: Mapped[float] = mapped_column(Float, nullable=False)
    avg_latency: Mapped[float] = mapped_column(Float, nullable=False)
    p95_latency: Mapped[float] = mapped_column(Float, nullable=False)
    max_latency: Mapped[float] = mapped_column(Float, nullable=False)
    retry_count: Mapped[int] = mapped_column(Integer, nullable=False)
    queue_depth: Mapped[int] = mapped_column(Integer, nullable=False)
    circuit_state: Mapped[str] = mapped_column(String(16), nullable=False)
    system_state: Mapped[str] = mapped_column(String(16), nullable=False)

    @classmethod
    def from_metric(cls, run_id: str, metric: TickMetric) -> MetricRow:
        return cls(
            run_id=run_id,
            time=metric.time,
            requests_per_sec=metric.requests_per_sec,
            success_count=metric.success_count,
            failure_count=metric.failure_count,
            error_rate=metric.error_rate,
            avg_latency=metric.avg_latency,
            p95_latency=metric.p95_latency,
            max_latency=metric.max_latency,
            retry_count=metric.retry_count,
            queue_depth=metric.queue_depth,
            circuit_state=metric.circuit_state.value,
            system_state=metric.system_state.value,
        )

    def to_metric(self) -> TickMetric:
        return TickMetric(
            time=self.time,
            requests_per_sec=self.requests_per_sec,
            success_count=self.success_count,
            failure_count=self.failure_count,
            error_rate=self.error_rate,
            avg_latency=self.avg_latency,
            p95_latency=self.p95_latency,
            max_latency=self.max_latency,
            retry_count=self.retry_count,
            queue_depth=self.queue_depth,
            circuit_state=CircuitState(self.circuit_state),
            system_state=SystemState(self.system_state),
        )


class EventRow(Base):
    __tablename__ = "run_events"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    run_id: Mapped[str] = mapped_column(
        String(32), ForeignKey("runs.id", ondelete="CASCADE"), nullable=False, index=True
    )
    time: Mapped[float] = mapped_column(Float, nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)

    def to_event(self) -> Event:
        return Event(time=self.time, message=self.message)

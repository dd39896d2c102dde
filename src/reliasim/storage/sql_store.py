"""SQL implementation of :class:`RunRepository`.

By default the database is a SQLite file, ``reliasim.db``, inside the data
directory. Every repository call runs in its own transaction, so a failed
write leaves no partial rows behind. Recording a tick inserts one
``run_metrics`` row plus one ``run_events`` row per event; nothing already
stored is rewritten.
"""

from __future__ import annotations

import time
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING

from sqlalchemy import create_engine, delete, select
from sqlalchemy.engine import URL, make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from reliasim._internal.errors import ConfigError, NotFoundError, StorageError
from reliasim._internal.logging import get_logger
from reliasim.engine.config import SimulationConfig
from reliasim.metrics.models import Summary
from reliasim.storage.models import RunStatus, StoredRun, StoredScenario
from reliasim.storage.repository import new_id
from reliasim.storage.tables import Base, EventRow, MetricRow, RunRow, ScenarioRow

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence

    from reliasim.metrics.models import Event, TickMetric

DATABASE_FILENAME = "reliasim.db"

logger = get_logger("storage.sql_store")


class SqlRunRepository:
    """Scenarios and runs stored through SQLAlchemy.

    Args:
        data_dir: Directory holding the SQLite database file. Created if
            missing. Ignored when *url* is given.
        url: Explicit SQLAlchemy database URL.
        echo: Log every SQL statement.

    Raises:
        ConfigError: If neither *data_dir* nor *url* is given.
        StorageError: If the directory cannot be created or the schema
            cannot be installed.
    """

    def __init__(
        self,
        data_dir: str | Path | None = None,
        *,
        url: str | URL | None = None,
        echo: bool = False,
    ) -> None:
        if url is None:
            if data_dir is None:
                msg = "SqlRunRepository needs a data_dir or a database url"
                raise ConfigError(msg)
            directory = Path(data_dir)
            try:
                directory.mkdir(parents=True, exist_ok=True)
            except OSError as exc:
                msg = f"Cannot create data directory {directory}: {exc}"
                raise StorageError(msg) from exc
            url = URL.create("sqlite", database=str(directory / DATABASE_FILENAME))

        self.url = make_url(url)
        connect_args: dict[str, object] = {}
        if self.url.get_backend_name() == "sqlite":
            connect_args["check_same_thread"] = False
        self.engine = create_engine(self.url, echo=echo, connect_args=connect_args)
        self._session_factory = sessionmaker(bind=self.engine, expire_on_commit=False)

        display_url = self.url.render_as_string(hide_password=True)
        try:
            Base.metadata.create_all(self.engine)
        except SQLAlchemyError as exc:
            msg = f"Cannot initialise database {display_url}: {exc}"
            raise StorageError(msg) from exc
        logger.debug("Opened run database %s", display_url)

    @contextmanager
    def _transaction(self) -> Iterator[Session]:
        """Yield a session whose work commits on success and rolls back on any error."""
        try:
            with self._session_factory.begin() as session:
                yield session
        except SQLAlchemyError as exc:
            msg = f"Database error: {exc}"
            raise StorageError(msg) from exc

    # -- scenarios --------------------------------------------------------

    def save_scenario(self, name: str, config: SimulationConfig) -> str:
        now = time.time()
        row = ScenarioRow(
            id=new_id(), name=name, config=config.to_dict(), created_at=now, updated_at=now
        )
        with self._transaction() as session:
            session.add(row)
        return row.id

    def update_scenario(self, scenario_id: str, name: str, config: SimulationConfig) -> None:
        with self._transaction() as session:
            row = self._get_scenario(session, scenario_id)
            row.name = name
            row.config = config.to_dict()
            row.updated_at = time.time()

    def load_scenario(self, scenario_id: str) -> StoredScenario:
        with self._transaction() as session:
            return _to_scenario(self._get_scenario(session, scenario_id))

    def list_scenarios(self) -> list[StoredScenario]:
        """Return every scenario, most recently updated first."""
        with self._transaction() as session:
            rows = session.scalars(select(ScenarioRow).order_by(ScenarioRow.updated_at.desc()))
            return [_to_scenario(row) for row in rows]

    def delete_scenario(self, scenario_id: str) -> None:
        """Delete a scenario and every run started from it."""
        with self._transaction() as session:
            row = self._get_scenario(session, scenario_id)
            run_ids = list(
                session.scalars(select(RunRow.id).where(RunRow.scenario_id == scenario_id))
            )
            self._delete_runs(session, run_ids)
            session.delete(row)
        logger.debug("Deleted scenario %s and %d runs", scenario_id, len(run_ids))

    def duplicate_scenario(self, scenario_id: str) -> str:
        """Copy a scenario under the name ``"<name> (copy)"``."""
        original = self.load_scenario(scenario_id)
        return self.save_scenario(f"{original.name} (copy)", original.config)

    # -- runs -------------------------------------------------------------

    def create_run(self, scenario_id: str, seed: int) -> str:
        with self._transaction() as session:
            scenario = _to_scenario(self._get_scenario(session, scenario_id))
            row = RunRow(
                id=new_id(),
                scenario_id=scenario_id,
                seed=seed,
                status=RunStatus.RUNNING.value,
                duration=scenario.config.duration,
                tick_interval_ms=scenario.config.tick_interval_ms,
                started_at=time.time(),
            )
            session.add(row)
        return row.id

    def append_tick(self, run_id: str, metric: TickMetric, events: Sequence[Event] = ()) -> None:
        """Insert one tick's metric and the events it emitted.

        Raises:
            NotFoundError: If the run does not exist.
            StorageError: If the run is already completed or the insert fails.
        """
        with self._transaction() as session:
            self._get_running(session, run_id)
            session.add(MetricRow.from_metric(run_id, metric))
            session.add_all(self._event_rows(run_id, events))

    def save_summary(self, run_id: str, summary: Summary) -> None:
        """Store the summary and mark the run completed."""
        with self._transaction() as session:
            row = self._get_running(session, run_id)
            row.summary = summary.to_dict()
            row.status = RunStatus.COMPLETED.value
            row.completed_at = time.time()

    def load_run(self, run_id: str) -> StoredRun:
        with self._transaction() as session:
            return self._to_run(session, self._get_run(session, run_id))

    def list_runs(self, scenario_id: str) -> list[StoredRun]:
        """Return the scenario's runs, most recently started first."""
        with self._transaction() as session:
            rows = session.scalars(
                select(RunRow)
                .where(RunRow.scenario_id == scenario_id)
                .order_by(RunRow.started_at.desc())
            )
            return [self._to_run(session, row) for row in rows]

    # -- row helpers (inside a transaction) -------------------------------

    def _event_rows(self, run_id: str, events: Sequence[Event]) -> list[EventRow]:
        return [EventRow(run_id=run_id, time=e.time, message=e.message) for e in events]

    def _delete_runs(self, session: Session, run_ids: list[str]) -> None:
        if not run_ids:
            return
        session.execute(delete(EventRow).where(EventRow.run_id.in_(run_ids)))
        session.execute(delete(MetricRow).where(MetricRow.run_id.in_(run_ids)))
        session.execute(delete(RunRow).where(RunRow.id.in_(run_ids)))

    def _get_scenario(self, session: Session, scenario_id: str) -> ScenarioRow:
        row = session.get(ScenarioRow, scenario_id)
        if row is None:
            msg = f"Scenario not found: {scenario_id}"
            raise NotFoundError(msg)
        return row

    def _get_run(self, session: Session, run_id: str) -> RunRow:
        row = session.get(RunRow, run_id)
        if row is None:
            msg = f"Run not found: {run_id}"
            raise NotFoundError(msg)
        return row

    def _get_running(self, session: Session, run_id: str) -> RunRow:
        row = self._get_run(session, run_id)
        if row.status != RunStatus.RUNNING.value:
            msg = f"Run is not active: {run_id}"
            raise StorageError(msg)
        return row

    def _to_run(self, session: Session, row: RunRow) -> StoredRun:
        metrics = session.scalars(
            select(MetricRow).where(MetricRow.run_id == row.id).order_by(MetricRow.id)
        )
        events = session.scalars(
            select(EventRow).where(EventRow.run_id == row.id).order_by(EventRow.id)
        )
        return StoredRun(
            id=row.id,
            scenario_id=row.scenario_id,
            seed=row.seed,
            status=RunStatus(row.status),
            duration=row.duration,
            tick_interval_ms=row.tick_interval_ms,
            metrics=tuple(m.to_metric() for m in metrics),
            events=tuple(e.to_event() for e in events),
            summary=Summary.from_dict(row.summary) if row.summary is not None else None,
            started_at=row.started_at,
            completed_at=row.completed_at,
        )


def _to_scenario(row: ScenarioRow) -> StoredScenario:
    try:
        config = SimulationConfig.from_dict(row.config)
    except (KeyError, TypeError, ValueError, ConfigError) as exc:
        msg = f"Stored scenario {row.id} is malformed: {exc}"
        raise StorageError(msg) from exc
    return StoredScenario(
        id=row.id,
        name=row.name,
        config=config,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )

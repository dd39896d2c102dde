"""Wall-clock paced driver that streams a run to subscribers.

The engine itself never waits. :class:`LiveRun` is a cooperative asyncio
task that advances one tick per ``tick_interval_ms / speed`` of wall-clock
time and forwards every result to its subscribers. It stops when the run
completes, when :meth:`LiveRun.cancel` is called, or when the last
subscriber unsubscribes.
"""

from __future__ import annotations

import asyncio
import contextlib
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

from reliasim._internal.errors import ConfigError
from reliasim._internal.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Callable

    from reliasim._internal.types import Record
    from reliasim.engine.simulator import SimulationEngine
    from reliasim.metrics.models import Event, Summary, TickMetric
    from reliasim.storage.repository import RunRepository

logger = get_logger("live.driver")


class UpdateKind(str, Enum):
    TICK = "tick"
    COMPLETE = "complete"


@dataclass(frozen=True)
class LiveUpdate:
    """One message pushed to subscribers.

    Attributes:
        kind: ``tick`` for each advanced tick, ``complete`` once at the end.
        metric: The tick's metrics (``tick`` updates only).
        events: Events emitted during that tick.
        summary: Final summary (``complete`` update only).
    """

    kind: UpdateKind
    metric: TickMetric | None = None
    events: tuple[Event, ...] = field(default_factory=tuple)
    summary: Summary | None = None

    def to_dict(self) -> Record:
        payload: Record = {"type": self.kind.value}
        if self.metric is not None:
            payload["data"] = self.metric.to_dict()
            payload["events"] = [e.to_dict() for e in self.events]
        if self.summary is not None:
            payload["summary"] = self.summary.to_dict()
        return payload


class LiveRun:
    """Paces a :class:`SimulationEngine` against the wall clock.

    Args:
        engine: Engine to drive. It must not be advanced by anyone else.
        speed: Wall-clock speed multiplier; ``2.0`` runs twice as fast as
            simulated time.
        repository: Optional repository that receives every tick and the
            summary under *run_id*.
        run_id: Run id in *repository*. Required when *repository* is given.

    Raises:
        ConfigError: If *speed* is not positive or *run_id* is missing.

    Example::

        live = LiveRun(SimulationEngine(config, seed=1), speed=10.0)
        live.subscribe(lambda update: print(update.kind))
        summary = await live.run()
    """

    def __init__(
        self,
        engine: SimulationEngine,
        *,
        speed: float = 1.0,
        repository: RunRepository | None = None,
        run_id: str | None = None,
    ) -> None:
        if speed <= 0:
            msg = f"speed must be positive, got {speed}"
            raise ConfigError(msg)
        if repository is not None and run_id is None:
            msg = "run_id is required when a repository is given"
            raise ConfigError(msg)
        self._engine = engine
        self._interval = engine.config.tick_seconds / speed
        self._repository = repository
        self._run_id = run_id
        self._subscribers: list[Callable[[LiveUpdate], None]] = []
        self._had_subscribers = False
        self._stop = asyncio.Event()
        self._task: asyncio.Task[Summary | None] | None = None

    @property
    def interval(self) -> float:
        """Wall-clock seconds between tick advances."""
        return self._interval

    @property
    def cancelled(self) -> bool:
        return self._stop.is_set()

    def subscribe(self, callback: Callable[[LiveUpdate], None]) -> Callable[[], None]:
        """Register *callback* and return a function that unsubscribes it.

        When the last subscriber unsubscribes the run is cancelled.
        """
        self._subscribers.append(callback)
        self._had_subscribers = True

        def _unsubscribe() -> None:
            with contextlib.suppress(ValueError):
                self._subscribers.remove(callback)
            if self._had_subscribers and not self._subscribers:
                logger.debug("Last subscriber left; cancelling live run")
                self.cancel()

        return _unsubscribe

    def cancel(self) -> None:
        """Ask the run to stop before its next tick."""
        self._stop.set()

    def start(self) -> asyncio.Task[Summary | None]:
        """Schedule the run on the current event loop and return its task."""
        if self._task is None:
            self._task = asyncio.create_task(self.run(), name="reliasim-live-run")
        return self._task

    async def run(self) -> Summary | None:
        """Drive the engine to completion or cancellation.

        Returns:
            The summary, or None if the run was cancelled first.
        """
        engine = self._engine
        seen_events = engine.event_count

        while not engine.is_complete:
            # Sleep one interval, waking early on cancel.
            with contextlib.suppress(TimeoutError):
                await asyncio.wait_for(self._stop.wait(), timeout=self._interval)
            if self._stop.is_set():
                logger.info(
                    "Live run cancelled after %d/%d ticks",
                    engine.ticks_completed,
                    engine.total_ticks,
                    extra={"run_id": self._run_id, "seed": engine.seed},
                )
                return None

            metric = engine.advance_tick()
            events = engine.events_since(seen_events)
            seen_events += len(events)
            if self._repository is not None and self._run_id is not None:
                self._repository.append_tick(self._run_id, metric, events)
            self._publish(LiveUpdate(kind=UpdateKind.TICK, metric=metric, events=events))

        summary = engine.summarize()
        if self._repository is not None and self._run_id is not None:
            self._repository.save_summary(self._run_id, summary)
        self._publish(LiveUpdate(kind=UpdateKind.COMPLETE, summary=summary))
        return summary

    def _publish(self, update: LiveUpdate) -> None:
        for callback in list(self._subscribers):
            callback(update)

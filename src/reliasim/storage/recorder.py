"""Drive an engine to completion while persisting its output."""

from __future__ import annotations

from typing import TYPE_CHECKING

from reliasim._internal.logging import get_logger
from reliasim.engine.simulator import SimulationEngine

if TYPE_CHECKING:
    from reliasim.storage.models import StoredRun
    from reliasim.storage.repository import RunRepository

logger = get_logger("storage.recorder")


def run_and_record(
    repository: RunRepository,
    scenario_id: str,
    seed: int | None = None,
) -> StoredRun:
    """Run a stored scenario and persist every tick, event and the summary.

    Args:
        repository: Where the run is recorded.
        scenario_id: Scenario to run.
        seed: Seed for the engine; drawn from entropy when None.

    Returns:
        The completed run as stored.

    Raises:
        NotFoundError: If the scenario does not exist.
        StorageError: If the repository rejects a write.
    """
    scenario = repository.load_scenario(scenario_id)
    engine = SimulationEngine(scenario.config, seed=seed)
    run_id = repository.create_run(scenario_id, engine.seed)
    logger.info(
        "Recording run %s of scenario %r (seed=%d)",
        run_id,
        scenario.name,
        engine.seed,
        extra={"run_id": run_id, "seed": engine.seed},
    )

    seen_events = 0
    while not engine.is_complete:
        metric = engine.advance_tick()
        events = engine.events_since(seen_events)
        repository.append_tick(run_id, metric, events)
        seen_events += len(events)

    repository.save_summary(run_id, engine.summarize())
    return repository.load_run(run_id)

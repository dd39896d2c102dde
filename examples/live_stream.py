"""Live stream — pace a run against the wall clock and watch each tick.

The run is recorded into a JSON data directory as it goes. Run it with:

    python examples/live_stream.py
"""

from __future__ import annotations

import asyncio

from reliasim import SimulationConfig, SimulationEngine
from reliasim.live import LiveRun, LiveUpdate, UpdateKind
from reliasim.storage import SqlRunRepository


def _print_update(update: LiveUpdate) -> None:
    if update.kind is UpdateKind.TICK and update.metric is not None:
        m = update.metric
        print(
            f"{m.time:6.2f}s  rps={m.requests_per_sec:5.1f}  err={m.error_rate:5.1f}%  "
            f"queue={m.queue_depth:3d}  circuit={m.circuit_state.value:<9}  "
            f"system={m.system_state.value}"
        )
        for event in update.events:
            print(f"        ! {event.message}")
    elif update.summary is not None:
        print(f"done: {update.summary.main_cause}")


async def main() -> None:
    config = SimulationConfig(duration=10, base_failure_probability=0.3)
    repository = SqlRunRepository("./reliasim-data")
    scenario_id = repository.save_scenario("Live example", config)

    engine = SimulationEngine(config, seed=11)
    run_id = repository.create_run(scenario_id, engine.seed)
    live = LiveRun(engine, speed=4.0, repository=repository, run_id=run_id)
    live.subscribe(_print_update)
    await live.run()
    print(f"stored run {run_id}")


if __name__ == "__main__":
    asyncio.run(main())

"""``reliasim run`` — simulate a scenario and print its summary."""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING

import typer
from rich.console import Console
from rich.live import Live
from rich.panel import Panel
from rich.table import Table

from reliasim._internal.config import load_settings
from reliasim._internal.errors import ReliaSimError
from reliasim._internal.logging import setup_logging
from reliasim.engine.config import SimulationConfig
from reliasim.engine.simulator import SimulationEngine
from reliasim.live.driver import LiveRun, UpdateKind
from reliasim.scenarios.loader import load_scenario_file
from reliasim.scenarios.presets import Scenario, get_preset
from reliasim.storage.sql_store import SqlRunRepository
from reliasim.storage.recorder import run_and_record

if TYPE_CHECKING:
    from collections.abc import Sequence

    from reliasim.live.driver import LiveUpdate
    from reliasim.metrics.models import Event, Summary, TickMetric
    from reliasim.storage.repository import RunRepository

console = Console(stderr=True)

_STATE_STYLES = {
    "stable": "green",
    "degraded": "yellow",
    "down": "red",
    "closed": "green",
    "half_open": "yellow",
    "open": "red",
}


# ---------------------------------------------------------------------------
# Scenario resolution
# ---------------------------------------------------------------------------


def _resolve_scenario(scenario_file: Path | None, preset: str | None) -> Scenario:
    """Pick the scenario from a file, a preset name, or the defaults.

    Raises:
        typer.BadParameter: If both a file and a preset are given.
    """
    if scenario_file is not None and preset is not None:
        msg = "Pass either a scenario file or --preset, not both"
        raise typer.BadParameter(msg)
    if scenario_file is not None:
        return load_scenario_file(scenario_file)
    if preset is not None:
        return get_preset(preset)
    return Scenario(name="Default Scenario", config=SimulationConfig())


# ---------------------------------------------------------------------------
# Rich display
# ---------------------------------------------------------------------------


def _styled(value: str) -> str:
    style = _STATE_STYLES.get(value)
    return f"[{style}]{value}[/{style}]" if style else value


def _make_live_table(metric: TickMetric | None, ticks_done: int, total_ticks: int) -> Table:
    """Build a Rich table for the latest tick.

    Args:
        metric: Latest tick metrics, or None before the first tick.
        ticks_done: Ticks advanced so far.
        total_ticks: Ticks in the whole run.

    Returns:
        Formatted Rich Table.
    """
    table = Table(show_header=True, header_style="bold cyan", expand=True)
    table.add_column("Metric", style="bold")
    table.add_column("Value", justify="right")

    table.add_row("Tick", f"{ticks_done}/{total_ticks}")
    if metric is None:
        table.add_row("Status", "Starting...")
        return table

    table.add_row("Time", f"{metric.time:.2f}s")
    table.add_row("Requests/sec", f"{metric.requests_per_sec:.1f}")
    table.add_row("Error Rate", f"{metric.error_rate:.1f}%")
    table.add_row("Avg Latency", f"{metric.avg_latency:.1f}ms")
    table.add_row("p95 Latency", f"{metric.p95_latency:.1f}ms")
    table.add_row("Retries", str(metric.retry_count))
    table.add_row("Queue Depth", str(metric.queue_depth))
    table.add_row("Circuit", _styled(metric.circuit_state.value))
    table.add_row("System", _styled(metric.system_state.value))
    return table


def _print_summary(
    scenario: Scenario,
    seed: int,
    summary: Summary,
    events: Sequence[Event],
    limit: int,
) -> None:
    """Print the final summary and the most recent events.

    Args:
        scenario: Scenario that was run.
        seed: Seed used, so the run can be replayed.
        summary: Completed run summary.
        events: Every event of the run.
        limit: Maximum number of events to show (0 hides them).
    """
    if events and limit > 0:
        ev_table = Table(title="Events", show_header=True, header_style="bold cyan", expand=True)
        ev_table.add_column("Time", justify="right")
        ev_table.add_column("Message")
        shown = events[-limit:]
        for event in shown:
            ev_table.add_row(f"{event.time:.2f}s", event.message)
        if len(events) > len(shown):
            ev_table.caption = f"{len(events) - len(shown)} earlier events not shown"
        console.print(ev_table)

    table = Table(title="Run Complete", show_header=True, header_style="bold green", expand=True)
    table.add_column("Metric", style="bold")
    table.add_column("Value", justify="right")

    table.add_row("Scenario", scenario.name)
    table.add_row("Seed", str(seed))
    table.add_row("Total Requests", str(summary.total_requests))
    table.add_row("Successes", str(summary.total_successes))
    table.add_row("Failures", str(summary.total_failures))
    table.add_row("Success Rate", f"{summary.success_rate:.2f}%")
    table.add_row("Error Rate", f"{summary.error_rate:.2f}%")
    table.add_row("Avg Latency", f"{summary.avg_latency:.1f}ms")
    table.add_row("p95 Latency", f"{summary.p95_latency:.1f}ms")
    table.add_row("Max Latency", f"{summary.max_latency:.1f}ms")
    table.add_row("Downtime", f"{summary.downtime_sec:.2f}s")
    table.add_row("Circuit Trips", str(summary.circuit_trips))
    table.add_row("Main Cause", f"[bold]{summary.main_cause}[/bold]")
    console.print(table)


# ---------------------------------------------------------------------------
# Execution modes
# ---------------------------------------------------------------------------


def _run_live(
    engine: SimulationEngine,
    speed: float,
    repository: RunRepository | None,
    run_id: str | None,
) -> Summary | None:
    """Run with wall-clock pacing and a live-updating table."""
    live_run = LiveRun(engine, speed=speed, repository=repository, run_id=run_id)

    with Live(
        _make_live_table(None, 0, engine.total_ticks),
        console=console,
        refresh_per_second=4,
        transient=True,
    ) as live:

        def _on_update(update: LiveUpdate) -> None:
            if update.kind is UpdateKind.TICK:
                live.update(
                    _make_live_table(update.metric, engine.ticks_completed, engine.total_ticks),
                )
                for event in update.events:
                    live.console.print(f"[dim]{event.time:6.2f}s[/dim] {event.message}")

        live_run.subscribe(_on_update)
        return asyncio.run(live_run.run())


# ---------------------------------------------------------------------------
# Command
# ---------------------------------------------------------------------------


def run_cmd(
    scenario_file: Path | None = typer.Argument(
        None,
        help="Path to a scenario .json file.",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
    preset: str | None = typer.Option(
        None,
        "--preset",
        "-p",
        help="Run a built-in preset instead of a file (see `reliasim presets`).",
    ),
    seed: int | None = typer.Option(
        None,
        "--seed",
        "-s",
        help="Seed for a reproducible run (random when omitted).",
        min=0,
    ),
    live: bool = typer.Option(
        False,
        "--live",
        help="Pace ticks against the wall clock and show a live table.",
    ),
    speed: float | None = typer.Option(
        None,
        "--speed",
        help="Live pacing multiplier (default: RELIASIM_LIVE_SPEED or 1.0).",
    ),
    save: bool = typer.Option(
        False,
        "--save",
        help="Store the scenario and run in the data directory.",
    ),
    data_dir: Path | None = typer.Option(
        None,
        "--data-dir",
        "-d",
        help="Data directory for --save (default: RELIASIM_DATA_DIR).",
    ),
    as_json: bool = typer.Option(
        False,
        "--json",
        help="Write the full run (metrics, events, summary) as JSON to stdout.",
    ),
    events_limit: int = typer.Option(
        20,
        "--events",
        help="Number of most recent events to display.",
        min=0,
    ),
    fail_on_error_rate: float | None = typer.Option(
        None,
        "--fail-on-error-rate",
        help="Exit non-zero if the error rate (percent) exceeds this threshold.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose (DEBUG) logging.",
    ),
) -> None:
    """Simulate a scenario and print its summary."""
    try:
        settings = load_settings()
        setup_logging(
            level=logging.DEBUG if verbose else logging.INFO,
            json_format=settings.json_logs,
        )
        scenario = _resolve_scenario(scenario_file, preset)
    except ReliaSimError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(code=1) from exc

    config = scenario.config
    console.print(
        Panel(
            f"[bold]Scenario:[/bold] {scenario.name}\n"
            f"[bold]Load:[/bold]     {config.rps:g} rps, capacity {config.capacity}/tick\n"
            f"[bold]Duration:[/bold] {config.duration:g}s ({config.total_ticks} ticks)\n"
            f"[bold]Retries:[/bold]  {config.retry.max_retries} ({config.retry.backoff.value})\n"
            f"[bold]Breaker:[/bold]  {'enabled' if config.circuit_breaker.enabled else 'disabled'}",
            title="ReliaSim",
            border_style="cyan",
        )
    )

    repository: RunRepository | None = None
    try:
        if save:
            repository = SqlRunRepository(data_dir or settings.data_dir)

        if live:
            engine = SimulationEngine(config, seed=seed)
            run_id = None
            if repository is not None:
                scenario_id = repository.save_scenario(scenario.name, config)
                run_id = repository.create_run(scenario_id, engine.seed)
            summary = _run_live(engine, speed or settings.live_speed, repository, run_id)
            if summary is None:
                console.print("[yellow]Run cancelled.[/yellow]")
                raise typer.Exit(code=1)
            run_seed, metrics, events = engine.seed, engine.metrics, engine.events
        elif repository is not None:
            scenario_id = repository.save_scenario(scenario.name, config)
            stored = run_and_record(repository, scenario_id, seed)
            run_id = stored.id
            if stored.summary is None:
                msg = f"Run {stored.id} finished without a summary"
                raise ReliaSimError(msg)
            summary = stored.summary
            run_seed, metrics, events = stored.seed, stored.metrics, stored.events
        else:
            run_id = None
            result = SimulationEngine(config, seed=seed).run()
            summary = result.summary
            run_seed, metrics, events = result.seed, result.metrics, result.events
    except ReliaSimError as exc:
        console.print(f"[red]Simulation failed:[/red] {exc}")
        raise typer.Exit(code=1) from exc
    except KeyboardInterrupt:
        console.print("[yellow]Run interrupted.[/yellow]")
        raise typer.Exit(code=130) from None

    _print_summary(scenario, run_seed, summary, events, events_limit)

    if run_id is not None:
        console.print(f"[green]Saved run[/green] {run_id}")

    if as_json:
        document = {
            "scenario": scenario.to_dict(),
            "seed": run_seed,
            "metrics": [m.to_dict() for m in metrics],
            "events": [e.to_dict() for e in events],
            "summary": summary.to_dict(),
        }
        if run_id is not None:
            document["runId"] = run_id
        typer.echo(json.dumps(document, ensure_ascii=False))

    if fail_on_error_rate is not None and summary.error_rate > fail_on_error_rate:
        console.print(
            f"[red]FAIL:[/red] Error rate {summary.error_rate:.2f}% "
            f"exceeds threshold {fail_on_error_rate:.2f}%"
        )
        raise typer.Exit(code=1)

"""``reliasim compare`` — compare two stored runs."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import typer
from rich.console import Console
from rich.table import Table

from reliasim._internal.config import load_settings
from reliasim._internal.errors import ReliaSimError, StorageError
from reliasim.metrics.compare import compare_runs
from reliasim.storage.sql_store import SqlRunRepository

if TYPE_CHECKING:
    from reliasim.metrics.models import Summary
    from reliasim.storage.models import StoredRun

console = Console(stderr=True)


def _completed_summary(stored: StoredRun) -> Summary:
    if stored.summary is None:
        msg = f"Run {stored.id} has not completed"
        raise StorageError(msg)
    return stored.summary


def compare_cmd(
    run_a: str = typer.Argument(..., help="Baseline run id."),
    run_b: str = typer.Argument(..., help="Run id to compare against the baseline."),
    data_dir: Path | None = typer.Option(
        None,
        "--data-dir",
        "-d",
        help="Data directory holding the runs (default: RELIASIM_DATA_DIR).",
    ),
) -> None:
    """Compare two completed runs stored in the data directory."""
    try:
        repository = SqlRunRepository(data_dir or load_settings().data_dir)
        stored_a = repository.load_run(run_a)
        stored_b = repository.load_run(run_b)
        summary_a = _completed_summary(stored_a)
        summary_b = _completed_summary(stored_b)
        config_a = repository.load_scenario(stored_a.scenario_id).config
        config_b = repository.load_scenario(stored_b.scenario_id).config
    except ReliaSimError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(code=1) from exc

    comparison = compare_runs(config_a, summary_a, config_b, summary_b)

    table = Table(title="Run Comparison", show_header=True, header_style="bold cyan", expand=True)
    table.add_column("Metric", style="bold")
    table.add_column(f"A ({run_a})", justify="right")
    table.add_column(f"B ({run_b})", justify="right")

    table.add_row("Seed", str(stored_a.seed), str(stored_b.seed))
    table.add_row("Total Requests", str(summary_a.total_requests), str(summary_b.total_requests))
    table.add_row("Error Rate", f"{summary_a.error_rate:.2f}%", f"{summary_b.error_rate:.2f}%")
    table.add_row("p95 Latency", f"{summary_a.p95_latency:.1f}ms", f"{summary_b.p95_latency:.1f}ms")
    table.add_row("Downtime", f"{summary_a.downtime_sec:.2f}s", f"{summary_b.downtime_sec:.2f}s")
    table.add_row("Circuit Trips", str(summary_a.circuit_trips), str(summary_b.circuit_trips))
    table.add_row("Main Cause", summary_a.main_cause, summary_b.main_cause)
    console.print(table)

    if comparison.differences:
        console.print("[bold]Configuration changes:[/bold]")
        for difference in comparison.differences:
            console.print(f"  • {difference}")
    console.print(f"[bold]Analysis:[/bold] {comparison.analysis}")

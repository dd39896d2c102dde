"""``reliasim presets`` — list the built-in scenarios."""

from __future__ import annotations

from rich.console import Console
from rich.table import Table

from reliasim.scenarios.presets import PRESETS

console = Console(stderr=True)


def presets_cmd() -> None:
    """List built-in preset scenarios."""
    table = Table(title="Preset Scenarios", show_header=True, header_style="bold cyan", expand=True)
    table.add_column("Name", style="bold")
    table.add_column("RPS", justify="right")
    table.add_column("Capacity", justify="right")
    table.add_column("Failure %", justify="right")
    table.add_column("Retries", justify="right")
    table.add_column("Breaker")
    table.add_column("Description")

    for preset in PRESETS:
        config = preset.config
        table.add_row(
            preset.name,
            f"{config.rps:g}",
            str(config.capacity),
            f"{config.base_failure_probability * 100:.0f}%",
            f"{config.retry.max_retries} ({config.retry.backoff.value})",
            "on" if config.circuit_breaker.enabled else "off",
            preset.description,
        )

    console.print(table)

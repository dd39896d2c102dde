"""``reliasim init`` — scaffold a new scenario file."""

from __future__ import annotations

import json
from pathlib import Path

import typer
from rich.console import Console

from reliasim._internal.errors import ConfigError
from reliasim.engine.config import SimulationConfig
from reliasim.scenarios.presets import Scenario, get_preset

console = Console(stderr=True)


def init_cmd(
    name: str = typer.Argument(
        "my_scenario",
        help="Name for the scenario (used as filename).",
    ),
    preset: str | None = typer.Option(
        None,
        "--from-preset",
        help="Start from a built-in preset's configuration.",
    ),
) -> None:
    """Scaffold a new scenario JSON file in the current directory."""
    safe_name = "".join(c if c.isalnum() or c == "_" else "_" for c in name).lower()
    if not safe_name:
        safe_name = "scenario"

    filename = f"{safe_name}.json"
    display_name = name.replace("_", " ").replace("-", " ").title()

    target = Path.cwd() / filename
    if target.exists():
        console.print(f"[red]File already exists:[/red] {filename}")
        raise typer.Exit(code=1)

    if preset is not None:
        try:
            config = get_preset(preset).config
        except ConfigError as exc:
            console.print(f"[red]Error:[/red] {exc}")
            raise typer.Exit(code=1) from exc
    else:
        config = SimulationConfig()

    document = Scenario(name=display_name, config=config).to_dict()
    target.write_text(json.dumps(document, indent=2) + "\n", encoding="utf-8")
    console.print(f"[green]Created scenario:[/green] {filename}")

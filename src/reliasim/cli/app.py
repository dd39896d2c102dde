"""Main Typer application — entry point for the ``reliasim`` CLI."""

from __future__ import annotations

import typer

from reliasim import __version__
from reliasim.cli.compare import compare_cmd
from reliasim.cli.init_cmd import init_cmd
from reliasim.cli.presets_cmd import presets_cmd
from reliasim.cli.run import run_cmd

app = typer.Typer(
    name="reliasim",
    help="Deterministic reliability simulations for retries, queues and circuit breakers.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

app.command("run", help="Simulate a scenario and print its summary.")(run_cmd)
app.command("presets", help="List the built-in preset scenarios.")(presets_cmd)
app.command("init", help="Scaffold a new scenario file.")(init_cmd)
app.command("compare", help="Compare two saved runs.")(compare_cmd)


def _version_callback(value: bool) -> None:
    """Print version and exit.

    Args:
        value: True if --version was passed.
    """
    if value:
        typer.echo(f"reliasim {__version__}")
        raise typer.Exit


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """ReliaSim — watch retries, queues and circuit breakers fail in slow motion."""

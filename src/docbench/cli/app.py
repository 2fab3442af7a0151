"""Main Typer application — entry point for the ``docbench`` CLI."""

from __future__ import annotations

import typer

from docbench import __version__
from docbench.cli.run import run_cmd

app = typer.Typer(
    name="docbench",
    help="Insert-load benchmark for document-store HTTP endpoints.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)

app.command("run", help="Run an insert benchmark against a table.")(run_cmd)


def _version_callback(value: bool) -> None:
    """Print version and exit.

    Args:
        value: True if --version was passed.
    """
    if value:
        typer.echo(f"docbench {__version__}")
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
    """DocBench — insert-load benchmark for document-store HTTP endpoints."""

"""``docbench run`` — execute an insert benchmark and print its summary."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from docbench._internal.config import load_config
from docbench._internal.errors import DocBenchError
from docbench._internal.logging import setup_logging
from docbench.engine.orchestrator import BenchmarkOrchestrator

if TYPE_CHECKING:
    from docbench.metrics.models import BenchmarkResult

console = Console(stderr=True)


# ---------------------------------------------------------------------------
# Summary rendering
# ---------------------------------------------------------------------------


def _print_summary(result: BenchmarkResult) -> None:
    """Print the final summary and both outcome histograms.

    Args:
        result: Completed BenchmarkResult.
    """
    summary = result.summary
    title = "Benchmark Complete" if result.complete else "Benchmark Interrupted"
    table = Table(
        title=title,
        show_header=True,
        header_style="bold green" if result.complete else "bold yellow",
        expand=True,
    )
    table.add_column("Metric", style="bold")
    table.add_column("Value", justify="right")

    table.add_row("Target", result.config.resource_url)
    table.add_row("Workers", str(result.config.num_workers))
    table.add_row("Completed", f"{summary.completed} / {result.config.total_operations}")
    table.add_row("Elapsed", f"{result.elapsed_seconds:.3f}s")
    table.add_row("Inserts/sec", f"{result.throughput:.1f}")
    table.add_row("p50 Latency", f"{summary.latency_p50:.1f}ms")
    table.add_row("p95 Latency", f"{summary.latency_p95:.1f}ms")
    table.add_row("p99 Latency", f"{summary.latency_p99:.1f}ms")
    table.add_row("Max Latency", f"{summary.latency_max:.1f}ms")
    console.print(table)

    if summary.response_codes:
        codes = Table(title="Response Codes", header_style="bold cyan", expand=True)
        codes.add_column("Status")
        codes.add_column("Count", justify="right")
        for code, count in sorted(summary.response_codes.items()):
            codes.add_row(str(code), str(count))
        console.print(codes)

    if summary.error_kinds:
        errors = Table(title="Errors", header_style="bold red", expand=True)
        errors.add_column("Kind")
        errors.add_column("Count", justify="right")
        for kind, count in sorted(summary.error_kinds.items()):
            errors.add_row(kind, str(count))
        console.print(errors)


# ---------------------------------------------------------------------------
# Command
# ---------------------------------------------------------------------------


def run_cmd(
    host: str | None = typer.Option(
        None,
        "--destination-host",
        "-d",
        help="Target host [localhost].",
    ),
    port: int | None = typer.Option(
        None,
        "--port",
        "-l",
        help="Target port [5984].",
    ),
    num_operations: int | None = typer.Option(
        None,
        "--num-operations",
        "-n",
        help="Total number of inserts [1000].",
        min=0,
    ),
    inserts_per_worker: int | None = typer.Option(
        None,
        "--inserts-per-worker",
        help="Inserts per worker; total becomes this times --threads.",
        min=0,
    ),
    threads: int = typer.Option(
        1,
        "--threads",
        "-t",
        help="Number of concurrent insert workers.",
        min=1,
    ),
    clean: bool = typer.Option(
        False,
        "--clean",
        "-c",
        help="Drop and recreate the benchmark table.",
    ),
    quorum: int | None = typer.Option(
        None,
        "--cloudant-q",
        "-q",
        help="Quorum Q value to set when creating the table.",
        min=1,
    ),
    table_name: str | None = typer.Option(
        None,
        "--table-name",
        "-b",
        help="The database table to use [bench_table].",
    ),
    username: str | None = typer.Option(
        None,
        "--user-name",
        "-u",
        help="HTTP Basic authentication username.",
    ),
    password: str | None = typer.Option(
        None,
        "--password",
        "-p",
        help="HTTP Basic authentication password.",
    ),
    report_interval: float | None = typer.Option(
        None,
        "--report-interval",
        help="Seconds between progress reports [10].",
    ),
    timeout: float | None = typer.Option(
        None,
        "--timeout",
        help="Per-request timeout in seconds [30].",
    ),
    json_logs: bool = typer.Option(
        False,
        "--json-logs",
        help="Emit structured JSON logs.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose (DEBUG) logging.",
    ),
) -> None:
    """Insert generated records into a table and report throughput."""
    if num_operations is not None and inserts_per_worker is not None:
        msg = "--num-operations and --inserts-per-worker are mutually exclusive"
        raise typer.BadParameter(msg)
    if inserts_per_worker is not None:
        num_operations = inserts_per_worker * threads

    setup_logging(
        level=logging.DEBUG if verbose else logging.INFO,
        json_format=json_logs,
    )

    try:
        config = load_config(
            host=host,
            port=port,
            table_name=table_name,
            total_operations=num_operations,
            num_workers=threads,
            clean=clean,
            quorum=quorum,
            username=username,
            password=password,
            request_timeout=timeout,
            report_interval=report_interval,
        )
    except DocBenchError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(code=1) from exc

    console.print(
        Panel(
            f"[bold]Target:[/bold]     {config.resource_url}\n"
            f"[bold]Inserts:[/bold]    {config.total_operations}\n"
            f"[bold]Workers:[/bold]    {config.num_workers}\n"
            f"[bold]Clean:[/bold]      {'yes' if config.clean else 'no'}",
            title="DocBench",
            border_style="cyan",
        )
    )

    try:
        result = BenchmarkOrchestrator(config).run()
    except DocBenchError as exc:
        console.print(f"[red]Benchmark failed:[/red] {exc}")
        raise typer.Exit(code=1) from exc

    _print_summary(result)

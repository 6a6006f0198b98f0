"""
CLI: ``tradefeed`` - run the feed pipeline on one input file.

    tradefeed run SAMPLE.dat --output-dir ./out
    tradefeed check SAMPLE.dat
"""

from __future__ import annotations

import json
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from tradefeed import __version__
from tradefeed.core.errors import TradeFeedError
from tradefeed.core.logging import configure_logging
from tradefeed.core.settings import get_settings
from tradefeed.feed.pipelines import FeedPipeline
from tradefeed.framework.pipelines import PipelineResult

app = typer.Typer(
    name="tradefeed",
    help="tradefeed - validate fixed-width trade feeds and write CSV reports.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

console = Console()
err_console = Console(stderr=True)


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"tradefeed {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
    log_level: str | None = typer.Option(None, "--log-level", help="DEBUG, INFO, WARNING or ERROR"),
    log_format: str | None = typer.Option(None, "--log-format", help="console or json"),
) -> None:
    """tradefeed CLI."""
    settings = get_settings()
    configure_logging(level=log_level or settings.log_level, format=log_format or settings.log_format)


# ── Output helpers ───────────────────────────────────────────────────────


def _print_summary(result: PipelineResult, as_json: bool) -> None:
    if as_json:
        console.print_json(
            json.dumps(
                {
                    "status": result.status.value,
                    "error": result.error,
                    "metrics": result.metrics,
                },
                default=str,
            )
        )
        return

    table = Table(title="Feed summary", show_header=True)
    table.add_column("Metric")
    table.add_column("Value", justify="right")
    for key in ("lines", "trade_records", "extrade_records", "trade_rows", "extrade_rows"):
        if key in result.metrics:
            table.add_row(key, str(result.metrics[key]))
    for severity, count in result.metrics.get("findings", {}).items():
        table.add_row(f"findings.{severity.lower()}", str(count))
    console.print(table)


def _finish(result: PipelineResult, as_json: bool) -> None:
    _print_summary(result, as_json)
    records = result.metrics.get("trade_records", 0) + result.metrics.get("extrade_records", 0)
    elapsed = result.metrics.get("elapsed_seconds", result.duration_seconds or 0.0)
    if result.succeeded:
        console.print(f"[green]Processed {records} records in {elapsed:.3f}s[/green]")
        return
    err_console.print(f"[red]Run failed after {elapsed:.3f}s: {result.error}[/red]")
    raise typer.Exit(code=1)


# ── Commands ─────────────────────────────────────────────────────────────


@app.command()
def run(
    input_path: Path = typer.Argument(..., help="Fixed-width feed file"),
    output_dir: Path | None = typer.Option(None, "--output-dir", "-o", help="Directory for the reports"),
    json_out: bool = typer.Option(False, "--json", help="Print the summary as JSON"),
) -> None:
    """Validate a feed and write the TRADE, EXTRADE and INFO reports."""
    settings = get_settings()
    pipeline = FeedPipeline(
        input_path,
        settings.report_paths(output_dir),
        input_encoding=settings.input_encoding,
        csv_encoding=settings.csv_encoding,
    )
    try:
        result = pipeline.run()
    except TradeFeedError as e:
        err_console.print(f"[red]{e.message}[/red]")
        raise typer.Exit(code=1)
    _finish(result, json_out)


@app.command()
def check(
    input_path: Path = typer.Argument(..., help="Fixed-width feed file"),
    json_out: bool = typer.Option(False, "--json", help="Print the summary as JSON"),
) -> None:
    """Decode and validate a feed without writing reports."""
    settings = get_settings()
    pipeline = FeedPipeline(
        input_path,
        settings.report_paths(),
        check_only=True,
        input_encoding=settings.input_encoding,
    )
    result = pipeline.run()
    _finish(result, json_out)


if __name__ == "__main__":
    app()

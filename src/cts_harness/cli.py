# src/cts_harness/cli.py
"""CTS Harness Command Line Interface.

Offline companion to the pytest plugin: re-render a saved coverage dump,
re-check it against another universe, and validate universe files.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

import typer

from cts_harness import __version__
from cts_harness.contracts import CoverageReport, CoverageThresholdError, ReportDumpError, UniverseFileError
from cts_harness.core.universe import load_universe
from cts_harness.coverage.dump import load_dump
from cts_harness.coverage.engine import compute_coverage
from cts_harness.coverage.render import render_json, render_text

__all__ = ["app"]

app = typer.Typer(
    name="cts-harness",
    help="CTS Harness: conformance coverage for pytest suites.",
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"cts-harness version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """CTS Harness command line."""


def _error(message: str) -> None:
    typer.secho(f"Error: {message}", fg=typer.colors.RED, err=True)


def _check_threshold(result: CoverageReport, min_coverage: float | None) -> None:
    """Raise CoverageThresholdError if ``result`` is below ``min_coverage``."""
    if not result.meets(min_coverage):
        raise CoverageThresholdError(result.percentage, min_coverage or 0.0)


@app.command()
def report(
    dump: Path = typer.Argument(..., help="JSON dump written by --cts-report-file."),
    output_format: Literal["text", "json"] = typer.Option(
        "text",
        "--format",
        "-f",
        help="Output format: 'text' (human-readable) or 'json'.",
    ),
    universe: Path | None = typer.Option(
        None,
        "--universe",
        "-u",
        help="Recompute coverage against this universe file instead of the saved one.",
    ),
    min_coverage: float | None = typer.Option(
        None,
        "--min-coverage",
        min=0.0,
        max=100.0,
        help="Exit with status 1 when coverage is below this percentage.",
    ),
    extraneous: bool = typer.Option(
        False,
        "--extraneous",
        help="List registered functions that are not in the universe.",
    ),
) -> None:
    """Render the coverage report of a saved run."""
    try:
        saved = load_dump(dump.expanduser())
        tags = load_universe(universe.expanduser()) if universe is not None else saved.universe_tags()
    except (ReportDumpError, UniverseFileError) as e:
        _error(str(e))
        raise typer.Exit(1) from None

    result = compute_coverage(saved.to_registrations(), tags)
    if output_format == "json":
        typer.echo(render_json(result))
    else:
        typer.echo(render_text(result, show_extraneous=extraneous))

    try:
        _check_threshold(result, min_coverage)
    except CoverageThresholdError as e:
        _error(str(e))
        raise typer.Exit(1) from None


@app.command(name="universe")
def universe_command(
    path: Path = typer.Argument(..., help="Universe YAML/JSON file."),
) -> None:
    """Validate a universe file and list its functions."""
    try:
        tags = load_universe(path.expanduser())
    except UniverseFileError as e:
        _error(str(e))
        raise typer.Exit(1) from None

    typer.echo(f"{len(tags)} function(s) in {path}")
    for tag in tags:
        typer.echo(f"  - {tag}")

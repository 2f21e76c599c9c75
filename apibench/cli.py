"""
Command‑line interface (CLI) for apibench.

Example – 50 parallel POSTs with two checks
-------------------------------------------
    apibench run --url https://httpbin.org/post \
                 --method POST --data-path payload.json \
                 --iterations 50 --parallel \
                 --check mean=200 --check pctOfSuccess=99

The process exits with *1* when any check fails or the run cannot start.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any, List, Optional

import typer
from pydantic import ValidationError

from apibench.config import get_settings
from apibench.log import configure_logging
from apibench.model import (
    ConcurrencyMode,
    ConfigurationError,
    RequestConfig,
    payload_from,
)
from apibench.output import OutputFormat, TableFormat, render
from apibench.runner import run_benchmark_sync

# Typer application instance
app = typer.Typer(
    add_completion=False,
    help="A tool to check the speed and resilience of your API endpoints.",
)


def _fail(message: str) -> None:
    typer.secho(f"Error: {message}", fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1)


def _load_json(path: Path, what: str) -> Any:
    """Read and JSON‑parse *path*; exit 1 if it is missing or invalid."""
    path = path.resolve()
    if not path.is_file():
        _fail(f"{what} file not found: {path}")
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        _fail(f"{what} file is not valid JSON: {path} ({exc})")


def _split_checks(values: Optional[List[str]]) -> List[str]:
    """``--check`` may be repeated and may hold comma‑separated expressions."""
    return [part.strip() for v in values or () for part in v.split(",") if part.strip()]


@app.command()
def run(  # noqa: D401 – CLI verb, not a docstring
    url: str = typer.Option(..., "--url", help="API endpoint URL"),
    method: str = typer.Option("GET", "--method", "-m", help="HTTP method (GET, POST, PUT, ...)"),
    iterations: Optional[int] = typer.Option(
        None, "--iterations", "-n", help="Number of requests to send [default: 10]"
    ),
    parallel: bool = typer.Option(False, "--parallel", help="Send all requests at once"),
    headers_path: Optional[Path] = typer.Option(
        None, "--headers-path", help="Path to a JSON file with request headers"
    ),
    data_path: Optional[Path] = typer.Option(
        None, "--data-path", help="Path to a JSON file with the request body"
    ),
    output_format: OutputFormat = typer.Option(
        OutputFormat.TABLE, "--output-format", "-o", help="Output format"
    ),
    output_file: bool = typer.Option(False, "--output-file", help="Also write the output to a file"),
    table: TableFormat = typer.Option(TableFormat.FULL, "--table", help="Table layout"),
    chart: bool = typer.Option(True, "--chart/--no-chart", help="Show the latency histogram"),
    check: Optional[List[str]] = typer.Option(
        None, "--check", "-c", help="Check to run, e.g. mean=200 (repeatable, comma‑separated)"
    ),
) -> None:
    """Benchmark one endpoint; exit with *1* if any check fails."""
    settings = get_settings()
    configure_logging(settings)

    headers = _load_json(headers_path, "Headers") if headers_path else {}
    data = _load_json(data_path, "Data") if data_path else None
    if iterations is None:
        iterations = settings.default_iterations
    if iterations < 1:
        _fail("Iterations must be a positive number")

    try:
        config = RequestConfig(
            url=url,
            method=method,
            headers={str(k): str(v) for k, v in dict(headers).items()},
            payload=payload_from(data),
        )
    except (ValidationError, TypeError, ValueError) as exc:
        _fail(str(exc))

    mode = ConcurrencyMode.PARALLEL if parallel else ConcurrencyMode.SEQUENTIAL
    typer.secho(
        f"Running {iterations} {mode.value} requests to {url}...",
        fg=typer.colors.BLUE,
        err=True,
    )

    try:
        report = run_benchmark_sync(
            config, iterations=iterations, mode=mode, checks=_split_checks(check)
        )
    except ConfigurationError as exc:
        _fail(str(exc))

    typer.echo(
        render(
            report,
            output_format,
            table,
            output_file=output_file,
            show_chart=chart,
            output_dir=settings.output_dir,
            color=sys.stdout.isatty(),
        )
    )
    if not report.all_checks_passed:
        raise typer.Exit(code=1)


@app.command()
def serve() -> None:  # pragma: no cover
    """Start the REST API server."""
    from apibench.api import serve as serve_api

    serve_api()


# ``python -m apibench.cli`` entry‑point

def main() -> None:  # pragma: no cover
    """Entry‑point for the ``apibench`` console script."""
    app()


if __name__ == "__main__":
    app()

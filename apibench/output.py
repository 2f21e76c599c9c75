"""
Presentation helpers for a :class:`BenchmarkReport`.

* **table** – rich tables (full or compact) plus an optional ASCII histogram
* **json** / **yaml** – the report with camelCase keys, absent fields omitted
* **csv** – per‑request rows and a ``-stats.csv`` companion, written to disk
"""

from __future__ import annotations

import csv
import io
import math
from enum import Enum
from pathlib import Path
from typing import List, Optional

import yaml
from rich.console import Console
from rich.table import Table
from rich.text import Text

from apibench.model import BenchmarkReport, CheckResult, Statistics

RESULTS_STEM = "apibench-results"


class OutputFormat(str, Enum):
    TABLE = "table"
    JSON = "json"
    YAML = "yaml"
    CSV = "csv"


class TableFormat(str, Enum):
    FULL = "full"
    COMPACT = "compact"


# Helper functions

def _report_dict(report: BenchmarkReport) -> dict:
    return report.model_dump(mode="json", by_alias=True, exclude_none=True)


def _to_text(*renderables, color: bool = False, soft_wrap: bool = False) -> str:
    console = Console(
        file=io.StringIO(),
        width=100,
        force_terminal=color,
        color_system="auto" if color else None,
    )
    for r in renderables:
        console.print(r, soft_wrap=soft_wrap)
    return console.file.getvalue().rstrip("\n")


def _stats_rows(s: Statistics, table_format: TableFormat) -> List[tuple[str, str]]:
    if table_format is TableFormat.COMPACT:
        return [
            ("Total", str(s.total)),
            ("Success", f"{s.successful} ({s.pct_of_success:.1f}%)"),
            ("Failed", str(s.failed)),
            ("Mean", f"{s.mean:.2f}ms"),
            ("Median", f"{s.median:.2f}ms"),
            ("Min", f"{s.min}ms"),
            ("Max", f"{s.max}ms"),
            ("Std Dev", f"{s.std_dev:.2f}ms"),
        ]
    return [
        ("Total Requests", str(s.total)),
        ("Successful", str(s.successful)),
        ("Failed", str(s.failed)),
        ("Success Rate", f"{s.pct_of_success:.2f}%"),
        ("Mean (ms)", f"{s.mean:.2f}"),
        ("Median (ms)", f"{s.median:.2f}"),
        ("Min (ms)", str(s.min)),
        ("Max (ms)", str(s.max)),
        ("Std Dev (ms)", f"{s.std_dev:.2f}"),
        ("5th Percentile (ms)", str(s.q5)),
        ("50th Percentile (ms)", str(s.q50)),
        ("95th Percentile (ms)", str(s.q95)),
        ("99th Percentile (ms)", str(s.q99)),
    ]


def _checks_table(checks: List[CheckResult]) -> Table:
    table = Table(title="Checks")
    for col in ("Check", "Expected", "Actual", "Status"):
        table.add_column(col)
    for c in checks:
        status = "[green]✓ PASS[/green]" if c.passed else "[red]✗ FAIL[/red]"
        table.add_row(c.check, f"{c.expected:g}", f"{c.actual:.2f}", status)
    return table


# Formatters

def _band(midpoint: float, statistics: Statistics) -> str:
    """Bar colour for a bucket: green up to q50, yellow up to q95, red beyond."""
    if midpoint <= statistics.q50:
        return "green"
    if midpoint <= statistics.q95:
        return "yellow"
    return "red"


def format_chart(statistics: Statistics, width: int = 50, *, color: bool = False) -> str:
    """Histogram of successful response times, bucketed between min and max."""
    times = statistics.response_times
    if not times:
        return "No successful requests to chart"
    low, high = statistics.min, statistics.max
    span = high - low
    if span == 0:
        return "All response times are identical"

    n_buckets = min(20, max(10, math.floor(math.sqrt(len(times)))))
    size = span / n_buckets
    buckets = [0] * n_buckets
    for t in times:
        buckets[min(math.floor((t - low) / size), n_buckets - 1)] += 1

    peak = max(buckets)
    chart = Text("Response Time Distribution (ms)\n\n")
    for i, count in enumerate(buckets):
        start, end = low + i * size, low + (i + 1) * size
        bar = "█" * round(count / peak * width)
        label = f"{start:.0f}".rjust(6) + "-" + f"{end:.0f}".ljust(6)
        pct = count / len(times) * 100
        chart.append(f"{label} │")
        chart.append(bar, style=_band((start + end) / 2, statistics))
        chart.append(f"{' ' * (width - len(bar))}│ {count:>3} ({pct:.1f}%)\n")
    chart.append(
        f"\nMin: {low}ms │ Mean: {statistics.mean:.2f}ms │ "
        f"Median: {statistics.median:.2f}ms │ Max: {high}ms"
    )
    if not color:
        return chart.plain
    return _to_text(chart, color=True, soft_wrap=True)


def format_table(
    statistics: Statistics,
    checks: Optional[List[CheckResult]] = None,
    table_format: TableFormat = TableFormat.FULL,
    show_chart: bool = True,
    *,
    color: bool = False,
) -> str:
    table = Table()
    table.add_column("Metric")
    table.add_column("Value", justify="right")
    for metric, value in _stats_rows(statistics, TableFormat(table_format)):
        table.add_row(metric, value)

    renderables: list = [table]
    if checks:
        renderables.append(_checks_table(checks))
    text = _to_text(*renderables, color=color)

    if show_chart and statistics.response_times:
        text = f"{text}\n\n{format_chart(statistics, color=color)}"
    return text


def format_json(report: BenchmarkReport) -> str:
    return report.model_dump_json(by_alias=True, exclude_none=True, indent=2)


def format_yaml(report: BenchmarkReport) -> str:
    return yaml.safe_dump(_report_dict(report), sort_keys=False, indent=2, allow_unicode=True)


def write_csv(report: BenchmarkReport, path: Path) -> tuple[Path, Path]:
    """Write per‑request rows to *path* and the statistics to ``<stem>-stats.csv``."""
    path = Path(path)
    with path.open("w", newline="", encoding="utf-8") as fh:
        writer = csv.writer(fh)
        writer.writerow(
            ["Iteration", "Status Code", "Response Time (ms)", "Success", "Error", "Timestamp"]
        )
        for r in report.results:
            writer.writerow(
                [
                    r.iteration,
                    "" if r.status_code is None else r.status_code,
                    r.response_time,
                    str(r.success).lower(),
                    r.error or "",
                    r.timestamp,
                ]
            )

    stats_path = path.with_name(f"{path.stem}-stats.csv")
    with stats_path.open("w", newline="", encoding="utf-8") as fh:
        writer = csv.writer(fh)
        writer.writerow(["Metric", "Value"])
        writer.writerows(_stats_rows(report.statistics, TableFormat.FULL))
    return path, stats_path


def render(
    report: BenchmarkReport,
    output_format: OutputFormat = OutputFormat.TABLE,
    table_format: TableFormat = TableFormat.FULL,
    output_file: bool = False,
    show_chart: bool = True,
    output_dir: Path = Path("."),
    *,
    color: bool = False,
) -> str:
    """Format *report*; with *output_file* also write it under *output_dir*."""
    output_format = OutputFormat(output_format)
    output_dir = Path(output_dir)

    if output_format is OutputFormat.CSV:
        if output_file:
            output_dir.mkdir(parents=True, exist_ok=True)
            rows, stats = write_csv(report, output_dir / f"{RESULTS_STEM}.csv")
            return f"CSV files written to:\n  - {rows}\n  - {stats}"
        text = format_json(report)  # console fallback
    elif output_format is OutputFormat.JSON:
        text = format_json(report)
    elif output_format is OutputFormat.YAML:
        text = format_yaml(report)
    else:
        text = format_table(
            report.statistics, report.checks, table_format, show_chart, color=color
        )

    if output_file:
        ext = {OutputFormat.JSON: "json", OutputFormat.YAML: "yaml"}.get(output_format, "txt")
        output_dir.mkdir(parents=True, exist_ok=True)
        target = output_dir / f"{RESULTS_STEM}.{ext}"
        target.write_text(text, encoding="utf-8")
        return f"{text}\n\nResults written to: {target}"
    return text

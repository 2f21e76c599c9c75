"""
Run pipeline shared by every front‑end.

executor -> raw results -> statistics -> checks (only when expressions are
given) -> :class:`BenchmarkReport`.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Sequence
from typing import Optional

import httpx
import structlog

from apibench.checks import run_checks
from apibench.executor import execute_requests
from apibench.model import BenchmarkReport, ConcurrencyMode, RequestConfig
from apibench.stats import calculate_statistics

logger = structlog.get_logger()


async def run_benchmark(
    config: RequestConfig,
    *,
    iterations: int = 10,
    mode: ConcurrencyMode = ConcurrencyMode.SEQUENTIAL,
    checks: Optional[Sequence[str]] = None,
    timeout: Optional[float] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> BenchmarkReport:
    """Benchmark *config* and return the results, statistics and check verdicts."""
    log = logger.bind(url=config.url, method=config.method.value, mode=ConcurrencyMode(mode).value)
    log.info("run_started", iterations=iterations)

    started = time.perf_counter()
    results = await execute_requests(
        config, iterations, mode, timeout=timeout, transport=transport
    )
    statistics = calculate_statistics(results)
    verdicts = run_checks(statistics, checks) if checks else None

    log.info(
        "run_finished",
        wall_time_ms=round((time.perf_counter() - started) * 1000, 2),
        successful=statistics.successful,
        failed=statistics.failed,
        checks_failed=sum(1 for c in verdicts or () if not c.passed),
    )
    return BenchmarkReport(results=results, statistics=statistics, checks=verdicts)


def run_benchmark_sync(config: RequestConfig, **kwargs) -> BenchmarkReport:
    """Blocking wrapper around :func:`run_benchmark` for synchronous callers."""
    return asyncio.run(run_benchmark(config, **kwargs))

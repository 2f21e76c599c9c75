"""
Statistics engine: reduce a run's results to a :class:`Statistics` record.

Timing metrics cover successful results only. Percentiles use the
nearest‑rank method (an actual element of the sorted sample, no
interpolation). ``mean``, ``median`` and ``std_dev`` are rounded to two
decimals, half up; ``min``/``max`` and the ``q*`` values are raw elements.
"""

from __future__ import annotations

import math
from collections.abc import Sequence

from apibench.model import RequestResult, Statistics


def percentile(sorted_times: Sequence[int], p: float) -> int:
    """Nearest‑rank percentile *p* (0‑100) of an ascending sequence; 0 if empty."""
    if not sorted_times:
        return 0
    index = math.ceil(p / 100 * len(sorted_times)) - 1
    return sorted_times[max(0, index)]


def _round2(value: float) -> float:
    """Round half up to two decimals."""
    return math.floor(value * 100 + 0.5) / 100


def calculate_statistics(results: Sequence[RequestResult]) -> Statistics:
    """Pure, deterministic reduction of *results*."""
    successful = [r for r in results if r.success]
    failed = [r for r in results if not r.success]
    total = len(results)

    times = sorted(r.response_time for r in successful)
    if not times:
        return Statistics.empty(total=total, failed=len(failed))

    n = len(times)
    mean = sum(times) / n
    median = percentile(times, 50)
    variance = sum((t - mean) ** 2 for t in times) / n  # population

    return Statistics(
        total=total,
        successful=n,
        failed=len(failed),
        pct_of_success=n / total * 100,
        mean=_round2(mean),
        median=_round2(median),
        min=times[0],
        max=times[-1],
        std_dev=_round2(math.sqrt(variance)),
        q5=percentile(times, 5),
        q50=median,
        q95=percentile(times, 95),
        q99=percentile(times, 99),
        response_times=times,
    )

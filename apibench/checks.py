"""
Threshold checks over a :class:`Statistics` record.

An expression reads ``<metric>=<threshold>``, e.g. ``q95=250``. Latency
metrics pass when the actual value is at or below the threshold;
``pctOfSuccess`` passes when it is at or above. Malformed expressions and
unknown metrics are dropped without error.
"""

from __future__ import annotations

import math
import operator
import re
from collections.abc import Callable, Iterable
from typing import List, Optional, Tuple

from apibench.model import CheckResult, Statistics

# Plain decimal notation only: no inf, nan or digit separators
_DECIMAL = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?", re.ASCII)

# metric (lower‑cased) -> (Statistics attribute, comparator(actual, expected))
_METRICS: dict[str, Tuple[str, Callable[[float, float], bool]]] = {
    "mean": ("mean", operator.le),
    "median": ("median", operator.le),
    "stddev": ("std_dev", operator.le),
    "q5": ("q5", operator.le),
    "q50": ("q50", operator.le),
    "q95": ("q95", operator.le),
    "q99": ("q99", operator.le),
    "pctofsuccess": ("pct_of_success", operator.ge),
}


def parse_check(expression: str) -> Optional[Tuple[str, float]]:
    """Split ``name=threshold``; ``None`` if the expression is malformed."""
    name, sep, raw = expression.partition("=")
    name, raw = name.strip(), raw.strip()
    if not sep or not name or not raw:
        return None
    if not _DECIMAL.fullmatch(raw):
        return None
    expected = float(raw)
    if not math.isfinite(expected):  # e.g. 1e400
        return None
    return name, expected


def run_checks(statistics: Statistics, expressions: Iterable[str]) -> List[CheckResult]:
    """Evaluate each valid expression against *statistics*, in input order."""
    checks: List[CheckResult] = []
    for expression in expressions:
        parsed = parse_check(expression)
        if parsed is None:
            continue
        name, expected = parsed
        metric = _METRICS.get(name.lower())
        if metric is None:
            continue
        attr, compare = metric
        actual = float(getattr(statistics, attr))
        checks.append(
            CheckResult(
                check=name,
                expected=expected,
                actual=actual,
                passed=compare(actual, expected),
            )
        )
    return checks

"""
Request executor and orchestrator.

* ``execute_request`` issues one timed HTTP call and folds every outcome,
  including transport failures, into a :class:`RequestResult`.
* ``execute_requests`` repeats it *N* times, one call at a time or all at once.

Parallel mode fans out one asyncio task per iteration with no in‑flight cap;
a bounded pool is left for a later revision. Results are always returned in
iteration order, never completion order.
"""

from __future__ import annotations

import asyncio
import json
import time
from typing import List, Optional

import httpx
import structlog

from apibench.config import get_settings
from apibench.model import (
    ConcurrencyMode,
    ConfigurationError,
    JsonPayload,
    RawPayload,
    RequestConfig,
    RequestResult,
)

logger = structlog.get_logger()

DEFAULT_HEADERS = {"Content-Type": "application/json"}


# Helper functions

def _build_headers(config: RequestConfig) -> httpx.Headers:
    """Default JSON content type, overridden case‑insensitively by the caller."""
    headers = httpx.Headers(DEFAULT_HEADERS)
    headers.update(config.headers)
    return headers


def _build_body(config: RequestConfig) -> Optional[str]:
    if config.payload is None or not config.body_allowed:
        return None
    match config.payload:
        case RawPayload(text=text):
            return text
        case JsonPayload(value=value):
            return json.dumps(value, separators=(",", ":"))
    return None


def _elapsed_ms(start: float) -> int:
    return max(0, round((time.perf_counter() - start) * 1000))


def _describe(exc: BaseException) -> str:
    return str(exc) or type(exc).__name__


# Public API

async def execute_request(
    config: RequestConfig,
    iteration: int,
    *,
    timeout: Optional[float] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> RequestResult:
    """Perform exactly one call and return its outcome; never raises.

    A fresh client is opened per call so the measured interval covers name
    resolution, connection setup and TLS as well as the transfer itself.
    """
    if timeout is None:
        timeout = get_settings().request_timeout

    async with httpx.AsyncClient(timeout=timeout, transport=transport) as client:
        timestamp = int(time.time() * 1000)
        start = time.perf_counter()
        try:
            # httpx rejects non-ASCII header values while building these
            headers = _build_headers(config)
            body = _build_body(config)
            response = await client.request(
                config.method.value, config.url, headers=headers, content=body
            )
        except Exception as exc:  # every failure mode becomes data
            elapsed = _elapsed_ms(start)
            logger.warning(
                "request_failed",
                iteration=iteration,
                url=config.url,
                error=_describe(exc),
                response_time_ms=elapsed,
            )
            return RequestResult(
                iteration=iteration,
                response_time=elapsed,
                success=False,
                error=_describe(exc),
                timestamp=timestamp,
            )
        elapsed = _elapsed_ms(start)

    logger.debug(
        "request_completed",
        iteration=iteration,
        status=response.status_code,
        response_time_ms=elapsed,
    )
    return RequestResult(
        iteration=iteration,
        status_code=response.status_code,
        response_time=elapsed,
        success=response.is_success,
        timestamp=timestamp,
    )


async def execute_requests(
    config: RequestConfig,
    iterations: int = 10,
    mode: ConcurrencyMode = ConcurrencyMode.SEQUENTIAL,
    *,
    timeout: Optional[float] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> List[RequestResult]:
    """Issue *iterations* calls and return one result per iteration, indexed 1..N.

    Raises :class:`ConfigurationError` for a non‑positive iteration count,
    before anything is sent. Individual call failures never propagate.
    """
    if isinstance(iterations, bool) or not isinstance(iterations, int) or iterations < 1:
        raise ConfigurationError("Iterations must be a positive number")
    mode = ConcurrencyMode(mode)

    if mode is ConcurrencyMode.PARALLEL:
        tasks = [
            asyncio.create_task(
                execute_request(config, i, timeout=timeout, transport=transport)
            )
            for i in range(1, iterations + 1)
        ]
        settled = await asyncio.gather(*tasks)
        return sorted(settled, key=lambda r: r.iteration)

    results: List[RequestResult] = []
    for i in range(1, iterations + 1):
        results.append(
            await execute_request(config, i, timeout=timeout, transport=transport)
        )
    return results

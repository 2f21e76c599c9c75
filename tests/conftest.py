"""Pytest configuration and shared fixtures."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import httpx
import pytest

from apibench.model import RequestResult

FIXTURES = Path(__file__).parent / "fixtures"


def make_result(
    iteration: int,
    response_time: int,
    *,
    success: bool = True,
    status_code: int | None = 200,
    error: str | None = None,
) -> RequestResult:
    """Build a :class:`RequestResult` with sensible defaults."""
    return RequestResult(
        iteration=iteration,
        status_code=status_code,
        response_time=response_time,
        success=success,
        error=error,
        timestamp=1_700_000_000_000 + iteration,
    )


def successes(*times: int) -> list[RequestResult]:
    return [make_result(i, t) for i, t in enumerate(times, 1)]


class Recorder:
    """Mock transport handler that remembers every request it answered."""

    def __init__(self, status: int = 200, handler: Callable | None = None) -> None:
        self.status = status
        self.handler = handler
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.handler is not None:
            return self.handler(request)
        return httpx.Response(self.status, json={"ok": self.status < 400})


@pytest.fixture
def recorder() -> Recorder:
    return Recorder()


@pytest.fixture
def ok_transport(recorder: Recorder) -> httpx.MockTransport:
    """Transport that answers every request with ``200 {"ok": true}``."""
    return httpx.MockTransport(recorder)


@pytest.fixture
def fixtures_dir() -> Path:
    return FIXTURES

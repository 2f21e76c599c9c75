"""
FastAPI wrapper around the apibench run pipeline.

Endpoints
---------
* ``POST /api/run``    – benchmark one endpoint, return results/statistics/checks.
* ``GET  /api/health`` – liveness probe.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, List, Optional

import structlog
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, ValidationError

from apibench import __version__
from apibench.config import get_settings
from apibench.log import configure_logging
from apibench.model import (
    BenchmarkReport,
    ConcurrencyMode,
    ConfigurationError,
    RequestConfig,
    payload_from,
)
from apibench.runner import run_benchmark

logger = structlog.get_logger()


# Pydantic models
class RunRequest(BaseModel):
    url: Optional[str] = None
    method: str = "GET"
    iterations: Optional[int] = None
    parallel: bool = False
    headers: Optional[dict[str, str]] = None
    data: Any = None
    checks: Optional[List[str]] = None


class HealthResponse(BaseModel):
    status: str
    version: str
    timestamp: str


def _client_error(exc: ValueError) -> str:
    if isinstance(exc, ValidationError):
        return "; ".join(err["msg"] for err in exc.errors())
    return str(exc)


def create_app() -> FastAPI:
    settings = get_settings()
    app = FastAPI(title="apibench", version=__version__)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.post(
        "/api/run",
        response_model=BenchmarkReport,
        response_model_by_alias=True,
        response_model_exclude_none=True,
    )
    async def run(req: RunRequest) -> BenchmarkReport:
        if not req.url:
            raise HTTPException(status_code=400, detail="URL is required")

        iterations = req.iterations if req.iterations is not None else settings.default_iterations
        try:
            config = RequestConfig(
                url=req.url,
                method=req.method,
                headers=req.headers or {},
                payload=payload_from(req.data),
            )
            if iterations < 1:
                raise ConfigurationError("Iterations must be a positive number")
        except (ValidationError, ConfigurationError) as exc:
            raise HTTPException(status_code=400, detail=_client_error(exc))

        try:
            return await run_benchmark(
                config,
                iterations=iterations,
                mode=ConcurrencyMode.PARALLEL if req.parallel else ConcurrencyMode.SEQUENTIAL,
                checks=req.checks,
            )
        except Exception as exc:
            logger.exception("run_crashed", url=req.url)
            raise HTTPException(status_code=500, detail=str(exc) or type(exc).__name__)

    @app.get("/api/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(
            status="ok",
            version=__version__,
            timestamp=datetime.now(timezone.utc).isoformat(),
        )

    return app


app = create_app()


def serve() -> None:  # pragma: no cover
    """Run the API with uvicorn."""
    import uvicorn

    settings = get_settings()
    configure_logging(settings)
    uvicorn.run(app, host=settings.api_host, port=settings.api_port)


if __name__ == "__main__":  # pragma: no cover
    serve()

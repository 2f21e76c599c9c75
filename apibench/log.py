"""structlog setup shared by the CLI and the API server."""

from __future__ import annotations

import sys

import structlog

from apibench.config import Settings, get_settings


def _stderr_logger(*_args) -> structlog.PrintLogger:
    # Resolve sys.stderr on every call; CLI stdout carries the report.
    return structlog.PrintLogger(file=sys.stderr)


def configure_logging(settings: Settings | None = None) -> None:
    """Configure structlog once per process, from *settings* or the environment."""
    settings = settings or get_settings()
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.JSONRenderer()
            if settings.log_json
            else structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(settings.log_level),
        context_class=dict,
        logger_factory=_stderr_logger,
        cache_logger_on_first_use=False,
    )

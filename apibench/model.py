"""
Core data‑model classes for the apibench request benchmarker.

Includes:
* **RequestConfig** with the **RawPayload** / **JsonPayload** body variants
* **RequestResult**, **Statistics**, **CheckResult** and **BenchmarkReport**
* Enums for HTTP verbs and concurrency modes.

Every record is frozen once built. Field names are snake_case in Python and
serialise with camelCase aliases so JSON output keeps the wire names the
front‑ends already consume (``statusCode``, ``pctOfSuccess`` ...).
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class ConfigurationError(ValueError):
    """Invalid run parameters, detected before any request is issued."""


# Enums

class HttpMethod(str, Enum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"


# Only these verbs carry a request body
BODY_METHODS: frozenset[HttpMethod] = frozenset(
    {HttpMethod.POST, HttpMethod.PUT, HttpMethod.PATCH}
)


class ConcurrencyMode(str, Enum):
    SEQUENTIAL = "sequential"
    PARALLEL = "parallel"


class _Record(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


# Payload variants

class RawPayload(_Record):
    """Pre‑serialised body, sent verbatim."""

    kind: Literal["raw"] = "raw"
    text: str


class JsonPayload(_Record):
    """Structured body, serialised to JSON on send."""

    kind: Literal["json"] = "json"
    value: Any


Payload = Annotated[Union[RawPayload, JsonPayload], Field(discriminator="kind")]


def payload_from(value: Any) -> Optional[RawPayload | JsonPayload]:
    """Wrap a loaded body in the matching payload variant (``None`` stays ``None``)."""
    if value is None:
        return None
    if isinstance(value, str):
        return RawPayload(text=value)
    return JsonPayload(value=value)


# Request side

class RequestConfig(_Record):
    """The call to repeat. Read‑only to the engine."""

    url: str = Field(..., min_length=1)
    method: HttpMethod = HttpMethod.GET
    headers: dict[str, str] = Field(default_factory=dict)
    payload: Optional[Payload] = None

    @field_validator("method", mode="before")
    @classmethod
    def _upper_method(cls, v: Any) -> Any:
        return v.strip().upper() if isinstance(v, str) else v

    @field_validator("url")
    @classmethod
    def _non_blank_url(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("URL is required")
        return v

    @property
    def body_allowed(self) -> bool:
        return self.method in BODY_METHODS


class RequestResult(_Record):
    """Outcome of one executed call."""

    iteration: int
    status_code: Optional[int] = None
    response_time: int = Field(..., ge=0)  # ms
    success: bool
    error: Optional[str] = None
    timestamp: int  # ms since epoch, taken at call start


# Aggregates

class Statistics(_Record):
    """Summary of one run. Timing fields cover successful results only."""

    total: int
    successful: int
    failed: int
    pct_of_success: float
    mean: float
    median: float
    min: int
    max: int
    std_dev: float
    q5: int
    q50: int
    q95: int
    q99: int
    response_times: List[int] = Field(default_factory=list)

    @classmethod
    def empty(cls, *, total: int, failed: int) -> "Statistics":
        """All‑zero record used when no request succeeded."""
        return cls(
            total=total,
            successful=0,
            failed=failed,
            pct_of_success=0,
            mean=0,
            median=0,
            min=0,
            max=0,
            std_dev=0,
            q5=0,
            q50=0,
            q95=0,
            q99=0,
            response_times=[],
        )


class CheckResult(_Record):
    check: str
    expected: float
    actual: float
    passed: bool


class BenchmarkReport(_Record):
    """The (results, statistics, checks) triple handed to front‑ends."""

    results: List[RequestResult]
    statistics: Statistics
    checks: Optional[List[CheckResult]] = None

    @property
    def all_checks_passed(self) -> bool:
        return all(c.passed for c in self.checks or ())

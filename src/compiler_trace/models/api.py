"""Pydantic models for the HTTP API.

Field names are snake_case in Python and camelCase on the wire
(``raw_output`` <-> ``rawOutput``); both spellings are accepted on input.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    """Base model with camelCase aliases."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


class CompileRequest(ApiModel):
    """Body of ``POST /compile``.

    Attributes:
        code: Java source text.
        options: Client-supplied options.  Accepted for compatibility and
            currently ignored.
    """

    code: str | None = None
    options: dict[str, Any] = Field(default_factory=dict)


class ParseRequest(ApiModel):
    """Body of ``POST /test-parse``."""

    output: str | None = None


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


class CompileResponse(ApiModel):
    """Successful (HTTP 200) response of ``POST /compile``.

    ``success`` reflects the compiler's exit status; ``error`` is only
    serialised when the compiler run failed.
    """

    success: bool
    phases: dict[str, str]
    raw_output: str
    execution_time: str
    timestamp: str
    compiler: str
    phase_count: int
    error: str | None = None


class ParseResponse(ApiModel):
    """Response of ``POST /test-parse``."""

    success: bool = True
    phases: dict[str, str]
    phase_count: int
    phase_names: list[str]


class ErrorResponse(ApiModel):
    """Body of every non-2xx JSON response."""

    success: bool = False
    error: str
    timestamp: str | None = None
    execution_time: str | None = None
    path: str | None = None


class HealthResponse(ApiModel):
    """Response of ``GET /health``."""

    status: str = "OK"
    timestamp: str
    compiler: str


class CompilerInfo(ApiModel):
    type: str
    path: str


class MemoryInfo(ApiModel):
    """Resource usage of the server process.

    Attributes:
        max_rss: Peak resident set size as reported by ``getrusage``
            (kilobytes on Linux, bytes on macOS).
        user_cpu_seconds: CPU time spent in user mode.
        system_cpu_seconds: CPU time spent in the kernel.
    """

    max_rss: int
    user_cpu_seconds: float
    system_cpu_seconds: float


class StatusResponse(ApiModel):
    """Response of ``GET /status``."""

    server: str = "OK"
    timestamp: str
    uptime: float
    compiler: CompilerInfo
    memory: MemoryInfo
    java: str
    temp_dir: str
    temp_files: int | str

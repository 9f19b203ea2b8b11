"""Data models for compiler-trace."""

from __future__ import annotations

from compiler_trace.models.api import (
    CompileRequest,
    CompileResponse,
    ErrorResponse,
    HealthResponse,
    MemoryInfo,
    ParseRequest,
    ParseResponse,
    StatusResponse,
)
from compiler_trace.models.compilation import CompilationRun, CompileOutcome

__all__ = [
    "CompilationRun",
    "CompileOutcome",
    "CompileRequest",
    "CompileResponse",
    "ErrorResponse",
    "HealthResponse",
    "MemoryInfo",
    "ParseRequest",
    "ParseResponse",
    "StatusResponse",
]

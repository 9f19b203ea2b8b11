"""HTTP front-end for compiler-trace.

:func:`create_app` builds a FastAPI application exposing:

- ``POST /compile``     -- compile Java source and return its phases.
- ``POST /test-parse``  -- segment a transcript supplied by the client.
- ``GET  /health``      -- liveness check.
- ``GET  /status``      -- compiler, Java and temp-directory status.
- ``GET  /``            -- the static front-end, when one is installed.

Responses use camelCase keys.  Errors are JSON objects with
``success: false`` and an ``error`` message.
"""

from __future__ import annotations

import logging
import resource
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from compiler_trace.compiler import (
    check_java_installation,
    cleanup_temp_dir,
    compile_source,
    count_temp_files,
    ensure_temp_dir,
)
from compiler_trace.config import Settings
from compiler_trace.exceptions import CompilerSetupError
from compiler_trace.models.api import (
    CompileRequest,
    CompileResponse,
    CompilerInfo,
    ErrorResponse,
    HealthResponse,
    MemoryInfo,
    ParseRequest,
    ParseResponse,
    StatusResponse,
)
from compiler_trace.segmenter import segment_transcript, summarize_phases

logger = logging.getLogger(__name__)

_SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "X-XSS-Protection": "1; mode=block",
}


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _error(status_code: int, **fields: object) -> JSONResponse:
    # Security headers are set here too: responses for unhandled errors are
    # built outside the HTTP middleware.
    body = ErrorResponse(**fields)  # type: ignore[arg-type]
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(by_alias=True, exclude_none=True),
        headers=_SECURITY_HEADERS,
    )


def _memory_usage() -> MemoryInfo:
    usage = resource.getrusage(resource.RUSAGE_SELF)
    return MemoryInfo(
        max_rss=usage.ru_maxrss,
        user_cpu_seconds=round(usage.ru_utime, 3),
        system_cpu_seconds=round(usage.ru_stime, 3),
    )


def create_app(settings: Settings) -> FastAPI:
    """Build the FastAPI application for *settings*.

    The temp directory is created on startup; leftover temporary source
    files are removed on shutdown.
    """
    started_at = time.monotonic()

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        ensure_temp_dir(settings.temp_dir)
        yield
        logger.info("Shutting down server...")
        cleanup_temp_dir(settings.temp_dir)

    app = FastAPI(title="compiler-trace", lifespan=lifespan)

    if not settings.production:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    @app.middleware("http")
    async def add_security_headers(request: Request, call_next):  # type: ignore[no-untyped-def]
        response = await call_next(request)
        response.headers.update(_SECURITY_HEADERS)
        return response

    # --- Error handlers ---------------------------------------------------

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        # Unknown paths and unsupported methods are both "not found".
        if exc.status_code in (404, 405):
            return _error(404, error="Endpoint not found", path=request.url.path)
        return _error(exc.status_code, error=str(exc.detail), timestamp=_now_iso())

    @app.exception_handler(RequestValidationError)
    async def invalid_body(request: Request, exc: RequestValidationError) -> JSONResponse:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in err.get('loc', ()))}: {err.get('msg', '')}"
            for err in exc.errors()
        )
        logger.info("Rejected request body on %s: %s", request.url.path, problems)
        return _error(400, error=f"Invalid request body: {problems}", timestamp=_now_iso())

    @app.exception_handler(Exception)
    async def server_error(request: Request, exc: Exception) -> JSONResponse:
        logger.error("Server error on %s: %s", request.url.path, exc, exc_info=exc)
        return _error(500, error="Internal server error", timestamp=_now_iso())

    # --- Routes -----------------------------------------------------------

    @app.post(
        "/compile",
        response_model=CompileResponse,
        response_model_exclude_none=True,
        responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    )
    def compile_code(body: CompileRequest):  # type: ignore[no-untyped-def]
        code = body.code or ""
        if not code.strip():
            return _error(400, error="No Java code provided", timestamp=_now_iso())
        if "class" not in code and "interface" not in code:
            return _error(
                400,
                error="Code must contain at least one class or interface declaration",
                timestamp=_now_iso(),
            )

        started = time.monotonic()
        try:
            outcome = compile_source(code, settings)
        except OSError as exc:
            logger.error("Compilation error: %s", exc)
            elapsed_ms = int((time.monotonic() - started) * 1000)
            return _error(
                500,
                error=f"Compilation failed: {exc}",
                timestamp=_now_iso(),
                execution_time=f"{elapsed_ms} ms",
            )

        summary = summarize_phases(outcome.phases)
        return CompileResponse(
            success=outcome.run.success,
            phases=summary.phases,
            raw_output=outcome.run.output,
            execution_time=f"{outcome.execution_ms} ms",
            timestamp=_now_iso(),
            compiler=settings.compiler_label,
            phase_count=summary.count,
            error=outcome.run.error,
        )

    @app.post(
        "/test-parse",
        response_model=ParseResponse,
        responses={400: {"model": ErrorResponse}},
    )
    def test_parse(body: ParseRequest):  # type: ignore[no-untyped-def]
        if not body.output:
            return _error(400, error="No output provided for testing")

        summary = summarize_phases(segment_transcript(body.output))
        return ParseResponse(
            phases=summary.phases,
            phase_count=summary.count,
            phase_names=summary.names,
        )

    @app.get("/health", response_model=HealthResponse)
    def health() -> HealthResponse:
        return HealthResponse(timestamp=_now_iso(), compiler=str(settings.compiler_path))

    @app.get("/status", response_model=StatusResponse)
    def status() -> StatusResponse:
        try:
            check_java_installation()
            java = "Available"
        except CompilerSetupError as exc:
            java = f"Not Available: {exc}"

        temp_files: int | str
        try:
            temp_files = count_temp_files(settings.temp_dir)
        except OSError:
            temp_files = "Unknown"

        return StatusResponse(
            timestamp=_now_iso(),
            uptime=round(time.monotonic() - started_at, 3),
            compiler=CompilerInfo(
                type=settings.compiler_label,
                path=str(settings.compiler_path),
            ),
            memory=_memory_usage(),
            java=java,
            temp_dir=str(settings.temp_dir),
            temp_files=temp_files,
        )

    index_file = settings.static_dir / "index.html"

    @app.get("/", include_in_schema=False)
    def index() -> FileResponse:
        if not index_file.is_file():
            raise StarletteHTTPException(status_code=404)
        return FileResponse(index_file)

    # Registered last so the API routes above take precedence.
    if settings.static_dir.is_dir():
        app.mount("/", StaticFiles(directory=settings.static_dir), name="static")

    return app

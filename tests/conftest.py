"""Shared fixtures for compiler-trace tests."""

from __future__ import annotations

import logging
from collections.abc import Generator
from pathlib import Path

import pytest

from compiler_trace.config import Settings

_ENV_VARS = (
    "COMPILER_MODE",
    "COMPILER_JAR_PATH",
    "COMPILER_EXE_PATH",
    "JAVA_OPTIONS",
    "COMPILE_TIMEOUT",
    "MAX_OUTPUT_BYTES",
    "TEMP_DIR",
    "STATIC_DIR",
    "HOST",
    "PORT",
    "LOG_LEVEL",
    "APP_ENV",
)


@pytest.fixture()
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove all compiler-trace environment variables.

    Patches ``load_dotenv`` so a real ``.env`` file cannot re-inject values
    that the test explicitly removed.
    """
    monkeypatch.setattr("compiler_trace.config.load_dotenv", lambda *_a, **_kw: None)
    for key in _ENV_VARS:
        monkeypatch.delenv(key, raising=False)


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    """Settings pointing every path into a per-test temp directory."""
    jar = tmp_path / "MyCompiler.jar"
    jar.write_bytes(b"PK")
    temp_dir = tmp_path / "temp"
    temp_dir.mkdir()
    return Settings(
        jar_path=jar,
        exe_path=tmp_path / "MyCompiler.exe",
        temp_dir=temp_dir,
        static_dir=tmp_path / "public",
        timeout_seconds=5.0,
    )


@pytest.fixture()
def sample_transcript() -> str:
    """A transcript in the format printed by the course compiler."""
    return (
        "Phase 1: Lexical Analysis\n"
        "Tokens:\n"
        "  CLASS class\n"
        "  IDENTIFIER Main\n"
        "Total tokens: 2\n"
        "=== PARSER INITIALIZED ===\n"
        "=== Parsing Started ===\n"
        "ClassDecl Main\n"
        "=== Parsing Completed ===\n"
        "AST nodes: 4\n"
        "Phase 4: IR Generation\n"
        "Instructions before optimization:\n"
        "  t1 = 2 + 3\n"
        "Instructions after optimization:\n"
        "  t1 = 5\n"
        "Optimized IR:\n"
        "  t1 = 5\n"
        "Phase 6: Code Generation\n"
        "Function: main\n"
        "  MOV R1, 5\n"
        "=== PROGRAM SUMMARY ===\n"
        "Classes: 1\n"
        "Compilation completed successfully!\n"
    )


@pytest.fixture(autouse=True)
def _reset_root_logger() -> Generator[None, None, None]:
    """Reset the root logger after each test to prevent handler leaks."""
    root = logging.getLogger()
    original_handlers = root.handlers[:]
    original_level = root.level
    yield
    root.handlers = original_handlers
    root.setLevel(original_level)

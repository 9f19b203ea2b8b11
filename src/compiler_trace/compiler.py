"""Running the external compiler.

Writes submitted source to a uniquely named temporary file, runs the
configured compiler on it (``java -jar`` or an EXE wrapper), and hands the
combined stdout/stderr to the segmenter.

Process failures never raise: timeouts, spawn errors, non-zero exit codes
and oversized output are reported through :class:`CompilationRun`.  Only
I/O errors on the temporary file propagate to the caller.
"""

from __future__ import annotations

import logging
import os
import secrets
import string
import subprocess
import time
from pathlib import Path

from compiler_trace.config import Settings
from compiler_trace.exceptions import CompilerSetupError
from compiler_trace.models.compilation import CompilationRun, CompileOutcome
from compiler_trace.segmenter import segment_transcript

logger = logging.getLogger(__name__)

TEMP_FILE_PREFIX = "JavaFile_"
TIMEOUT_OUTPUT = "Compilation timeout - process took too long"

_BASE36 = string.digits + string.ascii_lowercase
_JAVA_CHECK_TIMEOUT_SECONDS = 15


# ---------------------------------------------------------------------------
# Command construction
# ---------------------------------------------------------------------------


def generate_unique_filename() -> str:
    """Return a collision-resistant base name for a temporary source file.

    Format: ``JavaFile_<epoch ms>_<pid>_<10 base36 chars>``.
    """
    timestamp = int(time.time() * 1000)
    random_part = "".join(secrets.choice(_BASE36) for _ in range(10))
    return f"{TEMP_FILE_PREFIX}{timestamp}_{os.getpid()}_{random_part}"


def build_compiler_command(source_path: Path, settings: Settings) -> list[str]:
    """Build the argument list that compiles *source_path*."""
    if settings.use_java_direct:
        return ["java", *settings.java_options, "-jar", str(settings.jar_path), str(source_path)]
    return [str(settings.exe_path), str(source_path)]


# ---------------------------------------------------------------------------
# Execution
# ---------------------------------------------------------------------------


def _decode(data: bytes | str | None) -> str:
    if data is None:
        return ""
    if isinstance(data, bytes):
        return data.decode("utf-8", errors="replace")
    return data


def run_compiler(command: list[str], settings: Settings) -> CompilationRun:
    """Run *command* and collect its transcript.

    Args:
        command: Argument list from :func:`build_compiler_command`.
        settings: Supplies the timeout and output cap.

    Returns:
        A :class:`CompilationRun`.  The transcript is stdout followed by
        ``"\\n" + stderr`` when stderr is not empty.
    """
    logger.info("Executing: %s", " ".join(command))

    try:
        completed = subprocess.run(
            command,
            capture_output=True,
            timeout=settings.timeout_seconds,
            check=False,
        )
    except subprocess.TimeoutExpired:
        logger.warning("Compiler timed out after %.0fs", settings.timeout_seconds)
        return CompilationRun(success=False, output=TIMEOUT_OUTPUT, error="Timeout")
    except OSError as exc:
        logger.error("Could not start compiler: %s", exc)
        message = str(exc)
        return CompilationRun(success=False, output=message, error=message)

    stdout = _decode(completed.stdout)
    stderr = _decode(completed.stderr)
    output = stdout + ("\n" + stderr if stderr else "")

    if len(output.encode("utf-8")) > settings.max_output_bytes:
        logger.warning("Compiler output exceeded %d bytes, truncating", settings.max_output_bytes)
        truncated = output.encode("utf-8")[: settings.max_output_bytes]
        return CompilationRun(
            success=False,
            output=truncated.decode("utf-8", errors="ignore"),
            error=f"Compiler output exceeded {settings.max_output_bytes} bytes",
        )

    if completed.returncode != 0:
        message = f"Command failed with exit code {completed.returncode}: {' '.join(command)}"
        return CompilationRun(success=False, output=output or message, error=message)

    return CompilationRun(success=True, output=output)


def compile_source(code: str, settings: Settings) -> CompileOutcome:
    """Compile *code* and segment the compiler's transcript.

    The temporary source file is removed whether or not the run succeeds.

    Raises:
        OSError: If the temporary source file cannot be written.
    """
    source_path = settings.temp_dir / f"{generate_unique_filename()}.java"
    started = time.monotonic()

    try:
        source_path.write_text(code, encoding="utf-8")
        logger.info("Created temp file: %s", source_path)

        run = run_compiler(build_compiler_command(source_path, settings), settings)
    finally:
        cleanup_file(source_path)

    phases = segment_transcript(run.output)
    execution_ms = int((time.monotonic() - started) * 1000)
    logger.info("Parsed phases: %s", list(phases))

    return CompileOutcome(run=run, phases=phases, execution_ms=execution_ms)


# ---------------------------------------------------------------------------
# Setup checks
# ---------------------------------------------------------------------------


def check_java_installation() -> str:
    """Return the first line of ``java -version``.

    Raises:
        CompilerSetupError: If Java is not installed or not on ``PATH``.
    """
    failure = "Java not found. Please install Java JDK/JRE and add to PATH"
    try:
        completed = subprocess.run(
            ["java", "-version"],
            capture_output=True,
            text=True,
            timeout=_JAVA_CHECK_TIMEOUT_SECONDS,
            check=False,
        )
    except (OSError, subprocess.TimeoutExpired) as exc:
        raise CompilerSetupError(failure) from exc

    if completed.returncode != 0:
        raise CompilerSetupError(failure)

    # java prints its version banner on stderr.
    version = (completed.stderr or completed.stdout).strip()
    return version.split("\n")[0]


def verify_compiler_setup(settings: Settings) -> None:
    """Check that the configured compiler can be run.

    Java is checked in both modes: the EXE wrapper launches a JVM too.
    All checks run before anything is raised so the error lists every
    problem.

    Raises:
        CompilerSetupError: If any check fails.
    """
    failures: list[str] = []

    try:
        logger.info("Java version detected: %s", check_java_installation())
    except CompilerSetupError as exc:
        failures.extend(exc.failures)

    artifact = settings.compiler_path
    kind = "JAR" if settings.use_java_direct else "EXE"
    if artifact.is_file():
        logger.info("%s file found: %s", kind, artifact)
    else:
        failures.append(f"{kind} file not found: {artifact}")

    if failures:
        raise CompilerSetupError(
            "Setup verification failed: " + ", ".join(failures),
            failures=failures,
        )


# ---------------------------------------------------------------------------
# Temporary files
# ---------------------------------------------------------------------------


def ensure_temp_dir(temp_dir: Path) -> None:
    """Create *temp_dir* (and parents) if it does not exist yet."""
    if temp_dir.is_dir():
        logger.info("Temp directory exists: %s", temp_dir)
        return
    temp_dir.mkdir(parents=True, exist_ok=True)
    logger.info("Created temp directory: %s", temp_dir)


def cleanup_file(path: Path) -> None:
    """Delete *path*, logging (not raising) if that fails."""
    try:
        path.unlink()
    except OSError as exc:
        logger.warning("Cleanup warning: %s", exc)
    else:
        logger.info("Cleaned up: %s", path)


def count_temp_files(temp_dir: Path) -> int:
    """Number of entries in *temp_dir*.

    Raises:
        OSError: If the directory cannot be listed.
    """
    return sum(1 for _ in temp_dir.iterdir())


def cleanup_temp_dir(temp_dir: Path) -> int:
    """Remove leftover temporary source files from *temp_dir*.

    Only files named ``JavaFile_*`` are touched.

    Returns:
        The number of files that were removed.
    """
    if not temp_dir.is_dir():
        return 0

    removed = 0
    for path in temp_dir.glob(f"{TEMP_FILE_PREFIX}*"):
        try:
            path.unlink()
        except OSError as exc:
            logger.warning("Could not remove %s: %s", path, exc)
        else:
            removed += 1

    logger.info("Cleaned up %d temporary file(s)", removed)
    return removed

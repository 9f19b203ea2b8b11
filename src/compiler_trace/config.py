"""Configuration loading for compiler-trace.

Reads settings from environment variables (with .env support via
python-dotenv).  Every variable is optional; malformed values are
collected and reported together.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

DEFAULT_JAVA_OPTIONS: tuple[str, ...] = ("-Xms256m", "-Xmx1024m", "-XX:+UseG1GC")


class ConfigError(Exception):
    """Raised when a configuration value is invalid."""


@dataclass(frozen=True)
class Settings:
    """Application settings loaded from environment variables.

    Attributes:
        use_java_direct: Run the compiler JAR with ``java -jar`` when
            ``True``; run the EXE wrapper otherwise.
        jar_path: Path to the compiler JAR.
        exe_path: Path to the compiler executable wrapper.
        java_options: Extra JVM options placed before ``-jar``.
        timeout_seconds: Wall-clock limit for one compiler run.
        max_output_bytes: Largest transcript kept from one compiler run.
        temp_dir: Directory for temporary source files.
        static_dir: Directory served as the web front-end.
        host: Interface the HTTP server binds to.
        port: Port the HTTP server listens on.
        log_level: Logging level (default ``"INFO"``).
        production: Disables CORS when ``True``.
    """

    use_java_direct: bool = True
    jar_path: Path = Path("./MyCompiler.jar")
    exe_path: Path = Path("./MyCompiler.exe")
    java_options: tuple[str, ...] = DEFAULT_JAVA_OPTIONS
    timeout_seconds: float = 45.0
    max_output_bytes: int = 20 * 1024 * 1024
    temp_dir: Path = Path("./temp")
    static_dir: Path = Path("./public")
    host: str = "0.0.0.0"
    port: int = 3000
    log_level: str = "INFO"
    production: bool = False

    @property
    def compiler_path(self) -> Path:
        """The artifact that is actually invoked."""
        return self.jar_path if self.use_java_direct else self.exe_path

    @property
    def compiler_label(self) -> str:
        """``"Java JAR"`` or ``"EXE"``, as reported by the HTTP API."""
        return "Java JAR" if self.use_java_direct else "EXE"


def _env(name: str) -> str:
    return os.environ.get(name, "").strip()


def load_settings() -> Settings:
    """Load and validate settings from environment variables.

    Calls :func:`dotenv.load_dotenv` so a ``.env`` file in the working
    directory is picked up automatically.

    Returns:
        A validated :class:`Settings` instance.

    Raises:
        ConfigError: If any variable holds an unusable value.  The error
            message names **all** offending variables.
    """
    load_dotenv()

    values: dict[str, object] = {}
    invalid: list[str] = []

    mode = _env("COMPILER_MODE").lower()
    if mode:
        if mode not in {"jar", "exe"}:
            invalid.append(f"COMPILER_MODE={mode!r} (expected 'jar' or 'exe')")
        else:
            values["use_java_direct"] = mode == "jar"

    for env_var, field_name in (
        ("COMPILER_JAR_PATH", "jar_path"),
        ("COMPILER_EXE_PATH", "exe_path"),
        ("TEMP_DIR", "temp_dir"),
        ("STATIC_DIR", "static_dir"),
    ):
        raw = _env(env_var)
        if raw:
            values[field_name] = Path(raw)

    java_options = _env("JAVA_OPTIONS")
    if java_options:
        values["java_options"] = tuple(java_options.split())

    timeout = _env("COMPILE_TIMEOUT")
    if timeout:
        try:
            seconds = float(timeout)
        except ValueError:
            invalid.append(f"COMPILE_TIMEOUT={timeout!r} (expected seconds)")
        else:
            if seconds > 0:
                values["timeout_seconds"] = seconds
            else:
                invalid.append(f"COMPILE_TIMEOUT={timeout!r} (must be positive)")

    for env_var, field_name in (("MAX_OUTPUT_BYTES", "max_output_bytes"), ("PORT", "port")):
        raw = _env(env_var)
        if not raw:
            continue
        if not raw.isdigit() or int(raw) == 0:
            invalid.append(f"{env_var}={raw!r} (expected a positive integer)")
        else:
            values[field_name] = int(raw)

    host = _env("HOST")
    if host:
        values["host"] = host

    log_level = _env("LOG_LEVEL")
    if log_level:
        values["log_level"] = log_level

    if _env("APP_ENV").lower() == "production":
        values["production"] = True

    if invalid:
        raise ConfigError("Invalid environment variables: " + ", ".join(invalid))

    return Settings(**values)  # type: ignore[arg-type]

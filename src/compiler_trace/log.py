"""Logging setup for compiler-trace.

All output (CLI, compiler runner and the HTTP server, including uvicorn's
own loggers) shares one pipe-separated format with ISO 8601 timestamps.
"""

from __future__ import annotations

import logging
import sys
from typing import Any, TextIO

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"

# Marks the handler installed by setup_logging so repeated calls reuse it.
_HANDLER_ATTR = "_compiler_trace_log_handler"

_UVICORN_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")


def _resolve_level(level: str) -> int:
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        raise ValueError(f"Invalid log level: {level!r}")
    return numeric_level


def setup_logging(level: str = "INFO", stream: TextIO | None = None) -> None:
    """Attach the compiler-trace handler to the root logger.

    Safe to call more than once: an existing compiler-trace handler is
    re-levelled instead of duplicated.

    Args:
        level: Logging level name such as ``"DEBUG"`` or ``"INFO"``.
        stream: Destination stream.  Defaults to :data:`sys.stderr`.

    Raises:
        ValueError: If *level* is not a logging level name.
    """
    numeric_level = _resolve_level(level)

    root = logging.getLogger()
    root.setLevel(numeric_level)

    for handler in root.handlers:
        if getattr(handler, _HANDLER_ATTR, False):
            handler.setLevel(numeric_level)
            return

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setLevel(numeric_level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    setattr(handler, _HANDLER_ATTR, True)
    root.addHandler(handler)


def uvicorn_log_config(level: str = "INFO") -> dict[str, Any]:
    """Return a ``log_config`` for :func:`uvicorn.run`.

    uvicorn installs its own handlers by default.  This configuration
    removes them and lets uvicorn's records propagate to the root logger
    configured by :func:`setup_logging`.
    """
    numeric_level = _resolve_level(level)
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "loggers": {
            name: {"handlers": [], "level": numeric_level, "propagate": True}
            for name in _UVICORN_LOGGERS
        },
    }


def get_logger(name: str) -> logging.Logger:
    """Shorthand for :func:`logging.getLogger`."""
    return logging.getLogger(name)

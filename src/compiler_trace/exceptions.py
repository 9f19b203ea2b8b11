"""Custom exceptions for compiler-trace.

Exception hierarchy::

    CompilerTraceError        (base for all compiler-trace errors)
    +-- CompilerSetupError    (Java runtime or compiler artifact missing)

Process failures during a compilation (non-zero exit, timeout, oversized
output) are *not* exceptions: they are reported through
:class:`~compiler_trace.models.compilation.CompilationRun`.
"""

from __future__ import annotations


class CompilerTraceError(Exception):
    """Base exception for compiler-trace errors."""


class CompilerSetupError(CompilerTraceError):
    """Raised when the compiler toolchain is not usable.

    Covers a missing ``java`` executable and a missing JAR/EXE artifact.

    Attributes:
        failures: One human-readable message per failed check.
    """

    def __init__(self, message: str, failures: list[str] | None = None) -> None:
        super().__init__(message)
        self.failures = failures or [message]

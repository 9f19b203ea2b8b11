"""Result types for compiler runs.

Plain stdlib dataclasses: they never cross the HTTP boundary directly
(see :mod:`compiler_trace.models.api` for the wire models).
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class CompilationRun:
    """Outcome of running the external compiler process once.

    Attributes:
        success: ``True`` only when the process exited with status 0
            within the time limit and output cap.
        output: Combined stdout and stderr.  For failures without any
            output this holds the failure message instead.
        error: Short failure description, or ``None`` on success.
    """

    success: bool
    output: str
    error: str | None = None


@dataclass(frozen=True)
class CompileOutcome:
    """A compiler run together with its segmented transcript.

    Attributes:
        run: The raw process result.
        phases: Phase label -> phase text, from
            :func:`~compiler_trace.segmenter.segment_transcript`.
        execution_ms: Wall-clock time from writing the source file to
            having the phases, in whole milliseconds.
    """

    run: CompilationRun
    phases: dict[str, str] = field(default_factory=dict)
    execution_ms: int = 0

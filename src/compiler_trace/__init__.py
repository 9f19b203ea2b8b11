"""compiler-trace: compiler transcripts split into named phases.

Runs an external compiler on submitted source and reorganises its
textual trace into an ordered mapping of phase name -> phase text.
"""

from __future__ import annotations

from compiler_trace.exceptions import CompilerSetupError, CompilerTraceError
from compiler_trace.models.compilation import CompilationRun, CompileOutcome
from compiler_trace.segmenter import (
    PHASE_RULES,
    PhaseRule,
    PhaseSummary,
    match_phase_marker,
    segment_transcript,
    summarize_phases,
)

__version__ = "0.1.0"

__all__ = [
    "PHASE_RULES",
    "CompilationRun",
    "CompileOutcome",
    "CompilerSetupError",
    "CompilerTraceError",
    "PhaseRule",
    "PhaseSummary",
    "match_phase_marker",
    "segment_transcript",
    "summarize_phases",
]

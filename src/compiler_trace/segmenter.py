"""Phase segmentation for compiler transcripts.

Splits the combined stdout/stderr of an external compiler run into an
ordered mapping of phase label -> phase text.  Phase boundaries are found
with an ordered table of header patterns (:data:`PHASE_RULES`); when no
header is recognised the transcript is split on blank lines instead.

:func:`segment_transcript` never raises: malformed or unknown output
degrades to the fallback strategies rather than failing the caller.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

NO_OUTPUT_LABEL = "No Output"
NO_OUTPUT_TEXT = "Compiler produced no output"
COMPILER_OUTPUT_LABEL = "Compiler Output"
COMPILATION_RESULT_LABEL = "Compilation Result"

_COMPILATION_SUCCESS_MARKER = "Compilation completed successfully"

# Fallback labels longer than this are replaced by "Section <n>".
_MAX_FALLBACK_LABEL_LENGTH = 50

_BLANK_LINE_RUN_RE = re.compile(r"\n[\s\ufeff]*\n")

# Whitespace at either end, including a byte order mark.
_EDGE_SPACE_RE = re.compile(r"^[\s\ufeff]+|[\s\ufeff]+\Z")


@dataclass(frozen=True)
class PhaseRule:
    """A single phase header pattern.

    Attributes:
        pattern: Compiled pattern, matched against the start of a trimmed
            line.
        label: Builds the phase label from the successful match.
    """

    pattern: re.Pattern[str]
    label: Callable[[re.Match[str]], str]

    def apply(self, line: str) -> str | None:
        """Return the derived label if *line* opens a phase, else ``None``."""
        match = self.pattern.match(line)
        if match is None:
            return None
        return self.label(match)


def _rule(pattern: str, label: Callable[[re.Match[str]], str]) -> PhaseRule:
    return PhaseRule(pattern=re.compile(pattern, re.IGNORECASE), label=label)


# First match wins.  The Started/Completed/summary variants must stay ahead
# of the bare "=== name ===" rule, which would otherwise swallow them.
PHASE_RULES: tuple[PhaseRule, ...] = (
    _rule(r"^Phase \d+: (.+)", lambda m: m.group(1)),
    _rule(r"^=+ (.+) Started =+", lambda m: m.group(1)),
    _rule(r"^=+ (.+) Completed =+", lambda m: f"{m.group(1)} (Completed)"),
    _rule(r"^=+ PROGRAM SUMMARY =+", lambda m: "Program Summary"),
    _rule(r"^=+ PARSER INITIALIZED =+", lambda m: "Parser Initialization"),
    _rule(r"^=+ (.+) =+", lambda m: m.group(1)),
    _rule(r"^Instructions before (.+):", lambda m: f"Before {m.group(1)}"),
    _rule(r"^Instructions after (.+):", lambda m: f"After {m.group(1)}"),
    _rule(r"^Optimized IR:", lambda m: "Optimized Intermediate Representation"),
    _rule(r"^Tokens:", lambda m: "Token List"),
    _rule(r"^Total tokens:", lambda m: "Token Summary"),
)


@dataclass(frozen=True)
class PhaseSummary:
    """The phase set together with the values derived from it.

    Attributes:
        phases: Ordered mapping of phase label -> phase text.
        count: Number of phases.
        names: Phase labels in output order.
    """

    phases: dict[str, str] = field(default_factory=dict)
    count: int = 0
    names: list[str] = field(default_factory=list)


def match_phase_marker(line: str) -> str | None:
    """Return the phase label opened by *line*, or ``None``.

    Leading and trailing whitespace is ignored.  Only the phase header
    rules are consulted; the ``Compilation completed successfully``
    marker is handled by :func:`segment_transcript` itself.
    """
    trimmed = _trim(line)
    for rule in PHASE_RULES:
        label = rule.apply(trimmed)
        if label is not None:
            return label
    return None


def segment_transcript(transcript: str) -> dict[str, str]:
    """Split a compiler transcript into named phases.

    Args:
        transcript: Combined stdout and stderr of a compiler run.  Lines
            are separated by ``\\n``.

    Returns:
        An insertion-ordered ``dict`` mapping phase labels to phase text.
        Each phase text starts with its header line.  A later phase with
        the same label replaces the earlier one.  Empty or
        whitespace-only input yields ``{"No Output": "Compiler produced
        no output"}``; any other input yields at least one entry, and no
        entry ever has a blank value.
    """
    if not transcript or not _trim(transcript):
        return {NO_OUTPUT_LABEL: NO_OUTPUT_TEXT}

    phases = _scan_phase_markers(transcript)

    if not phases:
        logger.debug("No phase markers found, splitting on blank lines")
        phases = _split_sections(transcript)

    if not phases:
        phases[COMPILER_OUTPUT_LABEL] = _trim(transcript)

    phases = {label: text for label, text in phases.items() if _trim(text)}

    logger.debug("Segmented transcript into %d phase(s): %s", len(phases), list(phases))
    return phases


def summarize_phases(phases: Mapping[str, str]) -> PhaseSummary:
    """Build a :class:`PhaseSummary` from a phase mapping."""
    ordered = dict(phases)
    return PhaseSummary(phases=ordered, count=len(ordered), names=list(ordered))


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _trim(text: str) -> str:
    """Like :meth:`str.strip`, but also drops a byte order mark."""
    return _EDGE_SPACE_RE.sub("", text)


def _scan_phase_markers(transcript: str) -> dict[str, str]:
    """Run the header-driven scan over every line of *transcript*."""
    phases: dict[str, str] = {}

    # Mutable accumulator for the phase currently being built.
    cur_label = ""
    cur_lines: list[str] = []

    def _flush_current() -> None:
        """Commit the accumulated phase (if any) to the results mapping."""
        if cur_label and cur_lines:
            phases[cur_label] = _trim("\n".join(cur_lines))

    for raw_line in transcript.split("\n"):
        label = match_phase_marker(raw_line)

        if label is None and _COMPILATION_SUCCESS_MARKER in _trim(raw_line):
            label = COMPILATION_RESULT_LABEL

        if label is not None:
            _flush_current()
            cur_label = label
            cur_lines = [raw_line]
        else:
            # Lines before the first header have no label and are dropped
            # by the flush.
            cur_lines.append(raw_line)

    _flush_current()
    return phases


def _split_sections(transcript: str) -> dict[str, str]:
    """Fallback: one phase per blank-line separated section."""
    phases: dict[str, str] = {}

    for index, section in enumerate(_BLANK_LINE_RUN_RE.split(transcript), start=1):
        body = _trim(section)
        if not body:
            continue
        first_line = body.split("\n")[0]
        phases[_section_label(first_line, index)] = body

    return phases


def _section_label(first_line: str, index: int) -> str:
    """Derive a fallback label from a section's first line."""
    if "Phase" in first_line:
        return first_line
    if "===" in first_line:
        return _trim(first_line.replace("=", ""))
    if len(first_line) < _MAX_FALLBACK_LABEL_LENGTH:
        return first_line
    return f"Section {index}"

"""Console rendering of phase sets.

:func:`format_phase_set` returns the formatted text;
:func:`print_phase_set` writes it to stdout.
"""

from __future__ import annotations

import sys
from collections.abc import Mapping

from compiler_trace.models.compilation import CompilationRun

_BANNER_WIDTH = 60
_SEPARATOR = "=" * _BANNER_WIDTH
_INDENT = "  "


def format_phase_set(
    phases: Mapping[str, str],
    title: str = "COMPILER PHASES",
    run: CompilationRun | None = None,
) -> str:
    """Render *phases* as a banner, one block per phase, and a summary.

    Args:
        phases: Phase label -> phase text, in display order.
        title: Banner title.
        run: When given, the compiler status is added to the summary.

    Returns:
        A multi-line string ready for console display.
    """
    lines: list[str] = [_SEPARATOR, f"{_INDENT}{title}", _SEPARATOR]

    for idx, (label, text) in enumerate(phases.items(), start=1):
        lines.append("")
        lines.append(f"--- [{idx}] {label} ---")
        lines.extend(f"{_INDENT}{body_line}" for body_line in text.split("\n"))

    lines.append("")
    lines.append("--- SUMMARY ---")
    lines.append(f"{_INDENT}Phases: {len(phases)}")
    if run is not None:
        lines.append(f"{_INDENT}Status: {'success' if run.success else 'failed'}")
        if run.error:
            lines.append(f"{_INDENT}Error: {run.error}")
    lines.append(_SEPARATOR)

    return "\n".join(lines)


def print_phase_set(
    phases: Mapping[str, str],
    title: str = "COMPILER PHASES",
    run: CompilationRun | None = None,
) -> None:
    """Format and print a phase set to stdout."""
    sys.stdout.write(format_phase_set(phases, title=title, run=run) + "\n")

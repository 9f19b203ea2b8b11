"""Unit tests for the console phase-set formatter."""

from __future__ import annotations

import pytest

from compiler_trace.models.compilation import CompilationRun
from compiler_trace.render import format_phase_set, print_phase_set


class TestFormatPhaseSet:
    """Tests for format_phase_set()."""

    def test_blocks_in_order(self) -> None:
        """Each phase gets a numbered header and indented body."""
        output = format_phase_set({"Lexing": "Phase 1: Lexing\nfoo", "Parsing": "Phase 2: Parsing"})

        lines = output.split("\n")
        assert lines[1] == "  COMPILER PHASES"
        assert "--- [1] Lexing ---" in lines
        assert "--- [2] Parsing ---" in lines
        assert lines.index("--- [1] Lexing ---") < lines.index("--- [2] Parsing ---")
        assert "  foo" in lines
        assert "  Phases: 2" in lines

    def test_custom_title(self) -> None:
        """The banner shows the given title."""
        assert "  PHASES: out.txt" in format_phase_set({}, title="PHASES: out.txt")

    def test_run_status_in_summary(self) -> None:
        """A failed run adds status and error lines."""
        run = CompilationRun(success=False, output="", error="Timeout")

        output = format_phase_set({"x": "y"}, run=run)

        assert "  Status: failed" in output
        assert "  Error: Timeout" in output

    def test_successful_run_has_no_error_line(self) -> None:
        """Successful runs omit the error line."""
        output = format_phase_set({"x": "y"}, run=CompilationRun(success=True, output="y"))

        assert "  Status: success" in output
        assert "Error:" not in output


def test_print_phase_set(capsys: pytest.CaptureFixture[str]) -> None:
    """print_phase_set() writes the formatted text to stdout."""
    print_phase_set({"Lexing": "Phase 1: Lexing"})

    captured = capsys.readouterr()
    assert "--- [1] Lexing ---" in captured.out
    assert captured.out.endswith("\n")

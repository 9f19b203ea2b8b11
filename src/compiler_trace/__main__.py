"""Entry point for ``python -m compiler_trace``.

Subcommands:
    segment -- Default. Split a saved compiler transcript into phases.
    compile -- Run the configured compiler on a source file.
    serve   -- Start the HTTP service.

Exit codes:
    0 -- Success (also when no arguments are given: help is printed).
    1 -- An error occurred (file not found, config or setup error).
    2 -- Argument parsing error (handled by argparse).
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from compiler_trace.compiler import compile_source, ensure_temp_dir, verify_compiler_setup
from compiler_trace.config import ConfigError, Settings, load_settings
from compiler_trace.exceptions import CompilerSetupError
from compiler_trace.log import setup_logging, uvicorn_log_config
from compiler_trace.render import print_phase_set
from compiler_trace.segmenter import segment_transcript

_SUBCOMMANDS = {"segment", "compile", "serve"}


def build_parser() -> argparse.ArgumentParser:
    """Build the CLI argument parser with its subcommands."""
    parser = argparse.ArgumentParser(
        prog="compiler-trace",
        description="Split compiler transcripts into named phases.",
    )
    subparsers = parser.add_subparsers(dest="command")

    verbose = argparse.ArgumentParser(add_help=False)
    verbose.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=False,
        help="Enable debug-level logging.",
    )

    segment_parser = subparsers.add_parser(
        "segment",
        parents=[verbose],
        help="Split a saved compiler transcript into phases.",
    )
    segment_parser.add_argument("transcript_file", help="Path to the transcript text file.")

    compile_parser = subparsers.add_parser(
        "compile",
        parents=[verbose],
        help="Compile a source file and show the compiler phases.",
    )
    compile_parser.add_argument("source_file", help="Path to the Java source file.")

    serve_parser = subparsers.add_parser(
        "serve",
        parents=[verbose],
        help="Start the HTTP service.",
    )
    serve_parser.add_argument("--host", default=None, help="Bind address (default: HOST).")
    serve_parser.add_argument("--port", type=int, default=None, help="Port (default: PORT).")
    serve_parser.add_argument(
        "--skip-setup-check",
        action="store_true",
        default=False,
        help="Start even if Java or the compiler artifact is missing.",
    )

    return parser


def _resolve_command(parser: argparse.ArgumentParser, argv: list[str]) -> argparse.Namespace:
    """Parse *argv*, routing a bare file argument to ``segment``."""
    if argv and argv[0] not in _SUBCOMMANDS and argv[0] not in {"-h", "--help"}:
        argv = ["segment", *argv]
    return parser.parse_args(argv)


def _read_text(path: Path) -> str | None:
    """Read *path* as UTF-8, printing an error and returning ``None`` on failure."""
    if not path.is_file():
        print(f"Error: File not found: {path}", file=sys.stderr)
        return None
    try:
        return path.read_text(encoding="utf-8", errors="replace")
    except OSError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return None


def _handle_segment(args: argparse.Namespace) -> int:
    text = _read_text(Path(args.transcript_file))
    if text is None:
        return 1
    print_phase_set(segment_transcript(text), title=f"PHASES: {args.transcript_file}")
    return 0


def _handle_compile(args: argparse.Namespace, settings: Settings) -> int:
    code = _read_text(Path(args.source_file))
    if code is None:
        return 1

    try:
        ensure_temp_dir(settings.temp_dir)
        outcome = compile_source(code, settings)
    except OSError as exc:
        print(f"Error: Compilation failed: {exc}", file=sys.stderr)
        return 1

    print_phase_set(outcome.phases, title=f"COMPILE: {args.source_file}", run=outcome.run)
    return 0 if outcome.run.success else 1


def _handle_serve(args: argparse.Namespace, settings: Settings) -> int:
    import uvicorn

    from compiler_trace.server import create_app

    if not args.skip_setup_check:
        try:
            verify_compiler_setup(settings)
        except CompilerSetupError as exc:
            print(f"Error: {exc}", file=sys.stderr)
            return 1

    level = "DEBUG" if args.verbose else settings.log_level
    uvicorn.run(
        create_app(settings),
        host=args.host or settings.host,
        port=args.port or settings.port,
        log_config=uvicorn_log_config(level),
    )
    return 0


def main(argv: list[str] | None = None) -> int:
    """Run the compiler-trace CLI.

    Args:
        argv: Command-line arguments.  Defaults to ``sys.argv[1:]``.

    Returns:
        The process exit code.
    """
    parser = build_parser()
    args = _resolve_command(parser, argv if argv is not None else sys.argv[1:])

    if args.command is None:
        parser.print_help()
        return 0

    try:
        settings = load_settings()
    except ConfigError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    try:
        setup_logging("DEBUG" if args.verbose else settings.log_level)
    except ValueError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    if args.command == "compile":
        return _handle_compile(args, settings)
    if args.command == "serve":
        return _handle_serve(args, settings)
    return _handle_segment(args)


if __name__ == "__main__":
    raise SystemExit(main())

"""CLI entry-point for analyzer_host.

Usage:
    python -m analyzer_host --project <dir|pyproject.toml|file.py> [...]
    python -m analyzer_host --sources a.py b.py
    python -m analyzer_host --project . --analyzers-path plugins --report out/analysis.sarif
    python -m analyzer_host --project . --treat-as-error PY001 PY002 --exclude-analyzer NoPrint

Exit codes: see ``analyzer_host.policy.exit_codes``.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

import jsonschema

from analyzer_host import __version__
from analyzer_host.api import analyze
from analyzer_host.core.config import DEFAULT_ANALYZERS_PATH, HostConfig
from analyzer_host.errors import AnalyzerHostError
from analyzer_host.policy.exit_codes import ExitCode
from analyzer_host.reports.console import print_error, print_messages
from analyzer_host.reports.sarif import write_sarif_report

_logger = logging.getLogger("analyzer_host")


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="analyzer-host",
        description="Run analyzer plugins against Python projects.",
    )
    p.add_argument(
        "--project",
        nargs="+",
        action="extend",
        default=None,
        metavar="PATH",
        help="Project directory, pyproject.toml or single .py file.",
    )
    p.add_argument(
        "--sources",
        nargs="+",
        default=None,
        metavar="FILE",
        help="Explicit list of source files. Cannot be combined with --project.",
    )
    p.add_argument(
        "--analyzers-path",
        nargs="+",
        action="extend",
        default=None,
        metavar="DIR",
        help=f"Folder(s) where analyzer plugins are located (default: {DEFAULT_ANALYZERS_PATH}).",
    )
    for severity in ("info", "hint", "warning", "error"):
        p.add_argument(
            f"--treat-as-{severity}",
            nargs="+",
            default=None,
            metavar="CODE",
            help=f"Analyzer codes reported as {severity.capitalize()}, regardless of the original severity.",
        )
    p.add_argument(
        "--ignore-files",
        nargs="+",
        default=None,
        metavar="GLOB",
        help="Source files that shouldn't be processed.",
    )
    p.add_argument(
        "--exclude-analyzer",
        nargs="+",
        default=None,
        metavar="NAME",
        help="Names of analyzers that should not be executed.",
    )
    p.add_argument(
        "--report",
        default=None,
        metavar="FILE",
        help="Write the result messages to a SARIF report file.",
    )
    p.add_argument(
        "--code-root",
        default=None,
        metavar="DIR",
        help="Repository root used for relative paths in the SARIF report (default: cwd).",
    )
    p.add_argument(
        "--config",
        type=Path,
        default=None,
        help="YAML configuration file (default: .analyzer-host.yaml in cwd, if present).",
    )
    p.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=False,
        help="Verbose logging.",
    )
    p.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    return p


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s : %(message)s",
        stream=sys.stderr,
    )


def main(argv: list[str] | None = None) -> int:
    """Entry-point; returns an ``ExitCode``."""
    args = _build_parser().parse_args(argv)
    cwd = Path.cwd()

    try:
        file_config = (
            HostConfig.from_yaml(args.config) if args.config else HostConfig.discover(cwd)
        )
    except AnalyzerHostError as exc:
        print_error(str(exc))
        return ExitCode.ERROR

    config = file_config.merge(
        analyzers_path=args.analyzers_path,
        exclude_analyzers=args.exclude_analyzer,
        ignore_files=args.ignore_files,
        treat_as_info=args.treat_as_info,
        treat_as_hint=args.treat_as_hint,
        treat_as_warning=args.treat_as_warning,
        treat_as_error=args.treat_as_error,
        report=args.report,
        code_root=args.code_root,
        verbose=args.verbose or None,
    )
    _configure_logging(config.verbose)
    _logger.debug("Running in verbose mode")
    if config.source:
        _logger.debug("Configuration loaded from %s", config.source)
    for label, codes in (
        ("Info", config.treat_as_info),
        ("Hint", config.treat_as_hint),
        ("Warning", config.treat_as_warning),
        ("Error", config.treat_as_error),
    ):
        _logger.debug("Treat as %s: [%s]", label, ", ".join(codes))
    _logger.debug("Ignore Files: [%s]", ", ".join(config.ignore_files))

    try:
        run = analyze(
            projects=args.project or (),
            sources=args.sources,
            config=config,
            cwd=cwd,
        )
    except AnalyzerHostError as exc:
        print_error(str(exc))
        return ExitCode.ERROR

    print_messages(run.messages, verbose=config.verbose)

    if config.report:
        try:
            path = write_sarif_report(run.messages, config.report, code_root=config.code_root)
            _logger.debug("SARIF report written to %s", path)
        except (OSError, jsonschema.ValidationError) as exc:
            details = f" {exc!r}" if config.verbose else ""
            print(f"Could not write sarif to {config.report}{details}", file=sys.stderr)

    return run.exit_code


if __name__ == "__main__":
    raise SystemExit(main())

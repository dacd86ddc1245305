"""
analyzer_host.api
=================

Programmatic entrypoints for embedding the host.

Goals:
  - No argparse / console dependencies
  - Configuration errors surface as exceptions *before* any analyzer runs
  - Plain data results; the caller decides how to render them

Usage::

    from analyzer_host.api import analyze
    from analyzer_host.core.config import HostConfig

    run = analyze(projects=["."], config=HostConfig(analyzers_path=("plugins",)))
    print(run.exit_code, len(run.messages))
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Sequence

from analyzer_host.checker.service import CheckerService
from analyzer_host.core.config import HostConfig
from analyzer_host.core.project import load_project, options_from_sources, run_project
from analyzer_host.core.registry import AnalyzerRegistry
from analyzer_host.errors import ConfigError, ProjectLoadError
from analyzer_host.model import AnalyzerKind
from analyzer_host.model.message import AnalysisResult, AnalyzerMessage
from analyzer_host.policy.exit_codes import ExitCode, calculate_exit_code

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AnalysisRun:
    """Outcome of one host run."""

    messages: list[AnalyzerMessage]
    plugin_files: int
    analyzers: int
    exit_code: ExitCode


def load_registry(
    paths: Iterable[str | Path],
    *,
    kind: AnalyzerKind = AnalyzerKind.CLI,
    exclude: Iterable[str] = (),
    logger: logging.Logger | None = None,
) -> tuple[AnalyzerRegistry, int, int]:
    """Scan every path into one registry; returns it with summed counts."""
    registry = AnalyzerRegistry(kind, exclude=exclude, logger=logger)
    files_total = analyzers_total = 0
    for path in paths:
        files, analyzers = registry.scan(path)
        files_total += files
        analyzers_total += analyzers
    _logger.info("Registered %d analyzers from %d plugin files", analyzers_total, files_total)
    return registry, files_total, analyzers_total


def analyze(
    *,
    projects: Sequence[str] = (),
    sources: Sequence[str] | None = None,
    config: HostConfig | None = None,
    cwd: Path | None = None,
    checker: CheckerService | None = None,
) -> AnalysisRun:
    """Load analyzers, resolve projects, run everything.

    Raises
    ------
    ConfigError
        Overlapping severity mappings, ``projects`` combined with
        ``sources``, or no plugin files / analyzers found.
    ProjectLoadError
        Nothing to analyze, or a project path does not exist.
    """
    config = config or HostConfig()
    cwd = cwd or Path.cwd()

    mappings = config.severity_mappings
    mappings.ensure_valid()

    if projects and sources is not None:
        raise ConfigError("`--project` and `--sources` cannot be combined.")
    if not projects and sources is None:
        raise ProjectLoadError("No project given. Use `--project PATH` or `--sources FILE ...`.")

    analyzer_paths = config.resolved_analyzers_paths(cwd)
    _logger.info("Loading analyzers from %s", ", ".join(map(str, analyzer_paths)))
    registry, plugin_files, analyzers = load_registry(
        analyzer_paths, exclude=config.exclude_analyzers
    )
    if plugin_files == 0:
        raise ConfigError(
            "No analyzer plugin files found in " + ", ".join(map(str, analyzer_paths))
        )
    if analyzers == 0:
        raise ConfigError(
            f"No analyzers registered from {plugin_files} plugin file(s)"
        )

    if sources is not None:
        options = [options_from_sources(sources, cwd=cwd)]
    else:
        # Every project must resolve before any of them is analyzed.
        options = [load_project(p, cwd=cwd) for p in projects]

    checker = checker or CheckerService()
    messages: list[AnalyzerMessage] = []
    for opts in options:
        messages.extend(
            run_project(
                registry,
                opts,
                ignore_files=list(config.ignore_files),
                mappings=mappings,
                checker=checker,
            )
        )
    return AnalysisRun(messages, plugin_files, analyzers, calculate_exit_code(messages))


def analyze_editor_source(
    registry: AnalyzerRegistry,
    file_name: str,
    source: str | None,
    *,
    checker: CheckerService | None = None,
) -> list[AnalysisResult]:
    """Editor-style run: tolerant context, per-analyzer results preserved."""
    checker = checker or CheckerService()
    ctx = checker.create_editor_context(file_name, source)
    return registry.run_analyzers_safely(ctx)

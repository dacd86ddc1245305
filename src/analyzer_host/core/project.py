"""Project loading and per-file analysis.

A project is resolved into ``ProjectOptions`` either from a path
(directory, ``pyproject.toml`` or single ``.py`` file) or from an
explicit list of source files.  ``run_project`` then checks the whole
project once, builds one ``CliContext`` per file and runs the registry
against each of them.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable

from analyzer_host.checker.models import ProjectOptions
from analyzer_host.checker.service import CheckerService
from analyzer_host.core.discover import discover_source_files, is_python_file, matching_glob
from analyzer_host.core.registry import AnalyzerRegistry
from analyzer_host.errors import ProjectLoadError
from analyzer_host.model.message import AnalyzerMessage
from analyzer_host.policy.severity import SeverityMappings, apply

_logger = logging.getLogger(__name__)


def load_project(path: str | Path, *, cwd: Path | None = None) -> ProjectOptions:
    """Resolve *path* into project options.

    Raises ``ProjectLoadError`` when the path does not exist or holds no
    Python sources.
    """
    base = cwd or Path.cwd()
    p = Path(path)
    if not p.is_absolute():
        p = base / p
    p = p.resolve()
    if not p.exists():
        raise ProjectLoadError(f"Invalid project argument. Path does not exist: '{path}'")

    if p.is_file():
        if p.name == "pyproject.toml":
            root = p.parent
            files = discover_source_files(root)
        elif is_python_file(p):
            root = p.parent
            files = [p]
        else:
            raise ProjectLoadError(f"Failed to load project '{path}': not a Python project")
    else:
        root = p
        files = discover_source_files(root)

    if not files:
        raise ProjectLoadError(f"Failed to load project '{path}': no Python source files found")
    return ProjectOptions(
        project_file_name=str(p),
        root=str(root),
        source_files=tuple(str(f) for f in files),
    )


def options_from_sources(sources: Iterable[str], *, cwd: Path | None = None) -> ProjectOptions:
    """Build project options from an explicit source list.

    Entries that are not existing Python files are dropped; paths are made
    absolute because report URIs are computed relative to a code root.
    """
    base = cwd or Path.cwd()
    sources = [s for s in sources if s and s.strip()]
    if not sources:
        raise ProjectLoadError("Empty source list was passed!")

    files: list[str] = []
    for entry in sources:
        p = Path(entry)
        if not p.is_absolute():
            p = base / p
        if is_python_file(p) and p.is_file():
            files.append(str(p.resolve()))
        else:
            _logger.debug("Dropping source argument %s", entry)
    if not files:
        raise ProjectLoadError("None of the given sources is an existing Python file")
    return ProjectOptions(project_file_name="Project", root=str(base), source_files=tuple(files))


def filter_ignored(files: Iterable[str], ignore_files: list[str]) -> list[str]:
    kept: list[str] = []
    for file_name in files:
        pattern = matching_glob(file_name, ignore_files)
        if pattern is not None:
            _logger.debug("Ignoring file %s for pattern %s", file_name, pattern)
            continue
        kept.append(file_name)
    return kept


def run_project(
    registry: AnalyzerRegistry,
    options: ProjectOptions,
    *,
    ignore_files: list[str] | None = None,
    mappings: SeverityMappings | None = None,
    checker: CheckerService | None = None,
) -> list[AnalyzerMessage]:
    """Analyze every non-ignored file of *options*.

    Files that fail to parse or check are logged and skipped; the rest of
    the project is still analyzed.
    """
    checker = checker or CheckerService()
    mappings = mappings or SeverityMappings()
    project_results = checker.parse_and_check_project(options)

    messages: list[AnalyzerMessage] = []
    for file_name in filter_ignored(options.source_files, ignore_files or []):
        try:
            source = Path(file_name).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            _logger.error("Could not read %s: %s", file_name, exc)
            continue
        checked = checker.type_check_file(options, file_name, source)
        if checked is None:
            continue
        ctx = checker.create_cli_context(project_results, checked)
        _logger.debug("Running analyzers for %s", file_name)
        messages.extend(apply(mappings, m) for m in registry.run_analyzers(ctx))
    return messages

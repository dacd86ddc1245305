"""Helpers for testing analyzers without a real project on disk.

    from analyzer_host.testing import get_context, assert_messages_contain

    def test_flags_print():
        ctx = get_context("print('x')\\n")
        assert_messages_contain(no_print(ctx), code="NP001")
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable

from analyzer_host.checker.models import CheckProjectResults, ProjectOptions
from analyzer_host.checker.service import CheckerService
from analyzer_host.core.registry import AnalyzerRegistry
from analyzer_host.errors import ContextCreationError
from analyzer_host.model import AnalyzerKind
from analyzer_host.model.context import CliContext, EditorContext
from analyzer_host.model.message import AnalyzerMessage, Message


def get_context(source: str, file_name: str = "a.py") -> CliContext:
    """Build a complete ``CliContext`` for one in-memory file.

    Raises ``ContextCreationError`` when the source does not parse or
    check; the parse diagnostics are included in the error text.
    """
    checker = CheckerService()
    options = ProjectOptions(project_file_name=file_name, root=".", source_files=(file_name,))
    checked = checker.type_check_file(options, file_name, source)
    if checked is None:
        diagnostics = checker.parse_file(file_name, source).diagnostics
        details = "; ".join(
            f"({d.range.start_line},{d.range.start_column}) {d.message}" for d in diagnostics
        )
        raise ContextCreationError(
            f"There is an error in the code of {file_name}" + (f": {details}" if details else "")
        )
    project = CheckProjectResults(files=(checked.check_results,))
    return checker.create_cli_context(project, checked)


def get_editor_context(source: str | None, file_name: str = "a.py") -> EditorContext:
    """Build an ``EditorContext``; never raises, missing phases stay empty."""
    checker = CheckerService()
    ctx = checker.create_editor_context(file_name, source)
    if ctx.check_file_results is None:
        return ctx
    return checker.create_editor_context(
        file_name, source, CheckProjectResults(files=(ctx.check_file_results,))
    )


def load_test_analyzers(
    path: str | Path,
    kind: AnalyzerKind = AnalyzerKind.CLI,
) -> AnalyzerRegistry:
    """Scan *path* into a fresh registry, refusing an empty result."""
    registry = AnalyzerRegistry(kind)
    files, analyzers = registry.scan(path)
    if files == 0:
        raise ContextCreationError(f"No analyzer plugin files found in {path}")
    if analyzers == 0:
        raise ContextCreationError(f"No {AnalyzerKind(kind).value} analyzers found in {path}")
    return registry


def assert_messages_contain(
    messages: Iterable[Message | AnalyzerMessage],
    *,
    code: str | None = None,
    message: str | None = None,
) -> Message:
    """Assert that one message matches *code* and contains *message*.

    Returns the first match so a test can inspect its range or fixes.
    """
    plain = [m.message if isinstance(m, AnalyzerMessage) else m for m in messages]
    for m in plain:
        if code is not None and m.code != code:
            continue
        if message is not None and message not in m.message:
            continue
        return m
    seen = ", ".join(f"{m.code}: {m.message}" for m in plain) or "<none>"
    raise AssertionError(f"no message with code={code!r} message={message!r}; got [{seen}]")

"""Shared fixtures: plugin directories and small source projects."""

from __future__ import annotations

import textwrap
from pathlib import Path

import pytest

NO_UNUSED_VALUES_PLUGIN = '''
from analyzer_host.sdk import CliContext, Message, Severity, cli_analyzer


@cli_analyzer("NoUnusedValues", short_description="Unused local value",
              help_uri="https://example.com/rules/FS001")
def no_unused_values(ctx: CliContext) -> list[Message]:
    uses = ctx.get_all_symbol_uses_of_file()
    used = {u.name for u in uses if u.is_from_use}
    return [
        Message(
            type="Unused value",
            message=f"'{u.name}' is assigned but never used",
            code="FS001",
            severity=Severity.HINT,
            range=u.range,
        )
        for u in uses
        if u.is_from_definition and u.scope == "local" and u.name not in used
    ]
'''

CORRUPT_PLUGIN = "def broken(:\n    pass\n"


def write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(textwrap.dedent(text), encoding="utf-8")
    return path


@pytest.fixture
def plugin_dir(tmp_path: Path) -> Path:
    """One well-formed plugin exporting ``NoUnusedValues``."""
    d = tmp_path / "analyzers"
    write(d / "unused_analyzer.py", NO_UNUSED_VALUES_PLUGIN)
    return d


@pytest.fixture
def sample_project(tmp_path: Path) -> Path:
    """A tiny project with one unused local in ``app.py``."""
    root = tmp_path / "project"
    write(
        root / "app.py",
        """
        def compute(x):
            unused = x * 2
            return x + 1
        """,
    )
    write(
        root / "util.py",
        """
        def helper():
            return 42
        """,
    )
    return root


@pytest.fixture
def write_file():
    """``write_file(path, text)``: dedent *text* into *path*, creating parents."""
    return write

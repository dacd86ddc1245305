"""Console printer: one colored line per message.

Format (MSBuild-style, understood by most editors)::

    path/to/file.py(12,4): Warning PY001 - message text
"""

from __future__ import annotations

from typing import Iterable

from rich.console import Console
from rich.text import Text

from analyzer_host.model import Severity
from analyzer_host.model.message import AnalyzerMessage

_SEVERITY_STYLE = {
    Severity.ERROR: "red",
    Severity.WARNING: "yellow",
    Severity.INFO: "blue",
    Severity.HINT: "cyan",
}


def format_message(am: AnalyzerMessage) -> str:
    m = am.message
    r = m.range
    return (
        f"{r.file_name}({r.start_line},{r.start_column}): "
        f"{m.severity.label} {m.code} - {m.message}"
    )


def print_messages(
    messages: Iterable[AnalyzerMessage],
    *,
    console: Console | None = None,
    verbose: bool = False,
) -> None:
    console = console or Console(highlight=False, soft_wrap=True)
    messages = list(messages)
    if verbose:
        console.print()
        if not messages:
            console.print("No messages found from the analyzer(s)")
    for am in messages:
        console.print(Text(format_message(am), style=_SEVERITY_STYLE[am.severity]))


def print_error(text: str, *, console: Console | None = None) -> None:
    """``Error : <text>`` in red on stderr."""
    console = console or Console(stderr=True, highlight=False, soft_wrap=True)
    line = Text("Error : ", style="red")
    line.append(text)
    console.print(line)

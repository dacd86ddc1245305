"""Plugin SDK: everything an analyzer author imports.

An analyzer is a plain function taking one context and returning a list
of ``Message``.  Registration is driven by a marker decorator, not by
inheritance::

    from analyzer_host.sdk import CliContext, Message, Range, Severity, cli_analyzer

    @cli_analyzer("NoPrint", short_description="print() left in code")
    def no_print(ctx: CliContext) -> list[Message]:
        ...

``async def`` analyzers are accepted as well; the host runs them to
completion on their own event loop.

Plugins live in ``.py`` files whose name contains ``analyzer``.  A plugin
may list its analyzers explicitly in ``__analyzers__``; otherwise every
public top-level function (and static method of a public top-level
class) carrying a marker is registered.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, TypeVar, Union

from analyzer_host.model import AnalyzerKind, Severity
from analyzer_host.model.context import CliContext, Context, EditorContext
from analyzer_host.model.message import Fix, Message, Range

__all__ = [
    "Analyzer",
    "AnalyzerKind",
    "AnalyzerMarker",
    "CliContext",
    "Context",
    "DEFAULT_ANALYZER_NAME",
    "EditorContext",
    "Fix",
    "Message",
    "Range",
    "Severity",
    "cli_analyzer",
    "editor_analyzer",
    "get_marker",
]

DEFAULT_ANALYZER_NAME = "Analyzer"
MARKER_ATTRIBUTE = "__analyzer_marker__"

TContext = TypeVar("TContext", bound=Context)
Analyzer = Callable[[TContext], Union[list[Message], Awaitable[list[Message]]]]

F = TypeVar("F", bound=Callable[..., Any])


@dataclass(frozen=True, slots=True)
class AnalyzerMarker:
    """Registration metadata attached to an analyzer function."""

    kind: AnalyzerKind
    name: str = DEFAULT_ANALYZER_NAME
    short_description: str | None = None
    help_uri: str | None = None


def get_marker(obj: Any) -> AnalyzerMarker | None:
    """Return the marker carried by *obj* (unwrapping static methods)."""
    if isinstance(obj, staticmethod):
        obj = obj.__func__
    marker = getattr(obj, MARKER_ATTRIBUTE, None)
    return marker if isinstance(marker, AnalyzerMarker) else None


def _marker_decorator(
    kind: AnalyzerKind,
    name: str | Callable[..., Any],
    short_description: str | None,
    help_uri: str | None,
):
    # Bare ``@cli_analyzer`` usage passes the function itself as *name*.
    bare = callable(name)
    marker = AnalyzerMarker(
        kind,
        DEFAULT_ANALYZER_NAME if bare else (name or DEFAULT_ANALYZER_NAME),
        short_description,
        help_uri,
    )

    def decorate(func: F) -> F:
        target = func.__func__ if isinstance(func, staticmethod) else func
        setattr(target, MARKER_ATTRIBUTE, marker)
        return func

    return decorate(name) if bare else decorate


def cli_analyzer(
    name: str | Callable[..., Any] = DEFAULT_ANALYZER_NAME,
    *,
    short_description: str | None = None,
    help_uri: str | None = None,
):
    """Mark a function as an analyzer for command-line runs (``CliContext``)."""
    return _marker_decorator(AnalyzerKind.CLI, name, short_description, help_uri)


def editor_analyzer(
    name: str | Callable[..., Any] = DEFAULT_ANALYZER_NAME,
    *,
    short_description: str | None = None,
    help_uri: str | None = None,
):
    """Mark a function as an analyzer for editor hosts (``EditorContext``)."""
    return _marker_decorator(AnalyzerKind.EDITOR, name, short_description, help_uri)

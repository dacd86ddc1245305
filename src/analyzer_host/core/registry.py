"""Analyzer registry: discovers plugin modules and binds names to analyzers.

Each plugin file is imported under its own path-derived module name in
the private ``analyzer_host_plugins`` namespace, so two plugins that
share a file name (or a helper name) never overwrite each other and no
plugin can shadow a host module.

Loading is best-effort: a plugin that fails to import, or a member that
fails inspection, is logged on the error channel and scanning moves on.

Names are the binding key.  When two analyzers declare the same name the
later registration replaces the earlier one (a warning is logged).
"""

from __future__ import annotations

import asyncio
import functools
import hashlib
import importlib.util
import inspect
import logging
import re
import sys
import typing
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType, ModuleType
from typing import Any, Callable, Iterable, Iterator, Mapping

from analyzer_host.core.discover import discover_plugin_files
from analyzer_host.core.runner import run_all, run_all_safely
from analyzer_host.model import AnalyzerKind
from analyzer_host.model.context import CliContext, Context, EditorContext
from analyzer_host.model.message import AnalysisResult, AnalyzerMessage, Message
from analyzer_host.sdk import AnalyzerMarker, get_marker

_logger = logging.getLogger(__name__)

PLUGIN_NAMESPACE = "analyzer_host_plugins"

CONTEXT_TYPES: dict[AnalyzerKind, type[Context]] = {
    AnalyzerKind.CLI: CliContext,
    AnalyzerKind.EDITOR: EditorContext,
}


@dataclass(frozen=True, slots=True)
class AnalyzerDescriptor:
    """One registered analyzer, normalized to ``Context -> list[Message]``."""

    name: str
    callable: Callable[[Context], list[Message]]
    kind: AnalyzerKind
    source: str | None = None
    short_description: str | None = None
    help_uri: str | None = None


# ── signature & call-shape helpers ───────────────────────────────────


def _accepts_context(func: Callable[..., Any], context_type: type[Context]) -> bool:
    """True when *func* can be called with exactly one context argument."""
    try:
        sig = inspect.signature(func)
    except (TypeError, ValueError):
        return False

    positional = [
        p for p in sig.parameters.values()
        if p.kind in (p.POSITIONAL_ONLY, p.POSITIONAL_OR_KEYWORD)
    ]
    required = [p for p in positional if p.default is p.empty]
    if len(required) > 1:
        return False
    if any(
        p.kind == p.KEYWORD_ONLY and p.default is p.empty
        for p in sig.parameters.values()
    ):
        return False

    first = required[0] if required else (positional[0] if positional else None)
    if first is None:
        return any(p.kind == p.VAR_POSITIONAL for p in sig.parameters.values())

    try:
        hints = typing.get_type_hints(func)
    except Exception:
        # Unresolvable annotations are not a reason to reject an analyzer.
        hints = {}
    annotation = hints.get(first.name)
    if isinstance(annotation, type):
        return issubclass(context_type, annotation)
    return True


async def _await(awaitable: Any) -> Any:
    return await awaitable


def _normalize(func: Callable[..., Any]) -> Callable[[Context], list[Message]]:
    """Wrap sync and async analyzers into one synchronous call shape."""
    if inspect.iscoroutinefunction(func):
        def run_sync(ctx: Context) -> list[Message]:
            return asyncio.run(func(ctx))
    else:
        def run_sync(ctx: Context) -> list[Message]:
            result = func(ctx)
            if inspect.isawaitable(result):
                result = asyncio.run(_await(result))
            return result

    return functools.update_wrapper(run_sync, func)


def _plugin_module_name(path: Path) -> str:
    digest = hashlib.sha256(str(path).encode("utf-8")).hexdigest()[:12]
    stem = re.sub(r"\W", "_", path.stem)
    return f"{PLUGIN_NAMESPACE}.{stem}_{digest}"


def load_plugin_module(path: Path) -> ModuleType:
    """Import *path* under an isolated module name.

    Raises whatever the plugin raises on import (``SyntaxError``,
    ``ImportError`` for a missing dependency, ...).
    """
    path = path.resolve()
    name = _plugin_module_name(path)
    spec = importlib.util.spec_from_file_location(name, path)
    if spec is None or spec.loader is None:
        raise ImportError(f"cannot create an import spec for {path}")
    module = importlib.util.module_from_spec(spec)
    sys.modules[name] = module
    try:
        spec.loader.exec_module(module)
    except BaseException:
        sys.modules.pop(name, None)
        raise
    return module


def _candidate_members(module: ModuleType) -> Iterator[tuple[str, Any]]:
    """Yield ``(qualified name, object)`` pairs worth inspecting."""
    explicit = getattr(module, "__analyzers__", None)
    if explicit is not None:
        for obj in explicit:
            yield getattr(obj, "__qualname__", repr(obj)), obj
        return

    exported = getattr(module, "__all__", None)
    if exported is not None:
        names = list(exported)
    else:
        names = [n for n in vars(module) if not n.startswith("_")]

    for name in names:
        obj = getattr(module, name, None)
        if inspect.isclass(obj):
            if obj.__module__ != module.__name__:
                continue
            for attr, raw in vars(obj).items():
                if not attr.startswith("_") and isinstance(raw, staticmethod):
                    yield f"{name}.{attr}", raw.__func__
        elif callable(obj):
            # Re-exported imports belong to their defining plugin.
            if exported is None and getattr(obj, "__module__", None) != module.__name__:
                continue
            yield name, obj


# ── registry ─────────────────────────────────────────────────────────


class AnalyzerRegistry:
    """Name -> analyzer mapping for one host kind (CLI or editor).

    Populate it with ``scan`` (or ``register``) once at startup; after
    that the mapping is only read.
    """

    def __init__(
        self,
        kind: AnalyzerKind = AnalyzerKind.CLI,
        *,
        logger: logging.Logger | None = None,
        exclude: Iterable[str] = (),
    ) -> None:
        self.kind = AnalyzerKind(kind)
        self.context_type = CONTEXT_TYPES[self.kind]
        self.exclude = frozenset(exclude)
        self._logger = logger or _logger
        self._descriptors: dict[str, AnalyzerDescriptor] = {}

    # ── read access ──

    @property
    def descriptors(self) -> Mapping[str, AnalyzerDescriptor]:
        return MappingProxyType(self._descriptors)

    def names(self) -> list[str]:
        return sorted(self._descriptors)

    def __len__(self) -> int:
        return len(self._descriptors)

    def __contains__(self, name: object) -> bool:
        return name in self._descriptors

    # ── registration ──

    def register(self, func: Callable[..., Any], *, source: str | None = None) -> bool:
        """Register one marked callable.  Returns False when it was skipped.

        Raises ``TypeError`` if *func* carries no analyzer marker.
        """
        marker = get_marker(func)
        if marker is None:
            raise TypeError(f"{func!r} is not marked with an analyzer decorator")
        if isinstance(func, staticmethod):
            func = func.__func__
        return self._register_marked(func, marker, source)

    def _register_marked(
        self,
        func: Callable[..., Any],
        marker: AnalyzerMarker,
        source: str | None,
    ) -> bool:
        if marker.kind != self.kind:
            self._logger.debug(
                "Skipping %s analyzer %r (host kind is %s)",
                marker.kind.value, marker.name, self.kind.value,
            )
            return False
        if marker.name in self.exclude:
            self._logger.debug("Excluding analyzer %r", marker.name)
            return False
        if not _accepts_context(func, self.context_type):
            self._logger.debug(
                "Skipping %r: signature does not accept a single %s",
                marker.name, self.context_type.__name__,
            )
            return False

        previous = self._descriptors.get(marker.name)
        if previous is not None:
            self._logger.warning(
                "Analyzer %r from %s replaces the one registered from %s",
                marker.name, source or "<direct>", previous.source or "<direct>",
            )
        self._descriptors[marker.name] = AnalyzerDescriptor(
            name=marker.name,
            callable=_normalize(func),
            kind=marker.kind,
            source=source,
            short_description=marker.short_description,
            help_uri=marker.help_uri,
        )
        self._logger.debug("Registered analyzer %r from %s", marker.name, source or "<direct>")
        return True

    def register_module(self, module: ModuleType, *, source: str | None = None) -> int:
        """Register every marked analyzer exported by *module*."""
        source = source or getattr(module, "__file__", None) or module.__name__
        try:
            candidates = list(_candidate_members(module))
        except Exception as exc:
            # Malformed ``__analyzers__`` or ``__all__``.
            self._logger.error("Could not list analyzers of %s: %s", source, exc)
            return 0

        registered = 0
        for member_name, obj in candidates:
            try:
                marker = get_marker(obj)
                if marker is None:
                    continue
                if isinstance(obj, staticmethod):
                    obj = obj.__func__
                if self._register_marked(obj, marker, source):
                    registered += 1
            except Exception as exc:
                self._logger.error(
                    "Inspecting %s in %s failed: %s", member_name, source, exc
                )
        return registered

    def scan(self, root: str | Path) -> tuple[int, int]:
        """Load analyzers from every plugin file under *root*.

        Returns ``(plugin_files_found, analyzers_registered)``.  Zero
        counts are not an error here; the caller decides.
        """
        root = Path(root)
        files = discover_plugin_files(root)
        self._logger.debug("Found %d plugin file(s) under %s", len(files), root)

        registered = 0
        for path in files:
            try:
                module = load_plugin_module(path)
            except (Exception, SystemExit) as exc:
                self._logger.error("Could not load analyzers from %s: %r", path, exc)
                self._logger.debug("Load failure for %s", path, exc_info=exc)
                continue
            count = self.register_module(module, source=str(path))
            self._logger.debug("Registered %d analyzer(s) from %s", count, path)
            registered += count
        return len(files), registered

    load_analyzers = scan

    # ── execution ──

    def run_analyzers(self, ctx: Context) -> list[AnalyzerMessage]:
        return run_all(self.descriptors, ctx, logger=self._logger)

    def run_analyzers_safely(self, ctx: Context) -> list[AnalysisResult]:
        return run_all_safely(self.descriptors, ctx, logger=self._logger)

"""Runner: fans a context out to every analyzer and collects the results.

All analyzers for one context are submitted to a thread pool at once and
the call returns only after every one of them has finished or failed
(fan-out/fan-in).  Results are gathered in submission order, which is
analyzer-name order, so output does not depend on completion order.

There is no per-analyzer timeout: an analyzer that never
returns blocks the run.  Callers that need a bound must impose it around
the whole call.
"""

from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from typing import TYPE_CHECKING, Iterable, Mapping

from analyzer_host.model.context import Context
from analyzer_host.model.message import AnalysisResult, AnalyzerMessage, Message

if TYPE_CHECKING:
    from analyzer_host.core.registry import AnalyzerDescriptor

_logger = logging.getLogger(__name__)


def _ordered(descriptors: Mapping[str, AnalyzerDescriptor] | Iterable[AnalyzerDescriptor]) -> list[AnalyzerDescriptor]:
    items = descriptors.values() if isinstance(descriptors, Mapping) else descriptors
    return sorted(items, key=lambda d: d.name)


def _execute(descriptor: AnalyzerDescriptor, ctx: Context) -> list[Message]:
    """Call one analyzer and check the shape of what it returned."""
    output = descriptor.callable(ctx)
    if output is None:
        raise TypeError(f"analyzer {descriptor.name!r} returned None instead of a list")
    messages = list(output)
    for m in messages:
        if not isinstance(m, Message):
            raise TypeError(
                f"analyzer {descriptor.name!r} returned {type(m).__name__}, expected Message"
            )
    return messages


def _fan_out(
    ordered: list[AnalyzerDescriptor],
    ctx: Context,
    max_workers: int | None,
) -> list[tuple[AnalyzerDescriptor, Future]]:
    if not ordered:
        return []
    workers = max_workers or len(ordered)
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="analyzer") as pool:
        submitted = [(d, pool.submit(_execute, d, ctx)) for d in ordered]
    # Leaving the ``with`` block waits for every future.
    return submitted


def run_all_safely(
    descriptors: Mapping[str, AnalyzerDescriptor] | Iterable[AnalyzerDescriptor],
    ctx: Context,
    *,
    logger: logging.Logger | None = None,
    max_workers: int | None = None,
) -> list[AnalysisResult]:
    """Run every analyzer against *ctx*; one ``AnalysisResult`` per analyzer.

    Failures are preserved as ``AnalysisResult.error``; nothing raised by
    an analyzer escapes this function.
    """
    log = logger or _logger
    results: list[AnalysisResult] = []
    for descriptor, future in _fan_out(_ordered(descriptors), ctx, max_workers):
        error = future.exception()
        if error is not None:
            log.debug("Analyzer %r failed on %s: %r", descriptor.name, getattr(ctx, "file_name", "?"), error)
            results.append(AnalysisResult(descriptor.name, error=error))
        else:
            results.append(AnalysisResult(descriptor.name, messages=future.result()))
    return results


def run_all(
    descriptors: Mapping[str, AnalyzerDescriptor] | Iterable[AnalyzerDescriptor],
    ctx: Context,
    *,
    logger: logging.Logger | None = None,
    max_workers: int | None = None,
) -> list[AnalyzerMessage]:
    """Run every analyzer against *ctx* and flatten their messages.

    An analyzer that raises is logged on the error channel and
    contributes no messages.  Never raises.
    """
    log = logger or _logger
    by_name = {d.name: d for d in _ordered(descriptors)}
    messages: list[AnalyzerMessage] = []
    for result in run_all_safely(by_name.values(), ctx, logger=log, max_workers=max_workers):
        if not result.ok:
            log.error(
                "Analyzer %r raised an exception on %s; skipped",
                result.analyzer_name, getattr(ctx, "file_name", "?"),
                exc_info=result.error,
            )
            continue
        descriptor = by_name[result.analyzer_name]
        messages.extend(
            AnalyzerMessage(
                message=m,
                name=descriptor.name,
                short_description=descriptor.short_description,
                help_uri=descriptor.help_uri,
            )
            for m in result.messages or []
        )
    return messages

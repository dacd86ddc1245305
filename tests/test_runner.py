"""Fan-out/fan-in execution and failure isolation."""

from __future__ import annotations

import logging
import threading

import pytest

from analyzer_host.core.registry import AnalyzerRegistry
from analyzer_host.core.runner import run_all, run_all_safely
from analyzer_host.model.message import AnalysisResult
from analyzer_host.reports.console import format_message
from analyzer_host.sdk import CliContext, Message, Range, Severity, cli_analyzer
from analyzer_host.testing import get_context


def _message(ctx, code: str) -> Message:
    return Message("t", code, code, Severity.WARNING, Range(ctx.file_name, 1, 0, 1, 0))


def _registry(*funcs) -> AnalyzerRegistry:
    registry = AnalyzerRegistry()
    for f in funcs:
        registry.register(f)
    return registry


@cli_analyzer("Ok")
def ok(ctx: CliContext) -> list[Message]:
    return [_message(ctx, "OK001")]


@cli_analyzer("Boom")
def boom(ctx: CliContext) -> list[Message]:
    raise RuntimeError("boom")


@cli_analyzer("ReturnsNone")
def returns_none(ctx: CliContext):
    return None


@cli_analyzer("Empty")
def empty(ctx: CliContext) -> list[Message]:
    return []


class TestRunAllSafely:
    def test_one_result_per_analyzer_in_name_order(self) -> None:
        registry = _registry(ok, boom, returns_none, empty)
        results = run_all_safely(registry.descriptors, get_context("x = 1\n"))

        assert [r.analyzer_name for r in results] == ["Boom", "Empty", "Ok", "ReturnsNone"]
        by_name = {r.analyzer_name: r for r in results}
        assert isinstance(by_name["Boom"].error, RuntimeError)
        assert isinstance(by_name["ReturnsNone"].error, TypeError)
        assert by_name["Empty"].ok and by_name["Empty"].messages == []
        assert [m.code for m in by_name["Ok"].messages] == ["OK001"]

    def test_empty_registry(self) -> None:
        assert run_all_safely({}, get_context("x = 1\n")) == []

    def test_analyzers_run_concurrently(self) -> None:
        # Both analyzers must be in flight at once to get past the barrier.
        barrier = threading.Barrier(2, timeout=5)

        @cli_analyzer("Left")
        def left(ctx: CliContext) -> list[Message]:
            barrier.wait()
            return [_message(ctx, "L")]

        @cli_analyzer("Right")
        def right(ctx: CliContext) -> list[Message]:
            barrier.wait()
            return [_message(ctx, "R")]

        results = run_all_safely(_registry(left, right).descriptors, get_context("x = 1\n"))
        assert all(r.ok for r in results)

    def test_analysis_result_requires_exactly_one_outcome(self) -> None:
        with pytest.raises(ValueError):
            AnalysisResult("x")
        with pytest.raises(ValueError):
            AnalysisResult("x", messages=[], error=RuntimeError())


class TestRunAll:
    def test_failures_are_dropped_and_logged(self, caplog) -> None:
        registry = _registry(ok, boom, returns_none)
        with caplog.at_level(logging.ERROR):
            messages = run_all(registry.descriptors, get_context("x = 1\n"))

        assert [(m.name, m.code) for m in messages] == [("Ok", "OK001")]
        logged = {r.getMessage() for r in caplog.records if r.levelno == logging.ERROR}
        assert any("'Boom'" in text for text in logged)
        assert any("'ReturnsNone'" in text for text in logged)

    def test_severity_given_as_string_is_normalized(self) -> None:
        @cli_analyzer("StringSeverity")
        def string_severity(ctx: CliContext) -> list[Message]:
            return [Message("t", "m", "C1", "error", Range(ctx.file_name, 1, 0, 1, 0))]

        [m] = run_all(_registry(string_severity).descriptors, get_context("x = 1\n"))
        assert m.severity is Severity.ERROR
        assert format_message(m) == "a.py(1,0): Error C1 - m"

    def test_malformed_message_is_an_analyzer_failure(self, caplog) -> None:
        @cli_analyzer("BadSeverity")
        def bad_severity(ctx: CliContext) -> list[Message]:
            return [Message("t", "m", "C1", "fatal", Range(ctx.file_name, 1, 0, 1, 0))]

        @cli_analyzer("BadRange")
        def bad_range(ctx: CliContext) -> list[Message]:
            return [Message("t", "m", "C2", Severity.INFO, (1, 0, 1, 0))]

        registry = _registry(bad_severity, bad_range, ok)
        with caplog.at_level(logging.ERROR):
            messages = run_all(registry.descriptors, get_context("x = 1\n"))

        assert [m.name for m in messages] == ["Ok"]
        logged = " ".join(r.getMessage() for r in caplog.records if r.levelno == logging.ERROR)
        assert "'BadSeverity'" in logged and "'BadRange'" in logged

    def test_single_message_from_context_without_symbol_uses(self) -> None:
        ctx = get_context("")
        assert ctx.get_all_symbol_uses_of_file() == []

        @cli_analyzer("Single")
        def single(c: CliContext) -> list[Message]:
            return [_message(c, "ONE")]

        [m] = run_all(_registry(single).descriptors, ctx)
        assert (m.name, m.code, m.message.range.file_name) == ("Single", "ONE", "a.py")

    def test_all_analyzers_failing_gives_no_messages(self) -> None:
        assert run_all(_registry(boom).descriptors, get_context("x = 1\n")) == []

    def test_metadata_is_attached(self) -> None:
        @cli_analyzer("Documented", short_description="short", help_uri="https://example.com/d")
        def documented(ctx: CliContext) -> list[Message]:
            return [_message(ctx, "DOC")]

        [m] = run_all(_registry(documented).descriptors, get_context("x = 1\n"))
        assert m.short_description == "short"
        assert m.help_uri == "https://example.com/d"

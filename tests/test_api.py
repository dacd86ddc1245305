"""Programmatic API: configuration errors surface before any analyzer runs."""

from __future__ import annotations

from pathlib import Path

import pytest

import analyzer_host
from analyzer_host.api import analyze, analyze_editor_source, load_registry
from analyzer_host.core.config import HostConfig
from analyzer_host.errors import ConfigError, ProjectLoadError
from analyzer_host.model import AnalyzerKind, Severity
from analyzer_host.policy.exit_codes import ExitCode, calculate_exit_code


def test_package_exports() -> None:
    assert analyzer_host.analyze is analyze
    assert isinstance(analyzer_host.__version__, str)


class TestAnalyze:
    def test_clean_run_is_success(self, sample_project: Path, plugin_dir: Path) -> None:
        run = analyze(
            projects=[str(sample_project)],
            config=HostConfig(analyzers_path=(str(plugin_dir),)),
        )
        assert (run.plugin_files, run.analyzers) == (1, 1)
        assert [m.code for m in run.messages] == ["FS001"]
        assert run.exit_code is ExitCode.SUCCESS

    def test_treat_as_error_gives_violation(self, sample_project: Path, plugin_dir: Path) -> None:
        run = analyze(
            projects=[str(sample_project)],
            config=HostConfig(analyzers_path=(str(plugin_dir),), treat_as_error=("FS001",)),
        )
        assert [m.severity for m in run.messages] == [Severity.ERROR]
        assert run.exit_code is ExitCode.VIOLATION

    def test_sources_instead_of_project(self, sample_project: Path, plugin_dir: Path) -> None:
        run = analyze(
            sources=["util.py"],
            config=HostConfig(analyzers_path=(str(plugin_dir),)),
            cwd=sample_project,
        )
        assert run.messages == []
        assert run.exit_code is ExitCode.SUCCESS

    def test_relative_analyzers_path_uses_cwd(self, sample_project: Path, plugin_dir: Path) -> None:
        run = analyze(
            projects=["project"],
            config=HostConfig(analyzers_path=("analyzers",)),
            cwd=plugin_dir.parent,
        )
        assert run.analyzers == 1

    def test_conflicting_mappings(self, sample_project: Path, plugin_dir: Path) -> None:
        cfg = HostConfig(
            analyzers_path=(str(plugin_dir),),
            treat_as_warning=("FS001",),
            treat_as_error=("FS001",),
        )
        with pytest.raises(ConfigError, match="FS001"):
            analyze(projects=[str(sample_project)], config=cfg)

    def test_project_and_sources_together(self, sample_project: Path, plugin_dir: Path) -> None:
        with pytest.raises(ConfigError):
            analyze(
                projects=[str(sample_project)],
                sources=["app.py"],
                config=HostConfig(analyzers_path=(str(plugin_dir),)),
            )

    def test_nothing_to_analyze(self, plugin_dir: Path) -> None:
        with pytest.raises(ProjectLoadError):
            analyze(config=HostConfig(analyzers_path=(str(plugin_dir),)))

    def test_no_plugin_files(self, sample_project: Path, tmp_path: Path) -> None:
        empty = tmp_path / "empty"
        empty.mkdir()
        with pytest.raises(ConfigError, match="No analyzer plugin files"):
            analyze(projects=[str(sample_project)], config=HostConfig(analyzers_path=(str(empty),)))

    def test_no_analyzers_in_plugins(self, sample_project: Path, tmp_path: Path, write_file) -> None:
        write_file(tmp_path / "plugins" / "nothing_analyzer.py", "VALUE = 1\n")
        with pytest.raises(ConfigError, match="No analyzers registered"):
            analyze(
                projects=[str(sample_project)],
                config=HostConfig(analyzers_path=(str(tmp_path / "plugins"),)),
            )

    def test_every_project_must_resolve(self, sample_project: Path, plugin_dir: Path) -> None:
        with pytest.raises(ProjectLoadError):
            analyze(
                projects=[str(sample_project), str(sample_project / "missing")],
                config=HostConfig(analyzers_path=(str(plugin_dir),)),
            )


class TestRegistryAndEditor:
    def test_load_registry_sums_counts(self, plugin_dir: Path, tmp_path: Path, write_file) -> None:
        other = write_file(tmp_path / "other" / "x_analyzer.py", "raise ImportError('missing dep')\n")
        registry, files, analyzers = load_registry([plugin_dir, other.parent])
        assert (files, analyzers) == (2, 1)
        assert registry.names() == ["NoUnusedValues"]

    def test_editor_run_keeps_failures(self, tmp_path: Path, write_file) -> None:
        write_file(
            tmp_path / "ed_analyzer.py",
            """
            from analyzer_host.sdk import EditorContext, editor_analyzer

            @editor_analyzer("Count")
            def count(ctx: EditorContext):
                return []

            @editor_analyzer("Fails")
            def fails(ctx: EditorContext):
                raise ValueError("nope")
            """,
        )
        registry, _, _ = load_registry([tmp_path], kind=AnalyzerKind.EDITOR)
        results = analyze_editor_source(registry, "open.py", "def f(:\n")
        assert [(r.analyzer_name, r.ok) for r in results] == [("Count", True), ("Fails", False)]


class TestExitCode:
    def test_none_means_error(self) -> None:
        assert calculate_exit_code(None) is ExitCode.ERROR

    def test_empty_is_success(self) -> None:
        assert calculate_exit_code([]) is ExitCode.SUCCESS

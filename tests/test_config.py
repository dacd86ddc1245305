"""YAML configuration loading and CLI merge."""

from __future__ import annotations

from pathlib import Path

import pytest

from analyzer_host.core.config import DEFAULT_ANALYZERS_PATH, HostConfig
from analyzer_host.errors import ConfigError


class TestFromYaml:
    def test_full_file(self, tmp_path: Path, write_file) -> None:
        cfg_path = write_file(
            tmp_path / ".analyzer-host.yaml",
            """
            analyzers_path: [plugins, more]
            exclude_analyzers: NoPrint
            ignore_files: ["tests/*"]
            treat_as_error: [FS001]
            report: out/analysis.sarif
            verbose: true
            """,
        )
        cfg = HostConfig.from_yaml(cfg_path)
        assert cfg.analyzers_path == ("plugins", "more")
        assert cfg.exclude_analyzers == ("NoPrint",)
        assert cfg.treat_as_error == ("FS001",)
        assert cfg.report == "out/analysis.sarif"
        assert cfg.verbose is True
        assert cfg.source == str(cfg_path)

    def test_empty_file_gives_defaults(self, tmp_path: Path) -> None:
        p = tmp_path / "c.yaml"
        p.write_text("", encoding="utf-8")
        assert HostConfig.from_yaml(p) == HostConfig()

    def test_unknown_key(self, tmp_path: Path) -> None:
        p = tmp_path / "c.yaml"
        p.write_text("treat_as_fatal: [X]\n", encoding="utf-8")
        with pytest.raises(ConfigError, match="treat_as_fatal"):
            HostConfig.from_yaml(p)

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        p = tmp_path / "c.yaml"
        p.write_text("treat_as_error: [unclosed\n", encoding="utf-8")
        with pytest.raises(ConfigError, match="Invalid YAML"):
            HostConfig.from_yaml(p)

    def test_non_mapping(self, tmp_path: Path) -> None:
        p = tmp_path / "c.yaml"
        p.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ConfigError, match="mapping"):
            HostConfig.from_yaml(p)

    def test_list_of_non_strings(self, tmp_path: Path) -> None:
        p = tmp_path / "c.yaml"
        p.write_text("treat_as_error: [1, 2]\n", encoding="utf-8")
        with pytest.raises(ConfigError, match="list of strings"):
            HostConfig.from_yaml(p)

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="Could not read"):
            HostConfig.from_yaml(tmp_path / "missing.yaml")


class TestDiscoverAndMerge:
    def test_discover_without_file(self, tmp_path: Path) -> None:
        assert HostConfig.discover(tmp_path) == HostConfig()

    def test_discover_prefers_dotfile(self, tmp_path: Path) -> None:
        (tmp_path / ".analyzer-host.yaml").write_text("report: a.sarif\n", encoding="utf-8")
        (tmp_path / "analyzer-host.yaml").write_text("report: b.sarif\n", encoding="utf-8")
        assert HostConfig.discover(tmp_path).report == "a.sarif"

    def test_cli_values_override_file_values(self) -> None:
        base = HostConfig(treat_as_error=("A",), report="file.sarif", verbose=True)
        merged = base.merge(treat_as_error=["B"], report=None, verbose=None, ignore_files=[])
        assert merged.treat_as_error == ("B",)
        assert merged.report == "file.sarif"
        assert merged.verbose is True
        assert merged.ignore_files == ()

    def test_severity_mappings(self) -> None:
        cfg = HostConfig(treat_as_info=("I",), treat_as_error=("E",))
        m = cfg.severity_mappings
        assert m.treat_as_info == frozenset({"I"})
        assert m.treat_as_error == frozenset({"E"})
        assert m.treat_as_hint == frozenset()

    def test_default_analyzers_path(self, tmp_path: Path) -> None:
        assert HostConfig().resolved_analyzers_paths(tmp_path) == [
            (tmp_path / DEFAULT_ANALYZERS_PATH).resolve()
        ]

    def test_absolute_analyzers_path_kept(self, tmp_path: Path) -> None:
        cfg = HostConfig(analyzers_path=(str(tmp_path),))
        assert cfg.resolved_analyzers_paths(Path("/elsewhere")) == [tmp_path]

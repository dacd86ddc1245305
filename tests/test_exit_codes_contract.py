"""Exit code contract tests: enforce stable CLI exit semantics.

Code  Meaning
----  -------
  0   Success: analysis ran, no Error-severity diagnostics
  1   Violation: at least one Error-severity diagnostic after remapping
  2   Error: usage or configuration error, nothing was analyzed
"""

from __future__ import annotations

import json
import os
import subprocess
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]


def _run(*args: str, cwd: Path) -> subprocess.CompletedProcess[str]:
    env = {**os.environ}
    env["PYTHONPATH"] = str(REPO_ROOT / "src") + (
        os.pathsep + env["PYTHONPATH"] if env.get("PYTHONPATH") else ""
    )
    return subprocess.run(
        [sys.executable, "-m", "analyzer_host", *args],
        capture_output=True,
        text=True,
        env=env,
        cwd=cwd,
    )


class TestSuccess:
    def test_hint_only_returns_0(self, tmp_path: Path, sample_project: Path, plugin_dir: Path) -> None:
        r = _run("--project", str(sample_project), "--analyzers-path", str(plugin_dir), cwd=tmp_path)
        assert r.returncode == 0, r.stderr
        assert "Hint FS001" in r.stdout

    def test_version(self, tmp_path: Path) -> None:
        r = _run("--version", cwd=tmp_path)
        assert r.returncode == 0
        assert "analyzer-host" in r.stdout


class TestViolation:
    def test_treat_as_error_returns_1(self, tmp_path: Path, sample_project: Path, plugin_dir: Path) -> None:
        r = _run(
            "--project", str(sample_project),
            "--analyzers-path", str(plugin_dir),
            "--treat-as-error", "FS001",
            cwd=tmp_path,
        )
        assert r.returncode == 1, r.stderr
        assert "Error FS001" in r.stdout

    def test_report_is_written(self, tmp_path: Path, sample_project: Path, plugin_dir: Path) -> None:
        report = tmp_path / "out" / "result.sarif"
        r = _run(
            "--project", str(sample_project),
            "--analyzers-path", str(plugin_dir),
            "--treat-as-error", "FS001",
            "--report", str(report),
            "--code-root", str(tmp_path),
            cwd=tmp_path,
        )
        assert r.returncode == 1, r.stderr
        log = json.loads(report.read_text(encoding="utf-8"))
        [result] = log["runs"][0]["results"]
        assert result["level"] == "error"
        location = result["locations"][0]["physicalLocation"]
        assert location["artifactLocation"]["uri"] == "project/app.py"
        assert location["region"]["startColumn"] == 5

    def test_config_file_is_discovered(self, tmp_path: Path, sample_project: Path, plugin_dir: Path) -> None:
        (tmp_path / ".analyzer-host.yaml").write_text(
            f"analyzers_path: [{plugin_dir.name}]\ntreat_as_error: [FS001]\n",
            encoding="utf-8",
        )
        r = _run("--project", sample_project.name, cwd=tmp_path)
        assert r.returncode == 1, r.stderr


class TestError:
    def test_no_project_returns_2(self, tmp_path: Path, plugin_dir: Path) -> None:
        r = _run("--analyzers-path", str(plugin_dir), cwd=tmp_path)
        assert r.returncode == 2
        assert "Error :" in r.stderr

    def test_conflicting_mappings_return_2(self, tmp_path: Path, sample_project: Path, plugin_dir: Path) -> None:
        r = _run(
            "--project", str(sample_project),
            "--analyzers-path", str(plugin_dir),
            "--treat-as-warning", "FS001",
            "--treat-as-error", "FS001",
            cwd=tmp_path,
        )
        assert r.returncode == 2
        assert "FS001" in r.stderr

    def test_missing_project_returns_2(self, tmp_path: Path, plugin_dir: Path) -> None:
        r = _run("--project", str(tmp_path / "missing"), "--analyzers-path", str(plugin_dir), cwd=tmp_path)
        assert r.returncode == 2
        assert "does not exist" in r.stderr

    def test_no_analyzers_returns_2(self, tmp_path: Path, sample_project: Path) -> None:
        r = _run("--project", str(sample_project), "--analyzers-path", str(tmp_path / "none"), cwd=tmp_path)
        assert r.returncode == 2

    def test_bad_config_returns_2(self, tmp_path: Path, sample_project: Path) -> None:
        cfg = tmp_path / "bad.yaml"
        cfg.write_text("unknown_key: 1\n", encoding="utf-8")
        r = _run("--project", str(sample_project), "--config", str(cfg), cwd=tmp_path)
        assert r.returncode == 2
        assert "unknown_key" in r.stderr

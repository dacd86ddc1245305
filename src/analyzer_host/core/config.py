"""Host configuration: YAML file plus command-line overrides.

Recognised file names (first match in the working directory wins)::

    .analyzer-host.yaml
    analyzer-host.yaml

Example::

    analyzers_path: [packages/analyzers]
    exclude_analyzers: [NoPrint]
    ignore_files: ["tests/**"]
    treat_as_error: [PY001]
    report: out/analysis.sarif
    code_root: .
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any

import yaml

from analyzer_host.errors import ConfigError
from analyzer_host.policy.severity import SeverityMappings

DEFAULT_ANALYZERS_PATH = "packages/analyzers"
CONFIG_FILE_NAMES = (".analyzer-host.yaml", "analyzer-host.yaml")

_LIST_KEYS = (
    "analyzers_path",
    "exclude_analyzers",
    "ignore_files",
    "treat_as_info",
    "treat_as_hint",
    "treat_as_warning",
    "treat_as_error",
)


@dataclass(frozen=True)
class HostConfig:
    """Immutable host configuration."""

    analyzers_path: tuple[str, ...] = ()
    exclude_analyzers: tuple[str, ...] = ()
    ignore_files: tuple[str, ...] = ()
    treat_as_info: tuple[str, ...] = ()
    treat_as_hint: tuple[str, ...] = ()
    treat_as_warning: tuple[str, ...] = ()
    treat_as_error: tuple[str, ...] = ()
    report: str | None = None
    code_root: str | None = None
    verbose: bool = False
    source: str | None = field(default=None, compare=False)

    # ── loading ──

    @classmethod
    def from_dict(cls, data: dict[str, Any], *, source: str | None = None) -> HostConfig:
        known = {f.name for f in fields(cls)} - {"source"}
        unknown = sorted(set(data) - known)
        if unknown:
            where = f" in {source}" if source else ""
            raise ConfigError(f"Unknown configuration key(s){where}: {', '.join(unknown)}")

        values: dict[str, Any] = {}
        for key, value in data.items():
            if key in _LIST_KEYS:
                if isinstance(value, str):
                    value = [value]
                if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
                    raise ConfigError(f"Configuration key {key!r} must be a list of strings")
                values[key] = tuple(value)
            elif key == "verbose":
                values[key] = bool(value)
            elif value is not None:
                values[key] = str(value)
        return cls(**values, source=source)

    @classmethod
    def from_yaml(cls, path: Path) -> HostConfig:
        """Load configuration from a YAML file."""
        try:
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except OSError as exc:
            raise ConfigError(f"Could not read configuration file {path}: {exc}") from exc
        except yaml.YAMLError as exc:
            raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc
        if not isinstance(data, dict):
            raise ConfigError(f"Configuration file {path} must contain a mapping")
        return cls.from_dict(data, source=str(path))

    @classmethod
    def discover(cls, cwd: Path) -> HostConfig:
        """Load the first config file found in *cwd*, else defaults."""
        for name in CONFIG_FILE_NAMES:
            candidate = cwd / name
            if candidate.is_file():
                return cls.from_yaml(candidate)
        return cls()

    # ── combination ──

    def merge(self, **overrides: Any) -> HostConfig:
        """Return a copy where every non-empty override replaces the file value."""
        changes = {
            k: (tuple(v) if isinstance(v, list) else v)
            for k, v in overrides.items()
            if v not in (None, [], ())
        }
        return replace(self, **changes)

    @property
    def severity_mappings(self) -> SeverityMappings:
        return SeverityMappings.from_lists(
            info=self.treat_as_info,
            hint=self.treat_as_hint,
            warning=self.treat_as_warning,
            error=self.treat_as_error,
        )

    def resolved_analyzers_paths(self, cwd: Path) -> list[Path]:
        paths = self.analyzers_path or (DEFAULT_ANALYZERS_PATH,)
        return [p if p.is_absolute() else (cwd / p).resolve() for p in map(Path, paths)]

"""Enums shared across the SDK, the engine and the reporting layer."""

from __future__ import annotations

from enum import Enum


class Severity(str, Enum):
    """Diagnostic severity as emitted by analyzers.

    Declaration order is the remapping priority; there is no ranking
    between members beyond that.
    """

    INFO = "info"
    HINT = "hint"
    WARNING = "warning"
    ERROR = "error"

    @property
    def label(self) -> str:
        return self.value.capitalize()


class AnalyzerKind(str, Enum):
    """Which host an analyzer targets (and so which context it receives)."""

    CLI = "cli"
    EDITOR = "editor"

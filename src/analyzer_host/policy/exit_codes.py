"""Exit-code policy: CLI result contract observed by external tooling.

Code  Meaning
----  -------
  0   Success: analysis ran, no Error-severity diagnostics
  1   Violation: at least one diagnostic is Error after remapping
  2   Error: no analysis could run (usage or configuration error)
"""

from __future__ import annotations

from enum import IntEnum
from typing import Iterable

from analyzer_host.model import Severity
from analyzer_host.model.message import AnalyzerMessage


class ExitCode(IntEnum):
    SUCCESS = 0
    VIOLATION = 1
    ERROR = 2


def calculate_exit_code(messages: Iterable[AnalyzerMessage] | None) -> ExitCode:
    """``None`` means the analysis never ran."""
    if messages is None:
        return ExitCode.ERROR
    if any(m.severity == Severity.ERROR for m in messages):
        return ExitCode.VIOLATION
    return ExitCode.SUCCESS

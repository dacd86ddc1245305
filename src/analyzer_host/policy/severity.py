"""Severity remapping: user overrides of diagnostic severity by code.

Four code sets, one per target severity.  A code may appear in at most
one set; ``is_valid`` checks that before any analyzer runs.  The lookup
order ``INFO, HINT, WARNING, ERROR`` only matters for mappings that were
never validated.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, TypeVar

from analyzer_host.errors import ConfigError
from analyzer_host.model import Severity
from analyzer_host.model.message import AnalyzerMessage, Message

M = TypeVar("M", Message, AnalyzerMessage)


@dataclass(frozen=True)
class SeverityMappings:
    treat_as_info: frozenset[str] = frozenset()
    treat_as_hint: frozenset[str] = frozenset()
    treat_as_warning: frozenset[str] = frozenset()
    treat_as_error: frozenset[str] = frozenset()

    @classmethod
    def from_lists(
        cls,
        *,
        info: Iterable[str] = (),
        hint: Iterable[str] = (),
        warning: Iterable[str] = (),
        error: Iterable[str] = (),
    ) -> SeverityMappings:
        return cls(frozenset(info), frozenset(hint), frozenset(warning), frozenset(error))

    def _in_priority_order(self) -> list[tuple[Severity, frozenset[str]]]:
        return [
            (Severity.INFO, self.treat_as_info),
            (Severity.HINT, self.treat_as_hint),
            (Severity.WARNING, self.treat_as_warning),
            (Severity.ERROR, self.treat_as_error),
        ]

    def is_valid(self) -> bool:
        """True iff the four code sets are pairwise disjoint."""
        sets = [codes for _, codes in self._in_priority_order()]
        return sum(len(s) for s in sets) == len(frozenset().union(*sets))

    def conflicting_codes(self) -> list[str]:
        """Codes listed under more than one target severity (sorted)."""
        seen: dict[str, int] = {}
        for _, codes in self._in_priority_order():
            for code in codes:
                seen[code] = seen.get(code, 0) + 1
        return sorted(code for code, n in seen.items() if n > 1)

    def target_for(self, code: str) -> Severity | None:
        for severity, codes in self._in_priority_order():
            if code in codes:
                return severity
        return None

    def ensure_valid(self) -> None:
        """Raise ``ConfigError`` when a code is mapped to two severities."""
        if not self.is_valid():
            raise ConfigError(
                "An analyzer code may only be listed once in the treat-as-severity "
                f"options (conflicting: {', '.join(self.conflicting_codes())})."
            )


def validate(mappings: SeverityMappings) -> bool:
    return mappings.is_valid()


def apply(mappings: SeverityMappings, message: M) -> M:
    """Return *message* with its severity remapped (or unchanged)."""
    target = mappings.target_for(message.code)
    if target is None:
        return message
    return message.with_severity(target)


map_message_to_severity = apply

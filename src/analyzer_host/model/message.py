"""Message: the normalized diagnostic produced by an analyzer."""

from __future__ import annotations

import ast
from dataclasses import dataclass, field, replace

from . import Severity


@dataclass(frozen=True, slots=True)
class Range:
    """Source span of a diagnostic.

    Lines are 1-based and columns 0-based, exactly like ``ast`` nodes.
    Sinks that need 1-based columns convert at their own boundary.
    """

    file_name: str
    start_line: int
    start_column: int
    end_line: int
    end_column: int

    @classmethod
    def from_node(cls, file_name: str, node: ast.AST) -> Range:
        """Build a range covering *node* (falls back to a zero-width span)."""
        line = getattr(node, "lineno", 1)
        col = getattr(node, "col_offset", 0)
        end_line = getattr(node, "end_lineno", None) or line
        end_col = getattr(node, "end_col_offset", None)
        if end_col is None:
            end_col = col
        return cls(file_name, line, col, end_line, end_col)

    def to_dict(self) -> dict:
        return {
            "file_name": self.file_name,
            "start_line": self.start_line,
            "start_column": self.start_column,
            "end_line": self.end_line,
            "end_column": self.end_column,
        }


@dataclass(frozen=True, slots=True)
class Fix:
    """A textual edit: replace *from_text* at *from_range* with *to_text*."""

    from_range: Range
    from_text: str
    to_text: str

    def to_dict(self) -> dict:
        return {
            "from_range": self.from_range.to_dict(),
            "from_text": self.from_text,
            "to_text": self.to_text,
        }


@dataclass(frozen=True, slots=True)
class Message:
    """One diagnostic.

    ``code`` is the stable identifier used for severity remapping and
    rule descriptors.  ``fixes`` are independent edits; consumers apply
    them without any overlap resolution.
    """

    type: str
    message: str
    code: str
    severity: Severity
    range: Range
    fixes: tuple[Fix, ...] = ()

    def __post_init__(self) -> None:
        # Raises ValueError for an unknown severity string.
        object.__setattr__(self, "severity", Severity(self.severity))
        if not isinstance(self.range, Range):
            raise TypeError(f"Message.range must be a Range, not {type(self.range).__name__}")
        # Accept any sequence from plugin authors, store an immutable one.
        if not isinstance(self.fixes, tuple):
            object.__setattr__(self, "fixes", tuple(self.fixes))

    def with_severity(self, severity: Severity) -> Message:
        return replace(self, severity=severity)

    def to_dict(self) -> dict:
        d: dict = {
            "type": self.type,
            "message": self.message,
            "code": self.code,
            "severity": self.severity.value,
            "range": self.range.to_dict(),
        }
        if self.fixes:
            d["fixes"] = [f.to_dict() for f in self.fixes]
        return d


@dataclass(frozen=True, slots=True)
class AnalyzerMessage:
    """A ``Message`` tagged with the analyzer that produced it.

    ``short_description`` and ``help_uri`` only feed the SARIF rule
    descriptors.
    """

    message: Message
    name: str
    short_description: str | None = None
    help_uri: str | None = None

    @property
    def code(self) -> str:
        return self.message.code

    @property
    def severity(self) -> Severity:
        return self.message.severity

    def with_severity(self, severity: Severity) -> AnalyzerMessage:
        return replace(self, message=self.message.with_severity(severity))

    def to_dict(self) -> dict:
        d = {"analyzer": self.name, **self.message.to_dict()}
        if self.short_description:
            d["short_description"] = self.short_description
        if self.help_uri:
            d["help_uri"] = self.help_uri
        return d


@dataclass(frozen=True, slots=True)
class AnalysisResult:
    """Outcome of one analyzer for one context: messages or a failure."""

    analyzer_name: str
    messages: list[Message] | None = None
    error: BaseException | None = field(default=None, compare=False)

    def __post_init__(self) -> None:
        if (self.messages is None) == (self.error is None):
            raise ValueError(
                "AnalysisResult needs exactly one of 'messages' or 'error'"
            )

    @property
    def ok(self) -> bool:
        return self.error is None

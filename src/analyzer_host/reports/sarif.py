"""SARIF 2.1.0 exporter.

One rule descriptor per unique diagnostic code and one result per
message.  Columns are 0-based inside the engine and 1-based in SARIF;
the conversion happens here and nowhere else.  Artifact URIs are
relative to the code root (``%SRCROOT%``).
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Iterable

from analyzer_host import __version__
from analyzer_host.contracts.load import validate_instance
from analyzer_host.model import Severity
from analyzer_host.model.message import AnalyzerMessage, Fix, Range
from analyzer_host.utils.json_norm import stable_json_dump

SARIF_SCHEMA_URI = "https://json.schemastore.org/sarif-2.1.0.json"
SARIF_VERSION = "2.1.0"
TOOL_NAME = "analyzer-host"
TOOL_INFORMATION_URI = "https://pypi.org/project/analyzer-host/"
SRCROOT = "%SRCROOT%"

_LEVELS = {
    Severity.INFO: "note",
    Severity.HINT: "note",
    Severity.WARNING: "warning",
    Severity.ERROR: "error",
}


def _artifact_uri(file_name: str, code_root: Path) -> str:
    path = Path(file_name)
    if not path.is_absolute():
        return path.as_posix()
    try:
        return Path(os.path.relpath(path.resolve(), code_root)).as_posix()
    except ValueError:
        # Different drive on Windows; no relative form exists.
        return path.as_uri()


def _region(rng: Range) -> dict[str, int]:
    return {
        "startLine": max(rng.start_line, 1),
        "startColumn": max(rng.start_column, 0) + 1,
        "endLine": max(rng.end_line, 1),
        "endColumn": max(rng.end_column, 0) + 1,
    }


def _fix(fix: Fix, code_root: Path) -> dict[str, Any]:
    return {
        "artifactChanges": [
            {
                "artifactLocation": {
                    "uri": _artifact_uri(fix.from_range.file_name, code_root),
                    "uriBaseId": SRCROOT,
                },
                "replacements": [
                    {
                        "deletedRegion": _region(fix.from_range),
                        "insertedContent": {"text": fix.to_text},
                    }
                ],
            }
        ]
    }


def _sort_key(m: AnalyzerMessage) -> tuple:
    r = m.message.range
    return (r.file_name, r.start_line, r.start_column, m.code, m.name)


def build_sarif_log(
    messages: Iterable[AnalyzerMessage],
    *,
    code_root: str | Path | None = None,
) -> dict[str, Any]:
    """Assemble the SARIF log as a plain dict."""
    root = Path(code_root).resolve() if code_root else Path.cwd()

    rules: list[dict[str, Any]] = []
    rule_index: dict[str, int] = {}
    results: list[dict[str, Any]] = []

    for am in sorted(messages, key=_sort_key):
        msg = am.message
        if msg.code not in rule_index:
            rule: dict[str, Any] = {"id": msg.code, "name": am.name}
            if am.short_description:
                rule["shortDescription"] = {"text": am.short_description}
            if am.help_uri:
                rule["helpUri"] = am.help_uri
            rule_index[msg.code] = len(rules)
            rules.append(rule)

        result: dict[str, Any] = {
            "ruleId": msg.code,
            "ruleIndex": rule_index[msg.code],
            "level": _LEVELS[msg.severity],
            "message": {"text": msg.message},
            "locations": [
                {
                    "physicalLocation": {
                        "artifactLocation": {
                            "uri": _artifact_uri(msg.range.file_name, root),
                            "uriBaseId": SRCROOT,
                        },
                        "region": _region(msg.range),
                    }
                }
            ],
        }
        if msg.fixes:
            result["fixes"] = [_fix(f, root) for f in msg.fixes]
        results.append(result)

    return {
        "$schema": SARIF_SCHEMA_URI,
        "version": SARIF_VERSION,
        "runs": [
            {
                "tool": {
                    "driver": {
                        "name": TOOL_NAME,
                        "version": __version__,
                        "informationUri": TOOL_INFORMATION_URI,
                        "rules": rules,
                    }
                },
                "originalUriBaseIds": {SRCROOT: {"uri": root.as_uri() + "/"}},
                "results": results,
            }
        ],
    }


def write_sarif_report(
    messages: Iterable[AnalyzerMessage],
    report: str | Path,
    *,
    code_root: str | Path | None = None,
) -> Path:
    """Validate and write the SARIF log to *report*; returns the full path.

    Raises ``OSError`` when the file cannot be written and
    ``jsonschema.ValidationError`` when the log is malformed.
    """
    log = build_sarif_log(messages, code_root=code_root)
    validate_instance(log, "sarif_subset.schema.json")
    path = Path(report).resolve()
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        stable_json_dump(log, f)
    return path

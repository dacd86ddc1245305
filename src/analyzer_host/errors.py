"""Exceptions raised by analyzer_host.

Discovery failures and analyzer runtime failures are logged, not raised;
only configuration and usage problems surface as exceptions.
"""

from __future__ import annotations


class AnalyzerHostError(Exception):
    """Base exception for all analyzer_host errors."""


class ConfigError(AnalyzerHostError):
    """Invalid configuration: conflicting options, overlapping severity
    mappings, malformed config file, or no analyzers available."""


class ProjectLoadError(AnalyzerHostError):
    """A project or source list could not be resolved into source files."""


class ContextCreationError(AnalyzerHostError):
    """A source file could not be turned into a complete analysis context."""

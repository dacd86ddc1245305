"""Reporting sinks: console printer and SARIF exporter."""

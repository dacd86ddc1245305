"""Bundled JSON schemas for the artifacts analyzer_host writes."""

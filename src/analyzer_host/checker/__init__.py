"""Checker front-end: parse and symbol-table facts for Python sources.

``models`` holds the records, ``service`` produces them and wraps them
into analysis contexts.
"""

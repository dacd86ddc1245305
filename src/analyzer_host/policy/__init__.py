"""Policies applied to analyzer output before it reaches a sink."""

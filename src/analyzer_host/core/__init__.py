"""Core engine: plugin discovery, registry, runner, configuration, projects."""

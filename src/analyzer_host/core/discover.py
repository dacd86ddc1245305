"""File discovery: plugin modules and project source files."""

from __future__ import annotations

from fnmatch import fnmatch
from pathlib import Path

# Directory basenames never descended into (relative to the scan root).
_DEFAULT_EXCLUDES = frozenset(
    {
        ".git",
        ".github",
        ".venv",
        "venv",
        "__pycache__",
        "node_modules",
        "dist",
        "build",
        ".tox",
        ".mypy_cache",
        ".pytest_cache",
        ".ruff_cache",
    }
)

PLUGIN_NAME_MARKER = "analyzer"
PLUGIN_SUFFIX = ".py"
SOURCE_SUFFIXES = frozenset({".py", ".pyi"})


def _excluded(path: Path, root: Path, skip: frozenset[str] | set[str]) -> bool:
    return any(part in skip for part in path.relative_to(root).parts[:-1])


def is_plugin_file(path: Path) -> bool:
    """Plugin naming convention: ``*analyzer*.py`` (case-insensitive)."""
    return (
        path.suffix == PLUGIN_SUFFIX
        and PLUGIN_NAME_MARKER in path.stem.lower()
    )


def discover_plugin_files(root: Path) -> list[Path]:
    """Recursively find candidate plugin modules under *root*.

    Hidden directories and the default excludes are skipped.  Every
    returned path counts as an attempted plugin, whether or not it
    later loads.
    """
    if root.is_file():
        return [root.resolve()] if is_plugin_file(root) else []
    if not root.is_dir():
        return []
    results: list[Path] = []
    for p in root.rglob(f"*{PLUGIN_SUFFIX}"):
        rel_dirs = p.relative_to(root).parts[:-1]
        if any(part in _DEFAULT_EXCLUDES or part.startswith(".") for part in rel_dirs):
            continue
        if p.is_file() and is_plugin_file(p):
            results.append(p.resolve())
    return sorted(set(results))


def is_python_file(path: str | Path) -> bool:
    return Path(path).suffix in SOURCE_SUFFIXES


def discover_source_files(
    root: Path,
    *,
    include: list[str] | None = None,
    exclude: list[str] | None = None,
) -> list[Path]:
    """Recursively find Python sources under *root*.

    Parameters
    ----------
    root:
        Directory to scan.
    include:
        Glob patterns to include.  Default: ``["**/*.py"]``.
    exclude:
        Directory basenames to skip.  Merged with built-in defaults.

    Returns
    -------
    Sorted list of absolute ``Path`` objects.
    """
    skip = _DEFAULT_EXCLUDES | set(exclude or [])
    patterns = include or ["**/*.py"]

    results: list[Path] = []
    for pat in patterns:
        for p in root.glob(pat):
            if _excluded(p, root, skip):
                continue
            if p.is_file():
                results.append(p.resolve())

    return sorted(set(results))


def matching_glob(path: str | Path, globs: list[str]) -> str | None:
    """Return the first glob that *path*, any path suffix or its basename matches.

    ``fnmatch`` lets ``*`` cross ``/``, so ``tests/*`` matches every file
    below a ``tests`` directory at any depth.
    """
    posix = Path(path).as_posix()
    name = Path(path).name
    for pattern in globs:
        if (
            fnmatch(posix, pattern)
            or fnmatch(posix, f"*/{pattern.lstrip('/')}")
            or fnmatch(name, pattern)
        ):
            return pattern
    return None

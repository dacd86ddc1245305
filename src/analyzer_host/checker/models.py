"""Facts produced by the checker front-end.

These are the building blocks of an analysis context.  They are plain
frozen records derived from ``ast`` and ``symtable``; analyzers read
them and never mutate them.
"""

from __future__ import annotations

import ast
import symtable
from dataclasses import dataclass, field
from typing import Iterator

from analyzer_host.model.message import Message, Range


# ── entities & symbol uses ───────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class Entity:
    """A name visible at module level of a checked file."""

    name: str
    full_name: str
    kind: str                  # function | class | variable | import
    range: Range
    is_public: bool
    source_module: str | None = None


@dataclass(frozen=True, slots=True)
class SymbolUse:
    """One occurrence of a name in a file.

    ``scope`` is the symbol-table classification of the name where it
    occurs: local, global, free, parameter, imported, builtin or unknown.
    """

    name: str
    file_name: str
    range: Range
    scope: str
    is_from_definition: bool

    @property
    def is_from_use(self) -> bool:
        return not self.is_from_definition


# ── declaration tree ─────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class Declaration:
    """A function, class or assignment with its nested declarations."""

    name: str
    kind: str                  # function | class | variable
    range: Range
    node: ast.AST = field(compare=False, repr=False)
    children: tuple[Declaration, ...] = ()

    def walk(self) -> Iterator[Declaration]:
        yield self
        for child in self.children:
            yield from child.walk()


@dataclass(frozen=True, slots=True)
class ImplementationFile:
    """Top-level declarations of one source file."""

    file_name: str
    declarations: tuple[Declaration, ...] = ()

    def walk(self) -> Iterator[Declaration]:
        for decl in self.declarations:
            yield from decl.walk()


# ── phase results ────────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class ParseResults:
    """Outcome of parsing one file.

    A syntax error does not raise: ``tree`` is ``None`` and the error is
    recorded in ``diagnostics``.
    """

    file_name: str
    tree: ast.Module | None
    diagnostics: tuple[Message, ...] = ()

    @property
    def parse_had_errors(self) -> bool:
        return self.tree is None or bool(self.diagnostics)


@dataclass(frozen=True, slots=True)
class CheckFileResults:
    """Symbol-table facts for one successfully parsed file."""

    file_name: str
    symbol_uses: tuple[SymbolUse, ...]
    entities: tuple[Entity, ...]
    module_symbols: symtable.SymbolTable = field(compare=False, repr=False)

    def get_all_uses_of_all_symbols_in_file(self) -> list[SymbolUse]:
        return list(self.symbol_uses)

    def get_entities(self, public_only: bool = False) -> list[Entity]:
        if public_only:
            return [e for e in self.entities if e.is_public]
        return list(self.entities)


@dataclass(frozen=True, slots=True)
class CheckProjectResults:
    """Check results of every file in a project."""

    files: tuple[CheckFileResults, ...] = ()
    failed_files: tuple[str, ...] = ()

    @property
    def has_critical_errors(self) -> bool:
        return bool(self.failed_files)

    def get_all_uses_of_all_symbols(self) -> list[SymbolUse]:
        uses: list[SymbolUse] = []
        for f in self.files:
            uses.extend(f.symbol_uses)
        return uses

    def for_file(self, file_name: str) -> CheckFileResults | None:
        for f in self.files:
            if f.file_name == file_name:
                return f
        return None


# ── project options ──────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class ProjectOptions:
    """Resolved inputs of one project: its name, root and source files."""

    project_file_name: str
    root: str
    source_files: tuple[str, ...] = ()

"""Analysis contexts: the read-only bundle handed to every analyzer.

Two shapes share one capability surface:

* ``CliContext``: every phase succeeded; all fields are present.  Used
  for one-shot command-line runs.
* ``EditorContext``: any phase may be missing.  Capability queries
  degrade to empty results instead of failing.

Analyzers receive the context by reference and must not mutate it.
"""

from __future__ import annotations

from dataclasses import dataclass

from analyzer_host.checker.models import (
    CheckFileResults,
    CheckProjectResults,
    Entity,
    ImplementationFile,
    ParseResults,
    SymbolUse,
)


class Context:
    """Marker base for every context type an analyzer can receive."""

    __slots__ = ()

    file_name: str

    def get_all_entities(self, public_only: bool = False) -> list[Entity]:
        raise NotImplementedError

    def get_all_symbol_uses_of_project(self) -> list[SymbolUse]:
        raise NotImplementedError

    def get_all_symbol_uses_of_file(self) -> list[SymbolUse]:
        raise NotImplementedError


@dataclass(frozen=True, slots=True)
class CliContext(Context):
    file_name: str
    source_text: str
    parse_file_results: ParseResults
    check_file_results: CheckFileResults
    typed_tree: ImplementationFile
    check_project_results: CheckProjectResults

    def get_all_entities(self, public_only: bool = False) -> list[Entity]:
        return self.check_file_results.get_entities(public_only)

    def get_all_symbol_uses_of_project(self) -> list[SymbolUse]:
        return self.check_project_results.get_all_uses_of_all_symbols()

    def get_all_symbol_uses_of_file(self) -> list[SymbolUse]:
        return self.check_file_results.get_all_uses_of_all_symbols_in_file()


@dataclass(frozen=True, slots=True)
class EditorContext(Context):
    file_name: str
    source_text: str | None = None
    parse_file_results: ParseResults | None = None
    check_file_results: CheckFileResults | None = None
    typed_tree: ImplementationFile | None = None
    check_project_results: CheckProjectResults | None = None

    def get_all_entities(self, public_only: bool = False) -> list[Entity]:
        if self.check_file_results is None:
            return []
        return self.check_file_results.get_entities(public_only)

    def get_all_symbol_uses_of_project(self) -> list[SymbolUse]:
        if self.check_project_results is None:
            return []
        return self.check_project_results.get_all_uses_of_all_symbols()

    def get_all_symbol_uses_of_file(self) -> list[SymbolUse]:
        if self.check_file_results is None:
            return []
        return self.check_file_results.get_all_uses_of_all_symbols_in_file()

"""CheckerService: turns Python sources into analysis contexts.

Phases, in order:

1. ``parse_file``: ``ast.parse``; syntax errors become diagnostics.
2. ``check_file``: ``symtable`` walk producing symbol uses and
   module-level entities.
3. ``build_typed_tree``: declaration tree from the parsed module.
4. ``parse_and_check_project``: phases 1-2 for every project file.

``type_check_file`` runs phases 1-3 for one file and returns ``None``
when any of them fails, which is what strict (CLI) mode needs.
``create_editor_context`` never fails; a failed phase simply leaves its
field empty.
"""

from __future__ import annotations

import ast
import builtins
import logging
import symtable
import threading
from pathlib import Path
from typing import NamedTuple

from analyzer_host.checker.models import (
    CheckFileResults,
    CheckProjectResults,
    Declaration,
    Entity,
    ImplementationFile,
    ParseResults,
    ProjectOptions,
    SymbolUse,
)
from analyzer_host.model import Severity
from analyzer_host.model.context import CliContext, EditorContext
from analyzer_host.model.message import Message, Range

_logger = logging.getLogger(__name__)

SYNTAX_ERROR_CODE = "PY-SYNTAX"

_COMPREHENSION_SCOPES = {
    ast.ListComp: "listcomp",
    ast.SetComp: "setcomp",
    ast.DictComp: "dictcomp",
    ast.GeneratorExp: "genexpr",
}


class TypeCheckedFile(NamedTuple):
    file_name: str
    source_text: str
    parse_results: ParseResults
    check_results: CheckFileResults
    typed_tree: ImplementationFile


# ── symbol-use collection ────────────────────────────────────────────


def _name_range(file_name: str, node: ast.AST, keyword: str, name: str) -> Range:
    """Range of the identifier after ``def``/``class`` on the header line."""
    col = node.col_offset + len(keyword) + 1
    return Range(file_name, node.lineno, col, node.lineno, col + len(name))


class _SymbolUseCollector(ast.NodeVisitor):
    """Walk a module in lock-step with its symbol table."""

    def __init__(self, file_name: str, top: symtable.SymbolTable) -> None:
        self.file_name = file_name
        self.uses: list[SymbolUse] = []
        self._top = top
        self._tables: list[symtable.SymbolTable] = [top]
        self._claimed: set[int] = set()

    # ── scope tracking ──

    def _child_table(self, name: str, lineno: int) -> symtable.SymbolTable | None:
        children = self._tables[-1].get_children()
        for exact in (True, False):
            for child in children:
                if child.get_id() in self._claimed or child.get_name() != name:
                    continue
                if exact and child.get_lineno() != lineno:
                    continue
                self._claimed.add(child.get_id())
                return child
        return None

    def _visit_in_scope(self, name: str, node: ast.AST, body: list[ast.AST]) -> None:
        table = self._child_table(name, getattr(node, "lineno", 0))
        if table is not None:
            self._tables.append(table)
        try:
            for child in body:
                self.visit(child)
        finally:
            if table is not None:
                self._tables.pop()

    def _classify(self, name: str) -> str:
        table = self._tables[-1]
        try:
            sym = table.lookup(name)
        except KeyError:
            return "unknown"
        if sym.is_parameter():
            return "parameter"
        if sym.is_imported():
            return "imported"
        if sym.is_free():
            return "free"
        if table.get_type() != "module" and sym.is_local():
            return "local"
        try:
            module_sym = self._top.lookup(name)
        except KeyError:
            module_sym = None
        if module_sym is not None and module_sym.is_imported():
            return "imported"
        defined = module_sym is not None and module_sym.is_assigned()
        if not defined and hasattr(builtins, name):
            return "builtin"
        return "global"

    def _record(self, name: str, rng: Range, *, definition: bool, scope: str | None = None) -> None:
        self.uses.append(
            SymbolUse(
                name=name,
                file_name=self.file_name,
                range=rng,
                scope=scope or self._classify(name),
                is_from_definition=definition,
            )
        )

    # ── definitions ──

    def _visit_function(self, node: ast.FunctionDef | ast.AsyncFunctionDef, keyword: str) -> None:
        self._record(node.name, _name_range(self.file_name, node, keyword, node.name), definition=True)
        for deco in node.decorator_list:
            self.visit(deco)
        args = node.args
        for default in [*args.defaults, *(d for d in args.kw_defaults if d is not None)]:
            self.visit(default)
        for arg in [*args.posonlyargs, *args.args, *args.kwonlyargs, args.vararg, args.kwarg]:
            if arg is not None and arg.annotation is not None:
                self.visit(arg.annotation)
        if node.returns is not None:
            self.visit(node.returns)
        params = [a for a in (*args.posonlyargs, *args.args, args.vararg, *args.kwonlyargs, args.kwarg) if a]
        self._visit_in_scope(node.name, node, [*params, *node.body])

    def visit_FunctionDef(self, node: ast.FunctionDef) -> None:
        self._visit_function(node, "def")

    def visit_AsyncFunctionDef(self, node: ast.AsyncFunctionDef) -> None:
        self._visit_function(node, "async def")

    def visit_Lambda(self, node: ast.Lambda) -> None:
        args = node.args
        for default in [*args.defaults, *(d for d in args.kw_defaults if d is not None)]:
            self.visit(default)
        params = [a for a in (*args.posonlyargs, *args.args, args.vararg, *args.kwonlyargs, args.kwarg) if a]
        self._visit_in_scope("lambda", node, [*params, node.body])

    def visit_ClassDef(self, node: ast.ClassDef) -> None:
        self._record(node.name, _name_range(self.file_name, node, "class", node.name), definition=True)
        for expr in [*node.decorator_list, *node.bases, *(k.value for k in node.keywords)]:
            self.visit(expr)
        self._visit_in_scope(node.name, node, list(node.body))

    def _visit_comprehension(self, node: ast.AST) -> None:
        scope_name = _COMPREHENSION_SCOPES[type(node)]
        generators = node.generators  # type: ignore[attr-defined]
        # The outermost iterable is evaluated in the enclosing scope.
        self.visit(generators[0].iter)
        parts: list[ast.AST] = []
        for i, gen in enumerate(generators):
            parts.append(gen.target)
            if i:
                parts.append(gen.iter)
            parts.extend(gen.ifs)
        if isinstance(node, ast.DictComp):
            parts.extend([node.key, node.value])
        else:
            parts.append(node.elt)  # type: ignore[attr-defined]
        self._visit_in_scope(scope_name, node, parts)

    visit_ListComp = _visit_comprehension
    visit_SetComp = _visit_comprehension
    visit_DictComp = _visit_comprehension
    visit_GeneratorExp = _visit_comprehension

    def visit_arg(self, node: ast.arg) -> None:
        self._record(node.arg, Range.from_node(self.file_name, node), definition=True, scope="parameter")

    def visit_Import(self, node: ast.Import) -> None:
        for alias in node.names:
            bound = alias.asname or alias.name.split(".")[0]
            self._record(bound, Range.from_node(self.file_name, alias), definition=True, scope="imported")

    def visit_ImportFrom(self, node: ast.ImportFrom) -> None:
        for alias in node.names:
            if alias.name == "*":
                continue
            bound = alias.asname or alias.name
            self._record(bound, Range.from_node(self.file_name, alias), definition=True, scope="imported")

    def visit_ExceptHandler(self, node: ast.ExceptHandler) -> None:
        if node.name:
            self._record(node.name, Range.from_node(self.file_name, node), definition=True)
        self.generic_visit(node)

    # ── uses ──

    def visit_Name(self, node: ast.Name) -> None:
        definition = isinstance(node.ctx, (ast.Store, ast.Del))
        self._record(node.id, Range.from_node(self.file_name, node), definition=definition)


# ── entities & declarations ──────────────────────────────────────────


def _declared_all(tree: ast.Module) -> set[str] | None:
    """Names listed in a literal module-level ``__all__``, if any."""
    for node in tree.body:
        if not isinstance(node, ast.Assign):
            continue
        if any(isinstance(t, ast.Name) and t.id == "__all__" for t in node.targets):
            if isinstance(node.value, (ast.List, ast.Tuple)):
                return {
                    e.value for e in node.value.elts
                    if isinstance(e, ast.Constant) and isinstance(e.value, str)
                }
    return None


def _assigned_names(node: ast.Assign | ast.AnnAssign) -> list[ast.Name]:
    targets = node.targets if isinstance(node, ast.Assign) else [node.target]
    names: list[ast.Name] = []
    for target in targets:
        for sub in ast.walk(target):
            if isinstance(sub, ast.Name):
                names.append(sub)
    return names


def _collect_entities(file_name: str, tree: ast.Module) -> list[Entity]:
    module = Path(file_name).stem
    exported = _declared_all(tree)

    def public(name: str) -> bool:
        if exported is not None:
            return name in exported
        return not name.startswith("_")

    entities: list[Entity] = []

    def add(name: str, kind: str, node: ast.AST, source_module: str | None = None) -> None:
        entities.append(
            Entity(
                name=name,
                full_name=f"{module}.{name}",
                kind=kind,
                range=Range.from_node(file_name, node),
                is_public=public(name),
                source_module=source_module,
            )
        )

    for node in tree.body:
        if isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef)):
            add(node.name, "function", node)
        elif isinstance(node, ast.ClassDef):
            add(node.name, "class", node)
        elif isinstance(node, (ast.Assign, ast.AnnAssign)):
            for name in _assigned_names(node):
                add(name.id, "variable", name)
        elif isinstance(node, ast.Import):
            for alias in node.names:
                add(alias.asname or alias.name.split(".")[0], "import", alias, alias.name)
        elif isinstance(node, ast.ImportFrom):
            source = "." * node.level + (node.module or "")
            for alias in node.names:
                if alias.name != "*":
                    add(alias.asname or alias.name, "import", alias, source)
    return entities


def _declarations(file_name: str, body: list[ast.stmt], *, nested: bool = False) -> tuple[Declaration, ...]:
    decls: list[Declaration] = []
    for node in body:
        if isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef)):
            children = _declarations(file_name, node.body, nested=True)
            decls.append(Declaration(node.name, "function", Range.from_node(file_name, node), node, children))
        elif isinstance(node, ast.ClassDef):
            children = _declarations(file_name, node.body)
            decls.append(Declaration(node.name, "class", Range.from_node(file_name, node), node, children))
        elif not nested and isinstance(node, (ast.Assign, ast.AnnAssign)):
            for name in _assigned_names(node):
                decls.append(Declaration(name.id, "variable", Range.from_node(file_name, name), node))
    return tuple(decls)


# ── service ──────────────────────────────────────────────────────────


class CheckerService:
    """Parse/check front-end shared by the CLI, the API and test helpers.

    Results of ``parse_and_check_project`` are cached per file so that
    the per-file ``type_check_file`` call does not redo the work.
    """

    def __init__(self, *, logger: logging.Logger | None = None) -> None:
        self._logger = logger or _logger
        self._cache: dict[str, TypeCheckedFile] = {}
        self._lock = threading.Lock()

    # ── single-file phases ──

    def parse_file(self, file_name: str, source: str) -> ParseResults:
        try:
            tree = ast.parse(source, filename=file_name)
        except SyntaxError as exc:
            line = exc.lineno or 1
            col = max((exc.offset or 1) - 1, 0)
            end_line = getattr(exc, "end_lineno", None) or line
            end_col = max((getattr(exc, "end_offset", None) or (col + 1)) - 1, col)
            diag = Message(
                type="Parse",
                message=exc.msg,
                code=SYNTAX_ERROR_CODE,
                severity=Severity.ERROR,
                range=Range(file_name, line, col, end_line, end_col),
            )
            return ParseResults(file_name, None, (diag,))
        except ValueError as exc:
            # e.g. source containing null bytes
            diag = Message(
                type="Parse",
                message=str(exc),
                code=SYNTAX_ERROR_CODE,
                severity=Severity.ERROR,
                range=Range(file_name, 1, 0, 1, 0),
            )
            return ParseResults(file_name, None, (diag,))
        return ParseResults(file_name, tree)

    def check_file(self, parse_results: ParseResults, source: str) -> CheckFileResults | None:
        if parse_results.tree is None:
            return None
        file_name = parse_results.file_name
        try:
            top = symtable.symtable(source, file_name, "exec")
        except SyntaxError as exc:
            self._logger.error("Symbol table for %s failed: %s", file_name, exc)
            return None
        collector = _SymbolUseCollector(file_name, top)
        collector.visit(parse_results.tree)
        return CheckFileResults(
            file_name=file_name,
            symbol_uses=tuple(collector.uses),
            entities=tuple(_collect_entities(file_name, parse_results.tree)),
            module_symbols=top,
        )

    def build_typed_tree(self, parse_results: ParseResults) -> ImplementationFile | None:
        if parse_results.tree is None:
            return None
        file_name = parse_results.file_name
        return ImplementationFile(file_name, _declarations(file_name, parse_results.tree.body))

    # ── project ──

    def parse_and_check_project(self, options: ProjectOptions) -> CheckProjectResults:
        checked: list[CheckFileResults] = []
        failed: list[str] = []
        for file_name in options.source_files:
            try:
                source = Path(file_name).read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as exc:
                self._logger.error("Could not read %s: %s", file_name, exc)
                failed.append(file_name)
                continue
            result = self._check_all_phases(file_name, source)
            if result is None:
                failed.append(file_name)
                continue
            checked.append(result.check_results)
        return CheckProjectResults(tuple(checked), tuple(failed))

    def _check_all_phases(self, file_name: str, source: str) -> TypeCheckedFile | None:
        with self._lock:
            cached = self._cache.get(file_name)
        if cached is not None and cached.source_text == source:
            return cached

        parse_results = self.parse_file(file_name, source)
        if parse_results.parse_had_errors:
            for diag in parse_results.diagnostics:
                self._logger.debug(
                    "%s(%d,%d): %s", file_name, diag.range.start_line,
                    diag.range.start_column, diag.message,
                )
            return None
        check_results = self.check_file(parse_results, source)
        typed_tree = self.build_typed_tree(parse_results)
        if check_results is None or typed_tree is None:
            return None

        result = TypeCheckedFile(file_name, source, parse_results, check_results, typed_tree)
        with self._lock:
            self._cache[file_name] = result
        return result

    def type_check_file(
        self,
        options: ProjectOptions,
        file_name: str,
        source: str,
    ) -> TypeCheckedFile | None:
        """Run every phase for one file of *options*; ``None`` on failure."""
        result = self._check_all_phases(file_name, source)
        if result is None:
            self._logger.error(
                "Type checking %s (project %s) failed", file_name, options.project_file_name
            )
        return result

    # ── contexts ──

    @staticmethod
    def create_cli_context(
        project_results: CheckProjectResults,
        checked: TypeCheckedFile,
    ) -> CliContext:
        return CliContext(
            file_name=checked.file_name,
            source_text=checked.source_text,
            parse_file_results=checked.parse_results,
            check_file_results=checked.check_results,
            typed_tree=checked.typed_tree,
            check_project_results=project_results,
        )

    def create_editor_context(
        self,
        file_name: str,
        source: str | None = None,
        project_results: CheckProjectResults | None = None,
    ) -> EditorContext:
        if source is None:
            return EditorContext(file_name, check_project_results=project_results)
        parse_results = self.parse_file(file_name, source)
        check_results = self.check_file(parse_results, source)
        return EditorContext(
            file_name=file_name,
            source_text=source,
            parse_file_results=parse_results,
            check_file_results=check_results,
            typed_tree=self.build_typed_tree(parse_results),
            check_project_results=project_results,
        )

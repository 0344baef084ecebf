"""
Name Resolution Pass

Two linear passes over the module:

1. Bind every top-level name (var names and aliases, import bindings,
   graph names and aliases, op names) in the module scope. The first
   binding of a name stays authoritative; later ones are
   DuplicateDefinition errors.
2. Resolve the first segment of every value-position reference against
   the enclosing op parameters, the enclosing graph's node names, the
   module scope and finally the built-ins.

Bindings are module-wide, so a reference may precede its definition.
"""

import logging
from typing import Optional, Set

from .base import BasePass, ParseContext
from ..shared.ast_visitor import ASTVisitor
from ..shared.errors import ErrorCollection, ErrorKind, Label
from ..shared.nodes import GraphDef, Import, Module, OpDef, Symbol, VarDef
from ..shared.scope import Binding, BindingType, Scope, ScopeKind, ScopeManager
from ..shared.source_location import Span
from ..utils.config import BUILTIN_NAMES

logger = logging.getLogger("gos.passes.name_resolution")


def _define(scopes: ScopeManager, errors: ErrorCollection, name: str,
            binding_type: BindingType, span: Span) -> None:
    """Define in the innermost scope, reporting a clash with the earlier binding."""
    existing = scopes.define(Binding(name, binding_type, span))
    if existing is None:
        return
    errors.report(
        ErrorKind.DUPLICATE_DEFINITION,
        f"the name '{name}' is defined multiple times",
        span,
        label=f"'{name}' redefined here",
        labels=(Label(existing.span, f"previous definition of '{name}' here"),) if existing.span else (),
        help=f"'{name}' must be defined only once in this scope",
        name=name,
    )


class _ReferenceResolver(ASTVisitor[None]):
    """Walks values, resolving each reference against the active scope chain."""

    def __init__(self, scopes: ScopeManager, errors: ErrorCollection):
        self.scopes = scopes
        self.errors = errors
        self.resolved = 0

    def visit_symbol(self, node: Symbol) -> None:
        if self.scopes.lookup(node.root) is not None:
            self.resolved += 1
            return
        self.errors.report(
            ErrorKind.UNDEFINED_REFERENCE,
            f"cannot find '{node.root}' in this module",
            node.span,
            label="not found in this module",
            name=node.root,
        )

    def visit_graph_def(self, node: GraphDef) -> None:
        with self.scopes.scope(ScopeKind.GRAPH):
            for child in node.nodes:
                _define(self.scopes, self.errors, child.name.name, BindingType.NODE, child.name.span)
            node.metadata.accept(self)
            for child in node.nodes:
                child.accept(self)

    def visit_op_def(self, node: OpDef) -> None:
        with self.scopes.scope(ScopeKind.OP):
            for param in node.params:
                _define(self.scopes, self.errors, param.name, BindingType.PARAMETER, param.span)
            node.body.accept(self)

    def visit_string_literal(self, node) -> None:
        pass

    def visit_number_literal(self, node) -> None:
        pass

    def visit_float_literal(self, node) -> None:
        pass

    def visit_bool_literal(self, node) -> None:
        pass

    def visit_date_literal(self, node) -> None:
        pass

    def visit_comment(self, node) -> None:
        pass

    def visit_import(self, node) -> None:
        pass


class NameResolutionPass(BasePass):
    """
    Module-wide name binding and reference resolution.

    Stores the module Scope as this pass's analysis result.
    """
    requires = []

    def run(self, module: Module, ctx: ParseContext) -> None:
        scopes = ScopeManager(BUILTIN_NAMES)
        with scopes.scope(ScopeKind.MODULE) as module_scope:
            self._bind_definitions(module, scopes, ctx.errors)
            resolver = _ReferenceResolver(scopes, ctx.errors)
            module.accept(resolver)
        logger.debug("bound %d name(s), resolved %d reference(s)",
                     len(module_scope.names()), resolver.resolved)
        ctx.set_analysis(NameResolutionPass, module_scope)

    def _bind_definitions(self, module: Module, scopes: ScopeManager, errors: ErrorCollection) -> None:
        bound_aliases: Set[Span] = set()
        for stmt in module.definitions():
            alias: Optional[Symbol] = None
            if isinstance(stmt, VarDef):
                _define(scopes, errors, stmt.name.name, BindingType.VARIABLE, stmt.name.span)
                alias = stmt.alias
            elif isinstance(stmt, Import):
                span = stmt.alias.span if stmt.alias else stmt.span
                _define(scopes, errors, stmt.binding_name, BindingType.IMPORT, span)
            elif isinstance(stmt, GraphDef):
                _define(scopes, errors, stmt.name.name, BindingType.GRAPH, stmt.name.span)
                alias = stmt.alias
            elif isinstance(stmt, OpDef):
                _define(scopes, errors, stmt.name.name, BindingType.OP, stmt.name.span)
            # VarDefs of one block share their alias Symbol; bind it once
            if alias is not None and alias.span not in bound_aliases:
                bound_aliases.add(alias.span)
                _define(scopes, errors, alias.name, BindingType.ALIAS, alias.span)

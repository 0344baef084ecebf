"""
AST Serialization
=================

Two renderings of a Module:

- ``to_data``: plain dicts/lists for JSON output. Every node carries its
  ``type`` and ``span``; dates become ISO strings and sets stay lists in
  source order.
- ``to_sexpr``: structured S-expression (nested lists + sexpdata.Symbol),
  pretty-printed by ``dumps_sexpr`` for readable output.
"""

import json
from typing import Any, Dict, List

import sexpdata

from ..frontend.transformers.literals import escape_string
from ..shared.ast_visitor import ASTVisitor
from ..shared.nodes import ASTNode
from ..shared.source_location import Span
from .config import JSON_INDENT


def span_data(span: Span) -> Dict[str, Any]:
    return {
        "file": span.file,
        "start": {"line": span.start.line, "column": span.start.column, "offset": span.start.offset},
        "end": {"line": span.end.line, "column": span.end.column, "offset": span.end.offset},
    }


class DataSerializer(ASTVisitor[Any]):
    """AST to JSON-compatible data."""

    def __init__(self, include_spans: bool = True):
        self.include_spans = include_spans

    def _node(self, node: ASTNode, **fields) -> Dict[str, Any]:
        data: Dict[str, Any] = {"type": node.node_type.value}
        data.update(fields)
        if self.include_spans:
            data["span"] = span_data(node.span)
        return data

    def _all(self, nodes) -> List[Any]:
        return [n.accept(self) for n in nodes]

    def visit_symbol(self, node) -> Dict[str, Any]:
        return self._node(node, name=node.name)

    def visit_string_literal(self, node) -> Dict[str, Any]:
        return self._node(node, value=node.value, multiline=node.multiline)

    def visit_number_literal(self, node) -> Dict[str, Any]:
        return self._node(node, value=node.value)

    def visit_float_literal(self, node) -> Dict[str, Any]:
        return self._node(node, value=node.value)

    def visit_bool_literal(self, node) -> Dict[str, Any]:
        return self._node(node, value=node.value)

    def visit_date_literal(self, node) -> Dict[str, Any]:
        return self._node(node, value=node.value.isoformat(), has_time=node.has_time)

    def visit_comment(self, node) -> Dict[str, Any]:
        return self._node(node, text=node.text)

    def visit_import(self, node) -> Dict[str, Any]:
        return self._node(node, path=node.path, from_string=node.from_string, binding=node.binding_name,
                          alias=node.alias.accept(self) if node.alias else None)

    def visit_module(self, node) -> Dict[str, Any]:
        return self._node(node, statements=self._all(node.statements))

    def visit_var_def(self, node) -> Dict[str, Any]:
        return self._node(node, name=node.name.accept(self), value=node.value.accept(self),
                          alias=node.alias.accept(self) if node.alias else None)

    def visit_graph_def(self, node) -> Dict[str, Any]:
        return self._node(node, name=node.name.accept(self),
                          alias=node.alias.accept(self) if node.alias else None,
                          metadata=node.metadata.accept(self), nodes=self._all(node.nodes))

    def visit_node_def(self, node) -> Dict[str, Any]:
        return self._node(node, name=node.name.accept(self), fields=self._all(node.fields))

    def visit_field(self, node) -> Dict[str, Any]:
        return self._node(node, name=node.name.accept(self), value=node.value.accept(self))

    def visit_op_def(self, node) -> Dict[str, Any]:
        return self._node(node, name=node.name.accept(self), params=self._all(node.params),
                          body=node.body.accept(self))

    def visit_dict_statement(self, node) -> Dict[str, Any]:
        return self._node(node, items=self._all(node.items))

    def visit_dict_item(self, node) -> Dict[str, Any]:
        return self._node(node, key=node.key.accept(self), value=node.value.accept(self))

    def visit_list_statement(self, node) -> Dict[str, Any]:
        return self._node(node, items=self._all(node.items))

    def visit_tuple_statement(self, node) -> Dict[str, Any]:
        return self._node(node, items=self._all(node.items))

    def visit_set_statement(self, node) -> Dict[str, Any]:
        return self._node(node, items=self._all(node.items))


def to_data(node: ASTNode, include_spans: bool = True) -> Any:
    return node.accept(DataSerializer(include_spans=include_spans))


def dumps_json(node: ASTNode, include_spans: bool = True) -> str:
    return json.dumps(to_data(node, include_spans), indent=JSON_INDENT, ensure_ascii=False)


# ---------------------------------------------------------------------------
# S-expressions
# ---------------------------------------------------------------------------

def _sym(s: str) -> sexpdata.Symbol:
    return sexpdata.Symbol(s)


class SexprSerializer(ASTVisitor[Any]):
    """
    AST to structured sexpr.

    Keywords are sexpdata Symbols (printed bare); names and string values are
    Python strings (printed quoted). ``include_location`` appends
    ``:loc "file:line:col"`` to every node.
    """

    def __init__(self, include_location: bool = False):
        self.include_location = include_location

    def _form(self, head: str, node: ASTNode, *parts) -> list:
        form = [_sym(head), *parts]
        if self.include_location:
            form.extend([_sym(":loc"), str(node.span)])
        return form

    def visit_symbol(self, node) -> list:
        return self._form("ref", node, node.name)

    def visit_string_literal(self, node) -> Any:
        if self.include_location:
            return self._form("str", node, node.value)
        return node.value

    def visit_number_literal(self, node) -> Any:
        return self._form("int", node, node.value) if self.include_location else node.value

    def visit_float_literal(self, node) -> Any:
        return self._form("float", node, node.value) if self.include_location else node.value

    def visit_bool_literal(self, node) -> Any:
        return self._form("bool", node, _sym("true" if node.value else "false"))

    def visit_date_literal(self, node) -> list:
        return self._form("date", node, node.value.isoformat())

    def visit_comment(self, node) -> list:
        return self._form("comment", node, node.text)

    def visit_import(self, node) -> list:
        parts = [node.path]
        if node.alias is not None:
            parts.extend([_sym(":as"), node.alias.name])
        return self._form("import", node, *parts)

    def visit_module(self, node) -> list:
        return self._form("module", node, *(s.accept(self) for s in node.statements))

    def visit_var_def(self, node) -> list:
        parts = [node.name.name, node.value.accept(self)]
        if node.alias is not None:
            parts.extend([_sym(":as"), node.alias.name])
        return self._form("var", node, *parts)

    def visit_graph_def(self, node) -> list:
        parts: List[Any] = [node.name.name]
        if node.alias is not None:
            parts.extend([_sym(":as"), node.alias.name])
        if node.metadata.items:
            parts.extend([_sym(":meta"), node.metadata.accept(self)])
        parts.extend(n.accept(self) for n in node.nodes)
        return self._form("graph", node, *parts)

    def visit_node_def(self, node) -> list:
        return self._form("node", node, node.name.name, *(f.accept(self) for f in node.fields))

    def visit_field(self, node) -> list:
        return self._form("field", node, node.name.name, node.value.accept(self))

    def visit_op_def(self, node) -> list:
        params = [p.name for p in node.params]
        return self._form("op", node, node.name.name, params, node.body.accept(self))

    def visit_dict_statement(self, node) -> list:
        return self._form("dict", node, *(i.accept(self) for i in node.items))

    def visit_dict_item(self, node) -> list:
        return [node.key.accept(self), node.value.accept(self)]

    def visit_list_statement(self, node) -> list:
        return self._form("list", node, *(i.accept(self) for i in node.items))

    def visit_tuple_statement(self, node) -> list:
        return self._form("tuple", node, *(i.accept(self) for i in node.items))

    def visit_set_statement(self, node) -> list:
        return self._form("set", node, *(i.accept(self) for i in node.items))


def to_sexpr(node: ASTNode, include_location: bool = False) -> Any:
    return node.accept(SexprSerializer(include_location=include_location))


def _pretty_dumps(sexpr: Any, indent: int = 0, indent_str: str = "  ", max_line: int = 100) -> str:
    """
    Pretty-print structured sexpr. Keeps short forms on one line; breaks only when needed.
    """
    if sexpr is None:
        return "()"
    if isinstance(sexpr, bool):
        return "true" if sexpr else "false"
    if isinstance(sexpr, (int, float)):
        return str(sexpr)
    # Symbol subclasses str, so check it first
    if isinstance(sexpr, sexpdata.Symbol):
        return sexpr.value()
    if isinstance(sexpr, str):
        return escape_string(sexpr)
    if isinstance(sexpr, list):
        if not sexpr:
            return "()"
        parts = [_pretty_dumps(e, indent + 1, indent_str, max_line) for e in sexpr]
        one_line = "(" + " ".join(parts) + ")"
        if len(one_line) <= max_line and "\n" not in one_line:
            return one_line
        prefix = indent_str * indent
        next_prefix = indent_str * (indent + 1)
        rest = "\n".join(next_prefix + p for p in parts[1:])
        inner = parts[0] + ("\n" + rest if rest else "")
        return f"({inner}\n{prefix})"
    return str(sexpr)


def dumps_sexpr(node: ASTNode, include_location: bool = False, pretty: bool = True) -> str:
    """
    Serialize an AST node to an S-expression string.

    Pretty-printed by default; ``pretty=False`` gives sexpdata's compact form.
    """
    sexpr = to_sexpr(node, include_location=include_location)
    if pretty:
        return _pretty_dumps(sexpr)
    return sexpdata.dumps(sexpr)

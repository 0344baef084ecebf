"""
GOS AST Transformer
Converts a Lark CST fragment into GOS AST statements.

One transformer is built per fragment: it carries the fragment's base
offset for span mapping, the parse's ErrorCollection and the list that
collects feature tags for the validator.
"""

from dataclasses import dataclass
import logging
from typing import List, Optional, Tuple, Union

from lark import Transformer, v_args
from lark.lexer import Token
from typing_extensions import TypeAlias

from ...shared import (
    DictItem, DictStatement, ErrorCollection, Field, GosImplementationError, GraphDef,
    Import, NodeDef, OpDef, SourceMap, Span, Statement, StringLiteral, Symbol, Value, VarDef,
)
from .collections import CollectionBuilder
from .literals import LiteralParser

logger: logging.Logger = logging.getLogger(__name__)

# Lark Meta object carrying start_pos/end_pos relative to the fragment
LarkMeta: TypeAlias = object


@dataclass(frozen=True)
class FeatureTag:
    """Construct the builder accepted but the feature gate must judge."""
    kind: str  # "deprecated" or "unsupported"
    construct: str
    span: Span
    suggestion: Optional[str] = None


DEPRECATED = "deprecated"
UNSUPPORTED = "unsupported"


@dataclass
class _Binding:
    """Internal type for ``name = value;`` before it becomes a VarDef or Field"""
    name: Symbol
    value: Value
    span: Span


@dataclass
class _Alias:
    name: Symbol


@dataclass
class _MetaBlock:
    bindings: List[_Binding]
    span: Span


GraphItem: TypeAlias = Union[NodeDef, _Binding, _MetaBlock, _Alias, None]
BuiltStatements: TypeAlias = List[Statement]


@v_args(inline=True, meta=True)
class GosTransformer(Transformer):
    """
    GOS AST Transformer

    Every CST rule of grammar.lark has a method here; a rule without one is
    an implementation error, never a user error.
    """

    def __init__(self, source_map: SourceMap, base: int, errors: ErrorCollection,
                 tags: List[FeatureTag]) -> None:
        super().__init__()
        self.source_map = source_map
        self.base = base
        self.errors = errors
        self.tags = tags
        self.literals = LiteralParser(errors)
        self.collections = CollectionBuilder(errors)

    def __default__(self, data, children, meta):
        raise GosImplementationError(f"no AST builder for grammar rule '{data}'")

    # ------------------------------------------------------------------
    # Span helpers
    # ------------------------------------------------------------------

    def _span(self, meta: LarkMeta) -> Span:
        if getattr(meta, "empty", True):
            return self.source_map.point(self.base)
        return self.source_map.span(self.base + meta.start_pos, self.base + meta.end_pos)

    def _token_span(self, token: Token) -> Span:
        return self.source_map.span(self.base + token.start_pos, self.base + token.end_pos)

    def _symbol(self, token: Token) -> Symbol:
        return Symbol(name=str(token), span=self._token_span(token))

    def _tag(self, kind: str, construct: str, span: Span, suggestion: Optional[str] = None) -> None:
        logger.debug("tagged %s construct %s at %s", kind, construct, span)
        self.tags.append(FeatureTag(kind, construct, span, suggestion))

    # ------------------------------------------------------------------
    # Module and definitions
    # ------------------------------------------------------------------

    def module(self, meta: LarkMeta, *items) -> BuiltStatements:
        statements: BuiltStatements = []
        for item in items:
            if item is None:
                continue
            if isinstance(item, _MetaBlock):
                self._tag(DEPRECATED, "meta block", item.span, "use a var block")
                statements.extend(self._var_defs(item.bindings, None))
            elif isinstance(item, list):
                statements.extend(item)
            else:
                statements.append(item)
        return statements

    def var_def(self, meta: LarkMeta, *children) -> BuiltStatements:
        alias = None
        bindings = []
        for child in children:
            if isinstance(child, _Alias):
                alias = child.name
            else:
                bindings.append(child)
        return self._var_defs(bindings, alias)

    def _var_defs(self, bindings: List[_Binding], alias: Optional[Symbol]) -> BuiltStatements:
        return [VarDef(name=b.name, value=b.value, span=b.span, alias=alias) for b in bindings]

    def binding(self, meta: LarkMeta, name: Token, value: Value) -> _Binding:
        return _Binding(self._symbol(name), value, self._span(meta))

    def alias(self, meta: LarkMeta, name: Token) -> _Alias:
        return _Alias(self._symbol(name))

    def import_stmt(self, meta: LarkMeta, path: Union[StringLiteral, Symbol],
                    alias: Optional[_Alias] = None) -> Import:
        from_string = isinstance(path, StringLiteral)
        return Import(path=path.value if from_string else path.name, span=self._span(meta),
                      alias=alias.name if alias else None, from_string=from_string)

    def from_import(self, meta: LarkMeta, *children) -> None:
        self._tag(UNSUPPORTED, "from-import", self._span(meta),
                  "import the module and refer to its members by dotted name")
        return None

    def dotted_name(self, meta: LarkMeta, *names: Token) -> Symbol:
        return Symbol(name=".".join(str(n) for n in names), span=self._span(meta))

    def graph_def(self, meta: LarkMeta, name: Token, *items: GraphItem) -> GraphDef:
        span = self._span(meta)
        alias = None
        nodes: List[NodeDef] = []
        fields: List[Field] = []
        for item in items:
            if item is None:
                continue
            if isinstance(item, _Alias):
                alias = item.name
            elif isinstance(item, NodeDef):
                nodes.append(item)
            elif isinstance(item, _MetaBlock):
                self._tag(DEPRECATED, "meta block", item.span,
                          "write metadata as plain fields of the graph")
                fields.extend(Field(b.name, b.value, b.span) for b in item.bindings)
            else:
                fields.append(Field(item.name, item.value, item.span))
        unique = self.collections.build_fields(fields, f"graph '{name}' metadata")
        metadata = DictStatement(
            items=tuple(
                DictItem(
                    key=StringLiteral(value=f.name.name, span=f.name.span, raw=f.name.name),
                    value=f.value,
                    span=f.span,
                )
                for f in unique
            ),
            span=span,
        )
        return GraphDef(name=self._symbol(name), nodes=tuple(nodes), metadata=metadata,
                        span=span, alias=alias)

    def node_def(self, meta: LarkMeta, name: Token, *bindings: _Binding) -> NodeDef:
        fields = [Field(b.name, b.value, b.span) for b in bindings]
        return NodeDef(
            name=self._symbol(name),
            fields=self.collections.build_fields(fields, f"node '{name}'"),
            span=self._span(meta),
        )

    def edge(self, meta: LarkMeta, source: Token, target: Token) -> None:
        self._tag(UNSUPPORTED, "edge", self._span(meta),
                  "describe connections as node fields")
        return None

    def meta_block(self, meta: LarkMeta, *bindings: _Binding) -> _MetaBlock:
        return _MetaBlock(list(bindings), self._span(meta))

    def op_def(self, meta: LarkMeta, name: Token, *rest) -> OpDef:
        params: Tuple[Symbol, ...] = ()
        if len(rest) == 2:
            params = tuple(rest[0])
        body = rest[-1]
        return OpDef(name=self._symbol(name), params=params, body=body, span=self._span(meta))

    def params(self, meta: LarkMeta, *names: Token) -> List[Symbol]:
        return [self._symbol(n) for n in names]

    # ------------------------------------------------------------------
    # Values
    # ------------------------------------------------------------------

    def string(self, meta: LarkMeta, token: Token) -> StringLiteral:
        return self.literals.parse_string(str(token), self._token_span(token))

    def int_lit(self, meta: LarkMeta, token: Token):
        return self.literals.parse_integer(str(token), self._token_span(token))

    def float_lit(self, meta: LarkMeta, token: Token):
        return self.literals.parse_float(str(token), self._token_span(token))

    def date_lit(self, meta: LarkMeta, token: Token):
        return self.literals.parse_date(str(token), self._token_span(token))

    def bool_lit(self, meta: LarkMeta, token: Token):
        return self.literals.parse_bool(str(token), self._token_span(token))

    def bare_key(self, meta: LarkMeta, token: Token) -> StringLiteral:
        return StringLiteral(value=str(token), span=self._token_span(token), raw=str(token))

    def reference(self, meta: LarkMeta, *names: Token) -> Symbol:
        return Symbol(name=".".join(str(n) for n in names), span=self._span(meta))

    def dict_item(self, meta: LarkMeta, key: Value, value: Value) -> DictItem:
        return DictItem(key=key, value=value, span=self._span(meta))

    def dict_lit(self, meta: LarkMeta, *items: DictItem):
        return self.collections.build_dict(items, self._span(meta))

    def set_lit(self, meta: LarkMeta, *items: Value):
        return self.collections.build_set(items, self._span(meta))

    def list_lit(self, meta: LarkMeta, *items: Value):
        return self.collections.build_list(items, self._span(meta))

    def tuple_lit(self, meta: LarkMeta, *items: Value):
        return self.collections.build_tuple(items, self._span(meta))

"""
GOS AST (Abstract Syntax Tree) Definitions

Every node is a frozen dataclass that owns its decoded value and its Span.
Statements and values are closed sets: consumers dispatch through
``accept()`` and an ``ASTVisitor`` that must implement every ``visit_*``.
"""

from __future__ import annotations

import datetime
from dataclasses import dataclass
from pathlib import PurePosixPath
from enum import Enum
from typing import TYPE_CHECKING, ClassVar, Dict, Optional, Tuple, TypeVar, Union

from typing_extensions import TypeAlias

from .source_location import Span

if TYPE_CHECKING:
    from .ast_visitor import ASTVisitor

T = TypeVar('T')


class NodeType(Enum):
    """AST node types"""
    MODULE = "module"
    COMMENT = "comment"
    VAR_DEF = "var_def"
    IMPORT = "import"
    GRAPH_DEF = "graph_def"
    NODE_DEF = "node_def"
    FIELD = "field"
    OP_DEF = "op_def"
    SYMBOL = "symbol"
    STRING_LITERAL = "string_literal"
    NUMBER_LITERAL = "number_literal"
    FLOAT_LITERAL = "float_literal"
    BOOL_LITERAL = "bool_literal"
    DATE_LITERAL = "date_literal"
    DICT_STATEMENT = "dict_statement"
    DICT_ITEM = "dict_item"
    LIST_STATEMENT = "list_statement"
    TUPLE_STATEMENT = "tuple_statement"
    SET_STATEMENT = "set_statement"


class ASTNode:
    """
    Base class for all AST nodes.

    Subclasses are frozen dataclasses with a ``span`` field and a class-level
    ``node_type``; they implement ``accept()`` to call the matching
    ``visit_*`` method.
    """
    node_type: ClassVar[NodeType]
    span: Span

    def accept(self, visitor: 'ASTVisitor[T]') -> 'T':
        raise NotImplementedError(f"accept() not implemented for {self.__class__.__name__}")


# =========================================================================
# VALUES
# =========================================================================

@dataclass(frozen=True)
class Symbol(ASTNode):
    """Identifier at a binding site or a (possibly dotted) reference."""
    name: str
    span: Span
    node_type: ClassVar[NodeType] = NodeType.SYMBOL

    @property
    def root(self) -> str:
        """First segment of a dotted name; what a reference resolves through."""
        return self.name.split(".", 1)[0]

    def accept(self, visitor: 'ASTVisitor[T]') -> 'T':
        return visitor.visit_symbol(self)


@dataclass(frozen=True)
class StringLiteral(ASTNode):
    value: str
    span: Span
    raw: str = ""
    multiline: bool = False
    node_type: ClassVar[NodeType] = NodeType.STRING_LITERAL

    def accept(self, visitor: 'ASTVisitor[T]') -> 'T':
        return visitor.visit_string_literal(self)


@dataclass(frozen=True)
class NumberLiteral(ASTNode):
    """Integer literal (signed 64-bit)."""
    value: int
    span: Span
    raw: str = ""
    node_type: ClassVar[NodeType] = NodeType.NUMBER_LITERAL

    def accept(self, visitor: 'ASTVisitor[T]') -> 'T':
        return visitor.visit_number_literal(self)


@dataclass(frozen=True)
class FloatLiteral(ASTNode):
    value: float
    span: Span
    raw: str = ""
    node_type: ClassVar[NodeType] = NodeType.FLOAT_LITERAL

    def accept(self, visitor: 'ASTVisitor[T]') -> 'T':
        return visitor.visit_float_literal(self)


@dataclass(frozen=True)
class BoolLiteral(ASTNode):
    value: bool
    span: Span
    node_type: ClassVar[NodeType] = NodeType.BOOL_LITERAL

    def accept(self, visitor: 'ASTVisitor[T]') -> 'T':
        return visitor.visit_bool_literal(self)


@dataclass(frozen=True)
class DateLiteral(ASTNode):
    """Date (``2024-01-01``) or date-time (``2024-01-01T10:30:00``) literal."""
    value: Union[datetime.date, datetime.datetime]
    span: Span
    raw: str = ""
    node_type: ClassVar[NodeType] = NodeType.DATE_LITERAL

    @property
    def has_time(self) -> bool:
        return isinstance(self.value, datetime.datetime)

    def accept(self, visitor: 'ASTVisitor[T]') -> 'T':
        return visitor.visit_date_literal(self)


@dataclass(frozen=True)
class DictItem(ASTNode):
    key: 'Value'
    value: 'Value'
    span: Span
    node_type: ClassVar[NodeType] = NodeType.DICT_ITEM

    def accept(self, visitor: 'ASTVisitor[T]') -> 'T':
        return visitor.visit_dict_item(self)


@dataclass(frozen=True)
class DictStatement(ASTNode):
    """Mapping literal; insertion order preserved, keys unique."""
    items: Tuple[DictItem, ...]
    span: Span
    node_type: ClassVar[NodeType] = NodeType.DICT_STATEMENT

    def keys(self) -> Tuple['Value', ...]:
        return tuple(item.key for item in self.items)

    def get(self, key: str) -> Optional['Value']:
        """Look up a string key."""
        for item in self.items:
            if isinstance(item.key, StringLiteral) and item.key.value == key:
                return item.value
        return None

    def accept(self, visitor: 'ASTVisitor[T]') -> 'T':
        return visitor.visit_dict_statement(self)


@dataclass(frozen=True)
class ListStatement(ASTNode):
    items: Tuple['Value', ...]
    span: Span
    node_type: ClassVar[NodeType] = NodeType.LIST_STATEMENT

    def accept(self, visitor: 'ASTVisitor[T]') -> 'T':
        return visitor.visit_list_statement(self)


@dataclass(frozen=True)
class TupleStatement(ASTNode):
    """Ordered sequence; arity is checked at use sites, not at parse time."""
    items: Tuple['Value', ...]
    span: Span
    node_type: ClassVar[NodeType] = NodeType.TUPLE_STATEMENT

    @property
    def arity(self) -> int:
        return len(self.items)

    def accept(self, visitor: 'ASTVisitor[T]') -> 'T':
        return visitor.visit_tuple_statement(self)


@dataclass(frozen=True)
class SetStatement(ASTNode):
    """Unique elements; structurally equal duplicates are dropped at build time."""
    items: Tuple['Value', ...]
    span: Span
    node_type: ClassVar[NodeType] = NodeType.SET_STATEMENT

    def accept(self, visitor: 'ASTVisitor[T]') -> 'T':
        return visitor.visit_set_statement(self)


Value: TypeAlias = Union[
    StringLiteral, NumberLiteral, FloatLiteral, BoolLiteral, DateLiteral,
    DictStatement, ListStatement, TupleStatement, SetStatement, Symbol,
]

VALUE_TYPES = (
    StringLiteral, NumberLiteral, FloatLiteral, BoolLiteral, DateLiteral,
    DictStatement, ListStatement, TupleStatement, SetStatement, Symbol,
)


# =========================================================================
# STATEMENTS
# =========================================================================

@dataclass(frozen=True)
class Comment(ASTNode):
    """Top-level comment; kept for formatting, never affects semantics."""
    text: str
    span: Span
    node_type: ClassVar[NodeType] = NodeType.COMMENT

    def accept(self, visitor: 'ASTVisitor[T]') -> 'T':
        return visitor.visit_comment(self)


@dataclass(frozen=True)
class VarDef(ASTNode):
    """
    One binding of a ``var { ... }`` block.

    Bindings of the same block share the block's alias Symbol.
    """
    name: Symbol
    value: Value
    span: Span
    alias: Optional[Symbol] = None
    node_type: ClassVar[NodeType] = NodeType.VAR_DEF

    def accept(self, visitor: 'ASTVisitor[T]') -> 'T':
        return visitor.visit_var_def(self)


@dataclass(frozen=True)
class Import(ASTNode):
    """``path`` is the dotted name, or the string contents when ``from_string`` is set."""
    path: str
    span: Span
    alias: Optional[Symbol] = None
    from_string: bool = False
    node_type: ClassVar[NodeType] = NodeType.IMPORT

    @property
    def binding_name(self) -> str:
        """Name the import binds: the alias, else the file stem of a string path, else the last dotted segment."""
        if self.alias is not None:
            return self.alias.name
        if self.from_string:
            return PurePosixPath(self.path.replace("\\", "/")).stem
        return self.path.rsplit(".", 1)[-1]

    def accept(self, visitor: 'ASTVisitor[T]') -> 'T':
        return visitor.visit_import(self)


@dataclass(frozen=True)
class Field(ASTNode):
    """``name = value;`` inside a node block."""
    name: Symbol
    value: Value
    span: Span
    node_type: ClassVar[NodeType] = NodeType.FIELD

    def accept(self, visitor: 'ASTVisitor[T]') -> 'T':
        return visitor.visit_field(self)


@dataclass(frozen=True)
class NodeDef(ASTNode):
    name: Symbol
    fields: Tuple[Field, ...]
    span: Span
    node_type: ClassVar[NodeType] = NodeType.NODE_DEF

    def field_map(self) -> Dict[str, Value]:
        return {f.name.name: f.value for f in self.fields}

    def accept(self, visitor: 'ASTVisitor[T]') -> 'T':
        return visitor.visit_node_def(self)


@dataclass(frozen=True)
class GraphDef(ASTNode):
    name: Symbol
    nodes: Tuple[NodeDef, ...]
    metadata: DictStatement
    span: Span
    alias: Optional[Symbol] = None
    node_type: ClassVar[NodeType] = NodeType.GRAPH_DEF

    def accept(self, visitor: 'ASTVisitor[T]') -> 'T':
        return visitor.visit_graph_def(self)


@dataclass(frozen=True)
class OpDef(ASTNode):
    name: Symbol
    params: Tuple[Symbol, ...]
    body: Value
    span: Span
    node_type: ClassVar[NodeType] = NodeType.OP_DEF

    def accept(self, visitor: 'ASTVisitor[T]') -> 'T':
        return visitor.visit_op_def(self)


Statement: TypeAlias = Union[VarDef, Import, GraphDef, OpDef, Comment]


@dataclass(frozen=True)
class Module(ASTNode):
    """Root node; owns the ordered top-level statements."""
    statements: Tuple[Statement, ...]
    span: Span
    node_type: ClassVar[NodeType] = NodeType.MODULE

    def definitions(self) -> Tuple[Statement, ...]:
        return tuple(s for s in self.statements if not isinstance(s, Comment))

    def accept(self, visitor: 'ASTVisitor[T]') -> 'T':
        return visitor.visit_module(self)

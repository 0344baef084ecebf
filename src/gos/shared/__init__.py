"""
Shared components: spans, AST nodes, diagnostics and the visitor base.
"""

from .source_location import Position, Span, SourceMap
from .errors import (
    Category, Severity, ErrorKind, Label, Diagnostic, ErrorCollection,
    GosError, GosSourceError, FailFast, ParseFailure, GosImplementationError,
)
from .nodes import (
    ASTNode, NodeType, Module, Comment, VarDef, Import, GraphDef, NodeDef, Field, OpDef,
    Symbol, StringLiteral, NumberLiteral, FloatLiteral, BoolLiteral, DateLiteral,
    DictItem, DictStatement, ListStatement, TupleStatement, SetStatement,
    Value, Statement, VALUE_TYPES,
)
from .ast_visitor import ASTVisitor, StructuralKey, structural_key

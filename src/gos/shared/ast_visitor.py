"""
AST Visitor Pattern

Design:
- Abstract base class with visit_* methods for each AST node type
- Leaf nodes must be implemented by every visitor (instantiation fails
  otherwise), so a new literal kind cannot be silently ignored
- Container nodes have default traversal that visits children
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Generic, Optional, TypeVar

if TYPE_CHECKING:
    from .nodes import (
        BoolLiteral, Comment, DateLiteral, DictItem, DictStatement, Field, FloatLiteral,
        GraphDef, Import, ListStatement, Module, NodeDef, NumberLiteral, OpDef,
        SetStatement, StringLiteral, Symbol, TupleStatement, VarDef,
    )

T = TypeVar('T')


class ASTVisitor(ABC, Generic[T]):
    """
    Base AST visitor with default traversal for container nodes.

    Leaf nodes that MUST be implemented:
    - visit_symbol, visit_string_literal, visit_number_literal,
      visit_float_literal, visit_bool_literal, visit_date_literal
    - visit_comment, visit_import

    Usage:
        class Collector(ASTVisitor[None]):
            def visit_symbol(self, node) -> None:
                self.names.append(node.name)
            ...
    """

    # Leaf nodes - NO DEFAULT IMPLEMENTATION
    @abstractmethod
    def visit_symbol(self, node: 'Symbol') -> T:
        raise NotImplementedError(f"{self.__class__.__name__} must implement visit_symbol()")

    @abstractmethod
    def visit_string_literal(self, node: 'StringLiteral') -> T:
        raise NotImplementedError(f"{self.__class__.__name__} must implement visit_string_literal()")

    @abstractmethod
    def visit_number_literal(self, node: 'NumberLiteral') -> T:
        raise NotImplementedError(f"{self.__class__.__name__} must implement visit_number_literal()")

    @abstractmethod
    def visit_float_literal(self, node: 'FloatLiteral') -> T:
        raise NotImplementedError(f"{self.__class__.__name__} must implement visit_float_literal()")

    @abstractmethod
    def visit_bool_literal(self, node: 'BoolLiteral') -> T:
        raise NotImplementedError(f"{self.__class__.__name__} must implement visit_bool_literal()")

    @abstractmethod
    def visit_date_literal(self, node: 'DateLiteral') -> T:
        raise NotImplementedError(f"{self.__class__.__name__} must implement visit_date_literal()")

    @abstractmethod
    def visit_comment(self, node: 'Comment') -> T:
        raise NotImplementedError(f"{self.__class__.__name__} must implement visit_comment()")

    @abstractmethod
    def visit_import(self, node: 'Import') -> T:
        raise NotImplementedError(f"{self.__class__.__name__} must implement visit_import()")

    # Containers - default traversal
    def visit_module(self, node: 'Module') -> Optional[T]:
        for stmt in node.statements:
            stmt.accept(self)
        return None

    def visit_var_def(self, node: 'VarDef') -> Optional[T]:
        node.value.accept(self)
        return None

    def visit_graph_def(self, node: 'GraphDef') -> Optional[T]:
        node.metadata.accept(self)
        for child in node.nodes:
            child.accept(self)
        return None

    def visit_node_def(self, node: 'NodeDef') -> Optional[T]:
        for field in node.fields:
            field.accept(self)
        return None

    def visit_field(self, node: 'Field') -> Optional[T]:
        node.value.accept(self)
        return None

    def visit_op_def(self, node: 'OpDef') -> Optional[T]:
        node.body.accept(self)
        return None

    def visit_dict_statement(self, node: 'DictStatement') -> Optional[T]:
        for item in node.items:
            item.accept(self)
        return None

    def visit_dict_item(self, node: 'DictItem') -> Optional[T]:
        node.key.accept(self)
        node.value.accept(self)
        return None

    def visit_list_statement(self, node: 'ListStatement') -> Optional[T]:
        for item in node.items:
            item.accept(self)
        return None

    def visit_tuple_statement(self, node: 'TupleStatement') -> Optional[T]:
        for item in node.items:
            item.accept(self)
        return None

    def visit_set_statement(self, node: 'SetStatement') -> Optional[T]:
        for item in node.items:
            item.accept(self)
        return None


class StructuralKey(ASTVisitor[tuple]):
    """
    Hashable key for a value that ignores spans.

    Used for set de-duplication and dict key uniqueness. Each key is tagged
    with its literal kind so ``1``, ``1.0`` and ``true`` stay distinct.
    """

    def visit_symbol(self, node) -> tuple:
        return ("ref", node.name)

    def visit_string_literal(self, node) -> tuple:
        return ("str", node.value)

    def visit_number_literal(self, node) -> tuple:
        return ("int", node.value)

    def visit_float_literal(self, node) -> tuple:
        return ("float", node.value)

    def visit_bool_literal(self, node) -> tuple:
        return ("bool", node.value)

    def visit_date_literal(self, node) -> tuple:
        return ("date", node.value.isoformat())

    def visit_comment(self, node) -> tuple:
        return ("comment", node.text)

    def visit_import(self, node) -> tuple:
        return ("import", node.path)

    def visit_dict_statement(self, node) -> tuple:
        return ("dict", tuple((item.key.accept(self), item.value.accept(self)) for item in node.items))

    def visit_list_statement(self, node) -> tuple:
        return ("list", tuple(item.accept(self) for item in node.items))

    def visit_tuple_statement(self, node) -> tuple:
        return ("tuple", tuple(item.accept(self) for item in node.items))

    def visit_set_statement(self, node) -> tuple:
        return ("set", frozenset(item.accept(self) for item in node.items))


def structural_key(node) -> tuple:
    return node.accept(StructuralKey())

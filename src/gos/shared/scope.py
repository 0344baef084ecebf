"""
Lexical scopes for name resolution.

The chain is builtin -> module -> graph | op. Graph scopes hold node names,
op scopes hold parameters; everything else lives in the module scope.
"""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, Iterator, List, Optional

from .errors import GosImplementationError
from .source_location import Span


class ScopeKind(Enum):
    BUILTIN = "builtin"
    MODULE = "module"
    GRAPH = "graph"
    OP = "op"


class BindingType(Enum):
    """What introduced a name."""
    VARIABLE = "variable"
    ALIAS = "alias"
    IMPORT = "import"
    GRAPH = "graph"
    OP = "op"
    NODE = "node"
    PARAMETER = "parameter"
    BUILTIN = "builtin"


@dataclass(frozen=True)
class Binding:
    """A defined name; ``span`` is None for built-ins."""
    name: str
    binding_type: BindingType
    span: Optional[Span]


@dataclass
class Scope:
    kind: ScopeKind
    parent: Optional[Scope] = None
    bindings: Dict[str, Binding] = field(default_factory=dict)

    def lookup(self, name: str) -> Optional[Binding]:
        scope: Optional[Scope] = self
        while scope is not None:
            found = scope.bindings.get(name)
            if found is not None:
                return found
            scope = scope.parent
        return None

    def define(self, binding: Binding) -> Optional[Binding]:
        """
        Add ``binding`` unless its name is already bound here.

        Returns the earlier binding on a clash (which stays in place),
        otherwise None.
        """
        earlier = self.bindings.setdefault(binding.name, binding)
        return None if earlier is binding else earlier

    def names(self) -> List[str]:
        return list(self.bindings)


class ScopeManager:
    """Stack of scopes with the built-in scope at the bottom."""

    def __init__(self, builtins: Iterable[str] = ()) -> None:
        root = Scope(ScopeKind.BUILTIN)
        for name in builtins:
            root.define(Binding(name, BindingType.BUILTIN, None))
        self._stack: List[Scope] = [root]

    @property
    def innermost(self) -> Scope:
        return self._stack[-1]

    @contextmanager
    def scope(self, kind: ScopeKind) -> Iterator[Scope]:
        """Push a new ``kind`` scope for the duration of the with-block."""
        pushed = Scope(kind, parent=self.innermost)
        self._stack.append(pushed)
        try:
            yield pushed
        finally:
            if self._stack.pop() is not pushed:
                raise GosImplementationError("scope stack out of order")

    def enclosing(self, kind: ScopeKind) -> Optional[Scope]:
        return next((s for s in reversed(self._stack) if s.kind is kind), None)

    def define(self, binding: Binding) -> Optional[Binding]:
        return self.innermost.define(binding)

    def lookup(self, name: str) -> Optional[Binding]:
        return self.innermost.lookup(name)

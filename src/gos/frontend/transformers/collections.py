"""
Collection Builder
Builds dict, list, tuple and set values and the keyed blocks (node fields,
graph metadata) with their uniqueness rules.
"""

import logging
from typing import Dict, List, Sequence, Tuple

from ...shared import (
    DictItem, DictStatement, ErrorCollection, ErrorKind, Field, Label, ListStatement,
    SetStatement, Span, TupleStatement, Value, structural_key,
)

logger = logging.getLogger(__name__)


def _describe_key(key: Value) -> str:
    raw = getattr(key, "raw", "")
    if raw:
        return raw
    return repr(getattr(key, "value", getattr(key, "name", "?")))


class CollectionBuilder:
    """Builds collection values, reporting duplicate keys and set elements"""

    def __init__(self, errors: ErrorCollection):
        self.errors = errors

    def build_dict(self, items: Sequence[DictItem], span: Span) -> DictStatement:
        """Keys must be unique; a later duplicate is reported and dropped."""
        seen: Dict[tuple, DictItem] = {}
        kept: List[DictItem] = []
        for item in items:
            key = structural_key(item.key)
            first = seen.get(key)
            if first is not None:
                self.errors.report(
                    ErrorKind.DUPLICATE_KEY,
                    f"duplicate dictionary key {_describe_key(item.key)}",
                    item.key.span,
                    label="duplicate key",
                    labels=(Label(first.key.span, "first used here"),),
                )
                continue
            seen[key] = item
            kept.append(item)
        return DictStatement(items=tuple(kept), span=span)

    def build_list(self, items: Sequence[Value], span: Span) -> ListStatement:
        return ListStatement(items=tuple(items), span=span)

    def build_tuple(self, items: Sequence[Value], span: Span) -> TupleStatement:
        return TupleStatement(items=tuple(items), span=span)

    def build_set(self, items: Sequence[Value], span: Span) -> SetStatement:
        """Structurally equal elements are merged, keeping the first, with a warning."""
        seen: Dict[tuple, Value] = {}
        kept: List[Value] = []
        for item in items:
            key = structural_key(item)
            first = seen.get(key)
            if first is not None:
                self.errors.report(
                    ErrorKind.DUPLICATE_SET_ELEMENT,
                    "duplicate set element",
                    item.span,
                    label="duplicate removed",
                    labels=(Label(first.span, "first occurrence here"),),
                )
                continue
            seen[key] = item
            kept.append(item)
        if len(kept) != len(items):
            logger.debug("set at %s: dropped %d duplicate(s)", span, len(items) - len(kept))
        return SetStatement(items=tuple(kept), span=span)

    def build_fields(self, fields: Sequence[Field], owner: str) -> Tuple[Field, ...]:
        """Field names within one node (or one metadata block) must be unique."""
        seen: Dict[str, Field] = {}
        kept: List[Field] = []
        for field in fields:
            first = seen.get(field.name.name)
            if first is not None:
                self.errors.report(
                    ErrorKind.DUPLICATE_KEY,
                    f"duplicate key '{field.name.name}' in {owner}",
                    field.name.span,
                    label="duplicate key",
                    labels=(Label(first.name.span, "first used here"),),
                )
                continue
            seen[field.name.name] = field
            kept.append(field)
        return tuple(kept)


def require_arity(value: TupleStatement, expected: int, errors: ErrorCollection) -> bool:
    """
    Check a tuple against the arity its use site demands.

    Reports ArityMismatch and returns False when it does not match.
    """
    if value.arity == expected:
        return True
    errors.report(
        ErrorKind.ARITY_MISMATCH,
        f"expected a tuple of {expected} element{'s' if expected != 1 else ''}, found {value.arity}",
        value.span,
    )
    return False

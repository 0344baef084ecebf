"""
Parser

Grammar engine: compiles grammar.lark into an LALR parser and turns
statement fragments into CST fragments, or into syntax diagnostics carrying
the furthest position reached and the expected terminals.
"""

import logging
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

from lark import Lark, Tree
from lark.exceptions import UnexpectedCharacters, UnexpectedEOF, UnexpectedInput, UnexpectedToken
from lark.lexer import PatternStr

from .scanner import Fragment
from ..shared.errors import ErrorCollection, ErrorKind
from ..shared.source_location import SourceMap, Span
from ..utils.config import KEYWORDS, MAX_NESTING_DEPTH

logger = logging.getLogger("gos.frontend.parser")

GRAMMAR_PATH = Path(__file__).parent / "grammar.lark"

# CST rules that open a nesting level
CONTAINER_RULES = frozenset({"dict_lit", "set_lit", "list_lit", "tuple_lit"})

_END_OF_INPUT = "$END"


class Parser:
    """
    LALR parser over grammar.lark.

    The compiled tables are immutable, so one Parser can serve concurrent
    parses; all per-parse state is passed in by the caller.
    """

    def __init__(self, grammar_path: Path = GRAMMAR_PATH):
        self.lark = Lark.open(
            str(grammar_path),
            start="module",
            parser="lalr",
            lexer="basic",              # Keywords stay reserved in every position
            propagate_positions=True,   # Spans for every rule
            maybe_placeholders=False,   # Omitted optionals are simply absent
        )
        logger.debug("compiled grammar %s", grammar_path)

    def parse_fragment(self, text: str, fragment: Fragment, source_map: SourceMap,
                       errors: ErrorCollection) -> Optional[Tree]:
        """
        Parse one statement fragment.

        Returns the CST (positions relative to ``fragment.start``), or None
        after reporting a syntax error.
        """
        chunk = text[fragment.start:fragment.end]
        try:
            return self.lark.parse(chunk)
        except UnexpectedInput as e:
            offset, expected, found = self._describe(e, chunk)
            span = source_map.point(fragment.start + offset)
            logger.debug("syntax error at %s: found %s", span, found)
            hint = None
            if isinstance(e, UnexpectedToken) and str(e.token) in KEYWORDS and "NAME" in expected:
                hint = f"'{e.token}' is a reserved keyword and cannot be used as a name"
            errors.report(
                ErrorKind.SYNTAX,
                f"parsing error: expected one of: {', '.join(expected) or 'nothing'}",
                span,
                label=f"unexpected {found}",
                help=hint,
                expected=tuple(expected),
            )
            return None

    def _describe(self, e: UnexpectedInput, chunk: str) -> Tuple[int, List[str], str]:
        """Offset (fragment-relative), expected terminal names and a description of what was found."""
        if isinstance(e, UnexpectedCharacters):
            return e.pos_in_stream, self._pretty_terminals(e.allowed or ()), repr(chunk[e.pos_in_stream])
        if isinstance(e, UnexpectedToken):
            token = e.token
            if token.type == _END_OF_INPUT or token.start_pos is None:
                return len(chunk), self._pretty_terminals(e.expected), "end of input"
            return token.start_pos, self._pretty_terminals(e.expected), repr(str(token))
        if isinstance(e, UnexpectedEOF):
            return len(chunk), self._pretty_terminals(e.expected), "end of input"
        return getattr(e, "pos_in_stream", 0) or 0, [], "input"

    def _pretty_terminals(self, names: Iterable[str]) -> List[str]:
        pretty = set()
        ignored = set(self.lark.ignore_tokens)
        for name in names:
            if name in ignored:
                continue
            if name == _END_OF_INPUT:
                pretty.add("end of input")
                continue
            try:
                pattern = self.lark.get_terminal(name).pattern
            except KeyError:
                pretty.add(name)
                continue
            if isinstance(pattern, PatternStr):
                pretty.add(f"'{pattern.value}'")
            else:
                pretty.add(name)
        return sorted(pretty)

    @staticmethod
    def find_too_deep(tree: Tree, limit: int = MAX_NESTING_DEPTH) -> Optional[Tree]:
        """
        Return the first container node nested deeper than ``limit``, or None.

        Iterative, so arbitrarily deep input cannot exhaust the stack here.
        """
        stack = [(tree, 0)]
        while stack:
            node, depth = stack.pop()
            if node.data in CONTAINER_RULES:
                depth += 1
                if depth > limit:
                    return node
            for child in node.children:
                if isinstance(child, Tree):
                    stack.append((child, depth))
        return None

    @staticmethod
    def tree_span(tree: Tree, fragment: Fragment, source_map: SourceMap) -> Span:
        meta = tree.meta
        if getattr(meta, "empty", True):
            return source_map.point(fragment.start)
        return source_map.span(fragment.start + meta.start_pos, fragment.start + meta.end_pos)

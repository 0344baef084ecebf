"""
Statement boundary scanner

Splits source text into top-level statement fragments so that a syntax
error in one statement does not hide errors in the next. A fragment ends
at a ``;`` at bracket depth 0, or at a ``}`` that returns to depth 0 and is
not followed by ``as`` or ``;``. Strings and comments are skipped while
scanning; comments seen at depth 0 are returned so they can become Comment
statements.

The scan is a single forward pass over the text.
"""

from dataclasses import dataclass
from typing import List, Tuple

from ..utils.config import TRIPLE_QUOTES

_OPENERS = "([{"
_CLOSERS = ")]}"


@dataclass(frozen=True)
class Fragment:
    """Half-open character range [start, end) of one statement, from its first code character."""
    start: int
    end: int


@dataclass(frozen=True)
class RawComment:
    start: int
    end: int
    text: str


def _skip_string(text: str, i: int) -> int:
    """Return the index just past the string literal starting at i."""
    n = len(text)
    for quotes in TRIPLE_QUOTES:
        if text.startswith(quotes, i):
            j = i + 3
            while j < n:
                if text[j] == "\\":
                    j += 2
                    continue
                if text.startswith(quotes, j):
                    return j + 3
                j += 1
            return n
    quote = text[i]
    j = i + 1
    while j < n and text[j] != "\n":
        if text[j] == "\\" and j + 1 < n and text[j + 1] != "\n":
            j += 2
            continue
        if text[j] == quote:
            return j + 1
        j += 1
    return j


def _comment_end(text: str, i: int) -> int:
    """Return the end index of the comment starting at i, or -1 if none starts there."""
    if text[i] == "#" or text.startswith("//", i):
        j = text.find("\n", i)
        return len(text) if j < 0 else j
    if text.startswith("/*", i):
        j = text.find("*/", i + 2)
        return len(text) if j < 0 else j + 2
    return -1


def _skip_trivia(text: str, i: int) -> int:
    n = len(text)
    while i < n:
        if text[i].isspace():
            i += 1
            continue
        end = _comment_end(text, i)
        if end < 0:
            return i
        i = end
    return i


def _starts_word(text: str, i: int, word: str) -> bool:
    if not text.startswith(word, i):
        return False
    after = i + len(word)
    return after >= len(text) or not (text[after].isalnum() or text[after] == "_")


def scan_statements(text: str) -> Tuple[List[Fragment], List[RawComment]]:
    """Split text into statement fragments and collect depth-0 comments."""
    fragments: List[Fragment] = []
    comments: List[RawComment] = []
    n = len(text)
    depth = 0
    start = 0
    has_code = False
    i = 0

    def cut(end: int) -> None:
        nonlocal has_code
        if has_code:
            fragments.append(Fragment(start, end))
        has_code = False

    while i < n:
        char = text[i]
        if char.isspace():
            i += 1
            continue
        end = _comment_end(text, i)
        if end >= 0:
            if depth == 0:
                comments.append(RawComment(i, end, text[i:end]))
            i = end
            continue
        if not has_code:
            start = i
            has_code = True
        if char in "\"'":
            i = _skip_string(text, i)
            continue
        if char in _OPENERS:
            depth += 1
        elif char in _CLOSERS:
            depth = max(0, depth - 1)
            if char == "}" and depth == 0:
                k = _skip_trivia(text, i + 1)
                if k < n and text[k] == ";":
                    cut(k + 1)
                    i = k + 1
                    continue
                if not _starts_word(text, k, "as"):
                    cut(i + 1)
        elif char == ";" and depth == 0:
            cut(i + 1)
        i += 1

    cut(n)
    return fragments, comments

"""
Source Location (Span)

Positions are value data: every node and diagnostic owns a copy, so the
AST does not keep the source buffer alive after a parse.
"""

from bisect import bisect_right
from dataclasses import dataclass
from typing import List

from ..utils.config import DEFAULT_SOURCE_NAME


@dataclass(frozen=True, order=True)
class Position:
    """
    A point in the source text.

    Ordering is by byte offset first, so sorting positions sorts them in
    source order.
    """
    offset: int  # UTF-8 byte offset
    line: int    # 1-based
    column: int  # 1-based, in characters

    def __str__(self) -> str:
        return f"{self.line}:{self.column}"


@dataclass(frozen=True)
class Span:
    """
    Source span (start/end pair) attached to every AST node and diagnostic.

    Immutable (frozen) for hashability. ``end`` is exclusive.
    """
    start: Position
    end: Position
    file: str = DEFAULT_SOURCE_NAME

    @property
    def line(self) -> int:
        return self.start.line

    @property
    def column(self) -> int:
        return self.start.column

    @property
    def end_line(self) -> int:
        return self.end.line

    @property
    def end_column(self) -> int:
        return self.end.column

    def covers(self, other: "Span") -> bool:
        return self.start.offset <= other.start.offset and other.end.offset <= self.end.offset

    def __str__(self) -> str:
        """Format as file:line:column"""
        return f"{self.file}:{self.start.line}:{self.start.column}"


class SourceMap:
    """
    Maps character offsets in a source string to line/column/byte positions.

    Built once per parse; lark reports character offsets, spans carry UTF-8
    byte offsets.
    """

    def __init__(self, text: str, file: str = DEFAULT_SOURCE_NAME):
        self.text = text
        self.file = file
        self._line_starts: List[int] = [0]
        for index, char in enumerate(text):
            if char == "\n":
                self._line_starts.append(index + 1)
        self._line_start_bytes: List[int] = []
        byte_offset = 0
        previous = 0
        for start in self._line_starts:
            byte_offset += len(text[previous:start].encode("utf-8"))
            self._line_start_bytes.append(byte_offset)
            previous = start

    def position(self, offset: int) -> Position:
        offset = max(0, min(offset, len(self.text)))
        index = bisect_right(self._line_starts, offset) - 1
        line_start = self._line_starts[index]
        byte_offset = self._line_start_bytes[index] + len(self.text[line_start:offset].encode("utf-8"))
        return Position(offset=byte_offset, line=index + 1, column=offset - line_start + 1)

    def span(self, start: int, end: int) -> Span:
        return Span(self.position(start), self.position(max(start, end)), self.file)

    def point(self, offset: int) -> Span:
        position = self.position(offset)
        return Span(position, position, self.file)

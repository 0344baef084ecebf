"""
Literal Parser
Decodes string, number, boolean and date tokens into AST literals.

Decoding problems are reported on the ErrorCollection with the literal's
span; the literal is still built from a best-effort value so the rest of
the statement can be checked.
"""

import datetime
import math
import re
from typing import List, Optional, Tuple, Union

from ...shared import BoolLiteral, DateLiteral, ErrorCollection, ErrorKind, FloatLiteral, NumberLiteral, Span, StringLiteral
from ...utils.config import (
    BOOLEAN_TRUE_LITERAL, DEFAULT_QUOTE_CHAR, INT_MAX, INT_MIN, TRIPLE_QUOTES,
)

_SIMPLE_ESCAPES = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "0": "\0",
    "\\": "\\",
    '"': '"',
    "'": "'",
}

_REVERSE_ESCAPES = {v: "\\" + k for k, v in _SIMPLE_ESCAPES.items() if k not in "\"'"}

_HEX_DIGITS = {"u": 4, "U": 8}

_HEX_RE = re.compile(r"[0-9a-fA-F]+")


def decode_escapes(body: str) -> Tuple[str, List[str]]:
    """
    Decode backslash escapes in a literal body.

    Returns the decoded text and a list of problems; an invalid escape is
    kept verbatim in the decoded text.
    """
    out: List[str] = []
    problems: List[str] = []
    i = 0
    n = len(body)
    while i < n:
        char = body[i]
        if char != "\\":
            out.append(char)
            i += 1
            continue
        if i + 1 >= n:
            problems.append("unterminated escape sequence at end of string")
            out.append(char)
            break
        code = body[i + 1]
        if code in _SIMPLE_ESCAPES:
            out.append(_SIMPLE_ESCAPES[code])
            i += 2
            continue
        if code in _HEX_DIGITS:
            width = _HEX_DIGITS[code]
            digits = body[i + 2:i + 2 + width]
            if len(digits) != width or not _HEX_RE.fullmatch(digits):
                problems.append(f"invalid escape '\\{code}{digits}': expected {width} hex digits")
                out.append(body[i:i + 2])
                i += 2
                continue
            scalar = int(digits, 16)
            if scalar > 0x10FFFF or 0xD800 <= scalar <= 0xDFFF:
                problems.append(f"invalid escape '\\{code}{digits}': not a Unicode scalar value")
                out.append(body[i:i + 2 + width])
            else:
                out.append(chr(scalar))
            i += 2 + width
            continue
        problems.append(f"unknown escape sequence '\\{code}'")
        out.append(body[i:i + 2])
        i += 2
    return "".join(out), problems


def escape_string(value: str, quote: str = DEFAULT_QUOTE_CHAR) -> str:
    """Re-encode a decoded string as a single-line literal, quotes included."""
    out: List[str] = [quote]
    for char in value:
        if char == quote:
            out.append("\\" + quote)
        elif char in _REVERSE_ESCAPES:
            out.append(_REVERSE_ESCAPES[char])
        elif ord(char) < 0x20 or ord(char) == 0x7F:
            out.append(f"\\u{ord(char):04x}")
        else:
            out.append(char)
    out.append(quote)
    return "".join(out)


def dedent_multiline(body: str) -> Tuple[str, Optional[int]]:
    """
    Strip closing-delimiter indentation from a triple-quoted body.

    A newline right after the opening delimiter is dropped. When the closing
    delimiter sits on a whitespace-only line, that line's indentation is
    removed from every content line and the line itself is dropped. Blank
    lines are exempt. Returns the text and the 1-based number (within the
    body) of the first under-indented line, or None.
    """
    if body.startswith("\r\n"):
        body = body[2:]
    elif body.startswith("\n"):
        body = body[1:]
    lines = body.split("\n")
    last = lines[-1]
    if len(lines) == 1 or last.strip(" \t"):
        return body, None
    indent = last
    content = lines[:-1]
    result: List[str] = []
    bad_line: Optional[int] = None
    for number, line in enumerate(content, start=1):
        if not line.strip():
            result.append("")
        elif line.startswith(indent):
            result.append(line[len(indent):])
        else:
            if bad_line is None:
                bad_line = number
            result.append(line.lstrip(" \t"))
    return "\n".join(result), bad_line


class LiteralParser:
    """Dedicated parser for literal values"""

    def __init__(self, errors: ErrorCollection):
        self.errors = errors

    def parse_string(self, raw: str, span: Span) -> StringLiteral:
        multiline = raw[:3] in TRIPLE_QUOTES
        body = raw[3:-3] if multiline else raw[1:-1]
        if multiline:
            body, bad_line = dedent_multiline(body)
            if bad_line is not None:
                self.errors.report(
                    ErrorKind.INVALID_INDENT,
                    f"line {bad_line} of multi-line string is indented less than its closing delimiter",
                    span,
                    help="indent every content line at least as far as the closing quotes",
                )
        value, problems = decode_escapes(body)
        for problem in problems:
            self.errors.report(ErrorKind.INVALID_ESCAPE, problem, span)
        return StringLiteral(value=value, span=span, raw=raw, multiline=multiline)

    def parse_integer(self, raw: str, span: Span) -> NumberLiteral:
        value = int(raw)
        if not INT_MIN <= value <= INT_MAX:
            self.errors.report(
                ErrorKind.NUMBER_OUT_OF_RANGE,
                f"integer literal {raw} does not fit in a signed 64-bit integer",
                span,
            )
            value = max(INT_MIN, min(INT_MAX, value))
        return NumberLiteral(value=value, span=span, raw=raw)

    def parse_float(self, raw: str, span: Span) -> FloatLiteral:
        value = float(raw)
        if math.isinf(value):
            self.errors.report(
                ErrorKind.NUMBER_OUT_OF_RANGE,
                f"float literal {raw} is out of range",
                span,
            )
        return FloatLiteral(value=value, span=span, raw=raw)

    def parse_bool(self, raw: str, span: Span) -> BoolLiteral:
        return BoolLiteral(value=raw == BOOLEAN_TRUE_LITERAL, span=span)

    def parse_date(self, raw: str, span: Span) -> DateLiteral:
        value: Union[datetime.date, datetime.datetime]
        text = raw
        if "." in text:
            # fromisoformat only takes 3 or 6 fractional digits before 3.11
            whole, fraction = text.split(".", 1)
            text = f"{whole}.{fraction.ljust(6, '0')}"
        try:
            if len(text) > 10:
                value = datetime.datetime.fromisoformat(text)
            else:
                value = datetime.date.fromisoformat(raw)
        except ValueError as e:
            self.errors.report(ErrorKind.INVALID_DATE, f"invalid date literal {raw}: {e}", span)
            value = datetime.date.min
        return DateLiteral(value=value, span=span, raw=raw)

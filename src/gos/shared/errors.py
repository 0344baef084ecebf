"""
Error Reporting

Diagnostics, the per-parse ErrorCollection, and the exception types of the
GOS front-end.
"""

import os
import sys
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Dict, Iterator, List, Optional, Tuple

from .source_location import Span
from ..utils.config import COLOR_ENV_VAR, ERROR_POINTER_CHAR


# ---------------------------------------------------------------------------
# ANSI color helpers (disabled when NO_COLOR is set or not a TTY)
# ---------------------------------------------------------------------------

def _use_color() -> bool:
    if os.environ.get("NO_COLOR"):
        return False
    explicit = os.environ.get(COLOR_ENV_VAR, "").lower()
    if explicit in ("0", "false", "no", "never"):
        return False
    if explicit in ("1", "true", "yes", "always"):
        return True
    return sys.stderr.isatty()

_BOLD   = "\033[1m"
_RED    = "\033[31m"
_BLUE   = "\033[34m"
_CYAN   = "\033[36m"
_YELLOW = "\033[33m"
_RESET  = "\033[0m"

def _style(text: str, *codes: str, color: bool = True) -> str:
    if not color:
        return text
    prefix = "".join(codes)
    return f"{prefix}{text}{_RESET}" if prefix else text


# ---------------------------------------------------------------------------
# Taxonomy
# ---------------------------------------------------------------------------

class Category(IntEnum):
    """Diagnostic category; the value is the tie-break priority in reports."""
    SYNTAX = 0
    STRUCTURAL = 1
    SEMANTIC = 2
    DEPRECATED = 3


class Severity(Enum):
    ERROR = "error"
    WARNING = "warning"


class ErrorKind(Enum):
    """Every diagnostic the front-end can produce: (code, category, default severity)."""
    SYNTAX = ("E0001", Category.SYNTAX, Severity.ERROR)
    NESTING_TOO_DEEP = ("E0101", Category.STRUCTURAL, Severity.ERROR)
    INVALID_ESCAPE = ("E0102", Category.STRUCTURAL, Severity.ERROR)
    NUMBER_OUT_OF_RANGE = ("E0103", Category.STRUCTURAL, Severity.ERROR)
    INVALID_DATE = ("E0104", Category.STRUCTURAL, Severity.ERROR)
    INVALID_INDENT = ("E0105", Category.STRUCTURAL, Severity.ERROR)
    DUPLICATE_KEY = ("E0106", Category.STRUCTURAL, Severity.ERROR)
    ARITY_MISMATCH = ("E0107", Category.STRUCTURAL, Severity.ERROR)
    DUPLICATE_SET_ELEMENT = ("W0108", Category.STRUCTURAL, Severity.WARNING)
    DUPLICATE_DEFINITION = ("E0201", Category.SEMANTIC, Severity.ERROR)
    UNDEFINED_REFERENCE = ("E0202", Category.SEMANTIC, Severity.ERROR)
    UNSUPPORTED = ("E0203", Category.SEMANTIC, Severity.ERROR)
    DEPRECATED = ("W0301", Category.DEPRECATED, Severity.WARNING)

    def __init__(self, code: str, category: Category, severity: Severity):
        self.code = code
        self.category = category
        self.default_severity = severity


# ---------------------------------------------------------------------------
# Secondary label (for multi-span diagnostics)
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Label:
    span: Span
    message: str = ""


# ---------------------------------------------------------------------------
# Diagnostic dataclass
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Diagnostic:
    """
    One error or warning.

    ``name`` is set for DuplicateDefinition/UndefinedReference, ``construct``
    for Deprecated/Unsupported and ``expected`` for syntax errors.
    """
    kind: ErrorKind
    message: str
    span: Optional[Span]
    severity: Severity
    help: Optional[str] = None
    note: Optional[str] = None
    label: Optional[str] = None
    labels: Tuple[Label, ...] = ()
    name: Optional[str] = None
    construct: Optional[str] = None
    expected: Tuple[str, ...] = ()

    @property
    def code(self) -> str:
        return self.kind.code

    @property
    def category(self) -> Category:
        return self.kind.category

    @property
    def is_error(self) -> bool:
        return self.severity is Severity.ERROR

    @property
    def line(self) -> Optional[int]:
        return self.span.line if self.span else None

    @property
    def column(self) -> Optional[int]:
        return self.span.column if self.span else None

    @property
    def suggestion(self) -> Optional[str]:
        return self.help

    @property
    def first_span(self) -> Optional[Span]:
        """Earlier span of a DuplicateDefinition."""
        return self.labels[0].span if self.labels else None

    def sort_key(self) -> Tuple[int, int]:
        offset = self.span.start.offset if self.span else sys.maxsize
        return (offset, int(self.category))

    def __str__(self) -> str:
        where = f"{self.span}: " if self.span else ""
        return f"{where}{self.severity.value}[{self.code}]: {self.message}"


def make_diagnostic(
    kind: ErrorKind,
    message: str,
    span: Optional[Span],
    severity: Optional[Severity] = None,
    **extra,
) -> Diagnostic:
    return Diagnostic(kind=kind, message=message, span=span,
                      severity=severity or kind.default_severity, **extra)


# ---------------------------------------------------------------------------
# Formatting engine
# ---------------------------------------------------------------------------

def _format_diagnostic(
    diag: Diagnostic,
    source_files: Dict[str, str],
    color: bool = False,
) -> str:
    """
    Render a single diagnostic in rustc style.

    Example output (plain, no color)::

        error[E0202]: undefined reference 'y'
         --> main.gos:1:11
          |
        1 | var { x = y; };
          |           ^ not found in this module
    """
    out: List[str] = []
    tone = _RED if diag.is_error else _YELLOW

    # ---- header -----------------------------------------------------------
    out.append(
        _style(f"{diag.severity.value}[{diag.code}]", _BOLD, tone, color=color)
        + _style(f": {diag.message}", _BOLD, color=color)
    )

    # ---- location arrow ---------------------------------------------------
    if diag.span is None:
        out.append(_style(" --> ", _BOLD, _BLUE, color=color) + "<unknown location>")
        _append_annotations(out, diag, 1, color)
        return "\n".join(out)

    span = diag.span

    # ---- source snippet ---------------------------------------------------
    source = source_files.get(span.file)
    if source is None:
        out.append(_style(" --> ", _BOLD, _BLUE, color=color) + str(span))
        _append_annotations(out, diag, 1, color)
        return "\n".join(out)

    src_lines = source.split("\n")
    err_line = span.line
    err_end_line = span.end_line if span.end_line >= err_line else err_line
    err_col = max(span.column, 1)
    err_end_col = span.end_column if err_end_line == err_line else 0
    multiline = err_end_line > err_line

    display_end = min(len(src_lines), err_end_line) if multiline else err_line
    gw = max(len(str(display_end)), 1)

    def code_gutter(num: int) -> str:
        return _style(str(num).rjust(gw) + " | ", _BOLD, _BLUE, color=color)

    def underline_gutter() -> str:
        return _style(" " * (gw + 1) + "| ", _BOLD, _BLUE, color=color)

    out.append(_style(" " * gw + "--> ", _BOLD, _BLUE, color=color) + str(span))
    out.append(_style(" " * (gw + 1) + "|", _BOLD, _BLUE, color=color))

    inline_label = f" {diag.label}" if diag.label else ""

    if not multiline:
        idx = err_line - 1
        code_line = src_lines[idx] if 0 <= idx < len(src_lines) else ""
        out.append(f"{code_gutter(err_line)}{code_line}")
        span_len = err_end_col - err_col if err_end_col > err_col else 1
        carets = " " * (err_col - 1) + ERROR_POINTER_CHAR * span_len
        out.append(f"{underline_gutter()}{_style(carets + inline_label, _BOLD, tone, color=color)}")
    else:
        for line_num in range(err_line, display_end + 1):
            code_line = src_lines[line_num - 1]
            if line_num == err_line:
                out.append(f"{code_gutter(line_num)}{code_line}")
                opening = " " + "_" * (err_col - 2) + ERROR_POINTER_CHAR if err_col > 1 else ERROR_POINTER_CHAR
                out.append(f"{underline_gutter()}{_style(opening, _BOLD, tone, color=color)}")
            elif line_num == err_end_line:
                out.append(f"{code_gutter(line_num)}{_style('| ', _BOLD, tone, color=color)}{code_line}")
                end_col_0 = max(1, span.end_column - 1)
                closing = "|" + "_" * end_col_0 + ERROR_POINTER_CHAR + inline_label
                out.append(f"{underline_gutter()}{_style(closing, _BOLD, tone, color=color)}")
            else:
                out.append(f"{code_gutter(line_num)}{_style('| ', _BOLD, tone, color=color)}{code_line}")

    _append_annotations(out, diag, gw, color)
    return "\n".join(out)


def _append_annotations(
    out: List[str],
    diag: Diagnostic,
    gw: int,
    color: bool,
) -> None:
    notes = [f"{label.message} at {label.span}" for label in diag.labels]
    if diag.note:
        notes.append(diag.note)
    if not (diag.help or notes):
        return
    out.append(_style(" " * (gw + 1) + "|", _BOLD, _BLUE, color=color))
    pad = " " * (gw + 1)
    if diag.help:
        out.append(
            _style(f"{pad}= ", _BOLD, _CYAN, color=color)
            + _style("help: ", _BOLD, color=color)
            + diag.help
        )
    for note in notes:
        out.append(
            _style(f"{pad}= ", _BOLD, _CYAN, color=color)
            + _style("note: ", _BOLD, color=color)
            + note
        )


# ---------------------------------------------------------------------------
# ErrorCollection
# ---------------------------------------------------------------------------

class ErrorCollection:
    """
    Append-only accumulator for one parse.

    In fail-fast mode the first error added raises FailFast; warnings never
    abort. Reports are sorted by span start, ties broken by category
    (syntax < structural < semantic < deprecated), and deduplicated.
    """

    def __init__(self, source_files: Optional[Dict[str, str]] = None, fail_fast: bool = False):
        self.source_files: Dict[str, str] = dict(source_files or {})
        self.fail_fast = fail_fast
        self._diagnostics: List[Diagnostic] = []
        self._seen = set()

    def add(self, diag: Diagnostic) -> None:
        key = (diag.kind, diag.severity, diag.span, diag.message)
        if key not in self._seen:
            self._seen.add(key)
            self._diagnostics.append(diag)
        if self.fail_fast and diag.is_error:
            raise FailFast(diag)

    def report(
        self,
        kind: ErrorKind,
        message: str,
        span: Optional[Span],
        severity: Optional[Severity] = None,
        **extra,
    ) -> Diagnostic:
        diag = make_diagnostic(kind, message, span, severity, **extra)
        self.add(diag)
        return diag

    def extend(self, other: "ErrorCollection") -> None:
        for diag in other._diagnostics:
            self.add(diag)

    def _sorted(self, predicate) -> List[Diagnostic]:
        selected = [d for d in self._diagnostics if predicate(d)]
        return sorted(selected, key=Diagnostic.sort_key)

    @property
    def errors(self) -> List[Diagnostic]:
        return self._sorted(lambda d: d.is_error)

    @property
    def warnings(self) -> List[Diagnostic]:
        return self._sorted(lambda d: not d.is_error)

    @property
    def diagnostics(self) -> List[Diagnostic]:
        return self._sorted(lambda d: True)

    def of_kind(self, kind: ErrorKind) -> List[Diagnostic]:
        return self._sorted(lambda d: d.kind is kind)

    @property
    def error_count(self) -> int:
        return sum(1 for d in self._diagnostics if d.is_error)

    def has_errors(self) -> bool:
        return self.error_count > 0

    def has_warnings(self) -> bool:
        return any(not d.is_error for d in self._diagnostics)

    def is_empty(self) -> bool:
        return not self._diagnostics

    def __len__(self) -> int:
        return len(self._diagnostics)

    def __iter__(self) -> Iterator[Diagnostic]:
        return iter(self.diagnostics)

    def format_error(self, diag: Diagnostic, color: Optional[bool] = None) -> str:
        use_color = color if color is not None else _use_color()
        return _format_diagnostic(diag, self.source_files, color=use_color)

    def format_all(self, color: Optional[bool] = None) -> str:
        use_color = color if color is not None else _use_color()
        parts = [self.format_error(d, color=use_color) for d in self.diagnostics]
        count = self.error_count
        if count:
            summary = f"aborting due to {count} previous error{'s' if count != 1 else ''}"
            parts.append(
                _style("error", _BOLD, _RED, color=use_color)
                + _style(f": {summary}", _BOLD, color=use_color)
            )
        return "\n\n".join(parts)

    def __str__(self) -> str:
        lines: List[str] = []
        if self.has_errors():
            lines.append("Errors:")
            lines.extend(f"  {d}" for d in self.errors)
        if self.has_warnings():
            lines.append("Warnings:")
            lines.extend(f"  {d}" for d in self.warnings)
        return "\n".join(lines)


# ============================================================================
# Exception Classes
# ============================================================================

class GosError(Exception):
    """Base exception for all GOS errors"""
    def __init__(self, message: str, span: Optional[Span] = None):
        super().__init__(message)
        self.message = message
        self.span = span

    def __str__(self):
        if self.span:
            return f"{self.message}\n --> {self.span}"
        return self.message


class GosSourceError(GosError):
    """
    Error in GOS source text carrying its Diagnostic, with rich rustc-style
    formatting when the source text is known.
    """
    def __init__(self, diagnostic: Diagnostic, source_code: Optional[str] = None):
        super().__init__(diagnostic.message, diagnostic.span)
        self.diagnostic = diagnostic
        self.source_code = source_code

    @property
    def kind(self) -> ErrorKind:
        return self.diagnostic.kind

    def __str__(self):
        source_files: Dict[str, str] = {}
        if self.source_code is not None and self.span:
            source_files[self.span.file] = self.source_code
        return _format_diagnostic(self.diagnostic, source_files, color=_use_color())


class FailFast(GosSourceError):
    """Raised by a fail-fast ErrorCollection on its first error; caught by the driver."""


class ParseFailure(GosError):
    """A parse that produced errors, carrying the full ErrorCollection."""
    def __init__(self, errors: ErrorCollection):
        first = errors.errors[0] if errors.has_errors() else None
        super().__init__(first.message if first else "parse failed", first.span if first else None)
        self.errors = errors

    def __str__(self):
        return str(self.errors)


class GosImplementationError(Exception):
    """
    Error in Python implementation code (not user's GOS source).

    Use this for internal invariant violations, such as a CST rule the AST
    builder does not recognize. Never use it for errors in user input.
    """
    def __init__(self, message: str, error_code: str = "E9999"):
        super().__init__(message)
        self.message = message
        self.error_code = error_code

    def __str__(self):
        return f"[{self.error_code}] {self.message}"

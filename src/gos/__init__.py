"""
GOS language front-end: parse GOS source into a validated, positioned AST.

    >>> from gos import parse
    >>> result = parse('var { x = 1; } as cfg;')
    >>> result.ok
    True
"""

__version__ = "0.3.0"

from .driver import (
    CstFragment, ParseDriver, ParseOptions, ParseResult,
    parse, parse_with_errors, validate, version,
)
from .shared import (
    Diagnostic, ErrorCollection, ErrorKind, GosError, GosImplementationError,
    GosSourceError, ParseFailure, Position, Severity, Span,
)

__all__ = [
    '__version__',
    'parse', 'parse_with_errors', 'validate', 'version',
    'ParseOptions', 'ParseResult', 'ParseDriver', 'CstFragment',
    'Diagnostic', 'ErrorCollection', 'ErrorKind', 'Severity', 'Position', 'Span',
    'GosError', 'GosSourceError', 'ParseFailure', 'GosImplementationError',
]

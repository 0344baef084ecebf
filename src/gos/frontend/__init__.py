"""
GOS front-end: statement scanner, Lark grammar engine and AST builder.
"""

from .parser import Parser, GRAMMAR_PATH
from .scanner import Fragment, RawComment, scan_statements
from .transformers import GosTransformer, FeatureTag

__all__ = [
    'Parser', 'GRAMMAR_PATH', 'Fragment', 'RawComment', 'scan_statements',
    'GosTransformer', 'FeatureTag',
]

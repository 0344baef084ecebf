"""
Transformers that turn the Lark CST into the GOS AST.
"""

from .base import GosTransformer, FeatureTag, DEPRECATED, UNSUPPORTED
from .literals import LiteralParser, decode_escapes, escape_string, dedent_multiline
from .collections import CollectionBuilder, require_arity

__all__ = [
    'GosTransformer', 'FeatureTag', 'DEPRECATED', 'UNSUPPORTED',
    'LiteralParser', 'decode_escapes', 'escape_string', 'dedent_multiline',
    'CollectionBuilder', 'require_arity',
]

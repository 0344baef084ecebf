"""
Validation passes over the built AST.
"""

from .base import BasePass, ParseContext, PassManager
from .feature_gate import FeatureGatePass
from .name_resolution import NameResolutionPass

DEFAULT_PASSES = (FeatureGatePass, NameResolutionPass)

__all__ = [
    'BasePass', 'ParseContext', 'PassManager',
    'FeatureGatePass', 'NameResolutionPass', 'DEFAULT_PASSES',
]

"""
GOS utilities package
"""

from .io_utils import read_source, write_output

__all__ = ["read_source", "write_output"]

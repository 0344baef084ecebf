"""
Centralized file I/O utilities.

- Single place for encoding and stdin handling
- Use Path.read_text() consistently (no raw open/read)
"""

import sys
from pathlib import Path
from typing import Optional, Union

from .config import DEFAULT_FILE_ENCODING, STDIN_PATH


def read_source(path: Union[Path, str]) -> str:
    """Read source text from a file, or from standard input when path is '-'."""
    if str(path) == STDIN_PATH:
        return sys.stdin.read()
    p = Path(path) if not isinstance(path, Path) else path
    return p.read_text(encoding=DEFAULT_FILE_ENCODING)


def write_output(text: str, path: Optional[Union[Path, str]] = None) -> None:
    """Write text to a file, or to standard output when no path is given."""
    if path is None or str(path) == STDIN_PATH:
        sys.stdout.write(text)
        if not text.endswith("\n"):
            sys.stdout.write("\n")
        return
    p = Path(path) if not isinstance(path, Path) else path
    p.write_text(text if text.endswith("\n") else text + "\n", encoding=DEFAULT_FILE_ENCODING)

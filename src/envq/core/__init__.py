"""
envq core modules.

Includes:
- lexer: Line classification into header and entries
- document: Entry store and renderer
- streams: File/stdin input and atomic file output
"""

from . import lexer
from . import document
from . import streams

__all__ = [
    "lexer",
    "document",
    "streams",
]

"""
envq - a jq/yq-like tool for .env files

Reads, queries and edits .env files while leaving untouched lines exactly
as they were.
"""

__version__ = "0.1.0"

from .core import lexer, document, streams

__all__ = [
    "lexer",
    "document",
    "streams",
]

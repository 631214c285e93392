"""
Line classifier for .env files.

Splits raw text into a leading header block and an ordered stream of
entries (key/value pairs, comment lines, blank lines). Rendering the
result back must reproduce canonical input exactly:
    render(parse(file)) == file
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple


class EntryType(Enum):
    """Kinds of lines that can follow the header."""
    KEY_VALUE = "key_value"
    COMMENT = "comment"
    BLANK = "blank"


@dataclass
class Entry:
    """A single line of the .env body."""
    type: EntryType
    text: str = ""  # Verbatim line, only kept for comments
    key: Optional[str] = None
    value: Optional[str] = None
    comment: Optional[str] = None

    def __repr__(self):
        if self.type == EntryType.KEY_VALUE:
            comment = f" # {self.comment}" if self.comment is not None else ""
            return f"Entry({self.type.value}, {self.key}={self.value}{comment})"
        return f"Entry({self.type.value}, {repr(self.text[:20])})"


class ParseError(ValueError):
    """Raised when a line cannot be classified. Aborts the whole parse."""

    reason = "Invalid line"

    def __init__(self, line: str, lineno: int):
        self.line = line
        self.lineno = lineno
        super().__init__(f"{self.reason} at line {lineno}: {line}")


class InvalidHeaderLine(ParseError):
    """A line before the first key that is neither blank nor a comment."""

    reason = "Invalid line before first key (must be comment or blank)"


class InvalidLine(ParseError):
    """A line after the first key that is not KEY=VALUE, comment or blank."""

    reason = "Invalid line (must be KEY=VALUE, comment, or blank)"


def split_lines(content: str) -> List[str]:
    """
    Split text on '\\n' the way the file is read back.

    A trailing newline does not start an extra line, and a '\\r' left over
    from CRLF endings is dropped.
    """
    if not content:
        return []

    lines = content.split('\n')
    if lines[-1] == '':
        lines.pop()

    return [line[:-1] if line.endswith('\r') else line for line in lines]


def parse_key_value(line: str) -> Optional[Tuple[str, str, Optional[str]]]:
    """
    Match a line against the KEY=VALUE [# comment] pattern.

    Only the first '=' separates key from value, and only the first '#'
    after it starts the comment.

    Args:
        line: Raw line without its terminator

    Returns:
        Tuple of (key, value, comment) or None if the line is not key-value shaped
    """
    if '=' not in line:
        return None

    eq_index = line.index('=')
    key = line[:eq_index].strip()
    if not key:
        return None

    rest = line[eq_index + 1:]

    if '#' in rest:
        hash_index = rest.index('#')
        value = rest[:hash_index].strip()
        comment = rest[hash_index + 1:].strip()
        return key, value, comment or None

    return key, rest.strip(), None


def parse_line(line: str, lineno: int = 0) -> Entry:
    """Classify a line that follows the first key."""
    stripped = line.strip()

    if not stripped:
        return Entry(type=EntryType.BLANK)

    # Comment lines keep their original indentation
    if stripped.startswith('#'):
        return Entry(type=EntryType.COMMENT, text=line)

    parsed = parse_key_value(line)
    if parsed is None:
        raise InvalidLine(line, lineno)

    key, value, comment = parsed
    return Entry(
        type=EntryType.KEY_VALUE,
        key=key,
        value=value,
        comment=comment
    )


def strip_header_marker(line: str) -> str:
    """Turn '# text' into 'text' (one space after '#' at most)."""
    content = line.strip()[1:]
    if content.startswith(' '):
        content = content[1:]
    return content


class Lexer:
    """
    Single-pass lexer for .env files.

    Comment lines seen before the first key are collected as the file
    header, everything after the first key becomes an entry.
    """

    def __init__(self, content: str):
        self.content = content
        self.lines = split_lines(content)

    def tokenize(self) -> Tuple[List[str], List[Entry]]:
        """
        Parse content into header lines and entries.

        Returns:
            Tuple of (header lines, entries)

        Raises:
            InvalidHeaderLine: a line before the first key is not a comment or blank
            InvalidLine: a line after the first key cannot be classified
        """
        header: List[str] = []
        entries: List[Entry] = []
        found_first_key = False

        for lineno, line in enumerate(self.lines, start=1):
            if found_first_key:
                entries.append(parse_line(line, lineno))
                continue

            stripped = line.strip()

            if not stripped:
                continue

            if stripped.startswith('#'):
                header.append(strip_header_marker(line))
            elif parse_key_value(line) is not None:
                found_first_key = True
                entries.append(parse_line(line, lineno))
            else:
                raise InvalidHeaderLine(line, lineno)

        return header, entries

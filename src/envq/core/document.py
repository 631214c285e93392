"""
In-memory .env document: lookup, mutation and rendering.

Lookups scan entries in order and the first matching key wins. Keys added
with set_value() go to the end, everything else keeps its position.
"""

from typing import Iterator, List, Optional

from .lexer import Entry, EntryType, Lexer, split_lines


class Document:
    """
    Parsed .env file: a header block plus ordered entries.

    Built once per invocation, mutated in place, then rendered.
    """

    def __init__(self, header: Optional[List[str]] = None, entries: Optional[List[Entry]] = None):
        self.header: List[str] = header if header is not None else []
        self.entries: List[Entry] = entries if entries is not None else []

    @classmethod
    def parse(cls, content: str) -> "Document":
        """Build a document from raw text. Raises ParseError on bad lines."""
        header, entries = Lexer(content).tokenize()
        return cls(header, entries)

    def _key_values(self) -> Iterator[Entry]:
        return (entry for entry in self.entries if entry.type == EntryType.KEY_VALUE)

    def _find(self, key: str) -> Optional[Entry]:
        for entry in self._key_values():
            if entry.key == key:
                return entry
        return None

    def list_keys(self) -> List[str]:
        """All keys in file order."""
        return [entry.key for entry in self._key_values()]

    def has_key(self, key: str) -> bool:
        return self._find(key) is not None

    def get_value(self, key: str) -> Optional[str]:
        entry = self._find(key)
        return entry.value if entry else None

    def get_comment(self, key: str) -> Optional[str]:
        """
        Inline comment of a key.

        None both when the key is missing and when it has no comment; use
        has_key() to tell them apart.
        """
        entry = self._find(key)
        return entry.comment if entry else None

    def get_header(self) -> Optional[str]:
        """Header lines joined with newlines, or None without a header."""
        if not self.header:
            return None
        return "\n".join(self.header) + "\n"

    def set_value(self, key: str, value: str) -> None:
        """
        Update a value in place, keeping its comment.

        Unknown keys are appended as a new entry without comment.
        """
        entry = self._find(key)
        if entry is not None:
            entry.value = value
            return

        self.entries.append(Entry(
            type=EntryType.KEY_VALUE,
            key=key,
            value=value
        ))

    def set_comment(self, key: str, comment: str) -> None:
        """Set the inline comment of an existing key. Does nothing for unknown keys."""
        entry = self._find(key)
        if entry is not None:
            entry.comment = comment

    def set_header(self, header: str) -> None:
        """Replace the header with the lines of `header`, taken verbatim."""
        self.header = split_lines(header)

    def delete_key(self, key: str) -> None:
        """Remove the key together with its comment."""
        self.entries = [
            entry for entry in self.entries
            if not (entry.type == EntryType.KEY_VALUE and entry.key == key)
        ]

    def delete_comment(self, key: str) -> None:
        entry = self._find(key)
        if entry is not None:
            entry.comment = None

    def delete_header(self) -> None:
        self.header = []

    def render(self) -> str:
        """
        Serialize the document back to .env text.

        Returns:
            String content, byte-identical to canonical input when unmodified
        """
        lines = []

        if self.header:
            lines.extend(f"# {line}\n" for line in self.header)
            lines.append("\n")

        for entry in self.entries:
            if entry.type == EntryType.KEY_VALUE:
                comment = f" # {entry.comment}" if entry.comment is not None else ""
                lines.append(f"{entry.key}={entry.value}{comment}\n")
            elif entry.type == EntryType.COMMENT:
                lines.append(f"{entry.text}\n")
            else:
                lines.append("\n")

        return ''.join(lines)

    def __str__(self):
        return self.render()

    def __repr__(self):
        return f"Document(header={self.header!r}, entries={self.entries!r})"


def parse(content: str) -> Document:
    """
    Parse .env file content into a document.

    Args:
        content: String content of .env file

    Returns:
        Document holding the header and entries

    Raises:
        ParseError: if any line is invalid; no partial document is returned
    """
    return Document.parse(content)


def render(document: Document) -> str:
    """
    Reconstruct .env file text from a document.

    Args:
        document: Parsed (and possibly edited) document

    Returns:
        String content
    """
    return document.render()

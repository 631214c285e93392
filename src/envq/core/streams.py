"""
Input and output for envq: named files or the standard streams.

Files are rewritten atomically (temp file in the same directory, then
os.replace), so a crash mid-write leaves the original untouched.
"""

import logging
import os
import stat
import sys
import tempfile
from pathlib import Path
from typing import Optional, TextIO

logger = logging.getLogger(__name__)

ENCODING = "utf-8"


class MissingInputError(Exception):
    """No file was named and nothing is piped on stdin."""

    def __init__(self, message: str = "Missing file or stdin."):
        super().__init__(message)


def read_input(file_path: Optional[str], stdin: Optional[TextIO] = None) -> str:
    """
    Read the document text from a file or from piped stdin.

    Text is decoded as UTF-8 without newline translation, so a lone '\\r'
    reaches the lexer untouched.

    Args:
        file_path: Path of the .env file, or None to read stdin
        stdin: Stream to read when no file is given (defaults to sys.stdin)

    Returns:
        Full text content

    Raises:
        MissingInputError: no file given and stdin is a terminal
        OSError: the file cannot be read
        UnicodeDecodeError: the input is not valid UTF-8
    """
    if file_path is not None:
        content = Path(file_path).read_bytes().decode(ENCODING)
        logger.debug("Read %d characters from %s", len(content), file_path)
        return content

    stream = stdin if stdin is not None else sys.stdin
    if stream is None or stream.isatty():
        raise MissingInputError()

    buffer = getattr(stream, "buffer", None)
    content = buffer.read().decode(ENCODING) if buffer is not None else stream.read()
    logger.debug("Read %d characters from stdin", len(content))
    return content


def atomic_write(path: Path, content: str, preserve_mode: bool = True) -> None:
    """
    Replace `path` with `content` via a temp file and rename.

    The temp file lives next to the target so os.replace() stays on one
    filesystem. Concurrent editors can still overwrite each other.

    Args:
        path: File to replace
        content: New file content
        preserve_mode: Copy the permission bits of the existing file
    """
    path = Path(path)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    tmp_path = Path(tmp_name)

    try:
        with os.fdopen(fd, "w", encoding=ENCODING, newline="") as f:
            f.write(content)
            f.flush()
            os.fsync(f.fileno())
        logger.debug("Wrote %d characters to %s", len(content), tmp_path)

        if preserve_mode and path.exists():
            tmp_path.chmod(stat.S_IMODE(path.stat().st_mode))

        os.replace(tmp_path, path)
        logger.debug("Replaced %s", path)
    except Exception:
        tmp_path.unlink(missing_ok=True)
        raise


def write_output(
    file_path: Optional[str],
    content: str,
    stdout: Optional[TextIO] = None,
    preserve_mode: bool = True,
) -> None:
    """
    Write the rendered document back to its file, or to stdout.

    Args:
        file_path: File to rewrite, or None to print
        content: Rendered document
        stdout: Stream used when no file is given (defaults to sys.stdout)
        preserve_mode: Keep the original file's permission bits
    """
    if file_path is not None:
        atomic_write(Path(file_path), content, preserve_mode=preserve_mode)
        return

    stream = stdout if stdout is not None else sys.stdout
    stream.write(content)
    stream.flush()

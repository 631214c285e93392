"""
envq CLI - query and edit .env files

Main entry point for the envq command-line tool.
"""

import click
import logging
import sys
from enum import Enum
from typing import NoReturn, Optional, Tuple
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from . import __version__
from .config import EnvqConfig, load_config
from .core.document import Document, parse
from .core.lexer import ParseError
from .core.streams import MissingInputError, read_input, write_output


# Data goes to stdout through click.echo, diagnostics go here
console = Console(stderr=True)
logger = logging.getLogger(__name__)

PASSTHROUGH = {"ignore_unknown_options": True}


class ListMode(Enum):
    KEYS = "keys"
    VALUES = "values"


class Target(Enum):
    KEY = "key"
    COMMENT = "comment"
    HEADER = "header"


def setup_logging(level: str) -> None:
    """Route log records to stderr through rich."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def parse_list_args(args: Tuple[str, ...]) -> Tuple[ListMode, Optional[str]]:
    """
    Parse `list [keys|values] [file]`.

    An unknown first word is taken as the file name, in values mode.
    """
    if not args:
        return ListMode.VALUES, None

    first = args[0]
    if first in ("keys", "values"):
        file = args[1] if len(args) > 1 else None
        return ListMode(first), file

    return ListMode.VALUES, first


def parse_get_del_args(args: Tuple[str, ...], verb: str) -> Tuple[Target, Optional[str], Optional[str]]:
    """
    Parse `get|del [key|comment|header] [KEY] [file]`.

    Returns:
        Tuple of (target, key, file); key is None for the header
    """
    if not args:
        raise click.UsageError(
            f"You need to provide what to {verb} [key|comment|header].\n"
            f"Example: envq {verb} key FOO"
        )

    first = args[0]

    if first == "header":
        file = args[1] if len(args) > 1 else None
        return Target.HEADER, None, file

    if first in ("comment", "key"):
        if len(args) < 2:
            raise click.UsageError(
                f"You need to provide the name of key.\n"
                f"Example: envq {verb} {first} FOO"
            )
        file = args[2] if len(args) > 2 else None
        return Target(first), args[1], file

    # envq get/del KEY [file]
    file = args[1] if len(args) > 1 else None
    return Target.KEY, first, file


def parse_set_args(args: Tuple[str, ...]) -> Tuple[Target, Optional[str], str, Optional[str]]:
    """
    Parse `set [key|comment|header] [KEY] VALUE [file]`.

    Returns:
        Tuple of (target, key, value, file); key is None for the header
    """
    if not args:
        raise click.UsageError(
            "You need to provide what to set [key|comment|header].\n"
            "Example: envq set key FOO VALUE"
        )

    first = args[0]

    if first == "header":
        if len(args) < 2:
            raise click.UsageError(
                "You need to provide a value for header.\n"
                "Example: envq set header VALUE"
            )
        file = args[2] if len(args) > 2 else None
        return Target.HEADER, None, args[1], file

    if first in ("comment", "key"):
        if len(args) < 3:
            raise click.UsageError(
                "You need to provide the key and value.\n"
                f"Example: envq set {first} FOO VALUE"
            )
        file = args[3] if len(args) > 3 else None
        return Target(first), args[1], args[2], file

    # envq set KEY VALUE [file]
    if len(args) < 2:
        raise click.UsageError(
            "You need to provide a value.\n"
            "Example: envq set FOO VALUE"
        )
    file = args[2] if len(args) > 2 else None
    return Target.KEY, first, args[1], file


def check_set_args(target: Target, key: Optional[str], value: str) -> None:
    """
    Reject keys, values and comments that would not parse back the same.

    Line breaks would split the entry, and a '#' in a value would turn
    the rest of it into a comment. Header text may span lines.
    """
    if key is not None:
        if any(c in key for c in "\r\n="):
            raise click.UsageError(f"Key must not contain '=' or line breaks: {key!r}")
        if not key.strip() or key.strip().startswith("#"):
            raise click.UsageError(f"Invalid key name: {key!r}")

    if target == Target.HEADER:
        return

    if "\r" in value or "\n" in value:
        raise click.UsageError(f"The {target.value} must not contain line breaks.")
    if target == Target.KEY and "#" in value:
        raise click.UsageError(
            "A value must not contain '#', it would start a comment.\n"
            "Example: envq set comment FOO VALUE"
        )


def fail(message: str) -> NoReturn:
    """Print an error on stderr and exit with status 1."""
    console.print(f"[red]Error:[/red] {escape(message)}", soft_wrap=True, highlight=False)
    sys.exit(1)


def load_document(file: Optional[str]) -> Document:
    """Read and parse the input, exiting with a message on failure."""
    try:
        document = parse(read_input(file))
    except (ParseError, MissingInputError, OSError) as exc:
        fail(str(exc))
    except UnicodeDecodeError as exc:
        fail(f"Input is not valid UTF-8 ({exc.reason} at byte {exc.start})")

    logger.debug(
        "Parsed %d header line(s) and %d entries from %s",
        len(document.header), len(document.entries), file or "stdin"
    )
    return document


def save_document(file: Optional[str], document: Document, config: EnvqConfig) -> None:
    """Write the document back to its file, or print it when read from stdin."""
    try:
        write_output(file, document.render(), preserve_mode=config.preserve_mode)
    except OSError as exc:
        fail(str(exc))


@click.group()
@click.version_option(__version__, prog_name="envq")
@click.option('-v', '--verbose', is_flag=True, help='Log debug output to stderr')
@click.pass_context
def cli(ctx, verbose):
    """
    envq - a jq/yq-like tool for .env files

    Reads FILE, or stdin when no file is given. Edits are written back to
    FILE atomically, or printed to stdout.
    """
    config = load_config()
    setup_logging("DEBUG" if verbose else config.log_level)
    ctx.obj = config


@cli.command(name="list", context_settings=PASSTHROUGH)
@click.argument('args', nargs=-1)
def list_entries(args: Tuple[str, ...]):
    """
    List entries: [keys|values] [FILE]

    `values` (default) prints KEY=value lines, `keys` prints key names.
    """
    mode, file = parse_list_args(args)
    document = load_document(file)

    for key in document.list_keys():
        if mode == ListMode.KEYS:
            click.echo(key)
        else:
            click.echo(f"{key}={document.get_value(key)}")


@cli.command(context_settings=PASSTHROUGH)
@click.argument('args', nargs=-1)
def get(args: Tuple[str, ...]):
    """
    Print a value, comment or the header: [key|comment|header] [KEY] [FILE]

    Exits with status 1 when the key does not exist.
    """
    target, key, file = parse_get_del_args(args, "get")
    document = load_document(file)

    if target == Target.HEADER:
        header = document.get_header()
        if header is not None:
            click.echo(header, nl=False)
        return

    if not document.has_key(key):
        logger.debug("Key %s not found", key)
        sys.exit(1)

    if target == Target.KEY:
        click.echo(document.get_value(key))
    else:
        comment = document.get_comment(key)
        if comment is not None:
            click.echo(comment)


@cli.command(name="set", context_settings=PASSTHROUGH)
@click.argument('args', nargs=-1)
@click.pass_obj
def set_entry(config: EnvqConfig, args: Tuple[str, ...]):
    """
    Set a value, comment or the header: [key|comment|header] [KEY] VALUE [FILE]

    New keys are appended at the end. Setting a comment on a missing key
    does nothing.
    """
    target, key, value, file = parse_set_args(args)
    check_set_args(target, key, value)
    document = load_document(file)

    if target == Target.KEY:
        document.set_value(key, value)
    elif target == Target.COMMENT:
        document.set_comment(key, value)
    else:
        document.set_header(value)

    save_document(file, document, config)


@cli.command(name="del", context_settings=PASSTHROUGH)
@click.argument('args', nargs=-1)
@click.pass_obj
def delete(config: EnvqConfig, args: Tuple[str, ...]):
    """
    Delete a key, comment or the header: [key|comment|header] [KEY] [FILE]

    Deleting a key also removes its comment. Missing keys are ignored.
    """
    target, key, file = parse_get_del_args(args, "del")
    document = load_document(file)

    if target == Target.KEY:
        document.delete_key(key)
    elif target == Target.COMMENT:
        document.delete_comment(key)
    else:
        document.delete_header()

    save_document(file, document, config)


def main():
    """Main entry point."""
    cli()


if __name__ == '__main__':
    main()

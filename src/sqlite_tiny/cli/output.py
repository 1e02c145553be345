"""Console output of the CLI: status messages and tables of column values."""

from __future__ import annotations

import enum
from typing import Any

import click
from rich.console import Console
from rich.table import Column, Table
from rich.text import Text


class Prefix(enum.Enum):
    """Marker printed in front of a status message"""

    Info = "-"
    Ok = "✓"
    Warn = "!"
    NONE = ""


_PREFIX_COLORS = {Prefix.Ok: "green", Prefix.Warn: "red"}


def echo(message: str, nl: bool = True, prefix: Prefix = Prefix.NONE) -> None:
    """
    Prints a message to stdout.

    :param message: Text to print.
    :param nl: Whether to end with a new line.
    :param prefix: Marker to print in front of the message.
    """
    if prefix is not Prefix.NONE:
        marker = click.style(prefix.value, fg=_PREFIX_COLORS.get(prefix))
        message = f"{marker} {message}"

    click.echo(message, nl=nl)


def info(message: str, nl: bool = True) -> None:
    echo(message, nl=nl, prefix=Prefix.Info)


def ok(message: str, nl: bool = True) -> None:
    echo(message, nl=nl, prefix=Prefix.Ok)


def warn(message: str, nl: bool = True) -> None:
    """Prints a message prefixed with a red exclamation mark, used for errors."""
    echo(message, nl=nl, prefix=Prefix.Warn)


def rich_table(*headers: Column | str) -> Table:
    """A borderless table. The header line is only shown if headers are given."""
    return Table(*headers, box=None, padding=(0, 2, 0, 0), show_header=bool(headers))


def print_table(table: Table) -> None:
    Console().print(table, highlight=False)


def format_value(value: Any) -> Text:
    """
    Renders a column value like an SQL literal. Blobs are shown as ``x'..'`` and NULL
    as a dimmed ``NULL``. Text is never interpreted as console markup.

    :param value: Column value as returned by :meth:`sqlite_tiny.row.Row.values`.
    """
    if value is None:
        return Text("NULL", style="dim")

    if isinstance(value, (bytes, bytearray)):
        return Text(f"x'{value.hex()}'", style="cyan")

    return Text(str(value))

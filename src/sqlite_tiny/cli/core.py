"""
This module provides the custom click parameter :class:`SqlValue` for query
parameters, as well as an ordered command group class which prints its help output in
sections.
"""
from __future__ import annotations

import re
from typing import Any

import click

from .output import warn


_INT_RE = re.compile(r"^[+-]?\d+$")
_FLOAT_RE = re.compile(r"^[+-]?(\d+\.\d*|\.\d+|\d+)([eE][+-]?\d+)?$")
_BLOB_RE = re.compile(r"^[xX]'(?P<hex>[0-9a-fA-F]*)'$")


class SqlValue(click.ParamType):
    """A command line parameter representing a value to bind to a query

    Values are parsed like SQL literals: ``NULL`` (case insensitive), integers, real
    numbers and blobs written as ``x'0a1b'``. Anything else is bound as text.
    """

    name = "value"

    def convert(
        self,
        value: Any,
        param: click.Parameter | None,
        ctx: click.Context | None,
    ) -> Any:
        if not isinstance(value, str):
            return value

        if value.upper() == "NULL":
            return None

        if _INT_RE.match(value):
            return int(value)

        if _FLOAT_RE.match(value):
            return float(value)

        match = _BLOB_RE.match(value)

        if match:
            hex_str = match.group("hex")
            if len(hex_str) % 2 != 0:
                self.fail(f"Blob literal {value} has an odd length", param, ctx)
            return bytes.fromhex(hex_str)

        return value


class OrderedGroup(click.Group):
    """A command group which lists its commands in named sections, in the order in
    which they were added."""

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.sections: dict[str, list[str]] = {}

    def add_command(
        self, cmd: click.Command, name: str | None = None, section: str = ""
    ) -> None:
        name = name or cmd.name

        if name is None:
            raise TypeError("Command has no name.")

        super().add_command(cmd, name)
        self.sections.setdefault(section, []).append(name)

    def format_commands(
        self, ctx: click.Context, formatter: click.HelpFormatter
    ) -> None:
        visible = {}

        for name in self.list_commands(ctx):
            cmd = self.get_command(ctx, name)
            if cmd is not None and not cmd.hidden:
                visible[name] = cmd

        if not visible:
            return

        width = max(len(name) for name in visible)
        limit = formatter.width - 6 - width

        for section, names in self.sections.items():
            rows = [
                (name.ljust(width), visible[name].get_short_help_str(limit))
                for name in names
                if name in visible
            ]

            if rows:
                with formatter.section(section):
                    formatter.write_dl(rows)


class CliException(click.ClickException):
    """An error which is printed as a warning and exits with status 1."""

    def show(self, file: Any = None) -> None:
        warn(self.format_message())

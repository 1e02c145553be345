from __future__ import annotations

import click

from .common import convert_api_errors
from .output import print_table, rich_table


@click.command(help="Show the SQLite version and where the library was loaded from.")
@convert_api_errors
def version() -> None:
    from .. import __version__, version as engine_version
    from ..ffi import library_path

    major, minor, patch = engine_version()

    table = rich_table()
    table.add_row("sqlite-tiny", __version__)
    table.add_row("SQLite", f"{major}.{minor}.{patch}")
    table.add_row("Library", library_path() or "--")

    print_table(table)

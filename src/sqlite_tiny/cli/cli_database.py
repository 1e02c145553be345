from __future__ import annotations

from typing import Any

import click

from .common import convert_api_errors, location_argument, open_database, uri_option
from .core import SqlValue
from .output import format_value, info, ok, print_table, rich_table


@click.command(
    name="exec",
    help="""
Execute one or more SQL statements.

Statements are separated by semicolons and may not contain parameters. Any rows they
return are discarded. Statements which completed before a failing one are not rolled
back.
""",
)
@location_argument
@click.argument("sql")
@uri_option
@convert_api_errors
def exec_(location: str, sql: str, uri: bool) -> None:
    db = open_database(location, uri)
    db.execute_batch(sql)
    ok("Done")


@click.command(
    help="""
Run a single SQL query and print its result rows.

Parameters are bound to the placeholders of the query in order. They are parsed as
NULL, integers, real numbers and blobs written as x'0a1b'. Everything else is bound as
text.
""",
)
@location_argument
@click.argument("sql")
@click.argument("params", nargs=-1, type=SqlValue())
@uri_option
@convert_api_errors
def query(location: str, sql: str, params: tuple[Any, ...], uri: bool) -> None:
    db = open_database(location, uri)

    table = None
    n_rows = 0

    with db.prepare(sql).bind_all(*params).execute() as answer:
        for row in answer:
            if table is None:
                table = rich_table(*row.column_names())

            table.add_row(*(format_value(value) for value in row.values()))
            n_rows += 1

    if table is None:
        info("No rows")
    else:
        print_table(table)
        info(f"{n_rows} row{'' if n_rows == 1 else 's'}")

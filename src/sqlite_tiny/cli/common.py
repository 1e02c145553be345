from __future__ import annotations

import functools
from typing import Callable, TypeVar, TYPE_CHECKING
from typing_extensions import ParamSpec

import click

from .core import CliException

if TYPE_CHECKING:
    from ..sqlite import Sqlite


P = ParamSpec("P")
T = TypeVar("T")


def convert_api_errors(func: Callable[P, T]) -> Callable[P, T]:
    """
    Decorator that catches a SqliteError and re-raises it as a CliException. Click
    prints its message as a warning and exits with status 1.
    """

    from ..errors import SqliteError

    @functools.wraps(func)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
        try:
            return func(*args, **kwargs)
        except SqliteError as exc:
            raise CliException(str(exc)) from exc

    return wrapper


def open_database(location: str, uri: bool) -> Sqlite:
    """
    Opens a database for a command. The database is closed together with the click
    context.

    :param location: Path or URI of the database.
    :param uri: Whether ``location`` is a URI.
    :returns: The open database.
    """
    from ..sqlite import Sqlite

    ctx = click.get_current_context()

    if uri:
        return ctx.with_resource(Sqlite.open_uri(location))
    else:
        return ctx.with_resource(Sqlite.open(location))


location_argument = click.argument("location")

uri_option = click.option(
    "--uri",
    is_flag=True,
    default=False,
    help="Interpret LOCATION as an SQLite URI such as 'file:data.db?mode=ro'.",
)

"""
This module defines prepared queries and the binding of parameters.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, TYPE_CHECKING

from .answer import Answer
from .errors import ConversionError, SqliteError
from .ffi import get_lib, SQLITE_TRANSIENT, SQLITE_UTF8
from .handle import OwnedHandle, check_result
from .types import Blob, Integer, Null, Real, SqliteType, Text, into_sqlite

if TYPE_CHECKING:
    from .sqlite import Sqlite


__all__ = ["Query"]

logger = logging.getLogger(__name__)


def _bind_null(lib: Any, statement: Any, column: int, value: SqliteType) -> int:
    return lib.sqlite3_bind_null(statement, column)


def _bind_integer(lib: Any, statement: Any, column: int, value: SqliteType) -> int:
    return lib.sqlite3_bind_int64(statement, column, value.value)


def _bind_real(lib: Any, statement: Any, column: int, value: SqliteType) -> int:
    return lib.sqlite3_bind_double(statement, column, value.value)


def _bind_text(lib: Any, statement: Any, column: int, value: SqliteType) -> int:
    try:
        data = value.value.encode("utf-8")
    except UnicodeEncodeError as exc:
        raise ConversionError("Text cannot be encoded as UTF-8") from exc

    # The engine copies the value immediately.
    return lib.sqlite3_bind_text64(
        statement, column, data, len(data), SQLITE_TRANSIENT, SQLITE_UTF8
    )


def _bind_blob(lib: Any, statement: Any, column: int, value: SqliteType) -> int:
    data = value.value
    # The engine copies the value immediately.
    return lib.sqlite3_bind_blob64(statement, column, data, len(data), SQLITE_TRANSIENT)


_BINDERS: dict[type, Callable[[Any, Any, int, SqliteType], int]] = {
    Null: _bind_null,
    Integer: _bind_integer,
    Real: _bind_real,
    Text: _bind_text,
    Blob: _bind_blob,
}


class Query:
    """
    A prepared SQL statement.

    Binding a parameter moves the statement into a new :class:`Query` which is
    returned, so that binds can be chained::

        query = db.prepare("INSERT INTO t VALUES (?, ?)")
        answer = query.bind(1, 4).bind(2, "a").execute()

    The query a value was bound on can no longer be used afterwards. Likewise,
    :meth:`execute` moves the statement into the returned :class:`Answer`.

    :param sqlite: The database the query was prepared on.
    :param handle: Owned handle to the native statement.
    """

    def __init__(self, sqlite: Sqlite, handle: OwnedHandle) -> None:
        self._sqlite = sqlite
        self._handle = handle

    def bind(self, column: int, value: Any) -> Query:
        """
        Binds a value to a parameter.

        Parameter indices start at **1**, unless set explicitly with ``?NNN``. Text
        and blob values are copied by the engine immediately.

        :param column: The 1-based parameter index.
        :param value: ``None``, a :class:`sqlite_tiny.types.SqliteType` or a value of
            a type registered with :func:`sqlite_tiny.types.register`.
        :returns: The query which now owns the statement.
        :raises ConversionError: if the value cannot be converted.
        :raises EngineError: if the engine rejects the value or the index.
        :raises HandleError: if this query or its database can no longer be used.
        """
        statement = self._handle.as_raw()
        database = self._sqlite._raw()

        try:
            converted = into_sqlite(value)
        except ConversionError as exc:
            raise ConversionError("Failed to convert value into SQLite type") from exc

        binder = _BINDERS[type(converted)]
        code = binder(get_lib(), statement, column, converted)
        check_result(code, database)

        return Query(self._sqlite, self._handle.take())

    def bind_all(self, *values: Any) -> Query:
        """
        Binds values to the parameters 1, 2, ... in order.

        :param values: Values to bind, see :meth:`bind`.
        :returns: The query which now owns the statement.
        """
        query = self
        for column, value in enumerate(values, start=1):
            query = query.bind(column, value)
        return query

    def execute(self) -> Answer:
        """
        Executes the query by advancing its cursor once.

        :returns: The result, positioned on the first row if there is one.
        :raises EngineError: if the engine fails to execute the statement, which is
            finalized before the error propagates.
        :raises HandleError: if this query or its database can no longer be used.
        """
        self._sqlite._raw()

        answer = Answer(self._sqlite, self._handle.take())

        try:
            answer.step()
        except SqliteError:
            answer.close()
            raise

        return answer

    def close(self) -> None:
        """Finalizes the statement. Does nothing if it was moved or finalized."""
        self._handle.release()

    def __enter__(self) -> Query:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}({self._handle!r})>"

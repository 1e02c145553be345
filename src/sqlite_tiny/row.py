"""
This module defines result rows and the typed reading of their columns.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, TYPE_CHECKING

from .errors import ConversionError, SqliteError
from .ffi import (
    ffi,
    get_lib,
    SQLITE_BLOB,
    SQLITE_FLOAT,
    SQLITE_INTEGER,
    SQLITE_NULL,
    SQLITE_RANGE,
    SQLITE_TEXT,
)
from .handle import HandleView, last_error
from .types import NULL, Blob, Integer, Real, SqliteType, Text, from_sqlite

if TYPE_CHECKING:
    from .sqlite import Sqlite


__all__ = ["Row"]

logger = logging.getLogger(__name__)


def _read_bytes(lib: Any, statement: Any, column: int, pointer: Any) -> bytes:
    # The length must be queried after the pointer, since fetching the pointer may
    # convert the value in place.
    length = lib.sqlite3_column_bytes(statement, column)

    if pointer == ffi.NULL or length == 0:
        return b""

    return ffi.buffer(ffi.cast("const char *", pointer), length)[:]


def _read_null(lib: Any, statement: Any, column: int) -> SqliteType:
    return NULL


def _read_integer(lib: Any, statement: Any, column: int) -> SqliteType:
    return Integer(lib.sqlite3_column_int64(statement, column))


def _read_real(lib: Any, statement: Any, column: int) -> SqliteType:
    return Real(lib.sqlite3_column_double(statement, column))


def _read_text(lib: Any, statement: Any, column: int) -> SqliteType:
    pointer = lib.sqlite3_column_text(statement, column)

    # Only a failed allocation yields NULL for a TEXT value, even an empty one.
    if pointer == ffi.NULL:
        raise SqliteError("Failed to read text column, the engine is out of memory")

    data = _read_bytes(lib, statement, column, pointer)

    try:
        return Text(data.decode("utf-8"))
    except UnicodeDecodeError as exc:
        raise ConversionError("SQLite string is not valid UTF-8") from exc


def _read_blob(lib: Any, statement: Any, column: int) -> SqliteType:
    pointer = lib.sqlite3_column_blob(statement, column)
    return Blob(_read_bytes(lib, statement, column, pointer))


_READERS: dict[int, Callable[[Any, Any, int], SqliteType]] = {
    SQLITE_NULL: _read_null,
    SQLITE_INTEGER: _read_integer,
    SQLITE_FLOAT: _read_real,
    SQLITE_TEXT: _read_text,
    SQLITE_BLOB: _read_blob,
}


class Row:
    """
    A result row.

    Rows returned by :meth:`sqlite_tiny.answer.Answer.row` own their statement and
    may be kept around. Rows returned by :meth:`sqlite_tiny.answer.Answer.next_row`
    are borrowed from the answer and become unreadable once it advances.

    Column indices start at **0**.

    :param sqlite: The database the statement belongs to.
    :param view: Owned or borrowed view of the statement.
    """

    def __init__(self, sqlite: Sqlite, view: HandleView) -> None:
        self._sqlite = sqlite
        self._view = view

    @property
    def is_owned(self) -> bool:
        """Whether this row owns its statement."""
        return self._view.is_owned

    @property
    def is_valid(self) -> bool:
        """Whether the row can still be read."""
        return self._view.is_valid and not self._sqlite.closed

    def __len__(self) -> int:
        """The number of columns, or zero if the row can no longer be read."""
        if not self.is_valid:
            return 0

        with self._view.in_use.checked_out():
            return get_lib().sqlite3_data_count(self._view.as_raw())

    def is_empty(self) -> bool:
        """Whether the row has no columns."""
        return len(self) == 0

    def _check_column(self, statement: Any, column: int) -> None:
        count = get_lib().sqlite3_column_count(statement)

        if not 0 <= column < count:
            logger.debug("Column %s is out of range for %s columns", column, count)
            raise last_error(SQLITE_RANGE)

    def read_value(self, column: int) -> SqliteType:
        """
        Reads a column as its storage class variant.

        :param column: The 0-based column index.
        :returns: The value.
        :raises NoRowError: if the row is no longer available.
        :raises EngineError: if the column index is out of range.
        :raises ConversionError: if a TEXT value is not valid UTF-8.
        :raises HandleError: if the database was closed.
        """
        self._sqlite._raw()

        with self._view.in_use.checked_out():
            statement = self._view.as_raw()
            lib = get_lib()

            if not 0 <= column < lib.sqlite3_data_count(statement):
                raise last_error(SQLITE_RANGE)

            storage_class = lib.sqlite3_column_type(statement, column)

            try:
                reader = _READERS[storage_class]
            except KeyError:
                raise ConversionError(
                    f"Unknown SQLite storage class {storage_class} in column {column}"
                )

            return reader(lib, statement, column)

    def read(self, column: int, target: Any = object) -> Any:
        """
        Reads a column as the requested type.

        Reads are strict: a column is only converted if its storage class matches
        ``target``. For instance, reading an INTEGER column as ``str`` fails. Use
        ``Optional[...]`` as target for nullable columns.

        :param column: The 0-based column index.
        :param target: The requested type. This can be a type registered with
            :func:`sqlite_tiny.types.register`, a converter such as
            :data:`sqlite_tiny.types.UInt8`, ``Optional[...]`` of either, or ``object``
            for the natural Python value of the column.
        :returns: The converted value.
        :raises ConversionError: if the value cannot be converted into ``target``.
        :raises NoRowError: if the row is no longer available.
        :raises EngineError: if the column index is out of range.
        """
        return from_sqlite(self.read_value(column), target)

    def values(self) -> tuple[Any, ...]:
        """
        :returns: The natural Python values of all columns.
        """
        return tuple(self.read(column) for column in range(len(self)))

    def column_name(self, column: int) -> str:
        """
        :param column: The 0-based column index.
        :returns: The name of the column in the result set.
        :raises EngineError: if the column index is out of range.
        """
        self._sqlite._raw()

        with self._view.in_use.checked_out():
            statement = self._view.as_raw()
            self._check_column(statement, column)
            name = get_lib().sqlite3_column_name(statement, column)

        if name == ffi.NULL:
            # Only happens if the engine runs out of memory.
            raise SqliteError(f"Could not get the name of column {column}")

        return ffi.string(name).decode("utf-8", errors="replace")

    def column_names(self) -> list[str]:
        """
        :returns: The names of all columns.
        """
        return [self.column_name(column) for column in range(len(self))]

    def close(self) -> None:
        """Finalizes the statement if this row owns it."""
        self._view.release()

    def __enter__(self) -> Row:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def __repr__(self) -> str:
        kind = "owned" if self.is_owned else "borrowed"
        state = "valid" if self.is_valid else "invalid"
        return f"<{self.__class__.__name__}({kind}, {state})>"

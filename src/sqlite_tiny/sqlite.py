"""
This module defines the SQLite database connection.
"""

from __future__ import annotations

import logging
from typing import Any

from .errors import MalformedInputError, ThreadSafetyError
from .ffi import (
    ffi,
    get_lib,
    SQLITE_OK,
    SQLITE_OPEN_CREATE,
    SQLITE_OPEN_FULLMUTEX,
    SQLITE_OPEN_NOMUTEX,
    SQLITE_OPEN_READWRITE,
    SQLITE_OPEN_URI,
)
from .handle import OwnedHandle, check_result, last_error
from .query import Query


__all__ = ["Sqlite", "to_c_string"]

logger = logging.getLogger(__name__)


def to_c_string(text: str, what: str) -> bytes:
    """
    Encodes a string for passing it to the engine as a NUL-terminated C string.

    :param text: The string to encode.
    :param what: Description of the string for the error message.
    :returns: The UTF-8 encoded string.
    :raises MalformedInputError: if the string contains an embedded NUL character.
    """
    data = text.encode("utf-8")

    if b"\x00" in data:
        position = data.index(b"\x00")
        raise MalformedInputError(
            f"Invalid {what}: embedded NUL character at byte {position}"
        )

    return data


class Sqlite:
    """
    An open SQLite database.

    Use :meth:`open`, :meth:`open_uri` or :meth:`open_raw` to create instances. The
    database is always opened in the engine's serialized ("full mutex") mode, so one
    instance may be shared between threads. Statements prepared from it, and the
    results and rows derived from those statements, must stay on one thread while
    they are in use.

    The connection is closed by :meth:`close`, when leaving a ``with`` block or when
    the instance is garbage collected.

    :param handle: Owned handle to the native database object.
    :param location: The path or URI the database was opened from.
    """

    def __init__(self, handle: OwnedHandle, location: str = "") -> None:
        self._handle = handle
        self.location = location

    # ---- opening -------------------------------------------------------------------

    @classmethod
    def open(cls, location: str) -> Sqlite:
        """
        Opens or creates a database for reading and writing.

        :param location: Path of the database file, or ``":memory:"``.
        :returns: The open database.
        """
        return cls.open_raw(location, SQLITE_OPEN_READWRITE | SQLITE_OPEN_CREATE)

    @classmethod
    def open_uri(cls, location: str) -> Sqlite:
        """
        Opens a database from a URI, see https://www.sqlite.org/uri.html. The URI is
        passed to the engine unmodified, e.g. ``"file:test.db?mode=memory"``.

        :param location: The database URI.
        :returns: The open database.
        """
        return cls.open_raw(location, SQLITE_OPEN_READWRITE | SQLITE_OPEN_URI)

    @classmethod
    def open_raw(cls, location: str, flags: int) -> Sqlite:
        """
        Opens a database with the given engine flags. ``SQLITE_OPEN_FULLMUTEX`` is
        always added to ``flags``.

        :param location: Path or URI of the database.
        :param flags: Engine open flags.
        :returns: The open database.
        :raises MalformedInputError: if ``location`` contains a NUL character.
        :raises ThreadSafetyError: if the engine cannot serialize access to the
            connection.
        :raises EngineError: if the engine fails to open the database.
        """
        path = to_c_string(location, "database location")

        if flags & SQLITE_OPEN_NOMUTEX:
            raise ThreadSafetyError(
                "SQLITE_OPEN_NOMUTEX is not supported, connections are always "
                "opened in serialized mode"
            )

        lib = get_lib()

        if lib.sqlite3_threadsafe() == 0:
            raise ThreadSafetyError(
                "The SQLite library was compiled without thread safety "
                "(SQLITE_THREADSAFE=0) and cannot be opened in serialized mode"
            )

        database_star = ffi.new("sqlite3 **")
        flags |= SQLITE_OPEN_FULLMUTEX
        code = lib.sqlite3_open_v2(path, database_star, flags, ffi.NULL)
        database = database_star[0]

        if code != SQLITE_OK:
            # The engine usually allocates a handle even if opening fails. It carries
            # the detailed error message and must be closed.
            error = last_error(code, database)
            if database != ffi.NULL:
                lib.sqlite3_close_v2(database)
            logger.debug("Failed to open %s: %s", location, error)
            raise error

        handle = OwnedHandle(database, lib.sqlite3_close_v2, "database")
        logger.debug("Opened database %s", location)

        return cls(handle, location)

    # ---- handle access ---------------------------------------------------------------

    @property
    def closed(self) -> bool:
        """Whether the database has been closed."""
        return self._handle.released

    def _raw(self) -> Any:
        """
        :returns: The native database pointer.
        :raises HandleError: if the database has been closed.
        """
        return self._handle.as_raw()

    # ---- statements ------------------------------------------------------------------

    def prepare(self, sql: str) -> Query:
        """
        Prepares a query from a **single** SQL statement. Any text after the first
        statement is ignored, use :meth:`execute_batch` to run multiple statements.

        :param sql: The SQL statement, with ``?`` or ``?NNN`` placeholders.
        :returns: The prepared query.
        :raises MalformedInputError: if ``sql`` contains a NUL character or no
            statement at all.
        :raises EngineError: if the engine rejects the statement.
        """
        query = to_c_string(sql, "database query")
        database = self._raw()
        lib = get_lib()

        statement_star = ffi.new("sqlite3_stmt **")
        code = lib.sqlite3_prepare_v2(database, query, -1, statement_star, ffi.NULL)
        check_result(code, database)

        statement = statement_star[0]

        if statement == ffi.NULL:
            raise MalformedInputError("Invalid database query: no SQL statement found")

        logger.debug("Prepared statement %r", sql)

        return Query(self, OwnedHandle(statement, lib.sqlite3_finalize, "statement"))

    def execute_batch(self, sql: str) -> None:
        """
        Executes one or more SQL statements separated by semicolons, without
        parameters and without returning rows. Statements executed before a failing
        one are not rolled back by this method.

        :param sql: The SQL statements.
        :raises MalformedInputError: if ``sql`` contains a NUL character.
        :raises EngineError: if any statement fails.
        """
        script = to_c_string(sql, "database query")
        database = self._raw()

        code = get_lib().sqlite3_exec(database, script, ffi.NULL, ffi.NULL, ffi.NULL)
        check_result(code, database)

        logger.debug("Executed batch %r", sql)

    # ---- closing ---------------------------------------------------------------------

    def close(self) -> None:
        """
        Closes the database. Statements which are still alive keep the native
        connection open until they are released, but can no longer be used.
        """
        if not self.closed:
            logger.debug("Closing database %s", self.location)
        self._handle.release()

    def __enter__(self) -> Sqlite:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def __repr__(self) -> str:
        state = "closed" if self.closed else "open"
        return f"<{self.__class__.__name__}({self.location!r}, {state})>"

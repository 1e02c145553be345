# -*- coding: utf-8 -*-
"""
A thin, strict layer over the SQLite C API::

    from sqlite_tiny import Sqlite

    with Sqlite.open(":memory:") as db:
        db.execute_batch("CREATE TABLE t (a INTEGER, b TEXT)")
        db.prepare("INSERT INTO t VALUES (?, ?)").bind_all(1, "one").execute()

        row = db.prepare("SELECT b FROM t WHERE a = ?").bind(1, 1).execute().row()
        assert row.read(0, str) == "one"
"""

from __future__ import annotations

from .answer import Answer, CursorState
from .errors import (
    ConcurrentAccessError,
    ConversionError,
    EngineError,
    HandleError,
    HandleInvariantError,
    MalformedInputError,
    NoRowError,
    SqliteError,
    ThreadSafetyError,
)
from .ffi import get_lib
from .query import Query
from .row import Row
from .sqlite import Sqlite


__version__ = "1.0.0"
__author__ = "sqlite-tiny contributors"

__all__ = [
    "Sqlite",
    "Query",
    "Answer",
    "CursorState",
    "Row",
    "SqliteError",
    "EngineError",
    "ConversionError",
    "MalformedInputError",
    "NoRowError",
    "HandleError",
    "ThreadSafetyError",
    "ConcurrentAccessError",
    "HandleInvariantError",
    "version",
]


def version() -> tuple[int, int, int]:
    """
    Returns the version of the loaded SQLite library.

    :returns: The version as ``(major, minor, patch)``, e.g. ``(3, 45, 1)``.
    :raises SqliteError: if the SQLite library cannot be loaded.
    """
    number = get_lib().sqlite3_libversion_number()
    return number // 1_000_000, number // 1000 % 1000, number % 1000

"""
Bindings to the SQLite engine through cffi in ABI mode.

Only the part of the C API which sqlite-tiny consumes is declared here. The shared
library is located and loaded lazily on first use, see :func:`get_lib`.
"""

from __future__ import annotations

import os
import sys
import logging
import threading
import ctypes.util
from typing import Any

from cffi import FFI

from .errors import SqliteError


__all__ = [
    "ffi",
    "get_lib",
    "library_path",
    "library_candidates",
    "SQLITE_TRANSIENT",
]

logger = logging.getLogger(__name__)

ffi = FFI()

ffi.cdef(
    r"""
    typedef struct sqlite3 sqlite3;
    typedef struct sqlite3_stmt sqlite3_stmt;
    typedef long long sqlite3_int64;
    typedef unsigned long long sqlite3_uint64;
    typedef void (*sqlite3_destructor_type)(void *);

    int sqlite3_open_v2(const char *filename, sqlite3 **ppDb, int flags,
                        const char *zVfs);
    int sqlite3_close_v2(sqlite3 *db);
    int sqlite3_prepare_v2(sqlite3 *db, const char *zSql, int nByte,
                           sqlite3_stmt **ppStmt, const char **pzTail);
    int sqlite3_finalize(sqlite3_stmt *pStmt);
    int sqlite3_step(sqlite3_stmt *pStmt);
    int sqlite3_exec(sqlite3 *db, const char *sql,
                     int (*callback)(void *, int, char **, char **),
                     void *arg, char **errmsg);

    int sqlite3_bind_null(sqlite3_stmt *pStmt, int index);
    int sqlite3_bind_int64(sqlite3_stmt *pStmt, int index, sqlite3_int64 value);
    int sqlite3_bind_double(sqlite3_stmt *pStmt, int index, double value);
    int sqlite3_bind_text64(sqlite3_stmt *pStmt, int index, const char *value,
                            sqlite3_uint64 length, sqlite3_destructor_type destructor,
                            unsigned char encoding);
    int sqlite3_bind_blob64(sqlite3_stmt *pStmt, int index, const char *value,
                            sqlite3_uint64 length, sqlite3_destructor_type destructor);

    int sqlite3_column_count(sqlite3_stmt *pStmt);
    int sqlite3_data_count(sqlite3_stmt *pStmt);
    int sqlite3_column_type(sqlite3_stmt *pStmt, int column);
    sqlite3_int64 sqlite3_column_int64(sqlite3_stmt *pStmt, int column);
    double sqlite3_column_double(sqlite3_stmt *pStmt, int column);
    const unsigned char *sqlite3_column_text(sqlite3_stmt *pStmt, int column);
    const void *sqlite3_column_blob(sqlite3_stmt *pStmt, int column);
    int sqlite3_column_bytes(sqlite3_stmt *pStmt, int column);
    const char *sqlite3_column_name(sqlite3_stmt *pStmt, int column);

    const char *sqlite3_errstr(int code);
    const char *sqlite3_errmsg(sqlite3 *db);
    int sqlite3_threadsafe(void);
    const char *sqlite3_libversion(void);
    int sqlite3_libversion_number(void);
    """
)

# ==== constants from sqlite3.h ========================================================

# result codes
SQLITE_OK = 0
SQLITE_ERROR = 1
SQLITE_MISUSE = 21
SQLITE_RANGE = 25
SQLITE_ROW = 100
SQLITE_DONE = 101

# open flags
SQLITE_OPEN_READONLY = 0x00000001
SQLITE_OPEN_READWRITE = 0x00000002
SQLITE_OPEN_CREATE = 0x00000004
SQLITE_OPEN_URI = 0x00000040
SQLITE_OPEN_MEMORY = 0x00000080
SQLITE_OPEN_NOMUTEX = 0x00008000
SQLITE_OPEN_FULLMUTEX = 0x00010000

# storage classes
SQLITE_INTEGER = 1
SQLITE_FLOAT = 2
SQLITE_TEXT = 3
SQLITE_BLOB = 4
SQLITE_NULL = 5

# text encodings
SQLITE_UTF8 = 1

# Instructs the engine to copy a bound value immediately.
SQLITE_TRANSIENT = ffi.cast("sqlite3_destructor_type", -1)


# ==== library discovery ===============================================================

LIBRARY_ENV_VAR = "SQLITE_TINY_LIBRARY"

_DEFAULT_NAMES = {
    "darwin": ["libsqlite3.dylib", "libsqlite3.0.dylib"],
    "win32": ["sqlite3.dll", "winsqlite3.dll"],
}

_REQUIRED_SYMBOLS = [
    "sqlite3_open_v2",
    "sqlite3_close_v2",
    "sqlite3_prepare_v2",
    "sqlite3_finalize",
    "sqlite3_step",
    "sqlite3_exec",
    "sqlite3_bind_null",
    "sqlite3_bind_int64",
    "sqlite3_bind_double",
    "sqlite3_bind_text64",
    "sqlite3_bind_blob64",
    "sqlite3_column_count",
    "sqlite3_data_count",
    "sqlite3_column_type",
    "sqlite3_column_int64",
    "sqlite3_column_double",
    "sqlite3_column_text",
    "sqlite3_column_blob",
    "sqlite3_column_bytes",
    "sqlite3_column_name",
    "sqlite3_errstr",
    "sqlite3_errmsg",
    "sqlite3_threadsafe",
    "sqlite3_libversion",
    "sqlite3_libversion_number",
]

_lib: Any = None
_lib_path: str | None = None
_lib_lock = threading.Lock()


def _configured_library() -> str:
    from .config import read_option

    try:
        return read_option("engine", "library")
    except (OSError, RuntimeError) as exc:
        logger.debug("Could not read config: %s", exc)
        return ""


def _stdlib_extension() -> str | None:
    # The standard library's sqlite3 module is linked against an engine, either
    # dynamically or statically. Loading its extension module exposes those symbols.
    try:
        import _sqlite3
    except ImportError:
        return None

    return getattr(_sqlite3, "__file__", None)


def library_candidates() -> list[str]:
    """
    Returns the shared libraries to try, in order of preference:

    1. the ``SQLITE_TINY_LIBRARY`` environment variable,
    2. the ``engine.library`` config option,
    3. the result of :func:`ctypes.util.find_library`,
    4. the platform default library names,
    5. the extension module of the standard library's sqlite3 package.
    """
    candidates = [os.environ.get(LIBRARY_ENV_VAR, ""), _configured_library()]
    candidates.append(ctypes.util.find_library("sqlite3") or "")
    candidates.extend(
        _DEFAULT_NAMES.get(sys.platform, ["libsqlite3.so.0", "libsqlite3.so"])
    )
    candidates.append(_stdlib_extension() or "")

    unique: list[str] = []
    for candidate in candidates:
        if candidate and candidate not in unique:
            unique.append(candidate)

    return unique


def _load() -> Any:
    global _lib_path

    tried: list[str] = []

    for candidate in library_candidates():
        try:
            lib = ffi.dlopen(candidate)
            # All declared symbols must resolve, not just the library itself.
            for name in _REQUIRED_SYMBOLS:
                getattr(lib, name)
        except (OSError, AttributeError) as exc:
            logger.debug("Could not load SQLite from %s: %s", candidate, exc)
            tried.append(candidate)
        else:
            logger.debug("Loaded SQLite %s from %s", _libversion(lib), candidate)
            _lib_path = candidate
            return lib

    raise SqliteError(
        "Could not find the SQLite shared library. Tried: "
        f"{', '.join(tried) or 'nothing'}. Set {LIBRARY_ENV_VAR} to its location."
    )


def _libversion(lib: Any) -> str:
    return ffi.string(lib.sqlite3_libversion()).decode("ascii")


def get_lib() -> Any:
    """
    Loads the SQLite shared library on first use.

    :returns: The cffi library object.
    :raises SqliteError: if no usable library can be found.
    """
    global _lib

    if _lib is None:
        with _lib_lock:
            if _lib is None:
                _lib = _load()

    return _lib


def library_path() -> str | None:
    """
    :returns: The name or path the SQLite library was loaded from, or ``None`` if it
        was not loaded yet.
    """
    return _lib_path

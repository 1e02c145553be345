"""
This module defines the error classes of sqlite-tiny. It should be kept free of memory
heavy imports.

All recoverable errors inherit from :class:`SqliteError`, which carries a readable
message, an optional chained cause and a backtrace captured at construction. The only
exception which does not inherit from it is :class:`HandleInvariantError`: it marks a
defect in this package itself and is not meant to be handled.
"""

from __future__ import annotations

import functools
import traceback
from typing import Optional, List


__all__ = [
    "SqliteError",
    "EngineError",
    "ConversionError",
    "MalformedInputError",
    "NoRowError",
    "HandleError",
    "ThreadSafetyError",
    "ConcurrentAccessError",
    "HandleInvariantError",
]


@functools.lru_cache(maxsize=1)
def _backtraces_enabled() -> bool:
    from .config import read_option

    try:
        return bool(read_option("engine", "capture_backtrace"))
    except (OSError, RuntimeError):
        return True


def _capture_backtrace() -> Optional[List[str]]:
    if not _backtraces_enabled():
        return None

    try:
        # Drop the frames of this function and of the error constructor.
        return traceback.format_stack()[:-2]
    except Exception:
        return None


class SqliteError(Exception):
    """Base class for sqlite-tiny errors

    :param message: A human-readable description of the error.
    :param cause: The underlying exception, if any. It is also set as ``__cause__``
        so that the chain shows up in tracebacks.
    """

    def __init__(self, message: str, cause: Optional[BaseException] = None) -> None:
        super().__init__(message)
        self.message = message
        if cause is not None:
            self.__cause__ = cause
        self.backtrace = _capture_backtrace()

    @property
    def cause(self) -> Optional[BaseException]:
        """The chained exception which caused this error."""
        return self.__cause__

    def has_backtrace(self) -> bool:
        """Whether a backtrace was captured for this error."""
        return self.backtrace is not None

    def __str__(self) -> str:
        if self.__cause__ is not None:
            return f"{self.message}\n caused by: {self.__cause__}"
        return self.message


class EngineError(SqliteError):
    """Raised when the SQLite engine reports a non-success result code.

    :param message: The translated engine message.
    :param code: The primary result code returned by the engine.
    """

    def __init__(self, message: str, code: int) -> None:
        super().__init__(message)
        self.code = code


class ConversionError(SqliteError):
    """Raised when a value cannot be converted into or out of an SQLite storage class,
    for instance when reading a TEXT column as an integer."""


class MalformedInputError(SqliteError):
    """Raised when SQL text or a database location cannot be passed to the engine,
    for instance because it contains an embedded NUL character."""


class NoRowError(SqliteError):
    """Raised when a result row is requested but the cursor has no row pending."""


class HandleError(SqliteError):
    """Raised when a handle is used after it was released or after its ownership
    moved to another object."""


class ThreadSafetyError(SqliteError):
    """Raised when a database cannot be opened in the engine's serialized mode."""


class ConcurrentAccessError(SqliteError):
    """Raised when a statement cursor is used by two threads at the same time."""


class HandleInvariantError(RuntimeError):
    """Raised when an owned handle is created from a NULL pointer. This is a bug in
    sqlite-tiny and is intentionally not a :class:`SqliteError`."""

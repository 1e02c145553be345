"""
Ownership primitives for the engine's raw handles and helpers to translate engine
result codes into exceptions.

An :class:`OwnedHandle` holds exactly one non-NULL pointer together with the engine
function which releases it. A :class:`HandleView` is what result rows hold: either the
sole owner of a handle, or a borrowed reference into the handle of a live cursor which
becomes invalid as soon as that cursor moves.
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from typing import Any, Callable, Iterator, Protocol

from .errors import (
    ConcurrentAccessError,
    EngineError,
    HandleError,
    HandleInvariantError,
    NoRowError,
)
from .ffi import ffi, get_lib, SQLITE_OK


__all__ = [
    "OwnedHandle",
    "HandleView",
    "CursorSource",
    "InUseFlag",
    "last_error",
    "check_result",
]

logger = logging.getLogger(__name__)


def _is_null(pointer: Any) -> bool:
    return pointer is None or pointer == ffi.NULL


class OwnedHandle:
    """
    An owned, non-NULL engine pointer which is released exactly once.

    The handle is released by an explicit call to :meth:`release`, when leaving a
    ``with`` block, or, as a last resort, when it is garbage collected. The return
    code of the release function is ignored: the engine reports actionable errors
    at the call that failed, not when cleaning up.

    :param pointer: The cdata pointer returned by the engine.
    :param release: The engine function which releases ``pointer``.
    :param name: Name of the resource for log and error messages.
    :raises HandleInvariantError: if ``pointer`` is NULL.
    """

    def __init__(
        self, pointer: Any, release: Callable[[Any], int], name: str = "handle"
    ) -> None:
        self._pointer: Any = None
        self._released = False
        self._moved = False
        self._lock = threading.Lock()

        if _is_null(pointer):
            raise HandleInvariantError("cannot create an owned NULL pointer")

        self._pointer = pointer
        self._release = release
        self.name = name

    @property
    def released(self) -> bool:
        """Whether the underlying resource has been released."""
        return self._released

    @property
    def moved(self) -> bool:
        """Whether ownership was transferred to another handle."""
        return self._moved

    def as_raw(self) -> Any:
        """
        Returns the pointer for passing it to engine calls. This never transfers
        ownership.

        :raises HandleError: if the handle was released or moved.
        """
        if self._moved:
            raise HandleError(f"The {self.name} was moved and can no longer be used")
        if self._released:
            raise HandleError(f"The {self.name} was already released")
        return self._pointer

    def take(self) -> OwnedHandle:
        """
        Moves the pointer into a new handle. This handle becomes unusable and will
        not release the pointer.

        :returns: The new owner of the pointer.
        :raises HandleError: if the handle was released or moved.
        """
        with self._lock:
            pointer = self.as_raw()
            self._moved = True
            self._pointer = None

        return OwnedHandle(pointer, self._release, self.name)

    def release(self) -> None:
        """Releases the underlying resource. Subsequent calls are no-ops."""
        with self._lock:
            if self._released or self._moved or self._pointer is None:
                return
            pointer = self._pointer
            self._pointer = None
            self._released = True

        logger.debug("Releasing %s %s", self.name, pointer)
        self._release(pointer)

    def __enter__(self) -> OwnedHandle:
        return self

    def __exit__(self, *args: Any) -> None:
        self.release()

    def __del__(self) -> None:
        if getattr(self, "_pointer", None) is not None:
            self.release()

    def __repr__(self) -> str:
        if self._moved:
            state = "moved"
        elif self._released:
            state = "released"
        else:
            state = str(self._pointer)
        return f"<{self.__class__.__name__}({self.name}, {state})>"


class InUseFlag:
    """
    A checked "in use" marker for a statement cursor. Entering it while another
    thread is inside an operation on the same cursor raises instead of blocking.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()

    @contextmanager
    def checked_out(self) -> Iterator[None]:
        """
        Marks the cursor as in use for the duration of the ``with`` block.

        :raises ConcurrentAccessError: if the cursor is already in use.
        """
        if not self._lock.acquire(blocking=False):
            raise ConcurrentAccessError(
                "The statement is in use by another thread. Statements and their "
                "results must not be shared between threads while in use."
            )
        try:
            yield
        finally:
            self._lock.release()


class CursorSource(Protocol):
    """A cursor which lends out its statement handle to borrowed row views."""

    handle: OwnedHandle
    generation: int
    in_use: InUseFlag


class HandleView:
    """
    A statement handle as seen by a result row: either owned or borrowed.

    Use :meth:`owned` or :meth:`borrowed` to create instances. A borrowed view
    remembers the generation of its cursor and is invalid once the cursor advanced,
    was consumed or was released.

    :param handle: The viewed handle.
    :param source: The cursor lending the handle, ``None`` for an owned view.
    """

    def __init__(
        self, handle: OwnedHandle, source: CursorSource | None = None
    ) -> None:
        self._handle = handle
        self._source = source

        if source is None:
            self._generation = 0
            self.in_use = InUseFlag()
        else:
            self._generation = source.generation
            self.in_use = source.in_use

    @classmethod
    def owned(cls, handle: OwnedHandle) -> HandleView:
        """Creates a view which has sole custody of ``handle``."""
        return cls(handle)

    @classmethod
    def borrowed(cls, source: CursorSource) -> HandleView:
        """Creates a view into the current position of the cursor ``source``."""
        return cls(source.handle, source)

    @property
    def is_owned(self) -> bool:
        return self._source is None

    @property
    def is_valid(self) -> bool:
        """Whether the view still refers to the row it was created for."""
        if self._source is not None and self._source.generation != self._generation:
            return False
        return not (self._handle.released or self._handle.moved)

    def as_raw(self) -> Any:
        """
        :returns: The statement pointer.
        :raises NoRowError: if the cursor has moved past the viewed row.
        """
        if not self.is_valid:
            raise NoRowError("The result row is no longer available")
        return self._handle.as_raw()

    def release(self) -> None:
        """Releases the handle if this view owns it, otherwise does nothing."""
        if self.is_owned:
            self._handle.release()


def last_error(code: int, database: Any = None) -> EngineError:
    """
    Builds an error from an engine result code. If a database handle is given, its
    last error message is appended since it carries statement specific details which
    the generic code description lacks.

    :param code: The engine result code.
    :param database: Raw database pointer or ``None``.
    :returns: The error to raise.
    """
    lib = get_lib()

    description = lib.sqlite3_errstr(code)
    message = "Unknown" if _is_null(description) else _decode(description)

    if not _is_null(database):
        details = lib.sqlite3_errmsg(database)
        if not _is_null(details):
            message = f"{message} ({_decode(details)})"

    return EngineError(f"SQLite error: {message}", code)


def check_result(code: int, database: Any = None) -> None:
    """
    Translates a result code into an exception.

    :param code: The engine result code.
    :param database: Raw database pointer or ``None``, used to enrich the message.
    :raises EngineError: for any code other than ``SQLITE_OK``.
    """
    if code != SQLITE_OK:
        raise last_error(code, database)


def _decode(pointer: Any) -> str:
    return ffi.string(pointer).decode("utf-8", errors="replace")

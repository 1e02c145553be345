"""
This module defines the result of an executed query and the state machine which
advances its cursor.
"""

from __future__ import annotations

import enum
import logging
from typing import Any, Iterator, TYPE_CHECKING

from .errors import NoRowError
from .ffi import get_lib, SQLITE_DONE, SQLITE_ROW
from .handle import HandleView, InUseFlag, OwnedHandle, last_error
from .row import Row

if TYPE_CHECKING:
    from .sqlite import Sqlite


__all__ = ["Answer", "CursorState"]

logger = logging.getLogger(__name__)


class CursorState(enum.Enum):
    """Position of a statement cursor relative to its result rows"""

    Pending = "pending"
    """A row was fetched and not yet handed out."""

    Taken = "taken"
    """The last fetched row was handed out as a borrowed row."""

    Done = "done"
    """The cursor is past the last row. This state is terminal."""

    Consumed = "consumed"
    """The statement was moved into an owned row."""

    Released = "released"
    """The statement was finalized."""


class Answer:
    """
    The result of :meth:`sqlite_tiny.query.Query.execute`.

    Rows can be retrieved in two ways:

    * :meth:`row` consumes the answer and returns the current row, which then owns
      the statement. This is convenient for queries with a single result row.
    * :meth:`next_row`, or iterating over the answer, returns borrowed rows. A
      borrowed row is only valid until the cursor advances again, reading it
      afterwards raises :class:`sqlite_tiny.errors.NoRowError`.

    Once the cursor is past the last row, the answer is exhausted for good:
    :meth:`next_row` keeps returning ``None`` and :meth:`row` keeps raising
    :class:`sqlite_tiny.errors.NoRowError`. Prepare the statement again to re-run it.

    :param sqlite: The database the statement belongs to.
    :param handle: Owned handle to the executed statement.
    """

    def __init__(self, sqlite: Sqlite, handle: OwnedHandle) -> None:
        self._sqlite = sqlite
        self.handle = handle
        self.generation = 0
        self.in_use = InUseFlag()
        self.state = CursorState.Taken

    def step(self) -> bool:
        """
        Advances the cursor by one row. This invalidates all borrowed rows.

        :returns: Whether a new row is pending.
        :raises EngineError: if the engine fails to advance. The answer is exhausted
            afterwards.
        :raises HandleError: if the statement or its database can no longer be used.
        """
        database = self._sqlite._raw()

        if self.state is CursorState.Done:
            return False

        with self.in_use.checked_out():
            statement = self.handle.as_raw()
            code = get_lib().sqlite3_step(statement)
            self.generation += 1

            if code == SQLITE_ROW:
                self.state = CursorState.Pending
                return True

            self.state = CursorState.Done

            if code == SQLITE_DONE:
                return False

            error = last_error(code, database)

        logger.debug("Step failed: %s", error)
        raise error

    @property
    def has_row(self) -> bool:
        """Whether a fetched row is pending."""
        return self.state is CursorState.Pending

    @property
    def exhausted(self) -> bool:
        """Whether the cursor is past the last row."""
        return self.state is CursorState.Done

    def _advance(self) -> bool:
        if self.state is CursorState.Taken:
            return self.step()

        # Raises for consumed or released answers.
        self.handle.as_raw()
        return self.state is CursorState.Pending

    def row(self) -> Row:
        """
        Consumes the answer and returns the current row. If the current row was
        already handed out by :meth:`next_row`, the cursor is advanced first.

        :returns: A row which owns the statement.
        :raises NoRowError: if there is no row.
        :raises EngineError: if advancing the cursor fails.
        """
        if self.state is CursorState.Done:
            raise NoRowError("The query returned no row")

        if not self._advance():
            raise NoRowError("The query returned no row")

        with self.in_use.checked_out():
            handle = self.handle.take()
            self.generation += 1
            self.state = CursorState.Consumed

        return Row(self._sqlite, HandleView.owned(handle))

    def next_row(self) -> Row | None:
        """
        Returns the next row, borrowed from this answer.

        :returns: The row, or ``None`` if there are no more rows.
        :raises EngineError: if advancing the cursor fails.
        """
        if self.state is CursorState.Done:
            return None

        if not self._advance():
            return None

        self.state = CursorState.Taken
        return Row(self._sqlite, HandleView.borrowed(self))

    def __iter__(self) -> Iterator[Row]:
        return self

    def __next__(self) -> Row:
        row = self.next_row()
        if row is None:
            raise StopIteration
        return row

    def close(self) -> None:
        """Finalizes the statement unless it was moved into an owned row."""
        if self.state is not CursorState.Consumed:
            self.handle.release()
            self.generation += 1
            self.state = CursorState.Released

    def __enter__(self) -> Answer:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}({self.state.value})>"

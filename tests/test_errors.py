import pytest

from sqlite_tiny import Sqlite
from sqlite_tiny.config import SqliteTinyConfig
from sqlite_tiny.errors import (
    ConversionError,
    EngineError,
    HandleInvariantError,
    MalformedInputError,
    SqliteError,
    _backtraces_enabled,
)


def test_message():
    err = SqliteError("something failed")

    assert err.message == "something failed"
    assert str(err) == "something failed"
    assert err.cause is None


def test_cause_chain():
    cause = ValueError("bad value")
    err = SqliteError("conversion failed", cause=cause)

    assert err.cause is cause
    assert err.__cause__ is cause
    assert str(err) == "conversion failed\n caused by: bad value"


def test_raise_from_sets_cause():
    with pytest.raises(ConversionError) as exc_info:
        try:
            raise OverflowError("too large")
        except OverflowError as exc:
            raise ConversionError("Failed to convert") from exc

    assert isinstance(exc_info.value.cause, OverflowError)
    assert "caused by: too large" in str(exc_info.value)


def test_backtrace_captured():
    err = SqliteError("with backtrace")

    assert err.has_backtrace()
    assert any("test_backtrace_captured" in line for line in err.backtrace)


def test_backtrace_disabled():
    SqliteTinyConfig().set("engine", "capture_backtrace", False)
    _backtraces_enabled.cache_clear()

    err = SqliteError("without backtrace")

    assert not err.has_backtrace()
    assert err.backtrace is None


def test_engine_error_code():
    err = EngineError("SQLite error: constraint failed", 19)

    assert err.code == 19
    assert isinstance(err, SqliteError)


def test_invariant_error_is_not_recoverable():
    assert not issubclass(HandleInvariantError, SqliteError)


def test_engine_error_message(db):
    with pytest.raises(EngineError) as exc_info:
        db.prepare("SELECT * FROM missing_table")

    assert str(exc_info.value).startswith("SQLite error: ")
    assert "no such table: missing_table" in str(exc_info.value)


def test_malformed_input_is_sqlite_error():
    with pytest.raises(SqliteError):
        Sqlite.open("nul\x00byte.db")

    assert issubclass(MalformedInputError, SqliteError)

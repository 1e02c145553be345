import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from sqlite_tiny import Sqlite, sqlite as sqlite_module
from sqlite_tiny.errors import (
    EngineError,
    HandleError,
    MalformedInputError,
    ThreadSafetyError,
)
from sqlite_tiny.ffi import (
    SQLITE_OPEN_CREATE,
    SQLITE_OPEN_NOMUTEX,
    SQLITE_OPEN_READONLY,
    SQLITE_OPEN_READWRITE,
)


def test_open_memory():
    with Sqlite.open(":memory:") as db:
        assert not db.closed
        assert db.location == ":memory:"

    assert db.closed


def test_open_file(db_path):
    with Sqlite.open(db_path) as db:
        db.execute_batch("CREATE TABLE t (a); INSERT INTO t VALUES (1);")

    with Sqlite.open(db_path) as db:
        row = db.prepare("SELECT a FROM t").execute().row()
        assert row.read(0, int) == 1


def test_open_uri(db_path):
    Sqlite.open(db_path).close()

    with Sqlite.open_uri(f"file:{db_path}") as db:
        db.execute_batch("CREATE TABLE t (a)")


def test_open_uri_does_not_create(db_path):
    with pytest.raises(EngineError):
        Sqlite.open_uri(f"file:{db_path}")


def test_open_uri_read_only(db_path):
    Sqlite.open(db_path).close()

    with Sqlite.open_uri(f"file:{db_path}?mode=ro") as db:
        with pytest.raises(EngineError) as exc_info:
            db.execute_batch("CREATE TABLE t (a)")

    assert exc_info.value.code == 8  # SQLITE_READONLY


def test_open_raw_read_only(db_path):
    Sqlite.open(db_path).close()

    with Sqlite.open_raw(db_path, SQLITE_OPEN_READONLY) as db:
        with pytest.raises(EngineError, match="readonly"):
            db.execute_batch("CREATE TABLE t (a)")


def test_open_missing_directory(tmp_path):
    location = str(tmp_path / "missing" / "test.db")

    with pytest.raises(EngineError) as exc_info:
        Sqlite.open(location)

    assert exc_info.value.code == 14  # SQLITE_CANTOPEN
    assert "unable to open database file" in str(exc_info.value)


def test_open_nul_byte_before_engine_call(monkeypatch):
    def fail():
        raise AssertionError("engine must not be called")

    monkeypatch.setattr(sqlite_module, "get_lib", fail)

    with pytest.raises(MalformedInputError, match="embedded NUL"):
        Sqlite.open("test\x00.db")


def test_open_nomutex_rejected(db_path):
    flags = SQLITE_OPEN_READWRITE | SQLITE_OPEN_CREATE | SQLITE_OPEN_NOMUTEX

    with pytest.raises(ThreadSafetyError):
        Sqlite.open_raw(db_path, flags)


def test_open_single_threaded_library_rejected(monkeypatch):
    class SingleThreadedLib:
        def sqlite3_threadsafe(self):
            return 0

    monkeypatch.setattr(sqlite_module, "get_lib", lambda: SingleThreadedLib())

    with pytest.raises(ThreadSafetyError, match="SQLITE_THREADSAFE=0"):
        Sqlite.open(":memory:")


def test_prepare_nul_byte(db):
    with pytest.raises(MalformedInputError):
        db.prepare("SELECT 1\x00")


@pytest.mark.parametrize("sql", ["", "   ", "-- only a comment"])
def test_prepare_without_statement(db, sql):
    with pytest.raises(MalformedInputError, match="no SQL statement"):
        db.prepare(sql)


def test_prepare_syntax_error(db):
    with pytest.raises(EngineError) as exc_info:
        db.prepare("SELEC 1")

    assert exc_info.value.code == 1  # SQLITE_ERROR
    assert "syntax error" in str(exc_info.value)


def test_prepare_ignores_trailing_statements(db):
    db.execute_batch("CREATE TABLE t (a)")
    db.prepare("INSERT INTO t VALUES (1); INSERT INTO t VALUES (2)").execute()

    row = db.prepare("SELECT count(*) FROM t").execute().row()
    assert row.read(0, int) == 1


def test_execute_batch(db):
    db.execute_batch(
        """
        CREATE TABLE t (a INTEGER PRIMARY KEY, b TEXT NOT NULL);
        INSERT INTO t VALUES (1, 'one');
        INSERT INTO t VALUES (2, 'two');
        """
    )

    row = db.prepare("SELECT count(*) FROM t").execute().row()
    assert row.read(0, int) == 2


def test_execute_batch_constraint_failure(db):
    db.execute_batch("CREATE TABLE t (a INTEGER PRIMARY KEY)")

    with pytest.raises(EngineError) as exc_info:
        db.execute_batch("INSERT INTO t VALUES (1); INSERT INTO t VALUES (1);")

    assert exc_info.value.code == 19  # SQLITE_CONSTRAINT
    assert "UNIQUE constraint failed: t.a" in str(exc_info.value)

    # the first statement is not rolled back
    row = db.prepare("SELECT count(*) FROM t").execute().row()
    assert row.read(0, int) == 1


def test_closed_database(db):
    db.close()
    db.close()

    with pytest.raises(HandleError):
        db.prepare("SELECT 1")

    with pytest.raises(HandleError):
        db.execute_batch("SELECT 1")


def test_statement_of_closed_database():
    db = Sqlite.open(":memory:")
    query = db.prepare("SELECT ?")
    db.close()

    with pytest.raises(HandleError):
        query.bind(1, 1)

    with pytest.raises(HandleError):
        query.execute()

    query.close()


def test_row_of_closed_database():
    db = Sqlite.open(":memory:")
    row = db.prepare("SELECT 1").execute().row()
    db.close()

    assert len(row) == 0

    with pytest.raises(HandleError):
        row.read(0)

    row.close()


def test_shared_between_threads(db_path):
    with Sqlite.open(db_path) as db:
        db.execute_batch("CREATE TABLE t (thread INTEGER, n INTEGER)")

        def insert(thread_id):
            for n in range(20):
                db.prepare("INSERT INTO t VALUES (?, ?)").bind_all(
                    thread_id, n
                ).execute().close()
            return threading.get_ident()

        with ThreadPoolExecutor(max_workers=4) as executor:
            list(executor.map(insert, range(4)))

        row = db.prepare("SELECT count(*) FROM t").execute().row()
        assert row.read(0, int) == 80


def test_repr(db):
    assert repr(db) == "<Sqlite(':memory:', open)>"
    db.close()
    assert repr(db) == "<Sqlite(':memory:', closed)>"

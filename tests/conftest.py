# -*- coding: utf-8 -*-

import logging

import pytest

from sqlite_tiny import Answer, Sqlite
from sqlite_tiny import query as query_module
from sqlite_tiny.config.main import clear_config_cache
from sqlite_tiny.errors import _backtraces_enabled


logging.getLogger("sqlite_tiny").setLevel(logging.DEBUG)


@pytest.fixture(autouse=True)
def config_dir(tmp_path, monkeypatch):
    """Isolates every test from the user's config and log directories."""
    conf_dir = tmp_path / "config"
    monkeypatch.setenv("SQLITE_TINY_CONFIG_DIR", str(conf_dir))
    monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path / "cache"))

    clear_config_cache()
    _backtraces_enabled.cache_clear()

    yield conf_dir

    clear_config_cache()
    _backtraces_enabled.cache_clear()


@pytest.fixture
def db():
    db = Sqlite.open(":memory:")
    yield db
    db.close()


@pytest.fixture
def db_path(tmp_path):
    return str(tmp_path / "test.db")


@pytest.fixture
def table(db):
    """A table with one nullable column of each storage class."""
    db.execute_batch(
        "CREATE TABLE data (i INTEGER, r REAL, t TEXT, b BLOB);"
        "INSERT INTO data VALUES (7, 0.5, 'seven', x'0708');"
        "INSERT INTO data VALUES (NULL, NULL, NULL, NULL);"
    )
    return db


@pytest.fixture
def recorded_answers(monkeypatch):
    """Collects every answer created by ``Query.execute``."""
    answers = []

    class RecordingAnswer(Answer):
        def __init__(self, *args, **kwargs):
            super().__init__(*args, **kwargs)
            answers.append(self)

    monkeypatch.setattr(query_module, "Answer", RecordingAnswer)
    return answers

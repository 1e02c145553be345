import re

import pytest

import sqlite_tiny
from sqlite_tiny import ffi as ffi_module
from sqlite_tiny.config import SqliteTinyConfig
from sqlite_tiny.errors import SqliteError


def test_library_candidates_order(monkeypatch):
    monkeypatch.setenv(ffi_module.LIBRARY_ENV_VAR, "/from/env/libsqlite3.so")
    SqliteTinyConfig().set("engine", "library", "/from/config/libsqlite3.so")

    candidates = ffi_module.library_candidates()

    assert candidates[:2] == ["/from/env/libsqlite3.so", "/from/config/libsqlite3.so"]
    assert len(candidates) == len(set(candidates))


def test_library_candidates_skip_empty(monkeypatch):
    monkeypatch.delenv(ffi_module.LIBRARY_ENV_VAR, raising=False)

    assert "" not in ffi_module.library_candidates()


def test_load_failure(monkeypatch):
    monkeypatch.setattr(
        ffi_module, "library_candidates", lambda: ["/does/not/exist/libsqlite3.so"]
    )

    with pytest.raises(SqliteError) as exc_info:
        ffi_module._load()

    assert "/does/not/exist/libsqlite3.so" in str(exc_info.value)
    assert ffi_module.LIBRARY_ENV_VAR in str(exc_info.value)


def test_get_lib_is_cached():
    assert ffi_module.get_lib() is ffi_module.get_lib()
    assert ffi_module.library_path() is not None


def test_threadsafe_library():
    assert ffi_module.get_lib().sqlite3_threadsafe() != 0


def test_version():
    major, minor, patch = sqlite_tiny.version()

    assert major == 3
    assert minor >= 8

    version_str = ffi_module._libversion(ffi_module.get_lib())
    assert re.match(rf"^{major}\.{minor}\.{patch}", version_str)


def test_package_version():
    assert re.match(r"^\d+\.\d+\.\d+", sqlite_tiny.__version__)

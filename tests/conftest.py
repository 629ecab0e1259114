from __future__ import annotations

import pathlib
import sqlite3

import pytest

from sqlbatch.config import ExecConfig


def sqlite_url(path: pathlib.Path) -> str:
    return f"sqlite:///{path}"


def query(url: str, sql: str) -> list[tuple]:
    conn = sqlite3.connect(url[len("sqlite:///"):])
    try:
        return conn.execute(sql).fetchall()
    finally:
        conn.close()


@pytest.fixture
def db_url(tmp_path) -> str:
    return sqlite_url(tmp_path / "test.db")


@pytest.fixture
def make_cfg(db_url):
    def _make(**kw) -> ExecConfig:
        data = {"driver": "sqlite3", "url": db_url}
        data.update(kw)
        return ExecConfig("test", data)

    return _make

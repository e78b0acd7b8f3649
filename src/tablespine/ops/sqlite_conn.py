"""SQLite connection adapter.

Wraps a raw :class:`sqlite3.Connection` to satisfy the
:class:`~tablespine.core.protocols.Connection` protocol.

A bare ``sqlite3.Connection`` has no portable auto-commit switch: the
``autocommit`` attribute only exists on Python 3.12+ and changes the
transaction model when set.  This adapter maps the protocol's
``autocommit`` flag onto ``isolation_level`` instead, which every
supported interpreter honours:

- ``autocommit = True``  → ``isolation_level = None`` (every statement commits)
- ``autocommit = False`` → ``isolation_level = "DEFERRED"`` (DML opens an
  implicit transaction that lasts until ``commit()`` / ``rollback()``)

Usage::

    from tablespine.ops.sqlite_conn import SqliteConnection

    conn = SqliteConnection(":memory:")
    conn.execute("CREATE TABLE t (id INTEGER PRIMARY KEY, name TEXT)")
    conn.autocommit = False
    conn.execute("INSERT INTO t (name) VALUES (?)", ("a",))
    conn.rollback()
    conn.close()
"""

from __future__ import annotations

import sqlite3
from collections.abc import Sequence
from typing import Any


class SqliteConnection:
    """Adapter: ``sqlite3.Connection`` → ``Connection`` protocol.

    Each ``execute`` returns a fresh cursor so that a result set being
    materialized is never clobbered by a nested statement.
    """

    def __init__(
        self,
        path: str = ":memory:",
        *,
        autocommit: bool = True,
        timeout: float = 5.0,
    ) -> None:
        self._conn = sqlite3.connect(path, timeout=timeout, check_same_thread=False)
        self._conn.execute("PRAGMA foreign_keys = ON")
        self.autocommit = autocommit

    # -- Connection protocol -----------------------------------------------

    @property
    def autocommit(self) -> bool:
        return self._conn.isolation_level is None

    @autocommit.setter
    def autocommit(self, value: bool) -> None:
        self._conn.isolation_level = None if value else "DEFERRED"

    def execute(self, sql: str, params: Sequence[Any] = ()) -> sqlite3.Cursor:
        return self._conn.execute(sql, tuple(params))

    def executemany(self, sql: str, params: Sequence[Sequence[Any]]) -> sqlite3.Cursor:
        return self._conn.executemany(sql, [tuple(p) for p in params])

    def commit(self) -> None:
        self._conn.commit()

    def rollback(self) -> None:
        self._conn.rollback()

    def close(self) -> None:
        self._conn.close()

    # -- convenience -------------------------------------------------------

    @property
    def in_transaction(self) -> bool:
        """True while an implicit or explicit transaction is open."""
        return self._conn.in_transaction

    @property
    def raw(self) -> sqlite3.Connection:
        """Access the underlying ``sqlite3.Connection`` (e.g. for pragmas)."""
        return self._conn

    def __repr__(self) -> str:
        return f"SqliteConnection({self._conn!r}, autocommit={self.autocommit})"

"""
Structural protocols for the connection collaborator.

The repository never opens, pools or retains connections.  Every call is
handed an object satisfying :class:`Connection`; the adapter in
:mod:`tablespine.ops.sqlite_conn` is the reference implementation.

Architecture:
    ::

        Connection Protocol:
        ┌────────────────────────────────────────────────────────┐
        │ execute(sql, params)   → Cursor                        │
        │ executemany(sql, seq)  → Cursor                        │
        │ commit()               → Commit transaction            │
        │ rollback()             → Rollback transaction          │
        │ autocommit             → read/write auto-commit mode   │
        └────────────────────────────────────────────────────────┘

        Cursor Protocol (DB-API 2.0 subset):
        ┌────────────────────────────────────────────────────────┐
        │ description  → column names of the last SELECT         │
        │ rowcount     → rows affected by the last DML           │
        │ lastrowid    → generated key of the last INSERT        │
        │ __iter__     → forward-only row iteration              │
        └────────────────────────────────────────────────────────┘

    SQL text uses ``?`` positional placeholders.

Tags:
    protocol, connection, cursor, database, tablespine

Doc-Types:
    - API Reference
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class Cursor(Protocol):
    """Minimal DB-API 2.0 cursor used by the statement and materializer."""

    @property
    def description(self) -> Sequence[Sequence[Any]] | None: ...

    @property
    def rowcount(self) -> int: ...

    @property
    def lastrowid(self) -> Any: ...

    def __iter__(self) -> Iterator[Sequence[Any]]: ...

    def close(self) -> None: ...


@runtime_checkable
class Connection(Protocol):
    """
    Minimal SYNCHRONOUS connection interface used by the repository.

    Examples:
        >>> def store(conn: Connection, rows: list[tuple]) -> None:
        ...     conn.executemany("INSERT INTO data (id, value) VALUES (?,?)", rows)
        ...     conn.commit()
    """

    @property
    def autocommit(self) -> bool:
        """True when every statement commits on its own."""
        ...

    @autocommit.setter
    def autocommit(self, value: bool) -> None: ...

    def execute(self, sql: str, params: Sequence[Any] = ()) -> Cursor:
        """Execute SQL statement with optional parameters."""
        ...

    def executemany(self, sql: str, params: Sequence[Sequence[Any]]) -> Cursor:
        """Execute SQL statement for multiple parameter sets."""
        ...

    def commit(self) -> None:
        """Commit current transaction."""
        ...

    def rollback(self) -> None:
        """Rollback current transaction."""
        ...


__all__ = [
    "Connection",
    "Cursor",
]

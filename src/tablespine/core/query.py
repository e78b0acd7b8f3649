"""
SQL text builders.

Every function here is pure: (table, columns, predicate, order, limit,
offset) in, SQL text with ``?`` placeholders out.  Nothing is parsed or
optimised; the text comes from fixed templates.

Manifesto:
    Only *values* are ever bound as parameters.  Identifiers and caller
    supplied clause text are interpolated, so two paths exist and must not
    be confused:

    - **Safe path:** column/value filters (``by_value`` / ``by_values``)
      render ``col = ?`` or ``col IN ( ?,? )`` and bind the values.
    - **Unsafe boundary:** ``where`` predicates and ``order_by`` clauses
      given by the caller are copied verbatim.  The caller owns their
      safety.

    ``limit`` and ``offset`` are rendered as integer literals after being
    validated as non-negative ints, so they cannot carry SQL.

Statement shapes::

    INSERT INTO <table> (<cols>) VALUES (<placeholders>);
    UPDATE <table> SET <col = ?,...> WHERE <pk> = ?;
    SELECT <cols> FROM <table> [WHERE <pred>] [ORDER BY <clause>] [LIMIT <n>] [OFFSET <n>];
    DELETE FROM <table> WHERE <pred-or-pk=?>;
    SELECT COUNT(<pk>) AS total FROM <table> [WHERE <pred>];

Examples:
    >>> select("companies", "id,city", where=by_value("city"), order_by="id", limit=2)
    'SELECT id,city FROM companies WHERE city = ? ORDER BY id LIMIT 2;'
    >>> by_values("id", 3)
    'id IN ( ?,?,? )'

Tags:
    sql, query-builder, templates, tablespine

Doc-Types:
    - API Reference
"""

from __future__ import annotations

from collections.abc import Sequence


def placeholders(count: int) -> str:
    """Comma-separated ``?`` list: ``placeholders(3) == "?,?,?"``."""
    if count < 1:
        raise ValueError("placeholders() needs at least one value")
    return ",".join("?" for _ in range(count))


def _literal(name: str, value: int | None) -> str | None:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{name} must be an int, got {type(value).__name__}")
    if value < 0:
        raise ValueError(f"{name} must be >= 0, got {value}")
    return str(value)


def _tail(order_by: str | None, limit: int | None, offset: int | None) -> str:
    limit_text = _literal("limit", limit)
    offset_text = _literal("offset", offset)
    if offset_text is not None and limit_text is None:
        raise ValueError("offset requires a limit")

    parts = []
    if order_by:
        parts.append(f" ORDER BY {order_by}")
    if limit_text is not None:
        parts.append(f" LIMIT {limit_text}")
    if offset_text is not None:
        parts.append(f" OFFSET {offset_text}")
    return "".join(parts)


# -- Predicates ------------------------------------------------------------


def by_value(column: str) -> str:
    """``column = ?``"""
    return f"{column} = ?"


def by_values(column: str, count: int) -> str:
    """``column IN ( ?,?,... )`` with one placeholder per value."""
    return f"{column} IN ( {placeholders(count)} )"


# -- Statements ------------------------------------------------------------


def select(
    table: str,
    columns: str,
    *,
    where: str | None = None,
    order_by: str | None = None,
    limit: int | None = None,
    offset: int | None = None,
) -> str:
    """SELECT over ``columns`` (an already comma-joined list)."""
    where_text = f" WHERE {where}" if where else ""
    return f"SELECT {columns} FROM {table}{where_text}{_tail(order_by, limit, offset)};"


def count(table: str, key_column: str | None, *, where: str | None = None) -> str:
    """``SELECT COUNT(<pk>) AS total``; counts ``*`` when there is no key."""
    where_text = f" WHERE {where}" if where else ""
    return f"SELECT COUNT({key_column or '*'}) AS total FROM {table}{where_text};"


def insert(table: str, columns: Sequence[str]) -> str:
    return f"INSERT INTO {table} ({','.join(columns)}) VALUES ({placeholders(len(columns))});"


def update(table: str, columns: Sequence[str], key_column: str) -> str:
    if not columns:
        raise ValueError(f"nothing to update on {table}: no non-key columns")
    assignments = ",".join(f"{c} = ?" for c in columns)
    return f"UPDATE {table} SET {assignments} WHERE {key_column} = ?;"


def delete(table: str, *, where: str | None = None) -> str:
    """DELETE with a predicate, or every row when ``where`` is omitted."""
    if where:
        return f"DELETE FROM {table} WHERE {where};"
    return f"DELETE FROM {table};"


__all__ = [
    "by_value",
    "by_values",
    "count",
    "delete",
    "insert",
    "placeholders",
    "select",
    "update",
]

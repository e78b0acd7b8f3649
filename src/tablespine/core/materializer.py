"""Turning cursor rows into entities.

For every row the materializer runs three steps, in this order:

1. **instantiate** ``(row) -> entity``: build an empty (or row-seeded) entity
2. **populate** ``(row, entity)``: the default copies every mapped column
   through the registry setters, in column declaration order
3. **extra** ``(row, entity)``: optional caller hook for joined or computed
   columns; it runs last so it may overwrite what populate wrote

Rows are handed to the hooks as plain ``dict`` objects keyed by the
column names in ``cursor.description``, whatever row type the driver
produces.  A failure in any step aborts the whole read; a half-populated
entity is never returned.  The cursor is closed once the read ends,
whether it drained or failed.

Tags:
    tablespine, materialization, rows, hooks

Doc-Types:
    api-reference
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping
from typing import Any, TypeVar

from tablespine.core.bindings import FieldBindings
from tablespine.core.errors import MappingError
from tablespine.core.protocols import Cursor

E = TypeVar("E")

Row = Mapping[str, Any]
Instantiate = Callable[[Row], E]
Populate = Callable[[Row, E], None]


def iter_rows(cursor: Cursor) -> Iterator[dict[str, Any]]:
    """Yield each remaining cursor row as a ``{column: value}`` dict."""
    description = cursor.description or ()
    names = [d[0] for d in description]
    for raw in cursor:
        yield dict(zip(names, raw))


def populate_columns(bindings: FieldBindings, columns: tuple[str, ...], row: Row, entity: Any) -> None:
    """Default population: every column, in order, through its setter."""
    for column_name in columns:
        try:
            value = row[column_name]
        except KeyError:
            raise MappingError(
                f"column {column_name!r} is missing from the result row"
            ).with_context(column=column_name) from None
        bindings.set(entity, column_name, value)


def materialize(
    cursor: Cursor,
    instantiate: Instantiate[E],
    populate: Populate[E],
    extra: Populate[E] | None = None,
) -> list[E]:
    """Drain ``cursor`` into a list of entities, closing it afterwards."""
    results: list[E] = []
    try:
        for row in iter_rows(cursor):
            entity = instantiate(row)
            populate(row, entity)
            if extra is not None:
                extra(row, entity)
            results.append(entity)
    finally:
        cursor.close()
    return results


__all__ = [
    "Instantiate",
    "Populate",
    "Row",
    "iter_rows",
    "materialize",
    "populate_columns",
]

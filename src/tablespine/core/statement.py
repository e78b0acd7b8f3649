"""Prepared statements and parameter population.

:class:`PreparedStatement` holds one SQL text and the parameters bound to
its ``?`` placeholders (1-based, like every SQL driver API), optionally
accumulating several parameter sets as a batch.  The populator functions
fill a statement from a plain value list or from an entity through the
:class:`~tablespine.core.bindings.FieldBindings` getters.

Driver exceptions raised while executing are wrapped in
:class:`~tablespine.core.errors.QueryError` carrying the operation, table
and SQL text.

Tags:
    tablespine, statement, parameters, batch

Doc-Types:
    api-reference
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from typing import Any

from tablespine.core.bindings import FieldBindings
from tablespine.core.errors import QueryError, TableSpineError
from tablespine.core.logging import get_logger
from tablespine.core.protocols import Connection, Cursor

logger = get_logger(__name__)


class PreparedStatement:
    """One SQL text plus its bound parameters.

    Args:
        conn: Connection the statement executes on.
        sql: SQL text with ``?`` placeholders.
        operation: Repository operation name, for error context and logs.
        table: Target table, for error context and logs.
        return_generated_keys: Collect ``cursor.lastrowid`` for every batch
            entry into :attr:`generated_keys`.
    """

    def __init__(
        self,
        conn: Connection,
        sql: str,
        *,
        operation: str,
        table: str | None = None,
        return_generated_keys: bool = False,
    ) -> None:
        self.conn = conn
        self.sql = sql
        self.operation = operation
        self.table = table
        self.return_generated_keys = return_generated_keys
        self.generated_keys: list[Any] = []
        self._params: dict[int, Any] = {}
        self._batch: list[tuple[Any, ...]] = []
        logger.debug("statement_prepared", operation=operation, table=table, sql=sql)

    # -- Binding -----------------------------------------------------------

    def set_object(self, index: int, value: Any) -> None:
        """Bind ``value`` to the 1-based placeholder ``index``."""
        if index < 1:
            raise IndexError(f"parameter index is 1-based, got {index}")
        self._params[index] = value

    def clear_parameters(self) -> None:
        self._params.clear()

    @property
    def parameters(self) -> tuple[Any, ...]:
        """Currently bound values in placeholder order."""
        if not self._params:
            return ()
        highest = max(self._params)
        missing = [i for i in range(1, highest + 1) if i not in self._params]
        if missing:
            raise IndexError(f"parameters {missing} of {self.operation} are not bound")
        return tuple(self._params[i] for i in range(1, highest + 1))

    def add_batch(self) -> None:
        """Snapshot the bound parameters as one batch entry."""
        self._batch.append(self.parameters)
        self._params.clear()

    @property
    def batch_size(self) -> int:
        return len(self._batch)

    # -- Execution ---------------------------------------------------------

    @contextmanager
    def _wrap_errors(self) -> Iterator[None]:
        try:
            yield
        except TableSpineError:
            raise
        except Exception as exc:
            raise QueryError(
                f"{self.operation} on {self.table or 'query'} failed: {exc}",
                cause=exc,
            ).with_context(operation=self.operation, table=self.table, sql=self.sql) from exc

    def execute_query(self) -> Cursor:
        """Run a SELECT and return the (lazy, forward-only) cursor."""
        with self._wrap_errors():
            cursor = self.conn.execute(self.sql, self.parameters)
        logger.debug("statement_executed", operation=self.operation, table=self.table)
        return cursor

    def execute_update(self) -> int:
        """Run a single DML statement; return the affected rows (-1 if unknown)."""
        with self._wrap_errors():
            cursor = self.conn.execute(self.sql, self.parameters)
        rowcount = cursor.rowcount
        logger.debug("statement_executed", operation=self.operation, table=self.table, rowcount=rowcount)
        return rowcount

    def execute_batch(self) -> int:
        """Run every batch entry; return the total affected rows (-1 if unknown).

        With ``return_generated_keys`` each entry is executed on its own so
        that its ``lastrowid`` can be collected in entry order; otherwise the
        whole batch goes through one ``executemany``.
        """
        if not self._batch:
            return 0
        with self._wrap_errors():
            if self.return_generated_keys:
                counts: list[int] = []
                self.generated_keys = []
                for params in self._batch:
                    cursor = self.conn.execute(self.sql, params)
                    counts.append(cursor.rowcount)
                    if cursor.lastrowid is not None:
                        self.generated_keys.append(cursor.lastrowid)
            else:
                counts = [self.conn.executemany(self.sql, self._batch).rowcount]
        rowcount = -1 if any(c < 0 for c in counts) else sum(counts)
        logger.debug(
            "statement_executed",
            operation=self.operation,
            table=self.table,
            batch=len(self._batch),
            rowcount=rowcount,
        )
        self._batch.clear()
        return rowcount

    def __repr__(self) -> str:
        return f"PreparedStatement({self.sql!r}, operation={self.operation!r})"


# -- Populators --------------------------------------------------------------


def bind_values(statement: PreparedStatement, values: Sequence[Any], start: int = 1) -> int:
    """Bind ``values`` in order from placeholder ``start``; return how many."""
    for offset, value in enumerate(values):
        statement.set_object(start + offset, value)
    return len(values)


def bind_entity(
    statement: PreparedStatement,
    bindings: FieldBindings,
    entity: Any,
    columns: Sequence[str],
    start: int = 1,
) -> int:
    """Bind ``entity``'s values for ``columns`` through the registry getters.

    Returns the number of parameters bound, so the caller knows the next
    free placeholder (``start + n``).
    """
    for offset, column_name in enumerate(columns):
        statement.set_object(start + offset, bindings.get(entity, column_name))
    return len(columns)


__all__ = [
    "PreparedStatement",
    "bind_entity",
    "bind_values",
]

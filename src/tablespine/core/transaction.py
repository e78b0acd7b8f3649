"""Transaction scope for multi-row mutations.

::

    Idle ──► TransactionOpen ──┬── success ──► commit   ──┐
                               └── failure ──► rollback ──┴──► restore auto-commit ──► Idle

The auto-commit mode found on entry is restored on every exit path
(success, exception, early return), after the commit or rollback.

Tags:
    tablespine, transaction, rollback, autocommit

Doc-Types:
    api-reference
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from tablespine.core.errors import TableSpineError
from tablespine.core.logging import get_logger
from tablespine.core.protocols import Connection

logger = get_logger(__name__)


@contextmanager
def transaction(
    conn: Connection,
    *,
    operation: str = "transaction",
    table: str | None = None,
) -> Iterator[Connection]:
    """Run the block with auto-commit off; commit or roll back at the end.

    Usage::

        with transaction(conn, operation="insert_many", table="companies"):
            statement.execute_batch()
    """
    previous = conn.autocommit
    conn.autocommit = False
    try:
        yield conn
        conn.commit()
    except BaseException as exc:
        conn.rollback()
        details = exc.to_dict() if isinstance(exc, TableSpineError) else {"error": repr(exc)}
        logger.warning("transaction_rolled_back", operation=operation, table=table, **details)
        raise
    finally:
        conn.autocommit = previous


__all__ = ["transaction"]

"""Connection factory: create repository connections from URL strings.

The repository itself never acquires connections; callers pass one per
call.  ``create_connection()`` is the convenience entry point for getting
one that satisfies the :class:`~tablespine.core.protocols.Connection`
protocol.

Supported URL schemes
---------------------
==================  ==========================================  ============
Scheme              Example                                     Backend
==================  ==========================================  ============
``memory``          ``memory`` or ``:memory:`` or ``None``       SQLite RAM
``sqlite``          ``sqlite:///path/to/file.db``                SQLite file
``(file path)``     ``./data/my.db`` or ``/tmp/app.db``          SQLite file
==================  ==========================================  ============

Any other ``scheme://`` raises :class:`~tablespine.core.errors.ConfigError`.

Usage
-----
::

    from tablespine.core.connection import create_connection

    conn, info = create_connection()                    # settings.database_url
    conn, info = create_connection("sqlite:///runs.db")
    print(info)
    # ConnectionInfo(backend='sqlite', persistent=True, path='/abs/runs.db')
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from tablespine.core.errors import ConfigError
from tablespine.core.logging import get_logger
from tablespine.core.settings import get_settings
from tablespine.ops.sqlite_conn import SqliteConnection

logger = get_logger(__name__)


# ── ConnectionInfo ───────────────────────────────────────────────────────


@dataclass(frozen=True)
class ConnectionInfo:
    """Metadata about a database connection."""

    backend: str
    """Backend identifier: ``"sqlite"``."""

    persistent: bool
    """Whether data survives process exit."""

    url: str
    """The original URL or path used to create the connection."""

    resolved_path: str | None = None
    """For file-based SQLite, the resolved absolute path."""

    def __repr__(self) -> str:
        parts = [f"backend={self.backend!r}", f"persistent={self.persistent}"]
        if self.resolved_path:
            parts.append(f"path={self.resolved_path!r}")
        else:
            parts.append(f"url={self.url!r}")
        return f"ConnectionInfo({', '.join(parts)})"


# ── URL parsing ──────────────────────────────────────────────────────────


def _parse_url(db: str | None) -> tuple[str, str]:
    """Parse a database URL into ``(scheme, target)``.

    ``scheme`` is one of ``"memory"``, ``"file"``.
    """
    if db is None or db in ("", "memory", ":memory:"):
        return "memory", ":memory:"

    if db.startswith("sqlite:///"):
        path = db[len("sqlite:///"):]
        if not path or path == ":memory:":
            return "memory", ":memory:"
        return "file", path

    if "://" in db:
        scheme = db.split("://", 1)[0]
        raise ConfigError(
            f"unsupported database URL scheme {scheme!r}; expected memory, sqlite:/// or a file path"
        ).with_context(url=db)

    return "file", db


def create_connection(
    db: str | None = None,
    *,
    autocommit: bool = True,
    timeout: float | None = None,
) -> tuple[SqliteConnection, ConnectionInfo]:
    """Open a connection for ``db`` (defaults to ``settings.database_url``).

    Returns
    -------
    tuple[SqliteConnection, ConnectionInfo]
    """
    settings = get_settings()
    if db is None:
        db = settings.database_url
    timeout = settings.sqlite_timeout if timeout is None else timeout

    scheme, target = _parse_url(db)
    if scheme == "memory":
        conn = SqliteConnection(":memory:", autocommit=autocommit, timeout=timeout)
        info = ConnectionInfo(backend="sqlite", persistent=False, url=":memory:")
    else:
        path = Path(target)
        path.parent.mkdir(parents=True, exist_ok=True)
        resolved = str(path.resolve())
        conn = SqliteConnection(resolved, autocommit=autocommit, timeout=timeout)
        info = ConnectionInfo(backend="sqlite", persistent=True, url=db, resolved_path=resolved)

    logger.debug("connection_created", backend=info.backend, persistent=info.persistent)
    return conn, info


__all__ = [
    "ConnectionInfo",
    "create_connection",
]

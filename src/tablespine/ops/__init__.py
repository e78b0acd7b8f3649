"""Connection adapters for tablespine."""

from tablespine.ops.sqlite_conn import SqliteConnection

__all__ = ["SqliteConnection"]

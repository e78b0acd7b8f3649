"""
Structured error types for tablespine.

Provides a small hierarchy of typed errors carrying enough metadata to
diagnose a failed repository call: which operation ran, against which
table, with which SQL text, and the underlying driver exception.

Manifesto:
    - **Typed Error Hierarchy:** Mapping, query and creation failures are
      distinct types so callers can react to each one
    - **Propagate, never swallow:** A value that cannot be mapped raises;
      it is never logged and dropped
    - **Rich Context:** Errors carry operation/table/sql for logging
    - **Error Chaining:** The driver exception is kept as ``__cause__``

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────────┐
        │                      TableSpineError                         │
        │  (category, retryable, context, cause)                       │
        ├─────────────────────────────────────────────────────────────┤
        │                                                              │
        │  MappingError      ConfigError       DatabaseError           │
        │  (MAPPING)         (CONFIG)          (DATABASE)              │
        │                                          │                   │
        │                                    QueryError                │
        │                                    CreationError             │
        └─────────────────────────────────────────────────────────────┘

Examples:
    >>> error = QueryError("insert on companies failed")
    >>> error.with_context(operation="insert_many", table="companies")
    QueryError('insert on companies failed', category=DATABASE)
    >>> error.context.table
    'companies'

Tags:
    error-handling, exception-hierarchy, error-context, tablespine

Doc-Types:
    - API Reference
    - Error Handling Guide
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """
    Standard error categories for classification.

    Attributes:
        DATABASE: Statement execution, constraint violation, connectivity
        MAPPING: Entity field <-> column conversion failures
        CONFIG: Missing or invalid settings, unsupported connection URLs
        INTERNAL: Bugs, unexpected state
        UNKNOWN: Uncategorized errors
    """

    DATABASE = "DATABASE"
    MAPPING = "MAPPING"
    CONFIG = "CONFIG"
    INTERNAL = "INTERNAL"
    UNKNOWN = "UNKNOWN"


@dataclass
class ErrorContext:
    """
    Structured context attached to a :class:`TableSpineError`.

    Attributes:
        operation: Repository operation name (e.g. ``"insert_many"``)
        table: Table the operation targeted
        column: Column involved, for mapping failures
        sql: SQL text that was being executed
        metadata: Additional key-value pairs
    """

    operation: str | None = None
    table: str | None = None
    column: str | None = None
    sql: str | None = None

    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["operation", "table", "column", "sql"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class TableSpineError(Exception):
    """
    Base exception for all tablespine errors.

    Subclasses set ``default_category`` and ``default_retryable`` to give
    sensible defaults for their domain.

    Examples:
        >>> try:
        ...     raise ValueError("bad enum name")
        ... except ValueError as e:
        ...     error = MappingError("cannot map column 'status'", cause=e)
        >>> error.cause
        ValueError('bad enum name')
        >>> error.to_dict()["category"]
        'MAPPING'
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL
    default_retryable: bool = False

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        retryable: bool | None = None,
        context: ErrorContext | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.retryable = retryable if retryable is not None else self.default_retryable
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> TableSpineError:
        """
        Add context to this error (fluent API).

        Usage:
            raise QueryError("Failed").with_context(
                operation="read_by",
                table="companies",
            )
        """
        for key, value in kwargs.items():
            if hasattr(self.context, key) and key != "metadata":
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
            "retryable": self.retryable,
        }

        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict

        if self.cause is not None:
            result["cause"] = str(self.cause)

        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# MAPPING ERRORS
# =============================================================================


class MappingError(TableSpineError):
    """
    A value could not be moved between an entity field and a column.

    Raised for inaccessible or read-only fields, enum names that match no
    member, wrong runtime types for a conversion, unmapped columns, and
    operations that need a primary key on an entity that declares none.
    """

    default_category = ErrorCategory.MAPPING
    default_retryable = False


# =============================================================================
# CONFIG ERRORS
# =============================================================================


class ConfigError(TableSpineError):
    """Configuration error (unsupported URL, invalid setting)."""

    default_category = ErrorCategory.CONFIG
    default_retryable = False


# =============================================================================
# DATABASE ERRORS
# =============================================================================


class DatabaseError(TableSpineError):
    """Database query or transaction error."""

    default_category = ErrorCategory.DATABASE
    default_retryable = False


class QueryError(DatabaseError):
    """SQL execution failed (syntax, constraint violation, connectivity)."""

    pass


class CreationError(DatabaseError):
    """An insert batch did not create every row it was asked to."""

    pass


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "TableSpineError",
    "MappingError",
    "ConfigError",
    "DatabaseError",
    "QueryError",
    "CreationError",
]

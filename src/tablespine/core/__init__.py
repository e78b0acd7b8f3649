"""
tablespine.core - entity-to-table mapping engine.

Modules:
    metadata     - column()/identity() declarations, EntityDescriptor
    bindings     - per-column getter/setter registry
    query        - SQL text templates
    statement    - PreparedStatement and parameter populators
    materializer - cursor rows → entities
    paging       - Pageable
    transaction  - transaction scope for batch mutations
    repository   - Repository (CRUD orchestration)
    errors       - typed error hierarchy
    logging      - structlog configuration
    settings     - pydantic-settings configuration
    connection   - create_connection() from a URL
"""

from tablespine.core.bindings import FieldBindings, ignore
from tablespine.core.connection import ConnectionInfo, create_connection
from tablespine.core.errors import (
    ConfigError,
    CreationError,
    DatabaseError,
    ErrorCategory,
    ErrorContext,
    MappingError,
    QueryError,
    TableSpineError,
)
from tablespine.core.logging import configure_logging, get_logger
from tablespine.core.metadata import ColumnInfo, EntityDescriptor, GenerationType, column, identity
from tablespine.core.paging import Pageable
from tablespine.core.protocols import Connection, Cursor
from tablespine.core.repository import Repository
from tablespine.core.settings import TableSpineSettings, get_settings
from tablespine.core.statement import PreparedStatement
from tablespine.core.transaction import transaction

__all__ = [
    # Mapping
    "column",
    "identity",
    "ColumnInfo",
    "EntityDescriptor",
    "GenerationType",
    "FieldBindings",
    "ignore",
    # Repository
    "Repository",
    "Pageable",
    "PreparedStatement",
    "transaction",
    # Protocols / connections
    "Connection",
    "Cursor",
    "ConnectionInfo",
    "create_connection",
    # Errors
    "ErrorCategory",
    "ErrorContext",
    "TableSpineError",
    "MappingError",
    "ConfigError",
    "DatabaseError",
    "QueryError",
    "CreationError",
    # Ambient
    "configure_logging",
    "get_logger",
    "TableSpineSettings",
    "get_settings",
]

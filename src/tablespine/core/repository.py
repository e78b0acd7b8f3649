"""Generic entity repository.

Provides :class:`Repository`, which maps one dataclass entity type onto
one table and offers parameterized CRUD and dynamic-filter reads against
any object satisfying the :class:`~tablespine.core.protocols.Connection`
protocol.

Manifesto:
    The mapping is derived once, when the repository is built, and then
    reused by every call.  The repository holds no connection: each call
    receives one, so a single repository can serve many threads as long as
    each thread brings its own connection and all ``bind_*`` calls happen
    before the repository is shared.

    - **Values are parameters:** filter values are always bound; only
      caller predicate / order-by text is interpolated, verbatim
    - **All or nothing:** multi-row mutations run in one transaction per
      call and are rolled back on any failure
    - **Fail loudly:** mapping failures raise; nothing is logged and dropped

Architecture::

    ┌────────────────────────────────────────────────────────────────────┐
    │                          Repository[E]                             │
    │                                                                    │
    │   descriptor: EntityDescriptor   ← built once from the dataclass   │
    │   bindings:   FieldBindings      ← per-column getter / setter      │
    │                                                                    │
    │   count / count_by / count_where                     → int         │
    │   insert / insert_many                               → int         │
    │   update / update_many                               → int         │
    │   delete / delete_many / delete_by_id / delete_by_ids              │
    │   delete_by / delete_where / delete_all              → int         │
    │   read / read_by / read_where / read_by_query        → list[E]     │
    │   read_by_id                                         → E | None    │
    └────────────────────────────────────────────────────────────────────┘

          caller ─► query.* (SQL text) ─► PreparedStatement (bind values)
                 ─► conn.execute ─► materialize (rows → entities) ─► caller

Usage:
    >>> repo = Repository(Company)
    >>> repo.insert(conn, Company(id="co013", company_name="New Codes", city="Florence"))
    1
    >>> [c.company_name for c in repo.read_by(conn, "city", "Milan", order_by="company_name", limit=2)]
    ['Aether Innovations', 'BluePeak Logistics']

Tags:
    repository, database, mapping, crud, tablespine

Doc-Types:
    - API Reference
    - Architecture Documentation
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Any, Generic, TypeVar

from tablespine.core import query
from tablespine.core.bindings import FieldBindings, Getter, Setter
from tablespine.core.errors import CreationError, MappingError
from tablespine.core.logging import get_logger
from tablespine.core.materializer import Populate, Row, materialize, populate_columns
from tablespine.core.metadata import EntityDescriptor
from tablespine.core.paging import Pageable
from tablespine.core.protocols import Connection
from tablespine.core.statement import PreparedStatement, bind_entity, bind_values
from tablespine.core.transaction import transaction

logger = get_logger(__name__)

E = TypeVar("E")
C = TypeVar("C")

_VALUE_SET_TYPES = (list, tuple, set, frozenset)


def is_value_set(value: Any) -> bool:
    """True for ``list``/``tuple``/``set``/``frozenset`` (membership filters)."""
    return isinstance(value, _VALUE_SET_TYPES)


class Repository(Generic[E]):
    """Parameterized CRUD for one entity type.

    Parameters:
        entity_type: Dataclass declared with :func:`~tablespine.core.metadata.column`.
        instantiate: ``(row) -> entity`` factory.  Defaults to calling
            ``entity_type()`` with no arguments.
        populate: ``(row, entity)`` replacement for the default
            column-by-column population.

    Subclasses may override :meth:`instantiate_entity` and
    :meth:`populate_entity` instead of passing hooks.
    """

    def __init__(
        self,
        entity_type: type[E],
        *,
        instantiate: Callable[[Row], E] | None = None,
        populate: Populate[E] | None = None,
    ) -> None:
        self.entity_type = entity_type
        self.descriptor = EntityDescriptor.from_type(entity_type)
        self.bindings = FieldBindings(self.descriptor)
        self._instantiate = instantiate
        self._populate = populate

    # -- Metadata shortcuts ------------------------------------------------

    @property
    def table_name(self) -> str:
        return self.descriptor.table_name

    @property
    def columns(self) -> tuple[str, ...]:
        return self.descriptor.columns

    @property
    def primary_key(self) -> str | None:
        return self.descriptor.primary_key

    def column_for_field(self, field_name: str) -> str | None:
        return self.descriptor.column_for_field(field_name)

    def field_for_column(self, column_name: str) -> str | None:
        return self.descriptor.field_for_column(column_name)

    def order_by_for(self, pageable: Pageable) -> str | None:
        """ORDER BY text for ``pageable``, or ``None`` when it is unsorted."""
        if not pageable.is_sorted:
            return None
        column_name = self.descriptor.column_for_field(pageable.sort_field)
        if column_name is None:
            raise MappingError(
                f"cannot sort by {pageable.sort_field!r}: not a mapped field of {self.entity_type.__name__}"
            ).with_context(table=self.table_name)
        return f"{column_name} DESC" if pageable.descending else column_name

    # -- Bindings ----------------------------------------------------------

    def bind_getter(self, column_name: str, getter: Getter) -> None:
        """Use ``getter(entity)`` to read ``column_name`` for every later call."""
        self.bindings.bind_getter(column_name, getter)

    def bind_setter(self, column_name: str, setter: Setter) -> None:
        """Use ``setter(entity, value)`` to write ``column_name`` for every later call."""
        self.bindings.bind_setter(column_name, setter)

    # -- Hooks -------------------------------------------------------------

    def instantiate_entity(self, row: Row) -> E:
        """Create the entity for ``row`` (before population)."""
        if self._instantiate is not None:
            return self._instantiate(row)
        try:
            return self.entity_type()
        except TypeError as exc:
            raise MappingError(
                f"{self.entity_type.__name__} cannot be built without arguments; "
                "pass instantiate= or override instantiate_entity()",
                cause=exc,
            ).with_context(table=self.table_name) from exc

    def populate_entity(self, row: Row, entity: Any) -> None:
        """Copy the mapped columns of ``row`` onto ``entity``."""
        if self._populate is not None:
            self._populate(row, entity)
            return
        populate_columns(self.bindings, self.descriptor.columns, row, entity)

    # -- Internals ---------------------------------------------------------

    def _statement(self, conn: Connection, sql: str, operation: str, **kwargs: Any) -> PreparedStatement:
        return PreparedStatement(conn, sql, operation=operation, table=self.table_name, **kwargs)

    def _fetch(
        self,
        conn: Connection,
        sql: str,
        values: Sequence[Any],
        operation: str,
        *,
        factory: Callable[[], Any] | None = None,
        consumer: Populate[Any] | None = None,
    ) -> list[Any]:
        statement = self._statement(conn, sql, operation)
        bind_values(statement, values)
        cursor = statement.execute_query()
        if factory is not None:
            return materialize(cursor, lambda _row: factory(), self.populate_entity, consumer)
        return materialize(cursor, self.instantiate_entity, self.populate_entity, consumer)

    def _count(self, conn: Connection, sql: str, values: Sequence[Any], operation: str) -> int:
        statement = self._statement(conn, sql, operation)
        bind_values(statement, values)
        cursor = statement.execute_query()
        try:
            for row in cursor:
                return int(row[0] or 0)
            return 0
        finally:
            cursor.close()

    def _update_rows(self, conn: Connection, sql: str, values: Sequence[Any], operation: str) -> int:
        statement = self._statement(conn, sql, operation)
        bind_values(statement, values)
        return statement.execute_update()

    @staticmethod
    def _paging(
        order_by: str | None,
        limit: int | None,
        offset: int | None,
        pageable: Pageable | None,
        resolve: Callable[[Pageable], str | None],
    ) -> tuple[str | None, int | None, int | None]:
        if pageable is None:
            return order_by, limit, offset
        if order_by is not None or limit is not None or offset is not None:
            raise ValueError("pass either pageable or order_by/limit/offset, not both")
        return resolve(pageable), pageable.size, pageable.offset

    def _filter(self, column_name: str, value: Any) -> tuple[str, list[Any]] | None:
        """Predicate + values for ``column = ?`` or ``column IN (...)``.

        ``None`` means an empty value set: the caller short-circuits.
        """
        if is_value_set(value):
            values = list(value)
            if not values:
                return None
            return query.by_values(column_name, len(values)), values
        return query.by_value(column_name), [value]

    # -- Count -------------------------------------------------------------

    def count(self, conn: Connection) -> int:
        """Number of rows in the table."""
        sql = query.count(self.table_name, self.primary_key)
        return self._count(conn, sql, (), "count")

    def count_by(self, conn: Connection, column_name: str, value: Any) -> int:
        """Rows where ``column_name`` equals ``value`` (or is in a value set).

        An empty value set returns 0 without querying.
        """
        filtered = self._filter(column_name, value)
        if filtered is None:
            return 0
        where, values = filtered
        sql = query.count(self.table_name, self.primary_key, where=where)
        return self._count(conn, sql, values, "count_by")

    def count_where(self, conn: Connection, predicate: str) -> int:
        """Rows matching a raw SQL ``predicate`` (interpolated verbatim)."""
        sql = query.count(self.table_name, self.primary_key, where=predicate)
        return self._count(conn, sql, (), "count_where")

    # -- Insert ------------------------------------------------------------

    def insert(self, conn: Connection, entity: E) -> int:
        """Insert one entity; see :meth:`insert_many`."""
        return self.insert_many(conn, [entity])

    def insert_many(self, conn: Connection, entities: Sequence[E]) -> int:
        """Insert ``entities`` as one batch inside one transaction.

        With an autoincrement key the key column is left out of the INSERT
        and each generated key is written back to its entity, in input
        order, through the key's setter.

        Returns:
            Total affected rows.

        Raises:
            CreationError: Fewer generated keys than entities, or no rows
                affected.  The transaction is rolled back.
        """
        if not entities:
            return 0

        columns = self.descriptor.insert_columns
        auto_increment = self.descriptor.auto_increment
        sql = query.insert(self.table_name, columns)

        with transaction(conn, operation="insert_many", table=self.table_name):
            statement = self._statement(conn, sql, "insert_many", return_generated_keys=auto_increment)
            for entity in entities:
                bind_entity(statement, self.bindings, entity, columns)
                statement.add_batch()

            rowcount = statement.execute_batch()
            if rowcount == 0:
                raise CreationError(
                    f"insert into {self.table_name} affected no rows"
                ).with_context(operation="insert_many", table=self.table_name, sql=sql)

            if auto_increment:
                keys = statement.generated_keys
                if len(keys) < len(entities):
                    raise CreationError(
                        f"insert into {self.table_name} returned {len(keys)} generated keys "
                        f"for {len(entities)} entities"
                    ).with_context(operation="insert_many", table=self.table_name, sql=sql)
                key_setter = self.bindings.setter(self.descriptor.primary_key)
                for entity, key in zip(entities, keys):
                    key_setter(entity, key)

        logger.debug("entities_inserted", table=self.table_name, count=len(entities), rowcount=rowcount)
        return rowcount

    # -- Update ------------------------------------------------------------

    def update(self, conn: Connection, entity: E) -> int:
        """Update one entity by primary key; see :meth:`update_many`."""
        return self.update_many(conn, [entity])

    def update_many(self, conn: Connection, entities: Sequence[E]) -> int:
        """Update every non-key column of ``entities`` in one transaction.

        Each batch entry binds the SET columns first and the primary-key
        value as the final parameter.
        """
        key_column = self.descriptor.require_primary_key("update_many")
        if not entities:
            return 0

        columns = self.descriptor.update_columns
        sql = query.update(self.table_name, columns, key_column)
        key_getter = self.bindings.getter(key_column)

        with transaction(conn, operation="update_many", table=self.table_name):
            statement = self._statement(conn, sql, "update_many")
            for entity in entities:
                bound = bind_entity(statement, self.bindings, entity, columns)
                statement.set_object(bound + 1, key_getter(entity))
                statement.add_batch()
            rowcount = statement.execute_batch()

        logger.debug("entities_updated", table=self.table_name, count=len(entities), rowcount=rowcount)
        return rowcount

    # -- Delete ------------------------------------------------------------

    def delete(self, conn: Connection, entity: E) -> int:
        """Delete the row whose key matches ``entity``'s key."""
        key_column = self.descriptor.require_primary_key("delete")
        return self.delete_by_id(conn, self.bindings.get(entity, key_column))

    def delete_many(self, conn: Connection, entities: Sequence[E]) -> int:
        """Delete ``entities`` by key as one batch inside one transaction."""
        key_column = self.descriptor.require_primary_key("delete_many")
        if not entities:
            return 0

        sql = query.delete(self.table_name, where=query.by_value(key_column))
        key_getter = self.bindings.getter(key_column)

        with transaction(conn, operation="delete_many", table=self.table_name):
            statement = self._statement(conn, sql, "delete_many")
            for entity in entities:
                statement.set_object(1, key_getter(entity))
                statement.add_batch()
            return statement.execute_batch()

    def delete_by_id(self, conn: Connection, value: Any) -> int:
        key_column = self.descriptor.require_primary_key("delete_by_id")
        return self.delete_by(conn, key_column, value)

    def delete_by_ids(self, conn: Connection, values: Sequence[Any]) -> int:
        key_column = self.descriptor.require_primary_key("delete_by_ids")
        return self.delete_by(conn, key_column, list(values))

    def delete_by(self, conn: Connection, column_name: str, value: Any) -> int:
        """Delete rows where ``column_name`` equals ``value`` (or is in a value set).

        An empty value set deletes nothing and issues no statement.
        """
        filtered = self._filter(column_name, value)
        if filtered is None:
            return 0
        where, values = filtered
        return self._update_rows(conn, query.delete(self.table_name, where=where), values, "delete_by")

    def delete_where(self, conn: Connection, predicate: str) -> int:
        """Delete rows matching a raw SQL ``predicate`` (interpolated verbatim)."""
        return self._update_rows(conn, query.delete(self.table_name, where=predicate), (), "delete_where")

    def delete_all(self, conn: Connection) -> int:
        """Delete every row of the table."""
        return self._update_rows(conn, query.delete(self.table_name), (), "delete_all")

    # -- Read --------------------------------------------------------------

    def read(
        self,
        conn: Connection,
        *,
        order_by: str | None = None,
        limit: int | None = None,
        offset: int | None = None,
        pageable: Pageable | None = None,
    ) -> list[E]:
        """All rows, optionally ordered / limited / offset, or paged.

        ``order_by`` is raw SQL text; ``pageable`` sorts by a field name.
        """
        order_by, limit, offset = self._paging(order_by, limit, offset, pageable, self.order_by_for)
        sql = query.select(
            self.table_name, self.descriptor.column_list, order_by=order_by, limit=limit, offset=offset
        )
        return self._fetch(conn, sql, (), "read")

    def read_by(
        self,
        conn: Connection,
        column_name: str,
        value: Any,
        *,
        order_by: str | None = None,
        limit: int | None = None,
        offset: int | None = None,
        pageable: Pageable | None = None,
    ) -> list[E]:
        """Rows where ``column_name`` equals ``value`` (or is in a value set).

        An empty value set returns ``[]`` without querying.
        """
        order_by, limit, offset = self._paging(order_by, limit, offset, pageable, self.order_by_for)
        filtered = self._filter(column_name, value)
        if filtered is None:
            return []
        where, values = filtered
        sql = query.select(
            self.table_name,
            self.descriptor.column_list,
            where=where,
            order_by=order_by,
            limit=limit,
            offset=offset,
        )
        return self._fetch(conn, sql, values, "read_by")

    def read_where(
        self,
        conn: Connection,
        predicate: str,
        *,
        order_by: str | None = None,
        limit: int | None = None,
        offset: int | None = None,
        pageable: Pageable | None = None,
    ) -> list[E]:
        """Rows matching a raw SQL ``predicate`` (interpolated verbatim)."""
        order_by, limit, offset = self._paging(order_by, limit, offset, pageable, self.order_by_for)
        sql = query.select(
            self.table_name,
            self.descriptor.column_list,
            where=predicate,
            order_by=order_by,
            limit=limit,
            offset=offset,
        )
        return self._fetch(conn, sql, (), "read_where")

    def read_by_query(
        self,
        conn: Connection,
        sql: str,
        values: Sequence[Any] = (),
        *,
        factory: Callable[[], C] | None = None,
        consumer: Populate[C] | None = None,
    ) -> list[C]:
        """Materialize the rows of caller-written SQL.

        Args:
            sql: Full SQL text with ``?`` placeholders.  It must select every
                mapped column, since default population runs on each row.
            values: Bound to the placeholders in order.
            factory: No-argument constructor replacing :meth:`instantiate_entity`,
                e.g. a subclass of the entity type carrying joined fields.
            consumer: ``(row, entity)`` hook run after default population,
                for columns outside the mapping.
        """
        return self._fetch(conn, sql, values, "read_by_query", factory=factory, consumer=consumer)

    def read_by_id(self, conn: Connection, value: Any) -> E | None:
        """The entity whose primary key equals ``value``, or ``None``."""
        key_column = self.descriptor.require_primary_key("read_by_id")
        results = self.read_by(conn, key_column, value)
        return results[0] if results else None

    def __repr__(self) -> str:
        return f"Repository({self.entity_type.__name__}, table={self.table_name!r})"


__all__ = [
    "Repository",
    "is_value_set",
]

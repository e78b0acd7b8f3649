"""
Entity metadata: declaring mapped columns and deriving the table layout.

Entities are plain dataclasses.  A field becomes a column when it is
declared with :func:`column` (or :func:`identity` for the primary key);
any other field is ignored by the mapper and can hold joined or computed
values.

Manifesto:
    The table layout is read from the type exactly once, when a repository
    is built.  Everything downstream (query text, statement binding, row
    population) consumes the resulting :class:`EntityDescriptor` read-only,
    so the declaration order of the fields is the one source of column
    order for INSERT lists and population.

Architecture:
    ::

        @dataclass
        class Company:
            __tablename__ = "companies"
            id: str = identity()
            company_name: str = column("company_name")
            city: str = column()
            note: str | None = None          ← not mapped

                        │  EntityDescriptor.from_type(Company)
                        ▼
        ┌──────────────────────────────────────────────────────┐
        │ table_name        = "companies"                       │
        │ columns           = (id, company_name, city)          │
        │ primary_key       = "id"   (index 0)                  │
        │ auto_increment    = False                             │
        │ field_to_column   = {id: id, company_name: ..., ...}  │
        └──────────────────────────────────────────────────────┘

Examples:
    >>> descriptor = EntityDescriptor.from_type(Company)
    >>> descriptor.column_list
    'id,company_name,city'
    >>> descriptor.column_for_field("company_name")
    'company_name'

Tags:
    metadata, mapping, dataclass, descriptor, tablespine

Doc-Types:
    - API Reference
"""

from __future__ import annotations

import dataclasses
import sys
import types
import typing
from dataclasses import dataclass
from enum import Enum
from typing import Any

from tablespine.core.errors import MappingError
from tablespine.core.logging import get_logger

logger = get_logger(__name__)

COLUMN_METADATA_KEY = "tablespine.column"


class GenerationType(str, Enum):
    """Primary-key generation strategies.

    Only ``AUTO`` makes the repository treat the key as driver-generated
    (left out of INSERT, read back from the generated keys).
    """

    AUTO = "AUTO"
    IDENTITY = "IDENTITY"
    SEQUENCE = "SEQUENCE"
    TABLE = "TABLE"


@dataclass(frozen=True, slots=True)
class ColumnInfo:
    """Column metadata attached to a dataclass field."""

    name: str | None = None
    primary_key: bool = False
    generated: GenerationType | None = None


def column(
    name: str | None = None,
    *,
    primary_key: bool = False,
    generated: GenerationType | None = None,
    default: Any = None,
    default_factory: Any = dataclasses.MISSING,
    **field_kwargs: Any,
) -> Any:
    """Declare a mapped dataclass field.

    Args:
        name: Column name; defaults to the field name.
        primary_key: Mark the field as the entity's identity.
        generated: Key generation strategy (``GenerationType.AUTO`` for
            autoincrement keys).
        default: Field default.  Mapped fields default to ``None`` so the
            entity can be constructed without arguments.
        default_factory: Passed through to :func:`dataclasses.field`.
        **field_kwargs: Any other :func:`dataclasses.field` arguments.
    """
    metadata = dict(field_kwargs.pop("metadata", None) or {})
    metadata[COLUMN_METADATA_KEY] = ColumnInfo(name=name, primary_key=primary_key, generated=generated)
    if default_factory is not dataclasses.MISSING:
        return dataclasses.field(default_factory=default_factory, metadata=metadata, **field_kwargs)
    return dataclasses.field(default=default, metadata=metadata, **field_kwargs)


def identity(
    name: str | None = None,
    *,
    generated: GenerationType | None = None,
    **kwargs: Any,
) -> Any:
    """Shorthand for ``column(name, primary_key=True, ...)``."""
    return column(name, primary_key=True, generated=generated, **kwargs)


@dataclass(frozen=True, slots=True)
class MappedField:
    """One mapped field: attribute name, column name and resolved type."""

    field_name: str
    column_name: str
    field_type: Any = None


def _unwrap_optional(tp: Any) -> Any:
    """Return ``X`` for ``Optional[X]`` / ``X | None``; otherwise ``tp``."""
    origin = typing.get_origin(tp)
    if origin is typing.Union or origin is types.UnionType:
        args = [a for a in typing.get_args(tp) if a is not type(None)]
        if len(args) == 1:
            return args[0]
    return tp


def _field_type(entity_type: type, f: dataclasses.Field, table_name: str, column_name: str) -> Any:
    """Evaluate the declared type of ``f``, in the namespace of the class that declares it."""
    if not isinstance(f.type, str):
        return f.type
    owner = next(
        (c for c in entity_type.__mro__ if f.name in c.__dict__.get("__annotations__", {})),
        entity_type,
    )
    module = sys.modules.get(owner.__module__)
    globalns = dict(vars(module)) if module is not None else {}
    try:
        return eval(f.type, globalns, dict(vars(owner)))  # noqa: S307
    except (NameError, AttributeError, SyntaxError, TypeError) as exc:
        raise MappingError(
            f"cannot resolve the type {f.type!r} of {entity_type.__name__}.{f.name}; "
            "declare it at module level so the mapping can see it",
            cause=exc,
        ).with_context(table=table_name, column=column_name) from exc


class EntityDescriptor:
    """Table layout derived from an entity type, built once.

    Attributes:
        entity_type: The mapped dataclass.
        table_name: ``__tablename__`` or the class name.
        columns: Column names in field declaration order.
        primary_key: Primary-key column name, or ``None``.
        primary_key_index: Position of the key in ``columns``, or ``None``.
        auto_increment: True when the key uses ``GenerationType.AUTO``.
    """

    def __init__(
        self,
        entity_type: type,
        table_name: str,
        fields: list[MappedField],
        primary_key: str | None = None,
        auto_increment: bool = False,
    ) -> None:
        self.entity_type = entity_type
        self.table_name = table_name
        self.fields: tuple[MappedField, ...] = tuple(fields)
        self.columns: tuple[str, ...] = tuple(f.column_name for f in fields)
        self.primary_key = primary_key
        self.primary_key_index = self.columns.index(primary_key) if primary_key is not None else None
        self.auto_increment = auto_increment
        self.column_list = ",".join(self.columns)

        self._field_to_column = {f.field_name: f.column_name for f in fields}
        self._column_to_field = {f.column_name: f.field_name for f in fields}

    @classmethod
    def from_type(cls, entity_type: type) -> EntityDescriptor:
        """Walk the dataclass fields of ``entity_type`` in declaration order."""
        table_name = getattr(entity_type, "__tablename__", None) or entity_type.__name__
        if not dataclasses.is_dataclass(entity_type):
            logger.debug("descriptor_built", table=table_name, columns=0, mapped=False)
            return cls(entity_type, table_name, [])

        fields: list[MappedField] = []
        primary_key: str | None = None
        auto_increment = False

        for f in dataclasses.fields(entity_type):
            info = f.metadata.get(COLUMN_METADATA_KEY)
            if info is None:
                continue

            column_name = info.name or f.name
            if info.primary_key:
                if primary_key is not None:
                    raise MappingError(
                        f"{entity_type.__name__} declares more than one primary key "
                        f"({primary_key!r}, {column_name!r})"
                    ).with_context(table=table_name, column=column_name)
                primary_key = column_name
                auto_increment = info.generated is GenerationType.AUTO

            raw_type = _field_type(entity_type, f, table_name, column_name)
            fields.append(MappedField(f.name, column_name, _unwrap_optional(raw_type)))

        descriptor = cls(entity_type, table_name, fields, primary_key, auto_increment)
        logger.debug(
            "descriptor_built",
            table=table_name,
            columns=len(fields),
            primary_key=primary_key,
            auto_increment=auto_increment,
        )
        return descriptor

    # -- Lookups -----------------------------------------------------------

    def column_for_field(self, field_name: str) -> str | None:
        return self._field_to_column.get(field_name)

    def field_for_column(self, column_name: str) -> str | None:
        return self._column_to_field.get(column_name)

    def mapped_field(self, column_name: str) -> MappedField:
        field_name = self._column_to_field.get(column_name)
        if field_name is None:
            raise MappingError(
                f"column {column_name!r} is not mapped on {self.entity_type.__name__}"
            ).with_context(table=self.table_name, column=column_name)
        return self.fields[self.columns.index(column_name)]

    def column_index(self, column_name: str) -> int:
        """Position of ``column_name`` in :attr:`columns`, or ``-1``."""
        try:
            return self.columns.index(column_name)
        except ValueError:
            return -1

    def column_at(self, index: int) -> str:
        return self.columns[index]

    def has_column(self, column_name: str) -> bool:
        return column_name in self._column_to_field

    # -- Derived column sets -----------------------------------------------

    @property
    def insert_columns(self) -> list[str]:
        """Columns written by INSERT (the key is skipped when generated)."""
        if self.auto_increment:
            return [c for c in self.columns if c != self.primary_key]
        return list(self.columns)

    @property
    def update_columns(self) -> list[str]:
        """Columns written by UPDATE's SET clause (every non-key column)."""
        return [c for c in self.columns if c != self.primary_key]

    def require_primary_key(self, operation: str) -> str:
        """Return the key column or fail fast for ``operation``."""
        if self.primary_key is None:
            raise MappingError(
                f"{operation} requires a primary key but {self.entity_type.__name__} declares none"
            ).with_context(operation=operation, table=self.table_name)
        return self.primary_key

    def __repr__(self) -> str:
        return (
            f"EntityDescriptor(table={self.table_name!r}, columns={list(self.columns)!r}, "
            f"primary_key={self.primary_key!r}, auto_increment={self.auto_increment})"
        )


__all__ = [
    "COLUMN_METADATA_KEY",
    "ColumnInfo",
    "EntityDescriptor",
    "GenerationType",
    "MappedField",
    "column",
    "identity",
]

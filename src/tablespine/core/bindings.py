"""Per-column getter/setter registry.

Every mapped column gets a default accessor pair derived from its field
type.  Callers replace either side with :meth:`FieldBindings.bind_getter` /
:meth:`FieldBindings.bind_setter` when the field needs custom handling
(a property setter, a read-only column, a loosely typed value).

Default conversions:

==================  ==========================  ==========================
Field type          setter (row → entity)       getter (entity → row)
==================  ==========================  ==========================
``Enum`` subclass   member name → member        member → member name
``datetime``        datetime / date / ISO str   ISO-8601 text
``date``            date / datetime / ISO str   ISO-8601 text
anything else       stored as-is                passthrough
==================  ==========================  ==========================

Every failure (unknown enum name, wrong runtime type, frozen instance)
raises :class:`~tablespine.core.errors.MappingError`.

Tags:
    tablespine, mapping, accessors, conversion

Doc-Types:
    api-reference
"""

from __future__ import annotations

import datetime as dt
from collections.abc import Callable
from enum import Enum
from typing import Any

from tablespine.core.errors import MappingError
from tablespine.core.metadata import EntityDescriptor, MappedField

Getter = Callable[[Any], Any]
Setter = Callable[[Any, Any], None]


def ignore(entity: Any, value: Any) -> None:
    """No-op setter for columns that must not be written back to the entity."""


def _mapping_error(mapped: MappedField, message: str, cause: BaseException | None = None) -> MappingError:
    error = MappingError(f"column {mapped.column_name!r}: {message}", cause=cause)
    error.with_context(column=mapped.column_name)
    return error


def _to_datetime(value: Any) -> dt.datetime:
    if isinstance(value, dt.datetime):
        return value
    if isinstance(value, dt.date):
        return dt.datetime.combine(value, dt.time())
    if isinstance(value, str):
        return dt.datetime.fromisoformat(value)
    raise TypeError(f"cannot convert {type(value).__name__} to datetime")


def _to_date(value: Any) -> dt.date:
    if isinstance(value, dt.datetime):
        return value.date()
    if isinstance(value, dt.date):
        return value
    if isinstance(value, str):
        return dt.datetime.fromisoformat(value).date() if len(value) > 10 else dt.date.fromisoformat(value)
    raise TypeError(f"cannot convert {type(value).__name__} to date")


def _default_setter(mapped: MappedField) -> Setter:
    field_type = mapped.field_type
    convert: Callable[[Any], Any] | None = None

    if isinstance(field_type, type) and issubclass(field_type, Enum):
        enum_type = field_type

        def convert(value: Any) -> Any:
            if isinstance(value, enum_type):
                return value
            if not isinstance(value, str):
                raise TypeError(f"expected a {enum_type.__name__} member name, got {type(value).__name__}")
            try:
                return enum_type[value]
            except KeyError:
                raise ValueError(f"{value!r} is not a {enum_type.__name__} member") from None

    elif field_type is dt.datetime:
        convert = _to_datetime
    elif field_type is dt.date:
        convert = _to_date

    def setter(entity: Any, value: Any) -> None:
        try:
            if convert is not None and value is not None:
                value = convert(value)
            setattr(entity, mapped.field_name, value)
        except (TypeError, ValueError, AttributeError) as exc:
            raise _mapping_error(mapped, f"cannot set field {mapped.field_name!r}: {exc}", exc) from exc

    return setter


def _default_getter(mapped: MappedField) -> Getter:
    field_type = mapped.field_type
    is_enum = isinstance(field_type, type) and issubclass(field_type, Enum)
    is_temporal = field_type is dt.datetime or field_type is dt.date

    def getter(entity: Any) -> Any:
        try:
            value = getattr(entity, mapped.field_name)
        except AttributeError as exc:
            raise _mapping_error(mapped, f"cannot read field {mapped.field_name!r}", exc) from exc
        if value is None:
            return None
        if is_enum:
            if not isinstance(value, Enum):
                raise _mapping_error(
                    mapped, f"expected a {field_type.__name__} member, got {type(value).__name__}"
                )
            return value.name
        if is_temporal:
            if isinstance(value, dt.date):
                return value.isoformat()
            if not isinstance(value, str):
                raise _mapping_error(
                    mapped, f"expected a {field_type.__name__} or ISO text, got {type(value).__name__}"
                )
        return value

    return getter


class FieldBindings:
    """Column-keyed getter/setter table for one repository.

    Keys are column names, not field names, because every SQL operation
    addresses columns.  Bindings are expected to be completed before the
    repository is shared between threads; the table itself is not locked.
    """

    def __init__(self, descriptor: EntityDescriptor) -> None:
        self._descriptor = descriptor
        self._getters: dict[str, Getter] = {}
        self._setters: dict[str, Setter] = {}
        for mapped in descriptor.fields:
            self._getters[mapped.column_name] = _default_getter(mapped)
            self._setters[mapped.column_name] = _default_setter(mapped)

    def _check(self, column_name: str) -> None:
        if not self._descriptor.has_column(column_name):
            raise MappingError(
                f"column {column_name!r} is not mapped on {self._descriptor.entity_type.__name__}"
            ).with_context(table=self._descriptor.table_name, column=column_name)

    def bind_getter(self, column_name: str, getter: Getter) -> None:
        """Replace the getter used for ``column_name`` from now on."""
        self._check(column_name)
        self._getters[column_name] = getter

    def bind_setter(self, column_name: str, setter: Setter) -> None:
        """Replace the setter used for ``column_name`` from now on."""
        self._check(column_name)
        self._setters[column_name] = setter

    def getter(self, column_name: str) -> Getter:
        self._check(column_name)
        return self._getters[column_name]

    def setter(self, column_name: str) -> Setter:
        self._check(column_name)
        return self._setters[column_name]

    def get(self, entity: Any, column_name: str) -> Any:
        return self.getter(column_name)(entity)

    def set(self, entity: Any, column_name: str, value: Any) -> None:
        self.setter(column_name)(entity, value)


__all__ = [
    "FieldBindings",
    "Getter",
    "Setter",
    "ignore",
]

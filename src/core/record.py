# src/core/record.py — v1
"""Record container with schema-driven typed accessors.

A Record knows its identity and an open key -> value store, nothing else.
Field names are never baked into the type: typed reads go through the
module-level accessors, which take the schema (or a field definition) as
an explicit argument and coerce via core.field_types.

An absent key and a key holding None/""/[] read the same: no value.
"""

from __future__ import annotations

import copy
from typing import Any

from catalogquery.core.field_types import coerce_value, is_empty
from catalogquery.core.models import CatalogSchema, FieldDefinition


class Record:
    """One entity of a collection: identity plus dynamic field storage.

    Query engines only read records. Mutation happens through set_field /
    remove_field, normally by whoever built the record.
    """

    __slots__ = ("id", "path", "_fields")

    def __init__(self, id: str, path: str = "", fields: dict[str, Any] | None = None) -> None:
        self.id = id
        self.path = path
        self._fields: dict[str, Any] = dict(fields) if fields else {}

    def get_field(self, key: str) -> Any:
        """Stored value for ``key``; None when absent or empty."""
        value = self._fields.get(key)
        return None if is_empty(value) else value

    def set_field(self, key: str, value: Any) -> None:
        self._fields[key] = value

    def remove_field(self, key: str) -> None:
        self._fields.pop(key, None)

    def has_field(self, key: str) -> bool:
        """True only when the field carries a non-empty value (False counts)."""
        return not is_empty(self._fields.get(key))

    def get_all_fields(self) -> dict[str, Any]:
        """Shallow copy of the field store (identity excluded)."""
        return dict(self._fields)

    def to_dict(self) -> dict[str, Any]:
        """Identity plus every stored field, empty ones omitted."""
        data: dict[str, Any] = {"id": self.id, "path": self.path}
        for key, value in self._fields.items():
            if not is_empty(value):
                data[key] = value
        return data

    def clone(self) -> Record:
        """Independent copy; nested lists and dicts are copied too."""
        return Record(self.id, self.path, copy.deepcopy(self._fields))

    def __repr__(self) -> str:
        return f"Record(id={self.id!r}, path={self.path!r}, fields={len(self._fields)})"


def get_typed_field(
    record: Record, field: FieldDefinition | str, schema: CatalogSchema | None = None
) -> Any:
    """Read a field coerced to its declared type.

    Args:
        record: Record to read from.
        field: Field definition, or a key to resolve against ``schema``.
        schema: Required when ``field`` is a key.

    Returns:
        The coerced value, or None when the value is missing, cannot be
        coerced, or the key is not part of the schema.
    """
    definition = _resolve_definition(field, schema)
    if definition is None:
        return None
    return coerce_value(record.get_field(definition.key), definition.type)


def build_record_from_data(
    raw: dict[str, Any], id: str, path: str, schema: CatalogSchema
) -> Record:
    """Build a Record from raw key/value data, keeping only schema fields.

    Values are coerced once here; values that fail coercion are left out
    rather than replaced by a default.
    """
    record = Record(id, path)
    for definition in schema.fields:
        typed = coerce_value(raw.get(definition.key), definition.type)
        if typed is not None:
            record.set_field(definition.key, typed)
    return record


def record_to_dict(record: Record, schema: CatalogSchema) -> dict[str, Any]:
    """Plain dict with identity and every schema field (None when missing)."""
    data: dict[str, Any] = {"id": record.id, "path": record.path}
    for definition in schema.fields:
        data[definition.key] = record.get_field(definition.key)
    return data


def _resolve_definition(
    field: FieldDefinition | str, schema: CatalogSchema | None
) -> FieldDefinition | None:
    if isinstance(field, FieldDefinition):
        return field
    if schema is None:
        return None
    return schema.get_field(field)

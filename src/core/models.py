# src/core/models.py — v2
"""Shared Pydantic domain models used across modules.

No module redefines these types — all imports come from core.models.
Records themselves live in core.record; they are plain containers, not
models, because their field set is only known at runtime.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator, model_validator

from catalogquery.core.field_types import FieldType

FilterType = Literal["select", "checkbox", "range", "text"]
GroupSortMode = Literal["alphabetical", "count-desc", "count-asc"]


# === SCHEMA ===


class FieldDefinition(BaseModel):
    """One field of a runtime schema."""

    key: str
    label: str = ""
    type: FieldType = "string"
    visible: bool = True
    sortable: bool = True
    filterable: bool = True
    sort_order: int = 0
    description: str | None = None

    @model_validator(mode="after")
    def default_label(self) -> FieldDefinition:
        if not self.label:
            self.label = self.key
        return self


class CoreFields(BaseModel):
    """Pointers to the fields with a special role in the collection."""

    title_field: str = "title"
    id_field: str | None = None
    status_field: str | None = None


class CatalogSchema(BaseModel):
    """Ordered field definitions plus core-field pointers."""

    catalog_name: str = "catalog"
    fields: list[FieldDefinition] = Field(default_factory=list)
    core_fields: CoreFields = Field(default_factory=CoreFields)

    @field_validator("fields")
    @classmethod
    def validate_unique_keys(cls, v: list[FieldDefinition]) -> list[FieldDefinition]:
        seen: set[str] = set()
        duplicates: list[str] = []
        for definition in v:
            if definition.key in seen:
                duplicates.append(definition.key)
            seen.add(definition.key)
        if duplicates:
            raise ValueError(f"Duplicate field keys: {', '.join(duplicates)}")
        return v

    def get_field(self, key: str) -> FieldDefinition | None:
        """Look up a field definition by key (None when absent)."""
        for definition in self.fields:
            if definition.key == key:
                return definition
        return None

    def has_field(self, key: str) -> bool:
        return self.get_field(key) is not None

    def field_type(self, key: str) -> str | None:
        definition = self.get_field(key)
        return definition.type if definition else None

    @property
    def filterable_fields(self) -> list[FieldDefinition]:
        return [f for f in self.fields if f.filterable]

    @property
    def sortable_fields(self) -> list[FieldDefinition]:
        return [f for f in self.fields if f.sortable]

    @property
    def visible_fields(self) -> list[FieldDefinition]:
        """Visible fields ordered by sort_order, schema order breaking ties."""
        return sorted((f for f in self.fields if f.visible), key=lambda f: f.sort_order)


# === FILTERS ===


class FilterDefinition(BaseModel):
    """A configured constraint tied to one schema field."""

    field: str
    type: FilterType
    label: str = ""
    enabled: bool = True
    options: list[str] | None = None


class RangeValue(BaseModel):
    """Inclusive numeric bounds; None leaves that side open."""

    min: int | float | None = None
    max: int | float | None = None

    def contains(self, value: float) -> bool:
        if self.min is not None and value < self.min:
            return False
        if self.max is not None and value > self.max:
            return False
        return True

    def covers(self, lower: float, upper: float) -> bool:
        """True when this range spans all of ``[lower, upper]``."""
        return (self.min is None or self.min <= lower) and (
            self.max is None or self.max >= upper
        )


class FieldIssue(BaseModel):
    """Marks a field reference that could not be used for an operation.

    Engines return these instead of raising so the caller can show a
    configuration problem rather than crash.
    """

    field: str
    operation: Literal["filter", "sort", "group", "aggregate"]
    reason: Literal["unknown_field", "not_filterable", "not_sortable", "no_numeric_data"]
    message: str = ""


# === STATISTICS ===


class YearRange(BaseModel):
    min: int | float | None = None
    max: int | float | None = None


class GroupStatistics(BaseModel):
    """Aggregate over one group of records."""

    count: int = 0
    total_word_count: int | float = 0
    average_word_count: float = 0
    year_range: YearRange = Field(default_factory=YearRange)


class AggregateStatistics(GroupStatistics):
    """Same shape over a whole collection, with value coverage counts."""

    valid_word_count: int = 0
    valid_year_count: int = 0

    @property
    def total_count(self) -> int:
        return self.count


class NumericStats(BaseModel):
    count: int = 0
    sum: int | float = 0
    avg: float = 0
    min: int | float = 0
    max: int | float = 0


class GroupSummary(BaseModel):
    """One group ready for presentation: key, members, stats and share."""

    key: Any = None
    label: str = ""
    records: list[Any] = Field(default_factory=list)
    statistics: GroupStatistics = Field(default_factory=GroupStatistics)
    percentage: int = 0

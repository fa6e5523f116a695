# tests/conftest.py — v2
"""Shared test fixtures for all unit and integration tests.

Provides a sample schema, the three-record sample collection and a few
helpers. No external dependencies: engines are pure functions.
"""

from __future__ import annotations

import pytest

from catalogquery.core.models import (
    CatalogSchema,
    CoreFields,
    FieldDefinition,
    FilterDefinition,
)
from catalogquery.core.record import Record


# === FIXTURES: Schema ===


@pytest.fixture
def sample_schema() -> CatalogSchema:
    """Schema covering every field type."""
    return CatalogSchema(
        catalog_name="pulp-fiction",
        fields=[
            FieldDefinition(key="title", label="Title", type="string", sort_order=0),
            FieldDefinition(key="status", label="Status", type="string", sort_order=1),
            FieldDefinition(key="year", label="Year", type="number", sort_order=2),
            FieldDefinition(key="words", label="Word Count", type="number", sort_order=3),
            FieldDefinition(key="published", label="Published", type="boolean"),
            FieldDefinition(key="date-read", label="Date Read", type="date"),
            FieldDefinition(key="tags", label="Tags", type="array"),
            FieldDefinition(key="authors", label="Authors", type="labeled-reference-array"),
            FieldDefinition(key="meta", label="Meta", type="object", filterable=False),
            FieldDefinition(
                key="notes", label="Notes", type="string", sortable=False, filterable=False
            ),
        ],
        core_fields=CoreFields(title_field="title", status_field="status"),
    )


# === FIXTURES: Records ===


def make_record(record_id: str, **fields: object) -> Record:
    """Record with ``fields``; underscores in keys become hyphens."""
    return Record(
        record_id,
        f"works/{record_id}.md",
        {key.replace("_", "-"): value for key, value in fields.items()},
    )


@pytest.fixture
def record_factory():
    """Factory fixture wrapping make_record."""
    return make_record


@pytest.fixture
def sample_records() -> list[Record]:
    """Three records: two raw, one approved."""
    return [
        make_record("w1", title="The Call of Cthulhu", status="raw", year=1928, words=12000),
        make_record("w2", title="Dagon", status="raw", year=1923, words=4500),
        make_record("w3", title="The Yellow Wallpaper", status="approved", year=1894, words=18000),
    ]


@pytest.fixture
def record_without_year() -> Record:
    return make_record("w4", title="Untitled Fragment", status="raw", words=800)


@pytest.fixture
def year_range_filter() -> FilterDefinition:
    return FilterDefinition(field="year", type="range", label="Year")


@pytest.fixture
def status_checkbox_filter() -> FilterDefinition:
    return FilterDefinition(field="status", type="checkbox", label="Status")


@pytest.fixture
def title_text_filter() -> FilterDefinition:
    return FilterDefinition(field="title", type="text", label="Title")

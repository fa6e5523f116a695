# tests/integration/conftest.py — v8
"""Shared fixtures for integration tests.

Builds a mid-sized collection from raw front-matter style dicts through
build_record_from_data, the same path a vault loader takes.

Changelog:
    v8: Query-engine collection fixtures; container fixtures removed.
"""

from __future__ import annotations

from typing import Any

import pytest

from catalogquery.config.settings import Settings
from catalogquery.core.models import CatalogSchema, CoreFields, FieldDefinition
from catalogquery.core.record import Record, build_record_from_data

_RAW_WORKS: list[dict[str, Any]] = [
    {"title": "The Call of Cthulhu", "status": "raw", "year": "1928", "word-count": "12000",
     "authors": ["[[Lovecraft, H. P.]]"], "tags": ["horror", "sea"], "date-read": "2024-01-15"},
    {"title": "Dagon", "status": "raw", "year": 1923, "word-count": 2300,
     "authors": ["[[Lovecraft, H. P.]]"], "tags": "sea", "date-read": "2024-01-20"},
    {"title": "The Yellow Wallpaper", "status": "approved", "year": 1892, "word-count": 6000,
     "authors": ["[[Gilman, Charlotte Perkins]]"], "tags": ["gothic"], "published": "yes"},
    {"title": "The Willows", "status": "reviewed", "year": 1907, "word-count": "19000",
     "authors": ["[[Blackwood, Algernon]]"], "tags": ["nature", "horror"],
     "date-read": "2024-03-02"},
    {"title": "The King in Yellow", "status": "approved", "year": 1895,
     "authors": ["[[Chambers, Robert W.]]"], "published": True},
    {"title": "Untitled Fragment", "word-count": "unknown"},
    {"title": "The Great God Pan", "status": "raw", "year": 1894, "word-count": 24000,
     "authors": ["[[Machen, Arthur]]"], "tags": ["horror"]},
    {"title": "Carmilla", "status": "reviewed", "year": 1872, "word-count": 27000,
     "authors": ["[[Le Fanu, Sheridan]]"], "tags": ["gothic", "vampire"],
     "published": "no"},
]


@pytest.fixture
def catalog_schema() -> CatalogSchema:
    return CatalogSchema(
        catalog_name="weird-fiction",
        fields=[
            FieldDefinition(key="title", label="Title"),
            FieldDefinition(key="status", label="Status"),
            FieldDefinition(key="year", label="Year", type="number"),
            FieldDefinition(key="word-count", label="Words", type="number"),
            FieldDefinition(key="published", label="Published", type="boolean"),
            FieldDefinition(key="date-read", label="Read", type="date"),
            FieldDefinition(key="tags", label="Tags", type="array"),
            FieldDefinition(key="authors", label="Authors", type="labeled-reference-array"),
            FieldDefinition(key="summary", label="Summary", sortable=False, filterable=False),
        ],
        core_fields=CoreFields(title_field="title", status_field="status"),
    )


@pytest.fixture
def catalog(catalog_schema: CatalogSchema) -> list[Record]:
    return [
        build_record_from_data(raw, f"work-{i:03d}", f"works/work-{i:03d}.md", catalog_schema)
        for i, raw in enumerate(_RAW_WORKS, start=1)
    ]


@pytest.fixture
def engine_settings() -> Settings:
    return Settings(_env_file=None)

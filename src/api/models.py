# src/api/models.py — v3
"""API-level models: QueryConfig (per-call configuration) and QueryResult."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, SkipValidation

from catalogquery.core.models import (
    AggregateStatistics,
    FieldIssue,
    FilterDefinition,
    GroupSortMode,
    GroupSummary,
)
from catalogquery.query.pagination import Page


class QueryConfig(BaseModel):
    """Everything one query needs besides the schema and the records.

    Optional fields left as None are filled exactly once by
    api.facade.resolve_query_config:
      - group_by_field       -> schema.core_fields.status_field
      - group_sort_mode      -> Settings.default_group_sort_mode
      - word_count_field     -> Settings.default_word_count_field
      - year_field           -> Settings.default_year_field
      - page_size            -> Settings.default_page_size (when page is set)
    """

    filters: list[FilterDefinition] = Field(default_factory=list)
    filter_state: dict[str, Any] = Field(default_factory=dict)

    sort_field: str | None = None
    sort_descending: bool = False

    group_by_field: str | None = None
    group_sort_mode: GroupSortMode | None = None
    word_count_field: str | None = None
    year_field: str | None = None
    include_groups: bool = True
    include_statistics: bool = True

    page: int | None = None
    page_size: int | None = None


class QueryResult(BaseModel):
    """Return value of facade.run_query() — plain data for presentation.

    Record lists are stored as given, not copied: with no active filter
    ``filtered_records`` is the caller's own collection.
    """

    query_id: str
    filtered_records: SkipValidation[list[Any]] = Field(default_factory=list)
    sorted_records: SkipValidation[list[Any]] = Field(default_factory=list)
    grouped_records: SkipValidation[dict[Any, list[Any]]] = Field(default_factory=dict)
    groups: list[GroupSummary] = Field(default_factory=list)
    aggregate_statistics: AggregateStatistics | None = None
    field_options: dict[str, list[Any]] = Field(default_factory=dict)
    field_ranges: dict[str, tuple[int | float, int | float] | None] = Field(
        default_factory=dict
    )
    page: Page | None = None
    issues: list[FieldIssue] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        """True when no configuration issue was detected."""
        return not self.issues

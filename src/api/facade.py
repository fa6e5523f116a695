# src/api/facade.py — v3
"""Public API facade — single entry point for querying a record collection.

Usage:
    from catalogquery.api.facade import run_query
    result = run_query(schema, records, QueryConfig(sort_field="year"))

Each engine (filters, sorting, grouping, aggregates) can also be called
directly; run_query only chains them and gathers configuration issues.
"""

from __future__ import annotations

import logging
import uuid

from catalogquery.api.models import QueryConfig, QueryResult
from catalogquery.config.settings import Settings
from catalogquery.core.models import CatalogSchema, FieldIssue
from catalogquery.core.record import Record
from catalogquery.logging.context import set_query_context, set_stage_context
from catalogquery.query.aggregates import (
    calculate_aggregate_statistics,
    summarize_groups,
)
from catalogquery.query.filters import (
    apply_filters,
    build_field_options,
    build_field_ranges,
    validate_filter_definitions,
)
from catalogquery.query.grouping import group_by_field
from catalogquery.query.pagination import paginate
from catalogquery.query.sorting import check_sort_field, sort_items

logger = logging.getLogger(__name__)


def run_query(
    schema: CatalogSchema,
    records: list[Record],
    config: QueryConfig | None = None,
    settings: Settings | None = None,
) -> QueryResult:
    """Filter, sort, group and summarize ``records`` in one call.

    Pipeline:
      1. Resolve configuration defaults (once)
      2. Validate field references, collecting issues
      3. Derive filter control data (options, ranges) from the full input
      4. Filter -> sort -> page
      5. Group the filtered records and compute statistics

    Args:
        schema: Runtime schema for the collection.
        records: Full current collection; never mutated.
        config: Per-call configuration. Empty QueryConfig if None.
        settings: Engine defaults. Loaded from .env if None.

    Returns:
        QueryResult with plain data and any configuration issues. Invalid
        field references never raise; they appear in ``issues``.
    """
    settings = settings or Settings()
    config = resolve_query_config(config or QueryConfig(), schema, settings)

    query_id = _generate_query_id()
    set_query_context(query_id, schema.catalog_name)
    try:
        return _execute(schema, records, config, query_id)
    finally:
        set_stage_context(None)


def resolve_query_config(
    config: QueryConfig, schema: CatalogSchema, settings: Settings
) -> QueryConfig:
    """Fill every unset optional value of ``config`` from schema and settings."""
    updates: dict[str, object] = {}
    if config.group_by_field is None and schema.core_fields.status_field:
        updates["group_by_field"] = schema.core_fields.status_field
    if config.group_sort_mode is None:
        updates["group_sort_mode"] = settings.default_group_sort_mode
    if config.word_count_field is None:
        updates["word_count_field"] = settings.default_word_count_field
    if config.year_field is None:
        updates["year_field"] = settings.default_year_field
    if config.page is not None and config.page_size is None:
        updates["page_size"] = settings.default_page_size
    if not updates:
        return config
    return config.model_copy(update=updates)


def _execute(
    schema: CatalogSchema,
    records: list[Record],
    config: QueryConfig,
    query_id: str,
) -> QueryResult:
    issues: list[FieldIssue] = []

    logger.info(
        "Running query: records=%d, filters=%d, sort=%s, group_by=%s",
        len(records), len(config.filters), config.sort_field, config.group_by_field,
    )

    # --- Filter ---
    set_stage_context("filter")
    _, filter_issues = validate_filter_definitions(config.filters, schema)
    issues.extend(filter_issues)
    field_options = build_field_options(records, config.filters, schema)
    field_ranges = build_field_ranges(records, config.filters, schema)
    for key, bounds in field_ranges.items():
        if bounds is None:
            issues.append(FieldIssue(
                field=key,
                operation="filter",
                reason="no_numeric_data",
                message=f"Range filter on {key!r} has no numeric data and is ignored",
            ))
    filtered = apply_filters(
        records, config.filters, config.filter_state, schema, ranges=field_ranges
    )

    # --- Sort ---
    set_stage_context("sort")
    sorted_records = filtered
    if config.sort_field:
        sort_issue = check_sort_field(config.sort_field, schema)
        if sort_issue is not None:
            issues.append(sort_issue)
        else:
            sorted_records = sort_items(
                filtered, config.sort_field, config.sort_descending, schema
            )

    page = None
    if config.page is not None and config.page_size is not None:
        page = paginate(sorted_records, config.page, config.page_size)

    # --- Group + aggregate ---
    set_stage_context("group")
    aggregate = None
    if config.include_statistics:
        issues.extend(_check_aggregate_fields(config, schema))
        aggregate = calculate_aggregate_statistics(
            filtered, config.word_count_field, config.year_field
        )

    grouped = {}
    groups = []
    if config.include_groups and config.group_by_field:
        if not schema.has_field(config.group_by_field):
            issues.append(FieldIssue(
                field=config.group_by_field,
                operation="group",
                reason="unknown_field",
                message=f"Group-by field {config.group_by_field!r} is not in the schema",
            ))
        else:
            grouped = group_by_field(filtered, config.group_by_field)
            if aggregate is None:
                aggregate = calculate_aggregate_statistics(
                    filtered, config.word_count_field, config.year_field
                )
            groups = summarize_groups(
                grouped,
                config.group_sort_mode,
                aggregate,
                config.word_count_field,
                config.year_field,
            )

    for issue in issues:
        logger.warning("Configuration issue: %s", issue.message)
    logger.info(
        "Query complete: kept=%d, groups=%d, issues=%d",
        len(filtered), len(groups), len(issues),
    )

    return QueryResult(
        query_id=query_id,
        filtered_records=filtered,
        sorted_records=sorted_records,
        grouped_records=grouped,
        groups=groups,
        aggregate_statistics=aggregate,
        field_options=field_options,
        field_ranges=field_ranges,
        page=page,
        issues=issues,
    )


def _check_aggregate_fields(config: QueryConfig, schema: CatalogSchema) -> list[FieldIssue]:
    """Issues for aggregation fields missing from the schema."""
    issues = []
    for key in (config.word_count_field, config.year_field):
        if key and not schema.has_field(key):
            issues.append(FieldIssue(
                field=key,
                operation="aggregate",
                reason="unknown_field",
                message=f"Statistics field {key!r} is not in the schema",
            ))
    return issues


def _generate_query_id() -> str:
    """Short random query id used to correlate log lines."""
    return uuid.uuid4().hex[:12]


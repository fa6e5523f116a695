# src/query/filters.py — v2
"""Filter engine: select / checkbox / range / text filters over records.

Composition rules:
  - AND across filter definitions: a record must pass every active filter.
  - OR inside a checkbox filter: any chosen value admits the record.
  - A filter without a chosen value (absent from the state, None, empty
    set, blank text, full data range) imposes no constraint.

When no filter is active the input list itself is returned, same object
and same order.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping, Sequence
from datetime import datetime
from typing import Any

from catalogquery.core.field_types import (
    coerce_date,
    coerce_number,
    coerce_value,
    extract_label,
    is_empty,
    to_plain_string,
)
from catalogquery.core.models import (
    CatalogSchema,
    FieldDefinition,
    FieldIssue,
    FilterDefinition,
    RangeValue,
)
from catalogquery.core.record import Record

logger = logging.getLogger(__name__)

FilterState = dict[str, Any]
FieldRanges = Mapping[str, tuple[int | float, int | float] | None]
Predicate = Callable[[Record], bool]

_ARRAY_TYPES = frozenset({"array", "labeled-reference-array"})


# === VALIDATION ===


def validate_filter_definitions(
    definitions: Sequence[FilterDefinition], schema: CatalogSchema
) -> tuple[list[FilterDefinition], list[FieldIssue]]:
    """Split definitions into usable ones and issues for the rest.

    A definition is usable when its field exists in the schema and is
    marked filterable. Disabled definitions are dropped without an issue.

    Returns:
        (valid definitions in input order, issues for rejected ones)
    """
    valid: list[FilterDefinition] = []
    issues: list[FieldIssue] = []
    for definition in definitions:
        if not definition.enabled:
            continue
        field_def = schema.get_field(definition.field)
        if field_def is None:
            issues.append(FieldIssue(
                field=definition.field,
                operation="filter",
                reason="unknown_field",
                message=f"Filter field {definition.field!r} is not in the schema",
            ))
            continue
        if not field_def.filterable:
            issues.append(FieldIssue(
                field=definition.field,
                operation="filter",
                reason="not_filterable",
                message=f"Field {definition.field!r} is not filterable",
            ))
            continue
        valid.append(definition)
    return valid, issues


# === APPLY ===


def apply_filters(
    records: list[Record],
    definitions: Sequence[FilterDefinition],
    state: FilterState,
    schema: CatalogSchema,
    ranges: FieldRanges | None = None,
) -> list[Record]:
    """Return the records passing every enabled, valid filter.

    Args:
        records: Collection to narrow.
        definitions: Configured filters; invalid ones are skipped.
        state: Field key -> chosen value (shape depends on the filter type).
        schema: Runtime schema used for field types and capability flags.
        ranges: Data bounds per field, as built by build_field_ranges. Bounds
            missing from it are derived from ``records``.

    Returns:
        A new list of the passing records, or ``records`` itself when no
        filter imposes a constraint.
    """
    valid, issues = validate_filter_definitions(definitions, schema)
    for issue in issues:
        logger.warning("Skipping filter: %s", issue.message)

    predicates: list[Predicate] = []
    for definition in valid:
        field_def = schema.get_field(definition.field)
        if field_def is None or definition.field not in state:
            continue
        predicate = build_predicate(
            definition, field_def, state[definition.field], records, ranges
        )
        if predicate is not None:
            predicates.append(predicate)

    if not predicates:
        return records

    result = [r for r in records if all(p(r) for p in predicates)]
    logger.debug(
        "Filtered %d -> %d records with %d active filters",
        len(records), len(result), len(predicates),
    )
    return result


def build_predicate(
    definition: FilterDefinition,
    field_def: FieldDefinition,
    chosen: Any,
    records: Sequence[Record],
    ranges: FieldRanges | None = None,
) -> Predicate | None:
    """Predicate for one filter, or None when the chosen value is no constraint."""
    builder = _PREDICATE_BUILDERS[definition.type]
    return builder(field_def, chosen, records, ranges)


def active_filter_count(
    definitions: Sequence[FilterDefinition],
    state: FilterState,
    schema: CatalogSchema,
    records: Sequence[Record] = (),
    ranges: FieldRanges | None = None,
) -> int:
    """Number of valid filters whose chosen value currently constrains."""
    valid, _ = validate_filter_definitions(definitions, schema)
    count = 0
    for definition in valid:
        field_def = schema.get_field(definition.field)
        if field_def is None or definition.field not in state:
            continue
        chosen = state[definition.field]
        if build_predicate(definition, field_def, chosen, records, ranges) is not None:
            count += 1
    return count


def _select_predicate(
    field_def: FieldDefinition,
    chosen: Any,
    records: Sequence[Record],
    ranges: FieldRanges | None,
) -> Predicate | None:
    if is_empty(chosen):
        return None
    key, field_type = field_def.key, field_def.type

    if field_type in _ARRAY_TYPES:
        target = str(chosen)
        return lambda r: _array_contains_any(r.get_field(key), [target])

    typed_chosen = coerce_value(chosen, field_type)
    expected = chosen if typed_chosen is None else typed_chosen
    return lambda r: coerce_value(r.get_field(key), field_type) == expected


def _checkbox_predicate(
    field_def: FieldDefinition,
    chosen: Any,
    records: Sequence[Record],
    ranges: FieldRanges | None,
) -> Predicate | None:
    values = _as_value_list(chosen)
    if not values:
        return None
    key, field_type = field_def.key, field_def.type

    if field_type in _ARRAY_TYPES:
        targets = [str(v) for v in values]
        return lambda r: _array_contains_any(r.get_field(key), targets)

    expected = []
    for value in values:
        typed = coerce_value(value, field_type)
        expected.append(value if typed is None else typed)

    def passes(record: Record) -> bool:
        value = coerce_value(record.get_field(key), field_type)
        return value is not None and value in expected

    return passes


def _range_predicate(
    field_def: FieldDefinition,
    chosen: Any,
    records: Sequence[Record],
    ranges: FieldRanges | None,
) -> Predicate | None:
    bounds = _as_range(chosen)
    if bounds is None:
        return None
    key = field_def.key
    if ranges is not None and key in ranges:
        data_range = ranges[key]
    else:
        data_range = get_field_range(records, key)
    if data_range is None:
        logger.debug("Range filter on %r skipped: no numeric data", key)
        return None
    if bounds.covers(*data_range):
        return None

    def passes(record: Record) -> bool:
        number = coerce_number(record.get_field(key))
        return number is not None and bounds.contains(number)

    return passes


def _text_predicate(
    field_def: FieldDefinition,
    chosen: Any,
    records: Sequence[Record],
    ranges: FieldRanges | None,
) -> Predicate | None:
    if chosen is None:
        return None
    query = str(chosen).casefold()
    if not query:
        return None
    key, field_type = field_def.key, field_def.type
    return lambda r: query in to_plain_string(r.get_field(key), field_type).casefold()


_PREDICATE_BUILDERS: dict[
    str,
    Callable[[FieldDefinition, Any, Sequence[Record], FieldRanges | None], Predicate | None],
] = {
    "select": _select_predicate,
    "checkbox": _checkbox_predicate,
    "range": _range_predicate,
    "text": _text_predicate,
}


# === FILTER CONTROL DATA ===


def get_unique_field_values(records: Iterable[Record], field: str) -> list[Any]:
    """Distinct non-empty values of ``field``, array elements flattened.

    Sorted case-insensitively by their text so filter controls list them
    in a stable order. Values that cannot be hashed (objects) are skipped.
    """
    seen: dict[Any, None] = {}
    for record in records:
        value = record.get_field(field)
        items = value if isinstance(value, (list, tuple)) else [value]
        for item in items:
            if is_empty(item):
                continue
            try:
                seen.setdefault(item, None)
            except TypeError:
                continue
    return sorted(seen, key=lambda v: (str(v).casefold(), str(v)))


def get_field_range(
    records: Iterable[Record], field: str
) -> tuple[int | float, int | float] | None:
    """``(min, max)`` over numeric values of ``field``; None without any."""
    low: int | float | None = None
    high: int | float | None = None
    for record in records:
        number = coerce_number(record.get_field(field))
        if number is None:
            continue
        if low is None or number < low:
            low = number
        if high is None or number > high:
            high = number
    if low is None or high is None:
        return None
    return (low, high)


def build_field_options(
    records: Sequence[Record],
    definitions: Sequence[FilterDefinition],
    schema: CatalogSchema,
) -> dict[str, list[Any]]:
    """Option lists for every valid select/checkbox filter.

    Static ``options`` on a definition win over values found in the data.
    """
    valid, _ = validate_filter_definitions(definitions, schema)
    options: dict[str, list[Any]] = {}
    for definition in valid:
        if definition.type not in ("select", "checkbox") or definition.field in options:
            continue
        if definition.options:
            options[definition.field] = list(definition.options)
        else:
            options[definition.field] = get_unique_field_values(records, definition.field)
    return options


def build_field_ranges(
    records: Sequence[Record],
    definitions: Sequence[FilterDefinition],
    schema: CatalogSchema,
) -> dict[str, tuple[int | float, int | float] | None]:
    """Data-derived bounds for every valid range filter (None without data)."""
    valid, _ = validate_filter_definitions(definitions, schema)
    return {
        d.field: get_field_range(records, d.field)
        for d in valid
        if d.type == "range"
    }


# === PRIMITIVES ===


def filter_where(records: Iterable[Record], predicate: Predicate) -> list[Record]:
    return [r for r in records if predicate(r)]


def exclude_where(records: Iterable[Record], predicate: Predicate) -> list[Record]:
    return [r for r in records if not predicate(r)]


def filter_by_field(records: Iterable[Record], field: str, value: Any) -> list[Record]:
    """Records whose stored value for ``field`` equals ``value``."""
    return [r for r in records if r.get_field(field) == value]


def filter_by_field_includes(
    records: Iterable[Record], field: str, value: Any
) -> list[Record]:
    """Records whose array field contains ``value`` (exact element match)."""
    result = []
    for record in records:
        items = record.get_field(field)
        if isinstance(items, (list, tuple)) and value in items:
            result.append(record)
    return result


def filter_by_date_range(
    records: Iterable[Record],
    field: str,
    start: datetime | str | None = None,
    end: datetime | str | None = None,
) -> list[Record]:
    """Records whose date falls in ``[start, end]``; undated records fail."""
    lower = coerce_date(start) if start is not None else None
    upper = coerce_date(end) if end is not None else None
    result = []
    for record in records:
        value = coerce_date(record.get_field(field))
        if value is None:
            continue
        if lower is not None and value < lower:
            continue
        if upper is not None and value > upper:
            continue
        result.append(record)
    return result


# === HELPERS ===


def _as_value_list(chosen: Any) -> list[Any]:
    if chosen is None:
        return []
    if isinstance(chosen, (set, frozenset, list, tuple)):
        return [v for v in chosen if not is_empty(v)]
    return [] if is_empty(chosen) else [chosen]


def _as_range(chosen: Any) -> RangeValue | None:
    if chosen is None:
        return None
    if isinstance(chosen, RangeValue):
        bounds = chosen
    elif isinstance(chosen, dict):
        bounds = RangeValue(
            min=coerce_number(chosen.get("min")), max=coerce_number(chosen.get("max"))
        )
    elif isinstance(chosen, (list, tuple)) and len(chosen) == 2:
        bounds = RangeValue(min=coerce_number(chosen[0]), max=coerce_number(chosen[1]))
    else:
        return None
    if bounds.min is None and bounds.max is None:
        return None
    return bounds


def _array_contains_any(value: Any, targets: list[str]) -> bool:
    if not isinstance(value, (list, tuple)):
        return False
    return any(
        str(item) in targets or extract_label(item) in targets for item in value
    )

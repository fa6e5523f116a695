# src/query/sorting.py — v1
"""Sort engine: single-column, type-aware, stable ordering of records.

Comparator choice follows the field's declared type:
  - number: numeric; non-numeric values count as empty
  - date: by timestamp; invalid dates count as empty
  - boolean: False < True
  - array / labeled-reference-array: by element count (shorter first).
    Contents are deliberately not compared.
  - string / object: case-insensitive comparison of the plain text form

Records whose value is empty always go last, in input order, whichever
the direction. Descending flips the comparator's sign on the non-empty
part only; Python's sort is stable so ties keep their input order.
"""

from __future__ import annotations

import functools
import logging
from collections.abc import Callable, Sequence
from typing import Any

from pydantic import BaseModel

from catalogquery.core.field_types import coerce_value, to_plain_string
from catalogquery.core.models import CatalogSchema, FieldIssue
from catalogquery.core.record import Record

logger = logging.getLogger(__name__)

Comparator = Callable[[Any, Any], int]


class SortSpec(BaseModel):
    """One key of a multi-column sort."""

    field: str
    descending: bool = False


def _cmp(a: Any, b: Any) -> int:
    return (a > b) - (a < b)


def _compare_numbers(a: Any, b: Any) -> int:
    return _cmp(a, b)


def _compare_dates(a: Any, b: Any) -> int:
    return _cmp(a.timestamp(), b.timestamp())


def _compare_booleans(a: Any, b: Any) -> int:
    return _cmp(int(a), int(b))


def _compare_lengths(a: Any, b: Any) -> int:
    return _cmp(len(a), len(b))


def _text_comparator(field_type: str) -> Comparator:
    def compare(a: Any, b: Any) -> int:
        return _cmp(
            to_plain_string(a, field_type).casefold(),
            to_plain_string(b, field_type).casefold(),
        )
    return compare


_COMPARATORS: dict[str, Comparator] = {
    "string": _text_comparator("string"),
    "number": _compare_numbers,
    "boolean": _compare_booleans,
    "date": _compare_dates,
    "array": _compare_lengths,
    "labeled-reference-array": _compare_lengths,
    "object": _text_comparator("object"),
}


def comparators() -> dict[str, Comparator]:
    """Return a copy of the comparison dispatch table."""
    return dict(_COMPARATORS)


def compare_values(a: Any, b: Any, field_type: str) -> int:
    """Compare two raw values as ``field_type`` (-1, 0 or 1).

    Both values are coerced first. An empty value compares greater than
    any non-empty one so it lands after it in ascending order.
    """
    typed_a = coerce_value(a, field_type)
    typed_b = coerce_value(b, field_type)
    if typed_a is None and typed_b is None:
        return 0
    if typed_a is None:
        return 1
    if typed_b is None:
        return -1
    return _COMPARATORS.get(field_type, _COMPARATORS["string"])(typed_a, typed_b)


def check_sort_field(field: str, schema: CatalogSchema) -> FieldIssue | None:
    """Issue describing why ``field`` cannot be sorted on, or None."""
    definition = schema.get_field(field)
    if definition is None:
        return FieldIssue(
            field=field,
            operation="sort",
            reason="unknown_field",
            message=f"Sort field {field!r} is not in the schema",
        )
    if not definition.sortable:
        return FieldIssue(
            field=field,
            operation="sort",
            reason="not_sortable",
            message=f"Field {field!r} is not sortable",
        )
    return None


def sort_items(
    records: Sequence[Record],
    field: str,
    descending: bool = False,
    schema: CatalogSchema | None = None,
) -> list[Record]:
    """Return a new list of ``records`` ordered by ``field``.

    Args:
        records: Collection to order; never mutated.
        field: Schema key to sort by.
        descending: Reverse the order of non-empty values.
        schema: Schema giving the field's type and sortable flag.

    Returns:
        Sorted copy. When the field is unknown or not sortable the copy
        keeps input order and a warning is logged.
    """
    if schema is None:
        logger.warning("Cannot sort by %r without a schema", field)
        return list(records)
    issue = check_sort_field(field, schema)
    if issue is not None:
        logger.warning("Sort skipped: %s", issue.message)
        return list(records)

    field_type = schema.field_type(field) or "string"
    comparator = _COMPARATORS[field_type]
    sign = -1 if descending else 1

    present: list[tuple[Any, Record]] = []
    empty: list[Record] = []
    for record in records:
        typed = coerce_value(record.get_field(field), field_type)
        if typed is None:
            empty.append(record)
        else:
            present.append((typed, record))

    key = functools.cmp_to_key(lambda a, b: sign * comparator(a[0], b[0]))
    present.sort(key=key)
    logger.debug(
        "Sorted %d records by %r (%s), %d without value",
        len(records), field, "desc" if descending else "asc", len(empty),
    )
    return [record for _, record in present] + empty


def sort_by_multiple(
    records: Sequence[Record],
    specs: Sequence[SortSpec],
    schema: CatalogSchema,
) -> list[Record]:
    """Order by several keys, the first spec having the highest priority.

    Applies stable single-key sorts from the last spec to the first.
    """
    result = list(records)
    for spec in reversed(specs):
        result = sort_items(result, spec.field, spec.descending, schema)
    return result

# src/query/aggregates.py — v2
"""Statistics over record collections and groups.

Sums and averages only consider records carrying a coercible numeric
value; missing values never count as zero. Averages divide by the number
of records with a value, not by the collection size.
"""

from __future__ import annotations

import logging
import math
from collections import Counter
from collections.abc import Callable, Iterable, Sequence
from datetime import datetime
from typing import Any, Literal

from catalogquery.core.field_types import coerce_date, coerce_number, is_empty
from catalogquery.core.models import (
    AggregateStatistics,
    GroupSortMode,
    GroupStatistics,
    GroupSummary,
    NumericStats,
    YearRange,
)
from catalogquery.core.record import Record
from catalogquery.query.grouping import (
    Groups,
    group_by_field,
    group_key,
    key_text,
    sort_groups,
)

logger = logging.getLogger(__name__)

NO_VALUE_LABEL = "(no value)"

AggregateOperation = Literal["sum", "avg", "min", "max", "count"]


def calculate_statistics(
    records: Sequence[Record],
    word_count_field: str = "word-count",
    year_field: str = "year",
) -> GroupStatistics:
    """Count, word-count sum/average and year range for one group.

    Args:
        records: Group members.
        word_count_field: Numeric field summed and averaged.
        year_field: Numeric field whose min/max form the year range.

    Returns:
        GroupStatistics; an empty input gives zero counts and a None range.
    """
    return _collect(records, word_count_field, year_field)[0]


def calculate_aggregate_statistics(
    records: Sequence[Record],
    word_count_field: str = "word-count",
    year_field: str = "year",
) -> AggregateStatistics:
    """Whole-collection statistics, the denominator for group percentages."""
    stats, valid_words, valid_years = _collect(records, word_count_field, year_field)
    return AggregateStatistics(
        **stats.model_dump(),
        valid_word_count=valid_words,
        valid_year_count=valid_years,
    )


def group_percentage(group_count: int, total_count: int) -> int:
    """Share of the collection, rounded half up to a whole percent.

    Each group is rounded on its own, so shares need not add up to 100.
    """
    if total_count <= 0:
        return 0
    return math.floor(group_count / total_count * 100 + 0.5)


def summarize_groups(
    groups: Groups,
    mode: GroupSortMode,
    aggregate: AggregateStatistics,
    word_count_field: str = "word-count",
    year_field: str = "year",
) -> list[GroupSummary]:
    """Ordered groups with their statistics and share of ``aggregate``."""
    summaries = []
    for key, members in sort_groups(groups, mode):
        stats = calculate_statistics(members, word_count_field, year_field)
        summaries.append(GroupSummary(
            key=key,
            label=group_label(key),
            records=members,
            statistics=stats,
            percentage=group_percentage(stats.count, aggregate.total_count),
        ))
    return summaries


def group_label(key: Any) -> str:
    """Display label for a group key; the None group reads NO_VALUE_LABEL."""
    if key is None:
        return NO_VALUE_LABEL
    return key_text(key)


# === FIELD-LEVEL AGGREGATES ===


def sum_field(records: Iterable[Record], field: str) -> int | float:
    return sum(_numbers(records, field))


def average_field(records: Iterable[Record], field: str) -> float:
    """Mean over records carrying a value; 0 when none do."""
    values = _numbers(records, field)
    return sum(values) / len(values) if values else 0


def get_numeric_stats(records: Iterable[Record], field: str) -> NumericStats:
    """Count/sum/avg/min/max over numeric values; all zero without any."""
    values = _numbers(records, field)
    if not values:
        return NumericStats()
    total = sum(values)
    return NumericStats(
        count=len(values),
        sum=total,
        avg=total / len(values),
        min=min(values),
        max=max(values),
    )


def get_date_range(records: Iterable[Record], field: str) -> tuple[datetime, datetime] | None:
    """Earliest and latest valid date of ``field``; None without any."""
    dates = [d for d in (coerce_date(r.get_field(field)) for r in records) if d is not None]
    if not dates:
        return None
    return (min(dates), max(dates))


def count_by_field(records: Iterable[Record], field: str) -> dict[Any, int]:
    """Occurrences per group key (see grouping.group_key).

    Array elements are counted one by one, once per record. Records
    without a value are not counted.
    """
    counts: Counter[Any] = Counter()
    for record in records:
        value = record.get_field(field)
        if value is None:
            continue
        if isinstance(value, (list, tuple)):
            for element in dict.fromkeys(group_key(e) for e in value if not is_empty(e)):
                counts[element] += 1
        else:
            counts[group_key(value)] += 1
    return dict(counts)


def get_most_common(records: Iterable[Record], field: str) -> Any:
    """Most frequent value of ``field`` (first seen wins ties); None if none."""
    counts = count_by_field(records, field)
    if not counts:
        return None
    return max(counts, key=counts.__getitem__)


def aggregate_by_field(
    records: Iterable[Record],
    group_field: str,
    aggregate_field: str,
    operation: AggregateOperation,
) -> dict[Any, int | float]:
    """Group by ``group_field`` and reduce ``aggregate_field`` in each group.

    Only numeric values take part; "count" counts them. A group without
    any numeric value gets 0 whatever the operation.

    Raises:
        ValueError: If operation is not sum, avg, min, max or count.
    """
    if operation not in _REDUCERS:
        raise ValueError(
            f"Unknown aggregate operation {operation!r}. "
            "Supported: sum, avg, min, max, count"
        )
    reduce = _REDUCERS[operation]
    results: dict[Any, int | float] = {}
    for key, members in group_by_field(records, group_field).items():
        values = _numbers(members, aggregate_field)
        results[key] = reduce(values) if values else 0
    return results


# === HELPERS ===

_REDUCERS: dict[str, Callable[[list[int | float]], int | float]] = {
    "sum": sum,
    "avg": lambda values: sum(values) / len(values),
    "min": min,
    "max": max,
    "count": len,
}


def _numbers(records: Iterable[Record], field: str) -> list[int | float]:
    return [n for n in (coerce_number(r.get_field(field)) for r in records) if n is not None]


def _collect(
    records: Sequence[Record], word_count_field: str, year_field: str
) -> tuple[GroupStatistics, int, int]:
    words = _numbers(records, word_count_field)
    years = _numbers(records, year_field)
    total_words = sum(words)
    stats = GroupStatistics(
        count=len(records),
        total_word_count=total_words,
        average_word_count=total_words / len(words) if words else 0,
        year_range=YearRange(
            min=min(years) if years else None,
            max=max(years) if years else None,
        ),
    )
    return stats, len(words), len(years)

# tests/unit/query/test_unit_aggregates.py — v2
"""Tests for query/aggregates.py — group statistics and percentages."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from catalogquery.core.record import Record
from catalogquery.query.aggregates import (
    NO_VALUE_LABEL,
    aggregate_by_field,
    average_field,
    calculate_aggregate_statistics,
    calculate_statistics,
    count_by_field,
    get_date_range,
    get_most_common,
    get_numeric_stats,
    group_label,
    group_percentage,
    sum_field,
    summarize_groups,
)
from catalogquery.query.grouping import BoolKey, MappingKey, group_by_field


class TestCalculateStatistics:
    def test_raw_group(self, sample_records):
        raw = [r for r in sample_records if r.get_field("status") == "raw"]
        stats = calculate_statistics(raw, word_count_field="words")
        assert stats.count == 2
        assert stats.total_word_count == 16500
        assert stats.average_word_count == 8250
        assert (stats.year_range.min, stats.year_range.max) == (1923, 1928)

    def test_missing_values_not_counted_as_zero(self, sample_records, record_without_year):
        raw = [sample_records[0], record_without_year]
        stats = calculate_statistics(raw, word_count_field="words")
        assert stats.count == 2
        assert stats.total_word_count == 12800
        assert stats.year_range.min == 1928
        assert stats.year_range.max == 1928

    def test_average_over_records_with_value(self, record_factory):
        records = [record_factory("a", words=100), record_factory("b")]
        stats = calculate_statistics(records, word_count_field="words")
        assert stats.average_word_count == 100

    def test_numeric_strings_counted(self, record_factory):
        records = [record_factory("a", words="250"), record_factory("b", words="n/a")]
        assert calculate_statistics(records, word_count_field="words").total_word_count == 250

    def test_empty(self):
        stats = calculate_statistics([])
        assert stats.count == 0
        assert stats.total_word_count == 0
        assert stats.average_word_count == 0
        assert stats.year_range.min is None and stats.year_range.max is None

    def test_default_field_names(self, record_factory):
        stats = calculate_statistics([record_factory("a", word_count=300, year=2001)])
        assert stats.total_word_count == 300
        assert stats.year_range.min == 2001


class TestAggregateStatistics:
    def test_coverage_counts(self, sample_records, record_without_year):
        stats = calculate_aggregate_statistics(
            [*sample_records, record_without_year], word_count_field="words"
        )
        assert stats.total_count == 4
        assert stats.valid_word_count == 4
        assert stats.valid_year_count == 3
        assert stats.total_word_count == 35300
        assert (stats.year_range.min, stats.year_range.max) == (1894, 1928)


class TestGroupPercentage:
    @pytest.mark.parametrize("count,total,expected", [
        (1, 8, 13),
        (2, 3, 67),
        (1, 3, 33),
        (3, 3, 100),
        (0, 5, 0),
    ])
    def test_round_half_up(self, count, total, expected):
        assert group_percentage(count, total) == expected

    def test_zero_total(self):
        assert group_percentage(0, 0) == 0

    def test_thirds_sum_to_99(self):
        assert sum(group_percentage(1, 3) for _ in range(3)) == 99


class TestSummarizeGroups:
    def test_conservation(self, sample_records):
        groups = group_by_field(sample_records, "status")
        aggregate = calculate_aggregate_statistics(sample_records, word_count_field="words")
        summaries = summarize_groups(groups, "count-desc", aggregate, word_count_field="words")
        assert [s.key for s in summaries] == ["raw", "approved"]
        assert sum(s.statistics.count for s in summaries) == aggregate.total_count
        assert [s.percentage for s in summaries] == [67, 33]
        assert summaries[0].statistics.total_word_count == 16500

    def test_none_group_label(self, record_factory):
        records = [record_factory("a"), record_factory("b", status="raw")]
        groups = group_by_field(records, "status")
        aggregate = calculate_aggregate_statistics(records)
        summaries = summarize_groups(groups, "alphabetical", aggregate)
        assert [s.label for s in summaries] == ["raw", NO_VALUE_LABEL]
        assert summaries[1].records[0].id == "a"

    def test_labels(self):
        assert group_label(None) == NO_VALUE_LABEL
        assert group_label(("a", "b")) == "a, b"
        assert group_label(1928) == "1928"
        assert group_label(BoolKey(False)) == "false"
        assert group_label(MappingKey((("k", 1),))) == "k: 1"


class TestFieldAggregates:
    def test_sum_and_average(self, sample_records, record_without_year):
        records = [*sample_records, record_without_year]
        assert sum_field(records, "year") == 1928 + 1923 + 1894
        assert average_field(records, "year") == pytest.approx((1928 + 1923 + 1894) / 3)

    def test_average_without_values(self, record_factory):
        assert average_field([record_factory("a")], "year") == 0

    def test_numeric_stats(self, sample_records):
        stats = get_numeric_stats(sample_records, "words")
        assert (stats.count, stats.sum, stats.min, stats.max) == (3, 34500, 4500, 18000)
        assert stats.avg == 11500

    def test_numeric_stats_empty(self):
        assert get_numeric_stats([], "words").count == 0

    def test_date_range(self, record_factory):
        records = [
            record_factory("a", date_read="2024-05-01"),
            record_factory("b", date_read="2023-01-09"),
            record_factory("c", date_read="never"),
        ]
        assert get_date_range(records, "date-read") == (
            datetime(2023, 1, 9, tzinfo=timezone.utc),
            datetime(2024, 5, 1, tzinfo=timezone.utc),
        )
        assert get_date_range([], "date-read") is None

    def test_count_by_field(self, sample_records, record_without_year):
        counts = count_by_field([*sample_records, record_without_year], "status")
        assert counts == {"raw": 3, "approved": 1}

    def test_count_array_elements_once_per_record(self, record_factory):
        records = [
            record_factory("a", tags=["sea", "sea", "horror"]),
            record_factory("b", tags=["horror"]),
        ]
        assert count_by_field(records, "tags") == {"sea": 1, "horror": 2}

    def test_most_common(self, sample_records):
        assert get_most_common(sample_records, "status") == "raw"
        assert get_most_common([], "status") is None

    def test_count_keeps_true_apart_from_one(self):
        records = [
            Record("a", fields={"v": True}),
            Record("b", fields={"v": 1}),
            Record("c", fields={"v": 1.0}),
        ]
        assert count_by_field(records, "v") == {BoolKey(True): 1, 1: 2}


class TestAggregateByField:
    @pytest.fixture
    def records(self, sample_records, record_factory):
        return [
            *sample_records,
            record_factory("w4", status="approved", words="n/a"),
            record_factory("w5", status="draft"),
        ]

    @pytest.mark.parametrize("operation,expected", [
        ("sum", {"raw": 16500, "approved": 18000, "draft": 0}),
        ("avg", {"raw": 8250, "approved": 18000, "draft": 0}),
        ("min", {"raw": 4500, "approved": 18000, "draft": 0}),
        ("max", {"raw": 12000, "approved": 18000, "draft": 0}),
        ("count", {"raw": 2, "approved": 1, "draft": 0}),
    ])
    def test_operations(self, records, operation, expected):
        assert aggregate_by_field(records, "status", "words", operation) == expected

    def test_none_group_included(self, sample_records, record_factory):
        records = [*sample_records, record_factory("w6", words=300)]
        result = aggregate_by_field(records, "status", "words", "sum")
        assert result[None] == 300

    def test_array_of_objects_group_field(self):
        records = [
            Record("a", fields={"refs": [{"k": 1}], "words": 10}),
            Record("b", fields={"refs": [{"k": 1}], "words": 5}),
        ]
        result = aggregate_by_field(records, "refs", "words", "sum")
        assert result == {(MappingKey((("k", 1),)),): 15}

    def test_empty_collection(self):
        assert aggregate_by_field([], "status", "words", "avg") == {}

    def test_unknown_operation(self, sample_records):
        with pytest.raises(ValueError, match="Unknown aggregate operation"):
            aggregate_by_field(sample_records, "status", "words", "median")

# src/query/grouping.py — v2
"""Partition records into groups keyed by field value.

Groups are plain dicts in first-seen order. Records without a value for
the grouping field are kept in a single group keyed by None.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Hashable, Iterable
from dataclasses import dataclass
from typing import Any

from catalogquery.core.field_types import coerce_date, is_empty
from catalogquery.core.models import GroupSortMode
from catalogquery.core.record import Record

logger = logging.getLogger(__name__)

GroupKey = Hashable | None
Groups = dict[Any, list[Record]]


@dataclass(frozen=True)
class BoolKey:
    """Group key for a boolean, kept apart from the numbers 1 and 0."""

    value: bool


@dataclass(frozen=True)
class MappingKey:
    """Group key for an object value: its pairs sorted by key text."""

    items: tuple[tuple[str, Any], ...]


def group_key(value: Any) -> GroupKey:
    """Hashable key for a stored value; empties give None.

    Conversion is recursive: lists and tuples become tuples, dicts become
    MappingKey, sets become frozensets, booleans become BoolKey.
    """
    if is_empty(value):
        return None
    return _hashable(value)


def key_text(key: Any) -> str:
    """Plain text of a group key, used for labels and alphabetical order."""
    if key is None:
        return ""
    if isinstance(key, BoolKey):
        return "true" if key.value else "false"
    if isinstance(key, MappingKey):
        return ", ".join(f"{name}: {key_text(part)}" for name, part in key.items)
    if isinstance(key, tuple):
        return ", ".join(key_text(part) for part in key)
    if isinstance(key, frozenset):
        return ", ".join(sorted(key_text(part) for part in key))
    return str(key)


def group_by_field(records: Iterable[Record], field: str) -> Groups:
    """Group records by their value for ``field``.

    Every record lands in exactly one group; empty values share the None
    group.
    """
    groups: Groups = {}
    for record in records:
        groups.setdefault(group_key(record.get_field(field)), []).append(record)
    logger.debug("Grouped by %r into %d groups", field, len(groups))
    return groups


def group_by_array_field(records: Iterable[Record], field: str) -> Groups:
    """Group by each element of an array field.

    A record with several elements appears in several groups; records
    without elements appear in none.
    """
    groups: Groups = {}
    for record in records:
        value = record.get_field(field)
        if not isinstance(value, (list, tuple)):
            continue
        for element in value:
            if is_empty(element):
                continue
            bucket = groups.setdefault(group_key(element), [])
            if not bucket or bucket[-1] is not record:
                bucket.append(record)
    return groups


def group_by_date_month(records: Iterable[Record], field: str) -> Groups:
    """Group by ``YYYY-MM`` of a date field, newest month first.

    Records without a date go to the None group (last); records whose
    value is not a parseable date are left out.
    """
    months: Groups = {}
    undated: list[Record] = []
    for record in records:
        value = record.get_field(field)
        if value is None:
            undated.append(record)
            continue
        parsed = coerce_date(value)
        if parsed is None:
            continue
        months.setdefault(parsed.strftime("%Y-%m"), []).append(record)

    groups: Groups = {key: months[key] for key in sorted(months, reverse=True)}
    if undated:
        groups[None] = undated
    return groups


def group_by_custom(
    records: Iterable[Record], key_fn: Callable[[Record], GroupKey]
) -> Groups:
    """Group by an arbitrary key function (None is an ordinary group key)."""
    groups: Groups = {}
    for record in records:
        groups.setdefault(key_fn(record), []).append(record)
    return groups


def sort_groups(groups: Groups, mode: GroupSortMode) -> list[tuple[Any, list[Record]]]:
    """Order group entries.

    Args:
        groups: Mapping from group_by_field or similar.
        mode: "alphabetical" (case-insensitive, None key last),
            "count-desc" or "count-asc" (ties keep mapping order).

    Returns:
        List of (key, records) pairs.

    Raises:
        ValueError: If mode is not one of the three supported modes.
    """
    entries = list(groups.items())
    if mode == "alphabetical":
        entries.sort(key=lambda e: (e[0] is None, key_text(e[0]).casefold(), key_text(e[0])))
    elif mode == "count-desc":
        entries.sort(key=lambda e: len(e[1]), reverse=True)
    elif mode == "count-asc":
        entries.sort(key=lambda e: len(e[1]))
    else:
        raise ValueError(
            f"Unknown group sort mode {mode!r}. "
            "Supported: alphabetical, count-desc, count-asc"
        )
    return entries


def flatten_groups(groups: Groups) -> list[Record]:
    """Concatenate group members in group order."""
    result: list[Record] = []
    for members in groups.values():
        result.extend(members)
    return result


def get_group_keys(groups: Groups) -> list[Any]:
    """Group keys, None excluded."""
    return [key for key in groups if key is not None]


def _hashable(value: Any) -> Hashable:
    if isinstance(value, bool):
        return BoolKey(value)
    if isinstance(value, (list, tuple)):
        return tuple(_hashable(item) for item in value)
    if isinstance(value, dict):
        pairs = ((str(k), _hashable(v)) for k, v in value.items())
        return MappingKey(tuple(sorted(pairs, key=lambda pair: pair[0])))
    if isinstance(value, (set, frozenset)):
        return frozenset(_hashable(item) for item in value)
    try:
        hash(value)
    except TypeError:
        return repr(value)
    return value

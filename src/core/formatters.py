# src/core/formatters.py — v1
"""Display formatting per field type.

Formatting is for presentation only. Comparison and filtering never go
through these functions; they use core.field_types coercion instead.
Empty values render as EMPTY_DISPLAY.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable

from catalogquery.core.field_types import (
    coerce_boolean,
    coerce_date,
    coerce_number,
    extract_label,
    is_empty,
)

if TYPE_CHECKING:
    from catalogquery.config.settings import Settings
    from catalogquery.core.models import FieldDefinition
    from catalogquery.core.record import Record

EMPTY_DISPLAY = "-"
ELLIPSIS = "..."


def format_string(value: Any) -> str:
    if is_empty(value):
        return EMPTY_DISPLAY
    return str(value)


def format_number(value: Any, group_thousands: bool = True) -> str:
    """Render with grouped thousands separators, e.g. ``12,000``."""
    number = coerce_number(value)
    if number is None:
        return EMPTY_DISPLAY
    if isinstance(number, float) and not number.is_integer():
        text = f"{number:,.3f}" if group_thousands else f"{number:.3f}"
        return text.rstrip("0").rstrip(".")
    return f"{int(number):,}" if group_thousands else str(int(number))


def format_date(value: Any) -> str:
    parsed = coerce_date(value)
    if parsed is None:
        return EMPTY_DISPLAY
    return parsed.strftime("%Y-%m-%d")


def format_boolean(value: Any) -> str:
    parsed = coerce_boolean(value)
    if parsed is None:
        return EMPTY_DISPLAY
    return "Yes" if parsed else "No"


def format_array(value: Any, max_items: int | None = None) -> str:
    """Join items with ``, ``; past ``max_items`` a trailing ellipsis is added."""
    if not isinstance(value, (list, tuple)) or not value:
        return EMPTY_DISPLAY
    return _join_truncated([str(item) for item in value], max_items)


def format_labeled_reference_array(value: Any, max_items: int | None = None) -> str:
    """Like format_array, showing the label inside each ``[[Label]]`` entry."""
    if not isinstance(value, (list, tuple)) or not value:
        return EMPTY_DISPLAY
    labels = [label for label in (extract_label(entry) for entry in value) if label]
    if not labels:
        return EMPTY_DISPLAY
    return _join_truncated(labels, max_items)


def format_object(value: Any) -> str:
    """Compact key summary: ``[Object: a, b]``, or ``[Object]`` with no keys."""
    if value is None:
        return EMPTY_DISPLAY
    if isinstance(value, dict):
        if not value:
            return "[Object]"
        return f"[Object: {', '.join(str(key) for key in value)}]"
    if isinstance(value, str):
        return value or EMPTY_DISPLAY
    return str(value)


_FORMATTERS: dict[str, Callable[..., str]] = {
    "string": lambda value, **_: format_string(value),
    "number": lambda value, group_thousands=True, **_: format_number(value, group_thousands),
    "boolean": lambda value, **_: format_boolean(value),
    "date": lambda value, **_: format_date(value),
    "array": lambda value, max_items=None, **_: format_array(value, max_items),
    "labeled-reference-array": lambda value, max_items=None, **_: (
        format_labeled_reference_array(value, max_items)
    ),
    "object": lambda value, **_: format_object(value),
}


def format_value(
    value: Any,
    field_type: str,
    max_items: int | None = None,
    group_thousands: bool = True,
) -> str:
    """Format ``value`` for display according to its declared field type.

    Args:
        value: Raw stored value.
        field_type: One of core.field_types.FIELD_TYPES.
        max_items: Truncation count for array types (None = show all).
        group_thousands: Group number digits with commas.

    Returns:
        Display string; EMPTY_DISPLAY for empty or unknown-typed values.
    """
    formatter = _FORMATTERS.get(field_type)
    if formatter is None or is_empty(value):
        return EMPTY_DISPLAY
    return formatter(value, max_items=max_items, group_thousands=group_thousands)


def format_field(
    record: Record, definition: FieldDefinition, settings: Settings | None = None
) -> str:
    """Format one record cell using display settings.

    ``settings.array_display_limit`` of 0 shows every array entry.
    """
    max_items = None
    group_thousands = True
    if settings is not None:
        max_items = settings.array_display_limit or None
        group_thousands = settings.group_thousands
    return format_value(
        record.get_field(definition.key), definition.type, max_items, group_thousands
    )


def formatters() -> dict[str, Callable[..., str]]:
    """Return a copy of the formatting dispatch table."""
    return dict(_FORMATTERS)


def _join_truncated(items: list[str], max_items: int | None) -> str:
    if max_items is not None and len(items) > max_items:
        return ", ".join([*items[:max_items], ELLIPSIS])
    return ", ".join(items)

# src/core/field_types.py — v2
"""Field type system: type tags, emptiness and coercion rules.

Every concern that branches on a field type (coercion here, display in
core.formatters, comparison in query.sorting) does so through a dispatch
table keyed by FieldType. tests/unit/core checks each table against
FIELD_TYPES so a new tag cannot be added without handling it everywhere.
"""

from __future__ import annotations

import math
import re
from datetime import date, datetime, timezone
from typing import Any, Callable, Literal, get_args

FieldType = Literal[
    "string",
    "number",
    "boolean",
    "date",
    "array",
    "labeled-reference-array",
    "object",
]

FIELD_TYPES: tuple[str, ...] = get_args(FieldType)

_TRUE_STRINGS = frozenset({"true", "1", "yes"})
_FALSE_STRINGS = frozenset({"false", "0", "no"})

# [[Label]] wrapper used by labeled-reference-array entries.
_LABEL_PATTERN = re.compile(r"\[\[(.*?)\]\]")

# Plain decimal notation only: no digit separators, no non-ASCII digits.
_NUMBER_PATTERN = re.compile(
    r"[+-]?(?:\d+(?P<fraction>\.\d*)?|(?P<fraction_only>\.\d+))(?P<exponent>[eE][+-]?\d+)?",
    re.ASCII,
)


def is_empty(value: Any) -> bool:
    """True for None, the empty string and empty containers, whatever the type."""
    if value is None:
        return True
    if isinstance(value, str):
        return value == ""
    if isinstance(value, (list, tuple, set, frozenset, dict)):
        return len(value) == 0
    return False


def extract_label(entry: Any) -> str:
    """Return the inner label of a ``[[Label]]`` entry, or the entry as text."""
    text = str(entry)
    match = _LABEL_PATTERN.search(text)
    return match.group(1) if match else text


# === COERCION ===


def coerce_string(value: Any) -> str | None:
    if isinstance(value, str):
        return value if value != "" else None
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return _number_text(value) if _is_finite(value) else None
    return None


def coerce_number(value: Any) -> int | float | None:
    """Parse ints, floats and numeric strings; NaN and infinities become None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return value if _is_finite(value) else None
    if isinstance(value, str):
        match = _NUMBER_PATTERN.fullmatch(value.strip())
        if not match:
            return None
        if not any(match.group(name) for name in ("fraction", "fraction_only", "exponent")):
            return int(match.group(0))
        parsed = float(match.group(0))
        return parsed if _is_finite(parsed) else None
    return None


def coerce_boolean(value: Any) -> bool | None:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
    return None


def coerce_date(value: Any) -> datetime | None:
    """Coerce to a timezone-aware datetime.

    Accepts datetime/date objects, ISO-like strings and numeric timestamps
    in milliseconds since the epoch. Naive values are read as UTC so every
    coerced date is comparable with every other.
    """
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        if not _is_finite(value):
            return None
        try:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    if isinstance(value, str):
        return _parse_date_string(value.strip())
    return None


def coerce_array(value: Any) -> list[Any] | None:
    """Lists and tuples pass through; a single scalar becomes a one-item list."""
    if isinstance(value, (list, tuple)):
        return list(value) if value else None
    if isinstance(value, str):
        return [value] if value else None
    if isinstance(value, (bool, int, float)):
        return [coerce_string(value)]
    return None


def coerce_labeled_reference_array(value: Any) -> list[str] | None:
    items = coerce_array(value)
    if items is None:
        return None
    return [str(item) for item in items if not is_empty(item)] or None


def coerce_object(value: Any) -> dict[str, Any] | None:
    if isinstance(value, dict):
        return value if value else None
    return None


_COERCERS: dict[str, Callable[[Any], Any]] = {
    "string": coerce_string,
    "number": coerce_number,
    "boolean": coerce_boolean,
    "date": coerce_date,
    "array": coerce_array,
    "labeled-reference-array": coerce_labeled_reference_array,
    "object": coerce_object,
}


def coerce_value(value: Any, field_type: str) -> Any:
    """Coerce a raw value to ``field_type``; anything unusable becomes None."""
    if is_empty(value):
        return None
    coercer = _COERCERS.get(field_type)
    if coercer is None:
        return None
    return coercer(value)


# === PLAIN STRING FORM ===


def to_plain_string(value: Any, field_type: str) -> str:
    """Unformatted text used for text search and string comparison.

    Unlike core.formatters, numbers carry no separators and empty values
    render as an empty string.
    """
    typed = coerce_value(value, field_type)
    if typed is None:
        return ""
    if field_type == "date":
        return typed.date().isoformat()
    if field_type == "labeled-reference-array":
        return ", ".join(extract_label(entry) for entry in typed)
    if field_type == "array":
        return ", ".join(str(item) for item in typed)
    if field_type == "object":
        return ", ".join(str(key) for key in typed)
    if field_type == "boolean":
        return "true" if typed else "false"
    if field_type == "number":
        return _number_text(typed)
    return str(typed)


def coercers() -> dict[str, Callable[[Any], Any]]:
    """Return a copy of the coercion dispatch table."""
    return dict(_COERCERS)


# === HELPERS ===


def _is_finite(value: int | float) -> bool:
    return isinstance(value, int) or math.isfinite(value)


def _number_text(value: int | float) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _parse_date_string(text: str) -> datetime | None:
    if not text:
        return None
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        parsed = None
    if parsed is None:
        # Partial dates: "1928" or "1928-02"
        match = re.fullmatch(r"(\d{4})(?:-(\d{1,2}))?", text)
        if not match:
            return None
        try:
            parsed = datetime(int(match.group(1)), int(match.group(2) or 1), 1)
        except ValueError:
            return None
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)

# src/query/pagination.py — v1
"""Zero-indexed page slicing for any result list."""

from __future__ import annotations

import math
from collections.abc import Sequence
from typing import Any

from pydantic import BaseModel, Field


class Page(BaseModel):
    items: list[Any] = Field(default_factory=list)
    total_pages: int = 0
    current_page: int = 0
    total_items: int = 0


def paginate(items: Sequence[Any], page_number: int, items_per_page: int) -> Page:
    """Slice out one page; ``page_number`` is clamped to the valid range.

    Raises:
        ValueError: If items_per_page is not positive.
    """
    if items_per_page <= 0:
        raise ValueError(f"items_per_page must be > 0, got {items_per_page}")
    total_items = len(items)
    total_pages = math.ceil(total_items / items_per_page)
    page = max(0, min(page_number, total_pages - 1))
    start = page * items_per_page
    return Page(
        items=list(items[start:start + items_per_page]),
        total_pages=total_pages,
        current_page=page,
        total_items=total_items,
    )

# src/logging/context.py — v2
"""Contextual logging support — attach query_id, collection, stage to log records."""

from __future__ import annotations

import contextvars
from dataclasses import dataclass
from typing import Any

# Context variables for structured logging — set per query execution.
_query_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "query_id", default=None
)
_collection: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "collection", default=None
)
_stage: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "stage", default=None
)


@dataclass
class LogContext:
    """Immutable snapshot of current logging context."""

    query_id: str | None = None
    collection: str | None = None
    stage: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Return non-None fields as dict for JSON log injection."""
        return {k: v for k, v in self.__dict__.items() if v is not None}


def get_context() -> LogContext:
    """Snapshot current context variables."""
    return LogContext(
        query_id=_query_id.get(),
        collection=_collection.get(),
        stage=_stage.get(),
    )


def set_query_context(query_id: str, collection: str | None = None) -> None:
    """Set query-level context (called once per run_query call)."""
    _query_id.set(query_id)
    _collection.set(collection)


def set_stage_context(stage: str | None) -> None:
    """Set the current pipeline stage (filter, sort, group, ...)."""
    _stage.set(stage)


def clear_context() -> None:
    """Reset all context variables."""
    _query_id.set(None)
    _collection.set(None)
    _stage.set(None)

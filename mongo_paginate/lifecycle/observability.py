from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any, Callable

logger = logging.getLogger("mongo_paginate")


@dataclass(frozen=True)
class QueryEvent:
    """A single database operation, as seen by tracing listeners.

    ``details`` carries the cursor modifiers (skip, limit, sort, projection)
    for reads, and the pagination mode for ``paginate`` events.
    """

    operation: str
    collection: str
    filter: dict[str, Any] | None = None
    details: dict[str, Any] = field(default_factory=dict)
    duration_ms: float = 0.0
    result_count: int | None = None
    document_class: str = ""


class _ObservabilityState:
    """Global mutable state for observability."""

    def __init__(self) -> None:
        self.enabled: bool = False
        self.slow_query_threshold_ms: float = 100.0
        self.listeners: list[Callable[[QueryEvent], Any]] = []
        self.events: list[QueryEvent] = []
        self.capture_events: bool = False


_state = _ObservabilityState()


def enable_tracing(slow_query_ms: float = 100.0, capture_events: bool = False) -> None:
    """Enable query tracing and observability."""
    _state.enabled = True
    _state.slow_query_threshold_ms = slow_query_ms
    _state.capture_events = capture_events


def disable_tracing() -> None:
    """Disable tracing and clear all state."""
    _state.enabled = False
    _state.slow_query_threshold_ms = 100.0
    _state.listeners.clear()
    _state.events.clear()
    _state.capture_events = False


def get_events() -> list[QueryEvent]:
    return list(_state.events)


def clear_events() -> None:
    _state.events.clear()


def add_listener(callback: Callable[[QueryEvent], Any]) -> None:
    """Register a listener that receives a QueryEvent for each operation."""
    _state.listeners.append(callback)


def remove_listener(callback: Callable[[QueryEvent], Any]) -> None:
    _state.listeners.remove(callback)


def emit_event(event: QueryEvent) -> None:
    """Emit a query event: store it, log it if slow, notify listeners."""
    if not _state.enabled:
        return

    if _state.capture_events:
        _state.events.append(event)

    if event.duration_ms > _state.slow_query_threshold_ms:
        logger.warning(
            "Slow query: %s on %s took %.1fms (threshold: %.1fms)",
            event.operation,
            event.collection,
            event.duration_ms,
            _state.slow_query_threshold_ms,
        )
    else:
        logger.debug(
            "%s on %s took %.1fms (%s results)",
            event.operation,
            event.collection,
            event.duration_ms,
            event.result_count,
        )

    for listener in _state.listeners:
        listener(event)

    _try_emit_otel_span(event)


def _try_emit_otel_span(event: QueryEvent) -> None:
    """Attempt to emit an OpenTelemetry span if the library is available."""
    try:
        from opentelemetry import trace
    except ImportError:
        return

    tracer = trace.get_tracer("mongo_paginate")
    with tracer.start_as_current_span(f"mongo_paginate.{event.operation}") as span:
        span.set_attribute("db.system", "mongodb")
        span.set_attribute("db.collection", event.collection)
        span.set_attribute("db.operation", event.operation)
        if event.duration_ms:
            span.set_attribute("db.duration_ms", event.duration_ms)
        for key in ("skip", "limit"):
            if isinstance(event.details.get(key), int):
                span.set_attribute(f"db.{key}", event.details[key])


@asynccontextmanager
async def track_query(
    operation: str,
    collection: str,
    document_class: str = "",
    filter: dict | None = None,
    **details: Any,
):
    """Time an operation and emit a QueryEvent when it finishes.

    The yielded dict lets the caller report ``result_count``.
    """
    if not _state.enabled:
        yield {"result_count": None}
        return

    start = time.perf_counter()
    ctx: dict[str, Any] = {"result_count": None}
    try:
        yield ctx
    finally:
        duration_ms = (time.perf_counter() - start) * 1000
        event = QueryEvent(
            operation=operation,
            collection=collection,
            filter=filter,
            details={k: v for k, v in details.items() if v is not None},
            duration_ms=duration_ms,
            result_count=ctx.get("result_count"),
            document_class=document_class,
        )
        emit_event(event)

"""Adapter for callers that want ``callback(error, result)`` notification."""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, TypeVar

T = TypeVar("T")

Callback = Callable[[BaseException | None, Any], Any]


async def with_callback(awaitable: Awaitable[T], callback: Callback | None = None) -> T:
    """Await ``awaitable`` and mirror its outcome to ``callback``.

    On success the callback receives ``(None, result)`` and the result is
    returned. On failure it receives ``(error, None)`` and the error is
    re-raised. Coroutine callbacks are awaited.
    """
    if callback is None:
        return await awaitable

    try:
        result = await awaitable
    except Exception as error:
        await _invoke(callback, error, None)
        raise

    await _invoke(callback, None, result)
    return result


async def _invoke(callback: Callback, error: BaseException | None, result: Any) -> None:
    outcome = callback(error, result)
    if asyncio.iscoroutine(outcome):
        await outcome

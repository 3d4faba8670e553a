"""Deadline-bounded calls into the resource store.

Every resolver read goes through :func:`call_store` so the context's
deadline bounds each store call. ``asyncio.CancelledError`` is never
caught here.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from capspine.core.errors import ResolutionCancelledError
from capspine.resolver.context import ResolveContext

T = TypeVar("T")


async def call_store(
    ctx: ResolveContext,
    operation: Callable[..., Awaitable[T]],
    *args: Any,
) -> T:
    """Await ``operation(*args)`` within the remaining budget of ``ctx``.

    Raises:
        ResolutionCancelledError: The deadline passed before or during the call.
    """
    remaining = ctx.check_deadline()
    if remaining is None:
        return await operation(*args)

    budget = asyncio.timeout(remaining)
    try:
        async with budget:
            return await operation(*args)
    except TimeoutError as e:
        # A TimeoutError raised by the store itself is an upstream failure.
        if budget.expired():
            raise ResolutionCancelledError("resolution deadline exceeded", cause=e) from e
        raise


__all__ = ["call_store"]

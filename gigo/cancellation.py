"""
Cooperative Cancellation
========================

One ``CancellationToken`` is scoped to a single upscale invocation. Provider
clients race their network work against the token with ``run_cancellable``.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable
from typing import TypeVar

T = TypeVar("T")


class OperationCancelled(Exception):
    """Raised by ``run_cancellable`` when the token fires first."""


class CancellationToken:
    """Cancellation signal shared between a caller and the work it started"""

    def __init__(self) -> None:
        self._event = asyncio.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def is_cancellation_requested(self) -> bool:
        return self._event.is_set()

    async def wait(self) -> None:
        await self._event.wait()


def is_cancelled(token: CancellationToken | None) -> bool:
    return token is not None and token.is_cancellation_requested


async def run_cancellable(
    awaitable: Awaitable[T], token: CancellationToken | None
) -> T:
    """
    Await ``awaitable`` unless ``token`` fires first.

    The pending work is cancelled and ``OperationCancelled`` raised when the
    token wins the race.
    """
    if token is None:
        return await awaitable

    task = asyncio.ensure_future(awaitable)
    if token.is_cancellation_requested:
        task.cancel()
        await asyncio.gather(task, return_exceptions=True)
        raise OperationCancelled()

    waiter = asyncio.ensure_future(token.wait())
    try:
        done, _ = await asyncio.wait(
            {task, waiter}, return_when=asyncio.FIRST_COMPLETED
        )
    except asyncio.CancelledError:
        task.cancel()
        raise
    finally:
        waiter.cancel()

    if task in done:
        return task.result()

    task.cancel()
    await asyncio.gather(task, return_exceptions=True)
    raise OperationCancelled()

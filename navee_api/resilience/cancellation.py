"""Cooperative cancellation for in-flight API calls.

A caller creates a ``CancelToken``, passes it to one or more client calls and
calls ``cancel()`` to abort them. The client checks the token before each
attempt, races it against the transport call and against backoff waits.
"""

from __future__ import annotations

import asyncio
import contextlib
from collections.abc import Awaitable, Callable
from typing import TypeVar

from navee_api.errors import RequestCancelledError

T = TypeVar("T")


class CancelToken:
    """One-shot cancellation signal shared between a caller and the client."""

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self._reason: str | None = None

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()

    @property
    def reason(self) -> str | None:
        return self._reason

    def cancel(self, reason: str = "Cancelled") -> None:
        """Signal cancellation. Subsequent calls are no-ops."""
        if self._event.is_set():
            return
        self._reason = reason
        self._event.set()

    async def wait(self) -> None:
        await self._event.wait()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise RequestCancelledError(self._reason or "Cancelled")


async def run_cancellable(
    factory: Callable[[], Awaitable[T]], token: CancelToken | None
) -> T:
    """Await ``factory()`` unless ``token`` fires first.

    Raises RequestCancelledError when the token wins the race; the pending
    operation is cancelled and awaited before returning.
    """
    if token is None:
        return await factory()

    token.raise_if_cancelled()

    work = asyncio.ensure_future(factory())
    watcher = asyncio.ensure_future(token.wait())
    try:
        await asyncio.wait({work, watcher}, return_when=asyncio.FIRST_COMPLETED)
    finally:
        watcher.cancel()
        if not work.done():
            work.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await work

    if work.cancelled():
        raise RequestCancelledError(token.reason or "Cancelled")
    return work.result()

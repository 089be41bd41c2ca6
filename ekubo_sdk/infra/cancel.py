from __future__ import annotations

import asyncio
from typing import Any, Awaitable, List, Optional, TypeVar

from ekubo_sdk.errors import AbortError, RequestTimeoutError

T = TypeVar("T")


class CancelToken:
    """Cooperative cancellation flag that async code can poll or await.

    Tokens created with ``any_of`` are cancelled as soon as one of their
    parents is; cancelling a child never touches its parents or siblings.
    Tokens can be built outside a running loop; the event used for waiting is
    created on first await.
    """

    def __init__(self) -> None:
        self._cancelled = False
        self._event: Optional[asyncio.Event] = None
        self._children: List["CancelToken"] = []
        self.reason: Optional[str] = None

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def _waiter(self) -> asyncio.Event:
        if self._event is None:
            self._event = asyncio.Event()
            if self._cancelled:
                self._event.set()
        return self._event

    def cancel(self, reason: str = "cancelled") -> None:
        if self._cancelled:
            return
        self._cancelled = True
        self.reason = reason
        if self._event is not None:
            self._event.set()
        children, self._children = self._children, []
        for child in children:
            child.cancel(reason)

    def raise_if_cancelled(self) -> None:
        if self._cancelled:
            raise AbortError(f"Request aborted ({self.reason})")

    async def wait(self) -> None:
        await self._waiter().wait()

    async def sleep(self, seconds: float) -> None:
        """Sleep that ends early with AbortError when the token fires."""
        self.raise_if_cancelled()
        if seconds <= 0:
            await asyncio.sleep(0)
            self.raise_if_cancelled()
            return
        try:
            await asyncio.wait_for(self._waiter().wait(), timeout=float(seconds))
        except asyncio.TimeoutError:
            return
        self.raise_if_cancelled()

    def _link(self, child: "CancelToken") -> None:
        if self._cancelled:
            child.cancel(self.reason or "cancelled")
        else:
            self._children.append(child)

    def _unlink(self, child: "CancelToken") -> None:
        try:
            self._children.remove(child)
        except ValueError:
            pass

    @classmethod
    def any_of(cls, *tokens: Optional["CancelToken"]) -> "CancelToken":
        child = cls()
        for token in tokens:
            if token is not None:
                token._link(child)
        return child

    def detach_from(self, *tokens: Optional["CancelToken"]) -> None:
        for token in tokens:
            if token is not None:
                token._unlink(self)


async def run_with_timeout(
    aw: Awaitable[T],
    *,
    timeout_s: float,
    cancel_token: Optional[CancelToken] = None,
) -> T:
    """Run ``aw`` until it finishes, the timer fires, or the caller cancels.

    Caller cancellation raises AbortError; the timer raises RequestTimeoutError.
    """
    if cancel_token is not None:
        cancel_token.raise_if_cancelled()

    attempt_token = CancelToken.any_of(cancel_token)
    work: asyncio.Future[Any] = asyncio.ensure_future(aw)
    waiter = asyncio.ensure_future(attempt_token.wait())
    try:
        done, _ = await asyncio.wait({work, waiter}, timeout=float(timeout_s), return_when=asyncio.FIRST_COMPLETED)
        if work in done:
            return work.result()
        if waiter in done:
            raise AbortError(f"Request aborted ({attempt_token.reason})")
        attempt_token.cancel("timeout")
        raise RequestTimeoutError(timeout_s)
    finally:
        for fut in (work, waiter):
            if not fut.done():
                fut.cancel()
        await asyncio.gather(work, waiter, return_exceptions=True)
        attempt_token.detach_from(cancel_token)

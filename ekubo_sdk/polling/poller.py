from __future__ import annotations

import asyncio
import inspect
import logging
from dataclasses import dataclass, replace
from typing import Any, Awaitable, Callable, Optional, Set

import aiohttp

from ekubo_sdk.api.quote import fetch_swap_quote
from ekubo_sdk.config import FetchConfig, PollingConfig
from ekubo_sdk.errors import AbortError
from ekubo_sdk.infra.cancel import CancelToken
from ekubo_sdk.infra.metrics import POLL_ERROR, POLL_QUOTE, Metrics
from ekubo_sdk.types import SwapQuote

logger = logging.getLogger(__name__)

QuoteCallback = Callable[[SwapQuote], Any]
ErrorCallback = Callable[[BaseException], Any]
StopCallback = Callable[[str], Any]
QuoteFetcher = Callable[..., Awaitable[SwapQuote]]

STOP_MANUAL = "manual"
STOP_ERRORS = "errors"
SUPERSEDED = "superseded"


@dataclass(frozen=True)
class QuotePollerParams:
    amount: int
    token_from: str
    token_to: str
    chain_id: Optional[str] = None


async def _invoke(cb: Optional[Callable[..., Any]], *args: Any) -> None:
    if cb is None:
        return
    res = cb(*args)
    if inspect.isawaitable(res):
        await res


class QuotePoller:
    """Fetch a quote right away and then every ``interval_s``.

    Only the newest fetch may deliver: a tick that finds the previous fetch
    still running cancels it, so ``on_quote`` never sees an older quote after
    a newer one. A superseded fetch counts as a failed poll and goes to
    ``on_error``; only cancellations caused by ``stop()`` are not reported.
    """

    def __init__(
        self,
        params: QuotePollerParams,
        *,
        on_quote: QuoteCallback,
        on_error: Optional[ErrorCallback] = None,
        on_stop: Optional[StopCallback] = None,
        polling_config: Optional[PollingConfig] = None,
        fetch_config: Optional[FetchConfig] = None,
        quoter_api_url: Optional[str] = None,
        session: Optional[aiohttp.ClientSession] = None,
        metrics: Optional[Metrics] = None,
        fetch_quote: Optional[QuoteFetcher] = None,
    ) -> None:
        self.params = params
        self.on_quote = on_quote
        self.on_error = on_error
        self.on_stop = on_stop
        self.polling_config = polling_config or PollingConfig.from_env()
        self.fetch_config = fetch_config
        self.quoter_api_url = quoter_api_url
        self.session = session
        self.metrics = metrics
        self._fetch_quote = fetch_quote or fetch_swap_quote

        self._running = False
        self._consecutive_errors = 0
        self._timer_task: Optional[asyncio.Task] = None
        self._fetch_tasks: Set[asyncio.Task] = set()
        self._inflight_token: Optional[CancelToken] = None

    @property
    def running(self) -> bool:
        return self._running

    @property
    def consecutive_errors(self) -> int:
        return self._consecutive_errors

    async def start(self) -> None:
        if self._running:
            return
        self._running = True
        self._consecutive_errors = 0
        logger.info(
            "quote poller start: %s -> %s amount=%s interval=%.2fs",
            self.params.token_from,
            self.params.token_to,
            self.params.amount,
            self.polling_config.interval_s,
        )
        self._launch_fetch()
        self._timer_task = asyncio.create_task(self._timer_loop())

    async def stop(self) -> None:
        if not self._running:
            return
        await self._halt(STOP_MANUAL)

    async def update_params(self, **changes: Any) -> None:
        """Change amount, token_from, token_to or chain_id; restarts a running poller."""
        unknown = set(changes) - {"amount", "token_from", "token_to", "chain_id"}
        if unknown:
            raise TypeError(f"unknown poller params: {sorted(unknown)}")
        self.params = replace(self.params, **changes)
        if self._running:
            await self.stop()
            await self.start()

    async def __aenter__(self) -> "QuotePoller":
        await self.start()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.stop()

    async def _timer_loop(self) -> None:
        interval = float(self.polling_config.interval_s)
        while self._running:
            await asyncio.sleep(interval)
            if not self._running:
                break
            self._launch_fetch()

    def _launch_fetch(self) -> None:
        if self._inflight_token is not None:
            self._inflight_token.cancel(SUPERSEDED)
        token = CancelToken()
        self._inflight_token = token
        task = asyncio.create_task(self._fetch_once(token))
        self._fetch_tasks.add(task)
        task.add_done_callback(self._fetch_tasks.discard)

    async def _fetch_once(self, token: CancelToken) -> None:
        p = self.params
        kwargs = {
            "amount": p.amount,
            "token_from": p.token_from,
            "token_to": p.token_to,
            "chain_id": p.chain_id,
            "cancel_token": token,
        }
        # Injected fetchers only receive the per-request arguments.
        if self._fetch_quote is fetch_swap_quote:
            kwargs.update(
                fetch_config=self.fetch_config,
                quoter_api_url=self.quoter_api_url,
                session=self.session,
                metrics=self.metrics,
            )
        try:
            quote = await self._fetch_quote(**kwargs)
        except Exception as exc:
            if not self._running or (token.cancelled and token.reason != SUPERSEDED):
                return
            if isinstance(exc, AbortError) and token.reason == SUPERSEDED:
                exc = AbortError("Quote fetch superseded by the next poll")
            await self._record_error(exc)
            return

        if token.cancelled or not self._running:
            return
        self._consecutive_errors = 0
        if self.metrics is not None:
            self.metrics.record_poll(POLL_QUOTE)
        await self._deliver(self.on_quote, quote)

    async def _record_error(self, exc: BaseException) -> None:
        self._consecutive_errors += 1
        if self.metrics is not None:
            self.metrics.record_poll(POLL_ERROR)
        logger.warning(
            "quote poller error %d/%d: %s",
            self._consecutive_errors,
            self.polling_config.max_consecutive_errors,
            exc,
        )
        await self._deliver(self.on_error, exc)
        if self._running and self._consecutive_errors >= self.polling_config.max_consecutive_errors:
            await self._halt(STOP_ERRORS)

    async def _deliver(self, cb: Optional[Callable[..., Any]], *args: Any) -> None:
        try:
            await _invoke(cb, *args)
        except Exception:
            logger.exception("quote poller callback failed")

    async def _halt(self, reason: str) -> None:
        if not self._running:
            return
        self._running = False
        if self._inflight_token is not None:
            self._inflight_token.cancel(reason)
            self._inflight_token = None

        current = asyncio.current_task()
        tasks = [t for t in [self._timer_task, *self._fetch_tasks] if t is not None and t is not current]
        self._timer_task = None
        for t in tasks:
            if not t.done():
                t.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)

        logger.info("quote poller stopped: %s", reason)
        await self._deliver(self.on_stop, reason)


def create_quote_poller(
    params: QuotePollerParams,
    *,
    on_quote: QuoteCallback,
    on_error: Optional[ErrorCallback] = None,
    on_stop: Optional[StopCallback] = None,
    polling_config: Optional[PollingConfig] = None,
    fetch_config: Optional[FetchConfig] = None,
    **kwargs: Any,
) -> QuotePoller:
    return QuotePoller(
        params,
        on_quote=on_quote,
        on_error=on_error,
        on_stop=on_stop,
        polling_config=polling_config,
        fetch_config=fetch_config,
        **kwargs,
    )

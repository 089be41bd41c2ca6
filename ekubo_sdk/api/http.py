from __future__ import annotations

import json
import logging
import time
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Awaitable, Callable, Optional, Sequence, Tuple, TypeVar, Union

import aiohttp

from ekubo_sdk.config import FetchConfig
from ekubo_sdk.errors import ApiError, EkuboError, RateLimitError
from ekubo_sdk.infra.cancel import CancelToken, run_with_timeout
from ekubo_sdk.infra.metrics import Metrics
from ekubo_sdk.infra.retry import with_retry

logger = logging.getLogger(__name__)

T = TypeVar("T")

QueryParams = Union[None, dict, Sequence[Tuple[str, str]]]

_NOT_FOUND = object()


def new_session() -> aiohttp.ClientSession:
    connector = aiohttp.TCPConnector(limit=50, ttl_dns_cache=300)
    return aiohttp.ClientSession(connector=connector)


@asynccontextmanager
async def session_scope(session: Optional[aiohttp.ClientSession]) -> AsyncIterator[aiohttp.ClientSession]:
    """Yield ``session`` as-is, or a throwaway session closed on exit."""
    if session is not None and not session.closed:
        yield session
        return
    own = new_session()
    try:
        yield own
    finally:
        await own.close()


def _url_host(url: str) -> str:
    u = str(url).lower()
    if "://" in u:
        u = u.split("://", 1)[1]
    return u.split("/", 1)[0]


async def read_json(resp: aiohttp.ClientResponse) -> Any:
    text = await resp.text()
    return json.loads(text)


async def fetch_with_retry(
    attempt: Callable[[aiohttp.ClientSession], Awaitable[T]],
    *,
    url: str,
    session: Optional[aiohttp.ClientSession] = None,
    fetch_config: Optional[FetchConfig] = None,
    cancel_token: Optional[CancelToken] = None,
    metrics: Optional[Metrics] = None,
    label: str = "request",
) -> T:
    """Drive one HTTP exchange through timeout, cancellation and retries.

    ``attempt`` performs a single request on the session and classifies the
    response; transport failures are turned into retryable ApiErrors here.
    """
    cfg = fetch_config or FetchConfig.from_env()
    host = _url_host(url)

    async with session_scope(session) as sess:

        async def _once() -> T:
            t0 = time.perf_counter()
            if metrics is not None:
                metrics.record_request(host)
            try:
                result = await run_with_timeout(attempt(sess), timeout_s=cfg.timeout_s, cancel_token=cancel_token)
            except EkuboError as exc:
                if metrics is not None:
                    metrics.record_failure(exc.kind.value.lower())
                raise
            except aiohttp.ClientError as exc:
                if metrics is not None:
                    metrics.record_failure("transport")
                raise ApiError(f"{label} failed: {type(exc).__name__}: {exc}", cause=exc) from exc
            finally:
                if metrics is not None:
                    metrics.record_latency((time.perf_counter() - t0) * 1000.0)
            logger.debug("%s ok: %s", label, url)
            return result

        return await with_retry(
            _once,
            max_attempts=cfg.max_retries,
            base_backoff_s=cfg.base_backoff_s,
            max_backoff_s=cfg.max_backoff_s,
            cancel_token=cancel_token,
            label=label,
        )


async def get_json(
    url: str,
    *,
    params: QueryParams = None,
    session: Optional[aiohttp.ClientSession] = None,
    fetch_config: Optional[FetchConfig] = None,
    cancel_token: Optional[CancelToken] = None,
    metrics: Optional[Metrics] = None,
    label: str = "request",
    not_found_ok: bool = False,
) -> Any:
    """GET a JSON document. Returns None on 404 when ``not_found_ok``."""

    async def _attempt(sess: aiohttp.ClientSession) -> Any:
        async with sess.get(url, params=params) as resp:
            if resp.status == 404 and not_found_ok:
                return _NOT_FOUND
            if resp.status == 429:
                raise RateLimitError(
                    f"Rate limited (429): {label}",
                    retry_after=resp.headers.get("Retry-After"),
                )
            if resp.status >= 400:
                raise ApiError(f"Failed to fetch {label}: {resp.status}", resp.status)
            try:
                return await read_json(resp)
            except ValueError as exc:
                raise ApiError(f"Failed to fetch {label}: invalid JSON", resp.status, retryable=False, cause=exc) from exc

    data = await fetch_with_retry(
        _attempt,
        url=url,
        session=session,
        fetch_config=fetch_config,
        cancel_token=cancel_token,
        metrics=metrics,
        label=label,
    )
    return None if data is _NOT_FOUND else data

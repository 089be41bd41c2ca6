from __future__ import annotations

import logging
from typing import Any, Optional

import aiohttp

from ekubo_sdk import config
from ekubo_sdk.api.http import fetch_with_retry, read_json
from ekubo_sdk.chains import CHAIN_IDS, usdc_address_for
from ekubo_sdk.config import FetchConfig
from ekubo_sdk.errors import ApiError, InsufficientLiquidityError, RateLimitError
from ekubo_sdk.infra.cancel import CancelToken
from ekubo_sdk.infra.metrics import Metrics
from ekubo_sdk.types import SwapQuote, SwapSplit
from ekubo_sdk.utils import normalize_address, parse_total_calculated

logger = logging.getLogger(__name__)


def _is_liquidity_error(text: Any) -> bool:
    return isinstance(text, str) and config.INSUFFICIENT_LIQUIDITY_TEXT in text


def build_quote_url(
    quoter_api_url: str,
    chain_id: str,
    amount: int,
    token_from: str,
    token_to: str,
) -> str:
    """Quoter path: ``/{chain}/{amount}/{specified}/{other}``.

    The quoter always names the exactly-specified token first, so a negative
    (exact-output) amount puts ``token_to`` ahead of ``token_from``.
    """
    base = str(quoter_api_url).rstrip("/")
    src = normalize_address(token_from)
    dst = normalize_address(token_to)
    if int(amount) < 0:
        src, dst = dst, src
    return f"{base}/{chain_id}/{int(amount)}/{src}/{dst}"


def parse_quote_payload(data: Any) -> SwapQuote:
    """Turn a successful quoter body into a SwapQuote.

    Raises InsufficientLiquidityError or a non-retryable ApiError; a malformed
    200 is not expected to heal on retry.
    """
    if not isinstance(data, dict):
        raise ApiError("Malformed quote response: expected an object", 200, retryable=False)
    if "error" in data:
        err = data.get("error")
        if _is_liquidity_error(err):
            raise InsufficientLiquidityError(str(err))
        raise ApiError(str(err), 200, retryable=False)
    try:
        splits_raw = data.get("splits") or []
        if not isinstance(splits_raw, list):
            raise TypeError("splits must be a list")
        return SwapQuote(
            impact=float(data["price_impact"]),
            total=parse_total_calculated(data["total_calculated"]),
            splits=tuple(SwapSplit.from_dict(s) for s in splits_raw),
        )
    except (KeyError, TypeError, ValueError) as exc:
        raise ApiError(f"Malformed quote response: {exc}", 200, retryable=False, cause=exc) from exc


async def _classify(resp: aiohttp.ClientResponse) -> SwapQuote:
    if 200 <= resp.status < 300:
        try:
            data = await read_json(resp)
        except ValueError as exc:
            raise ApiError("Malformed quote response: invalid JSON", resp.status, retryable=False, cause=exc) from exc
        return parse_quote_payload(data)

    if resp.status == 404:
        try:
            data = await read_json(resp)
        except ValueError:
            data = None
        if isinstance(data, dict) and _is_liquidity_error(data.get("error")):
            raise InsufficientLiquidityError(str(data["error"]))
        raise ApiError("Failed to fetch swap quote: 404 Not Found", 404)

    if resp.status == 429:
        raise RateLimitError(
            "Rate limited (429) - max retries exceeded",
            retry_after=resp.headers.get("Retry-After"),
        )

    raise ApiError(f"Failed to fetch swap quote: {resp.status}", resp.status)


async def fetch_swap_quote(
    *,
    amount: int,
    token_from: str,
    token_to: str,
    chain_id: Optional[str] = None,
    cancel_token: Optional[CancelToken] = None,
    fetch_config: Optional[FetchConfig] = None,
    quoter_api_url: Optional[str] = None,
    session: Optional[aiohttp.ClientSession] = None,
    metrics: Optional[Metrics] = None,
) -> SwapQuote:
    """Fetch a routed quote from the Ekubo quoter.

    ``amount >= 0`` sells exactly ``amount`` of ``token_from``; ``amount < 0``
    asks for exactly ``-amount`` of ``token_to``.
    """
    chain = str(chain_id or CHAIN_IDS["MAINNET"])
    url = build_quote_url(quoter_api_url or config.quoter_api_url(), chain, amount, token_from, token_to)

    async def _attempt(sess: aiohttp.ClientSession) -> SwapQuote:
        async with sess.get(url) as resp:
            return await _classify(resp)

    quote = await fetch_with_retry(
        _attempt,
        url=url,
        session=session,
        fetch_config=fetch_config,
        cancel_token=cancel_token,
        metrics=metrics,
        label="swap quote",
    )
    logger.debug("quote %s: total=%d splits=%d impact=%s", url, quote.total, len(quote.splits), quote.impact)
    return quote


async def fetch_swap_quote_in_usdc(
    *,
    amount: int,
    token_from: str,
    chain_id: Optional[str] = None,
    cancel_token: Optional[CancelToken] = None,
    fetch_config: Optional[FetchConfig] = None,
    quoter_api_url: Optional[str] = None,
    session: Optional[aiohttp.ClientSession] = None,
    metrics: Optional[Metrics] = None,
) -> int:
    chain = str(chain_id or CHAIN_IDS["MAINNET"])
    quote = await fetch_swap_quote(
        amount=amount,
        token_from=token_from,
        token_to=usdc_address_for(chain),
        chain_id=chain,
        cancel_token=cancel_token,
        fetch_config=fetch_config,
        quoter_api_url=quoter_api_url,
        session=session,
        metrics=metrics,
    )
    return quote.total

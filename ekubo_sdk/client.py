from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

import aiohttp

from ekubo_sdk import config
from ekubo_sdk.api import price as price_api
from ekubo_sdk.api import stats as stats_api
from ekubo_sdk.api import tokens as tokens_api
from ekubo_sdk.api.http import new_session
from ekubo_sdk.api.quote import fetch_swap_quote, fetch_swap_quote_in_usdc
from ekubo_sdk.calls.generator import generate_swap_calls, prepare_swap_calls
from ekubo_sdk.chains import CHAIN_IDS, ChainConfig, load_chain_config
from ekubo_sdk.config import FetchConfig, PollingConfig
from ekubo_sdk.errors import InvalidChainError
from ekubo_sdk.infra.cancel import CancelToken
from ekubo_sdk.infra.metrics import Metrics
from ekubo_sdk.polling.poller import ErrorCallback, QuoteCallback, QuotePoller, QuotePollerParams, StopCallback
from ekubo_sdk.tokens.registry import TokenRegistry, default_tokens
from ekubo_sdk.tokens.resolver import resolve_token
from ekubo_sdk.types import SwapCallsResult, SwapQuote, TokenInfo

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedConfig:
    chain_id: str
    quoter_api_url: str
    api_url: str
    router_address: str
    default_slippage_percent: int
    fetch: FetchConfig
    polling: PollingConfig


@dataclass(frozen=True)
class UsdcPriceBatch:
    prices: Dict[str, int] = field(default_factory=dict)
    errors: Dict[str, BaseException] = field(default_factory=dict)


def _resolve_config(
    *,
    chain: Optional[str],
    chain_id: Optional[str],
    quoter_api_url: Optional[str],
    api_url: Optional[str],
    router_address: Optional[str],
    default_slippage_percent: Optional[int],
    fetch: Optional[FetchConfig],
    polling: Optional[PollingConfig],
) -> Tuple[ResolvedConfig, Optional[ChainConfig]]:
    name = str(chain or config.default_chain())
    chain_cfg = load_chain_config(chain_id) if chain_id else load_chain_config(name)
    if chain_cfg is None and not chain_id:
        raise InvalidChainError(name)

    resolved = ResolvedConfig(
        chain_id=str(chain_id or (chain_cfg.chain_id if chain_cfg else CHAIN_IDS["MAINNET"])),
        quoter_api_url=str(quoter_api_url or config.quoter_api_url(chain_cfg.quoter_api_url if chain_cfg else None)),
        api_url=str(api_url or config.api_url(chain_cfg.api_url if chain_cfg else None)),
        router_address=str(router_address or (chain_cfg.router_address if chain_cfg else "")),
        default_slippage_percent=int(
            default_slippage_percent if default_slippage_percent is not None else config.default_slippage_percent()
        ),
        fetch=fetch or FetchConfig.from_env(),
        polling=polling or PollingConfig.from_env(),
    )
    return resolved, chain_cfg


class EkuboClient:
    """High-level entry point: quotes, swap calls, tokens, polling and stats.

    Token arguments accept a registered symbol or an address. The client owns
    one aiohttp session (created on first use) and one Metrics instance.
    """

    def __init__(
        self,
        chain: Optional[str] = None,
        *,
        chain_id: Optional[str] = None,
        quoter_api_url: Optional[str] = None,
        api_url: Optional[str] = None,
        router_address: Optional[str] = None,
        default_slippage_percent: Optional[int] = None,
        fetch: Optional[FetchConfig] = None,
        polling: Optional[PollingConfig] = None,
        custom_tokens: Iterable[TokenInfo] = (),
        session: Optional[aiohttp.ClientSession] = None,
        metrics: Optional[Metrics] = None,
    ) -> None:
        self.config, chain_cfg = _resolve_config(
            chain=chain,
            chain_id=chain_id,
            quoter_api_url=quoter_api_url,
            api_url=api_url,
            router_address=router_address,
            default_slippage_percent=default_slippage_percent,
            fetch=fetch,
            polling=polling,
        )
        defaults = default_tokens(chain_cfg.name) if chain_cfg is not None else []
        self.tokens = TokenRegistry([*defaults, *custom_tokens], include_defaults=False)
        self.metrics = metrics or Metrics()
        self._session = session
        self._owns_session = session is None

    @property
    def chain_id(self) -> str:
        return self.config.chain_id

    @property
    def router_address(self) -> str:
        return self.config.router_address

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = new_session()
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None

    async def __aenter__(self) -> "EkuboClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    def _api_kwargs(self, cancel_token: Optional[CancelToken] = None) -> Dict[str, Any]:
        return {
            "chain_id": self.config.chain_id,
            "api_url": self.config.api_url,
            "fetch_config": self.config.fetch,
            "session": self._get_session(),
            "cancel_token": cancel_token,
            "metrics": self.metrics,
        }

    def resolve_token(self, identifier: str) -> str:
        return resolve_token(identifier, self.tokens)

    # quotes

    async def get_quote(
        self,
        token_from: str,
        token_to: str,
        amount: int,
        *,
        cancel_token: Optional[CancelToken] = None,
    ) -> SwapQuote:
        return await fetch_swap_quote(
            amount=int(amount),
            token_from=self.resolve_token(token_from),
            token_to=self.resolve_token(token_to),
            chain_id=self.config.chain_id,
            cancel_token=cancel_token,
            fetch_config=self.config.fetch,
            quoter_api_url=self.config.quoter_api_url,
            session=self._get_session(),
            metrics=self.metrics,
        )

    async def get_usdc_price(
        self,
        token: str,
        amount: int,
        *,
        cancel_token: Optional[CancelToken] = None,
    ) -> int:
        return await fetch_swap_quote_in_usdc(
            amount=int(amount),
            token_from=self.resolve_token(token),
            chain_id=self.config.chain_id,
            cancel_token=cancel_token,
            fetch_config=self.config.fetch,
            quoter_api_url=self.config.quoter_api_url,
            session=self._get_session(),
            metrics=self.metrics,
        )

    async def get_usdc_prices(
        self,
        amounts: Mapping[str, int],
        *,
        cancel_token: Optional[CancelToken] = None,
    ) -> UsdcPriceBatch:
        """Price several tokens concurrently.

        Each token gets its own cancel token linked to ``cancel_token``, so one
        failure does not abort the others; failures land in ``errors``.
        """
        batch = UsdcPriceBatch()

        async def _one(token: str, amount: int) -> None:
            child = CancelToken.any_of(cancel_token)
            try:
                batch.prices[token] = await self.get_usdc_price(token, amount, cancel_token=child)
            except Exception as exc:
                logger.debug("usdc price failed for %s: %s", token, exc)
                batch.errors[token] = exc
            finally:
                child.detach_from(cancel_token)

        await asyncio.gather(*(_one(token, amount) for token, amount in amounts.items()))
        return batch

    async def get_price_history(
        self,
        token: str,
        other_token: str,
        interval: int = price_api.DEFAULT_HISTORY_INTERVAL_S,
        *,
        cancel_token: Optional[CancelToken] = None,
    ) -> price_api.PriceHistory:
        return await price_api.get_price_history(
            self.resolve_token(token),
            self.resolve_token(other_token),
            interval=interval,
            **self._api_kwargs(cancel_token),
        )

    # swap calls

    def generate_swap_calls(
        self,
        sell_token: str,
        buy_token: str,
        quote: SwapQuote,
        minimum_received: int,
        *,
        slippage_percent: Optional[int] = None,
    ) -> SwapCallsResult:
        return generate_swap_calls(
            sell_token=self.resolve_token(sell_token),
            buy_token=self.resolve_token(buy_token),
            minimum_received=int(minimum_received),
            quote=quote,
            chain_id=self.config.chain_id,
            router_address=self.config.router_address or None,
            slippage_percent=self._slippage(slippage_percent),
        )

    def prepare_swap_calls(
        self,
        sell_token: str,
        buy_token: str,
        quote: SwapQuote,
        minimum_received: int,
        *,
        slippage_percent: Optional[int] = None,
    ) -> SwapCallsResult:
        return prepare_swap_calls(
            sell_token=self.resolve_token(sell_token),
            buy_token=self.resolve_token(buy_token),
            minimum_received=int(minimum_received),
            quote=quote,
            chain_id=self.config.chain_id,
            router_address=self.config.router_address or None,
            slippage_percent=self._slippage(slippage_percent),
        )

    def _slippage(self, slippage_percent: Optional[int]) -> int:
        if slippage_percent is None:
            return self.config.default_slippage_percent
        return int(slippage_percent)

    # polling

    async def _poller_fetch(self, **kwargs: Any) -> SwapQuote:
        return await fetch_swap_quote(
            fetch_config=self.config.fetch,
            quoter_api_url=self.config.quoter_api_url,
            session=self._get_session(),
            metrics=self.metrics,
            **kwargs,
        )

    def create_quote_poller(
        self,
        token_from: str,
        token_to: str,
        amount: int,
        *,
        on_quote: QuoteCallback,
        on_error: Optional[ErrorCallback] = None,
        on_stop: Optional[StopCallback] = None,
        polling: Optional[PollingConfig] = None,
    ) -> QuotePoller:
        params = QuotePollerParams(
            amount=int(amount),
            token_from=self.resolve_token(token_from),
            token_to=self.resolve_token(token_to),
            chain_id=self.config.chain_id,
        )
        return QuotePoller(
            params,
            on_quote=on_quote,
            on_error=on_error,
            on_stop=on_stop,
            polling_config=polling or self.config.polling,
            fetch_config=self.config.fetch,
            metrics=self.metrics,
            fetch_quote=self._poller_fetch,
        )

    # tokens

    def register_token(self, token: TokenInfo) -> TokenInfo:
        return self.tokens.register(token)

    async def fetch_tokens(self, *, cancel_token: Optional[CancelToken] = None) -> List[tokens_api.ApiTokenInfo]:
        return await tokens_api.fetch_tokens(**self._api_kwargs(cancel_token))

    async def fetch_token(
        self, token: str, *, cancel_token: Optional[CancelToken] = None
    ) -> Optional[tokens_api.ApiTokenInfo]:
        return await tokens_api.fetch_token(self.resolve_token(token), **self._api_kwargs(cancel_token))

    async def fetch_tokens_batch(
        self, tokens: Iterable[str], *, cancel_token: Optional[CancelToken] = None
    ) -> List[tokens_api.ApiTokenInfo]:
        resolved = [self.resolve_token(t) for t in tokens]
        return await tokens_api.fetch_tokens_batch(resolved, **self._api_kwargs(cancel_token))

    async def sync_tokens_from_api(self, *, cancel_token: Optional[CancelToken] = None) -> int:
        """Register every token the API lists; returns how many were seen."""
        api_tokens = await self.fetch_tokens(cancel_token=cancel_token)
        for t in api_tokens:
            self.tokens.register(t.to_token_info())
        logger.info("synced %d tokens from %s", len(api_tokens), self.config.api_url)
        return len(api_tokens)

    # stats

    async def get_top_pairs(self, *, cancel_token: Optional[CancelToken] = None) -> List[stats_api.PairStats]:
        return await stats_api.fetch_top_pairs(**self._api_kwargs(cancel_token))

    async def get_tvl(self, *, cancel_token: Optional[CancelToken] = None) -> stats_api.OverviewStats:
        return await stats_api.fetch_tvl(**self._api_kwargs(cancel_token))

    async def get_volume(self, *, cancel_token: Optional[CancelToken] = None) -> stats_api.OverviewStats:
        return await stats_api.fetch_volume(**self._api_kwargs(cancel_token))

    async def get_pair_tvl(
        self, token_a: str, token_b: str, *, cancel_token: Optional[CancelToken] = None
    ) -> List[stats_api.TvlDataPoint]:
        return await stats_api.fetch_pair_tvl(
            self.resolve_token(token_a), self.resolve_token(token_b), **self._api_kwargs(cancel_token)
        )

    async def get_pair_volume(
        self, token_a: str, token_b: str, *, cancel_token: Optional[CancelToken] = None
    ) -> List[stats_api.VolumeDataPoint]:
        return await stats_api.fetch_pair_volume(
            self.resolve_token(token_a), self.resolve_token(token_b), **self._api_kwargs(cancel_token)
        )

    async def get_pair_pools(
        self, token_a: str, token_b: str, *, cancel_token: Optional[CancelToken] = None
    ) -> List[stats_api.PoolInfo]:
        return await stats_api.fetch_pair_pools(
            self.resolve_token(token_a), self.resolve_token(token_b), **self._api_kwargs(cancel_token)
        )


def create_ekubo_client(chain: Optional[str] = None, **kwargs: Any) -> EkuboClient:
    return EkuboClient(chain, **kwargs)

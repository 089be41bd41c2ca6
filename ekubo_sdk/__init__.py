"""Python client for the Ekubo routing API on Starknet."""

import logging

from ekubo_sdk.api import (
    ApiTokenInfo,
    OverviewStats,
    PairStats,
    PoolInfo,
    PriceDataPoint,
    PriceHistory,
    TvlDataPoint,
    VolumeDataPoint,
    fetch_swap_quote,
    fetch_swap_quote_in_usdc,
    get_price_history,
)
from ekubo_sdk.calls import EncodedRoute, encode_route, encode_route_node, generate_swap_calls, prepare_swap_calls
from ekubo_sdk.chains import CHAIN_IDS, ROUTER_ADDRESSES, USDC_ADDRESSES, ChainConfig, get_chain_config, get_ekubo_chain_id
from ekubo_sdk.client import EkuboClient, UsdcPriceBatch, create_ekubo_client
from ekubo_sdk.config import FetchConfig, PollingConfig
from ekubo_sdk.errors import (
    AbortError,
    ApiError,
    EkuboError,
    ErrorKind,
    InsufficientLiquidityError,
    InvalidChainError,
    RateLimitError,
    RequestTimeoutError,
    TokenNotFoundError,
    is_non_retryable,
    is_retryable,
)
from ekubo_sdk.infra import CancelToken, Metrics, calculate_backoff, with_retry
from ekubo_sdk.log import configure_logging
from ekubo_sdk.polling import QuotePoller, QuotePollerParams, create_quote_poller
from ekubo_sdk.tokens import TokenRegistry, can_resolve_token, create_token_registry, resolve_token, resolve_token_info
from ekubo_sdk.types import PoolKey, RouteNode, SwapCall, SwapCallsResult, SwapQuote, SwapSplit, TokenInfo
from ekubo_sdk.utils import add_slippage, addresses_equal, normalize_address, split_u256, subtract_slippage, to_hex

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"

__all__ = [
    "AbortError",
    "ApiError",
    "ApiTokenInfo",
    "CHAIN_IDS",
    "CancelToken",
    "ChainConfig",
    "EkuboClient",
    "EkuboError",
    "EncodedRoute",
    "ErrorKind",
    "FetchConfig",
    "InsufficientLiquidityError",
    "InvalidChainError",
    "Metrics",
    "OverviewStats",
    "PairStats",
    "PollingConfig",
    "PoolInfo",
    "PoolKey",
    "PriceDataPoint",
    "PriceHistory",
    "QuotePoller",
    "QuotePollerParams",
    "ROUTER_ADDRESSES",
    "RateLimitError",
    "RequestTimeoutError",
    "RouteNode",
    "SwapCall",
    "SwapCallsResult",
    "SwapQuote",
    "SwapSplit",
    "TokenInfo",
    "TokenNotFoundError",
    "TokenRegistry",
    "TvlDataPoint",
    "USDC_ADDRESSES",
    "UsdcPriceBatch",
    "VolumeDataPoint",
    "add_slippage",
    "addresses_equal",
    "calculate_backoff",
    "can_resolve_token",
    "configure_logging",
    "create_ekubo_client",
    "create_quote_poller",
    "create_token_registry",
    "encode_route",
    "encode_route_node",
    "fetch_swap_quote",
    "fetch_swap_quote_in_usdc",
    "generate_swap_calls",
    "get_chain_config",
    "get_ekubo_chain_id",
    "get_price_history",
    "is_non_retryable",
    "is_retryable",
    "normalize_address",
    "prepare_swap_calls",
    "resolve_token",
    "resolve_token_info",
    "split_u256",
    "subtract_slippage",
    "to_hex",
]

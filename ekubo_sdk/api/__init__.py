from ekubo_sdk.api.price import PriceDataPoint, PriceHistory, get_price_history
from ekubo_sdk.api.quote import build_quote_url, fetch_swap_quote, fetch_swap_quote_in_usdc, parse_quote_payload
from ekubo_sdk.api.stats import (
    OverviewStats,
    PairStats,
    PoolInfo,
    TvlDataPoint,
    VolumeDataPoint,
    fetch_pair_pools,
    fetch_pair_tvl,
    fetch_pair_volume,
    fetch_top_pairs,
    fetch_tvl,
    fetch_volume,
)
from ekubo_sdk.api.tokens import ApiTokenInfo, fetch_token, fetch_tokens, fetch_tokens_batch

__all__ = [
    "ApiTokenInfo",
    "OverviewStats",
    "PairStats",
    "PoolInfo",
    "PriceDataPoint",
    "PriceHistory",
    "TvlDataPoint",
    "VolumeDataPoint",
    "build_quote_url",
    "fetch_pair_pools",
    "fetch_pair_tvl",
    "fetch_pair_volume",
    "fetch_swap_quote",
    "fetch_swap_quote_in_usdc",
    "fetch_token",
    "fetch_tokens",
    "fetch_tokens_batch",
    "fetch_top_pairs",
    "fetch_tvl",
    "fetch_volume",
    "get_price_history",
    "parse_quote_payload",
]

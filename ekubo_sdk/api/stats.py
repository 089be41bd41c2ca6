from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, TypeVar

import aiohttp

from ekubo_sdk import config
from ekubo_sdk.api.http import get_json
from ekubo_sdk.chains import CHAIN_IDS
from ekubo_sdk.config import FetchConfig
from ekubo_sdk.errors import ApiError
from ekubo_sdk.infra.cancel import CancelToken
from ekubo_sdk.infra.metrics import Metrics
from ekubo_sdk.utils import normalize_address

T = TypeVar("T")


def _f(raw: Dict[str, Any], key: str) -> float:
    v = raw.get(key)
    return float(v) if v is not None else 0.0


@dataclass(frozen=True)
class PairStats:
    token0: str
    token1: str
    tvl_usd: float
    volume_24h_usd: float
    fees_24h_usd: float
    price: float
    price_change_24h: float

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "PairStats":
        return cls(
            token0=str(raw["token0"]),
            token1=str(raw["token1"]),
            tvl_usd=_f(raw, "tvl_usd"),
            volume_24h_usd=_f(raw, "volume_24h_usd"),
            fees_24h_usd=_f(raw, "fees_24h_usd"),
            price=_f(raw, "price"),
            price_change_24h=_f(raw, "price_change_24h"),
        )


@dataclass(frozen=True)
class OverviewStats:
    tvl_usd: float
    volume_24h_usd: float
    fees_24h_usd: float

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "OverviewStats":
        return cls(
            tvl_usd=_f(raw, "tvl_usd"),
            volume_24h_usd=_f(raw, "volume_24h_usd"),
            fees_24h_usd=_f(raw, "fees_24h_usd"),
        )


@dataclass(frozen=True)
class PoolInfo:
    key_hash: str
    token0: str
    token1: str
    fee: str
    tick_spacing: int
    extension: str
    tvl_usd: float
    volume_24h_usd: float

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "PoolInfo":
        return cls(
            key_hash=str(raw["key_hash"]),
            token0=str(raw["token0"]),
            token1=str(raw["token1"]),
            fee=str(raw["fee"]),
            tick_spacing=int(raw["tick_spacing"]),
            extension=str(raw.get("extension") or "0x0"),
            tvl_usd=_f(raw, "tvl_usd"),
            volume_24h_usd=_f(raw, "volume_24h_usd"),
        )


@dataclass(frozen=True)
class TvlDataPoint:
    timestamp: int
    tvl_usd: float

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "TvlDataPoint":
        return cls(timestamp=int(raw["timestamp"]), tvl_usd=_f(raw, "tvl_usd"))


@dataclass(frozen=True)
class VolumeDataPoint:
    timestamp: int
    volume_usd: float

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "VolumeDataPoint":
        return cls(timestamp=int(raw["timestamp"]), volume_usd=_f(raw, "volume_usd"))


def _parse_one(data: Any, parse: Callable[[Dict[str, Any]], T], label: str) -> T:
    if not isinstance(data, dict):
        raise ApiError(f"Malformed {label} response: expected an object", retryable=False)
    try:
        return parse(data)
    except (KeyError, TypeError, ValueError) as exc:
        raise ApiError(f"Malformed {label} response: {exc}", retryable=False, cause=exc) from exc


def _parse_list(data: Any, parse: Callable[[Dict[str, Any]], T], label: str) -> List[T]:
    if not isinstance(data, list):
        raise ApiError(f"Malformed {label} response: expected a list", retryable=False)
    return [_parse_one(entry, parse, label) for entry in data]


class _StatsRequest:
    def __init__(
        self,
        *,
        chain_id: Optional[str],
        api_url: Optional[str],
        fetch_config: Optional[FetchConfig],
        session: Optional[aiohttp.ClientSession],
        cancel_token: Optional[CancelToken],
        metrics: Optional[Metrics],
    ) -> None:
        self.chain_id = str(chain_id or CHAIN_IDS["MAINNET"])
        self.base = str(api_url or config.api_url()).rstrip("/")
        self.kwargs = {
            "session": session,
            "fetch_config": fetch_config,
            "cancel_token": cancel_token,
            "metrics": metrics,
        }

    async def overview(self, what: str, label: str) -> Any:
        return await get_json(
            f"{self.base}/overview/{what}",
            params={"chainId": self.chain_id},
            label=label,
            **self.kwargs,
        )

    async def pair(self, token_a: str, token_b: str, what: str, label: str) -> Any:
        a = normalize_address(token_a)
        b = normalize_address(token_b)
        return await get_json(f"{self.base}/pair/{self.chain_id}/{a}/{b}/{what}", label=label, **self.kwargs)


async def fetch_top_pairs(
    *,
    chain_id: Optional[str] = None,
    api_url: Optional[str] = None,
    fetch_config: Optional[FetchConfig] = None,
    session: Optional[aiohttp.ClientSession] = None,
    cancel_token: Optional[CancelToken] = None,
    metrics: Optional[Metrics] = None,
) -> List[PairStats]:
    req = _StatsRequest(chain_id=chain_id, api_url=api_url, fetch_config=fetch_config, session=session, cancel_token=cancel_token, metrics=metrics)
    return _parse_list(await req.overview("pairs", "top pairs"), PairStats.from_dict, "top pairs")


async def fetch_tvl(
    *,
    chain_id: Optional[str] = None,
    api_url: Optional[str] = None,
    fetch_config: Optional[FetchConfig] = None,
    session: Optional[aiohttp.ClientSession] = None,
    cancel_token: Optional[CancelToken] = None,
    metrics: Optional[Metrics] = None,
) -> OverviewStats:
    req = _StatsRequest(chain_id=chain_id, api_url=api_url, fetch_config=fetch_config, session=session, cancel_token=cancel_token, metrics=metrics)
    return _parse_one(await req.overview("tvl", "TVL"), OverviewStats.from_dict, "TVL")


async def fetch_volume(
    *,
    chain_id: Optional[str] = None,
    api_url: Optional[str] = None,
    fetch_config: Optional[FetchConfig] = None,
    session: Optional[aiohttp.ClientSession] = None,
    cancel_token: Optional[CancelToken] = None,
    metrics: Optional[Metrics] = None,
) -> OverviewStats:
    req = _StatsRequest(chain_id=chain_id, api_url=api_url, fetch_config=fetch_config, session=session, cancel_token=cancel_token, metrics=metrics)
    return _parse_one(await req.overview("volume", "volume"), OverviewStats.from_dict, "volume")


async def fetch_pair_tvl(
    token_a: str,
    token_b: str,
    *,
    chain_id: Optional[str] = None,
    api_url: Optional[str] = None,
    fetch_config: Optional[FetchConfig] = None,
    session: Optional[aiohttp.ClientSession] = None,
    cancel_token: Optional[CancelToken] = None,
    metrics: Optional[Metrics] = None,
) -> List[TvlDataPoint]:
    req = _StatsRequest(chain_id=chain_id, api_url=api_url, fetch_config=fetch_config, session=session, cancel_token=cancel_token, metrics=metrics)
    return _parse_list(await req.pair(token_a, token_b, "tvl", "pair TVL"), TvlDataPoint.from_dict, "pair TVL")


async def fetch_pair_volume(
    token_a: str,
    token_b: str,
    *,
    chain_id: Optional[str] = None,
    api_url: Optional[str] = None,
    fetch_config: Optional[FetchConfig] = None,
    session: Optional[aiohttp.ClientSession] = None,
    cancel_token: Optional[CancelToken] = None,
    metrics: Optional[Metrics] = None,
) -> List[VolumeDataPoint]:
    req = _StatsRequest(chain_id=chain_id, api_url=api_url, fetch_config=fetch_config, session=session, cancel_token=cancel_token, metrics=metrics)
    return _parse_list(await req.pair(token_a, token_b, "volume", "pair volume"), VolumeDataPoint.from_dict, "pair volume")


async def fetch_pair_pools(
    token_a: str,
    token_b: str,
    *,
    chain_id: Optional[str] = None,
    api_url: Optional[str] = None,
    fetch_config: Optional[FetchConfig] = None,
    session: Optional[aiohttp.ClientSession] = None,
    cancel_token: Optional[CancelToken] = None,
    metrics: Optional[Metrics] = None,
) -> List[PoolInfo]:
    req = _StatsRequest(chain_id=chain_id, api_url=api_url, fetch_config=fetch_config, session=session, cancel_token=cancel_token, metrics=metrics)
    return _parse_list(await req.pair(token_a, token_b, "pools", "pair pools"), PoolInfo.from_dict, "pair pools")

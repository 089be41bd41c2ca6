from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

import aiohttp

from ekubo_sdk import config
from ekubo_sdk.api.http import get_json
from ekubo_sdk.chains import CHAIN_IDS
from ekubo_sdk.config import FetchConfig
from ekubo_sdk.errors import ApiError
from ekubo_sdk.infra.cancel import CancelToken
from ekubo_sdk.infra.metrics import Metrics
from ekubo_sdk.types import TokenInfo


@dataclass(frozen=True)
class ApiTokenInfo:
    address: str
    name: str
    symbol: str
    decimals: int
    logo_uri: Optional[str] = None
    verified: Optional[bool] = None

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "ApiTokenInfo":
        return cls(
            address=str(raw["address"]),
            name=str(raw.get("name") or ""),
            symbol=str(raw["symbol"]),
            decimals=int(raw.get("decimals", 18)),
            logo_uri=raw.get("logo_uri"),
            verified=raw.get("verified"),
        )

    def to_token_info(self) -> TokenInfo:
        return TokenInfo(symbol=self.symbol, address=self.address, decimals=self.decimals, name=self.name or None)


def _token_list(data: Any, label: str) -> List[ApiTokenInfo]:
    if not isinstance(data, list):
        raise ApiError(f"Malformed {label} response: expected a list", retryable=False)
    out: List[ApiTokenInfo] = []
    for entry in data:
        if not isinstance(entry, dict):
            continue
        try:
            out.append(ApiTokenInfo.from_dict(entry))
        except (KeyError, TypeError, ValueError):
            continue
    return out


async def fetch_tokens(
    *,
    chain_id: Optional[str] = None,
    api_url: Optional[str] = None,
    fetch_config: Optional[FetchConfig] = None,
    session: Optional[aiohttp.ClientSession] = None,
    cancel_token: Optional[CancelToken] = None,
    metrics: Optional[Metrics] = None,
) -> List[ApiTokenInfo]:
    base = str(api_url or config.api_url()).rstrip("/")
    data = await get_json(
        f"{base}/tokens",
        params={"chainId": str(chain_id or CHAIN_IDS["MAINNET"])},
        session=session,
        fetch_config=fetch_config,
        cancel_token=cancel_token,
        metrics=metrics,
        label="tokens",
    )
    return _token_list(data, "tokens")


async def fetch_token(
    token_address: str,
    *,
    chain_id: Optional[str] = None,
    api_url: Optional[str] = None,
    fetch_config: Optional[FetchConfig] = None,
    session: Optional[aiohttp.ClientSession] = None,
    cancel_token: Optional[CancelToken] = None,
    metrics: Optional[Metrics] = None,
) -> Optional[ApiTokenInfo]:
    base = str(api_url or config.api_url()).rstrip("/")
    chain = str(chain_id or CHAIN_IDS["MAINNET"])
    data = await get_json(
        f"{base}/tokens/{chain}/{token_address}",
        session=session,
        fetch_config=fetch_config,
        cancel_token=cancel_token,
        metrics=metrics,
        label="token",
        not_found_ok=True,
    )
    if data is None:
        return None
    if not isinstance(data, dict):
        raise ApiError("Malformed token response: expected an object", retryable=False)
    try:
        return ApiTokenInfo.from_dict(data)
    except (KeyError, TypeError, ValueError) as exc:
        raise ApiError(f"Malformed token response: {exc}", retryable=False, cause=exc) from exc


async def fetch_tokens_batch(
    token_addresses: Sequence[str],
    *,
    chain_id: Optional[str] = None,
    api_url: Optional[str] = None,
    fetch_config: Optional[FetchConfig] = None,
    session: Optional[aiohttp.ClientSession] = None,
    cancel_token: Optional[CancelToken] = None,
    metrics: Optional[Metrics] = None,
) -> List[ApiTokenInfo]:
    if not token_addresses:
        return []
    base = str(api_url or config.api_url()).rstrip("/")
    params = [("chainId", str(chain_id or CHAIN_IDS["MAINNET"]))]
    params.extend(("addresses", str(addr)) for addr in token_addresses)
    data = await get_json(
        f"{base}/tokens/batch",
        params=params,
        session=session,
        fetch_config=fetch_config,
        cancel_token=cancel_token,
        metrics=metrics,
        label="tokens batch",
    )
    return _token_list(data, "tokens batch")

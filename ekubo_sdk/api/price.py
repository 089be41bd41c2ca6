from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

import aiohttp

from ekubo_sdk import config
from ekubo_sdk.api.http import get_json
from ekubo_sdk.chains import CHAIN_IDS
from ekubo_sdk.config import FetchConfig
from ekubo_sdk.infra.cancel import CancelToken
from ekubo_sdk.infra.metrics import Metrics
from ekubo_sdk.utils import normalize_address

DEFAULT_HISTORY_INTERVAL_S = 7000


@dataclass(frozen=True)
class PriceDataPoint:
    timestamp: int
    price: float


@dataclass(frozen=True)
class PriceHistory:
    data: Tuple[PriceDataPoint, ...] = field(default_factory=tuple)


def _points(raw: Any) -> Tuple[PriceDataPoint, ...]:
    entries = raw.get("data") if isinstance(raw, dict) else None
    if not isinstance(entries, list):
        return ()
    out = []
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        try:
            out.append(PriceDataPoint(timestamp=int(entry["timestamp"]), price=float(entry["price"])))
        except (KeyError, TypeError, ValueError):
            continue
    return tuple(out)


async def get_price_history(
    token: str,
    other_token: str,
    *,
    chain_id: Optional[str] = None,
    interval: int = DEFAULT_HISTORY_INTERVAL_S,
    api_url: Optional[str] = None,
    fetch_config: Optional[FetchConfig] = None,
    session: Optional[aiohttp.ClientSession] = None,
    cancel_token: Optional[CancelToken] = None,
    metrics: Optional[Metrics] = None,
) -> PriceHistory:
    """Price history of ``token`` quoted in ``other_token``.

    A body without a ``data`` list yields an empty history.
    """
    base = str(api_url or config.api_url()).rstrip("/")
    chain = str(chain_id or CHAIN_IDS["MAINNET"])
    url = f"{base}/price/{chain}/{normalize_address(token)}/{normalize_address(other_token)}/history"
    params: Dict[str, str] = {"interval": str(int(interval))}
    raw = await get_json(
        url,
        params=params,
        session=session,
        fetch_config=fetch_config,
        cancel_token=cancel_token,
        metrics=metrics,
        label="price history",
    )
    return PriceHistory(data=_points(raw))

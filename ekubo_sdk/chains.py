from __future__ import annotations

import json
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from ekubo_sdk import config
from ekubo_sdk.errors import InvalidChainError

CHAINS_DIR = Path(__file__).resolve().parent / "configs" / "chains"
KNOWN_CHAINS = ("mainnet", "sepolia")


@dataclass(frozen=True)
class ChainConfig:
    name: str
    chain_id: str
    quoter_api_url: str
    api_url: str
    router_address: str
    usdc_address: str
    starknet_chain_id: Optional[str] = None
    tokens: Tuple[Dict[str, Any], ...] = field(default_factory=tuple)


def _read_json(path: Path) -> Optional[Dict[str, Any]]:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return None


def _normalize_tokens(raw: Any) -> Tuple[Dict[str, Any], ...]:
    out: List[Dict[str, Any]] = []
    if not isinstance(raw, list):
        return tuple(out)
    for entry in raw:
        if not isinstance(entry, dict):
            continue
        symbol = str(entry.get("symbol") or "").strip()
        address = str(entry.get("address") or "").strip()
        if not symbol or not address:
            continue
        try:
            decimals = int(entry.get("decimals", 18))
        except (TypeError, ValueError):
            decimals = 18
        out.append(
            {
                "symbol": symbol,
                "address": address,
                "decimals": decimals,
                "name": entry.get("name"),
            }
        )
    return tuple(out)


def _from_dict(data: Dict[str, Any], name: str) -> Optional[ChainConfig]:
    chain_id = str(data.get("chain_id") or "").strip()
    if not chain_id:
        return None
    return ChainConfig(
        name=str(data.get("name") or name).strip().lower(),
        chain_id=chain_id,
        quoter_api_url=str(data.get("quoter_api_url") or config.QUOTER_API_URL).rstrip("/"),
        api_url=str(data.get("api_url") or config.API_URL).rstrip("/"),
        router_address=str(data.get("router_address") or "").strip(),
        usdc_address=str(data.get("usdc_address") or "").strip(),
        starknet_chain_id=(str(data["starknet_chain_id"]).lower() if data.get("starknet_chain_id") else None),
        tokens=_normalize_tokens(data.get("tokens")),
    )


@lru_cache(maxsize=None)
def _load_named(name: str) -> Optional[ChainConfig]:
    path = CHAINS_DIR / f"{name}.json"
    if not path.exists():
        return None
    data = _read_json(path)
    if not isinstance(data, dict):
        return None
    return _from_dict(data, name)


def load_chain_config(chain: Optional[str] = None) -> Optional[ChainConfig]:
    """Look a chain up by name, Ekubo decimal chain id, or starknet.js hex id."""
    key = str(chain or config.default_chain()).strip()
    if not key:
        return None
    lowered = key.lower()
    if lowered in KNOWN_CHAINS:
        return _load_named(lowered)
    for name in KNOWN_CHAINS:
        cfg = _load_named(name)
        if cfg is None:
            continue
        if key == cfg.chain_id or lowered == cfg.starknet_chain_id:
            return cfg
    return None


def get_chain_config(chain: Optional[str] = None) -> ChainConfig:
    cfg = load_chain_config(chain)
    if cfg is None:
        raise InvalidChainError(str(chain))
    return cfg


def get_ekubo_chain_id(starknet_chain_id: str) -> Optional[str]:
    lowered = str(starknet_chain_id or "").strip().lower()
    for name in KNOWN_CHAINS:
        cfg = _load_named(name)
        if cfg is not None and cfg.starknet_chain_id == lowered:
            return cfg.chain_id
    return None


def _by_chain_id(attr: str) -> Dict[str, str]:
    out: Dict[str, str] = {}
    for name in KNOWN_CHAINS:
        cfg = _load_named(name)
        if cfg is not None:
            out[cfg.chain_id] = getattr(cfg, attr)
    return out


CHAIN_IDS: Dict[str, str] = {name.upper(): get_chain_config(name).chain_id for name in KNOWN_CHAINS}
ROUTER_ADDRESSES: Dict[str, str] = _by_chain_id("router_address")
USDC_ADDRESSES: Dict[str, str] = _by_chain_id("usdc_address")


def router_address_for(chain_id: str) -> Optional[str]:
    return ROUTER_ADDRESSES.get(str(chain_id)) or None


def usdc_address_for(chain_id: str) -> str:
    return USDC_ADDRESSES.get(str(chain_id)) or USDC_ADDRESSES[CHAIN_IDS["MAINNET"]]

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from eth_utils import keccak

from ekubo_sdk.utils import to_hex, to_int_value

_MASK_250 = 2 ** 250 - 1


@dataclass(frozen=True)
class PoolKey:
    token0: str
    token1: str
    fee: str
    tick_spacing: int
    extension: str

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "PoolKey":
        return cls(
            token0=str(raw["token0"]),
            token1=str(raw["token1"]),
            fee=str(raw["fee"]),
            tick_spacing=int(raw["tick_spacing"]),
            extension=str(raw.get("extension") or "0x0"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "token0": self.token0,
            "token1": self.token1,
            "fee": self.fee,
            "tick_spacing": self.tick_spacing,
            "extension": self.extension,
        }


@dataclass(frozen=True)
class RouteNode:
    pool_key: PoolKey
    sqrt_ratio_limit: int
    skip_ahead: int = 0

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "RouteNode":
        return cls(
            pool_key=PoolKey.from_dict(raw["pool_key"]),
            sqrt_ratio_limit=to_int_value(raw["sqrt_ratio_limit"]),
            skip_ahead=int(raw.get("skip_ahead") or 0),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "pool_key": self.pool_key.to_dict(),
            "sqrt_ratio_limit": str(self.sqrt_ratio_limit),
            "skip_ahead": self.skip_ahead,
        }


@dataclass(frozen=True)
class SwapSplit:
    amount_specified: int
    route: Tuple[RouteNode, ...]

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "SwapSplit":
        route = raw["route"]
        if not isinstance(route, list):
            raise TypeError("split route must be a list")
        return cls(
            amount_specified=to_int_value(raw["amount_specified"]),
            route=tuple(RouteNode.from_dict(node) for node in route),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "amount_specified": str(self.amount_specified),
            "route": [node.to_dict() for node in self.route],
        }


@dataclass(frozen=True)
class SwapQuote:
    impact: float
    total: int
    splits: Tuple[SwapSplit, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if self.total < 0:
            raise ValueError("quote total must be non-negative")

    @property
    def has_route(self) -> bool:
        return len(self.splits) > 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "impact": self.impact,
            "total": str(self.total),
            "splits": [s.to_dict() for s in self.splits],
        }


def entrypoint_selector(name: str) -> str:
    """Starknet entry point selector: keccak256(name) truncated to 250 bits."""
    return to_hex(int.from_bytes(keccak(text=name), "big") & _MASK_250)


@dataclass(frozen=True)
class SwapCall:
    contract_address: str
    entrypoint: str
    calldata: Tuple[str, ...]

    @property
    def selector(self) -> str:
        return entrypoint_selector(self.entrypoint)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "contractAddress": self.contract_address,
            "entrypoint": self.entrypoint,
            "calldata": list(self.calldata),
        }


@dataclass(frozen=True)
class SwapCallsResult:
    transfer_call: SwapCall
    swap_calls: Tuple[SwapCall, ...]
    clear_call: SwapCall
    all_calls: Tuple[SwapCall, ...]
    clear_minimum_call: Optional[SwapCall] = None
    approve_call: Optional[SwapCall] = None

    @property
    def is_executable(self) -> bool:
        return len(self.swap_calls) > 0

    def to_list(self) -> List[Dict[str, Any]]:
        return [c.to_dict() for c in self.all_calls]


@dataclass(frozen=True)
class TokenInfo:
    symbol: str
    address: str
    decimals: int = 18
    name: Optional[str] = None

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "TokenInfo":
        return cls(
            symbol=str(raw["symbol"]),
            address=str(raw["address"]),
            decimals=int(raw.get("decimals", 18)),
            name=raw.get("name"),
        )

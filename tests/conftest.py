from __future__ import annotations

from typing import Any, Dict

import pytest

from ekubo_sdk.types import PoolKey, RouteNode, SwapQuote, SwapSplit

ETH = "0x049d36570d4e46f48e99674bd3fcc84644ddd6b96f7c741b1562b82f9e004dc7"
STRK = "0x04718f5a0fc34cc1af16a1cdee98ffb20c31f5cd61d6ab07201858f4287c938d"
USDC = "0x033068F6539f8e6e6b131e6B2B814e6c34A5224bC66947c47DaB9dFeE93b35fb"
MAINNET_CHAIN_ID = "23448594291968334"
MAINNET_ROUTER = "0x0199741822c2dc722f6f605204f35e56dbc23bceed54818168c4c49e4fb8737e"

FEE_A = "0x20c49ba5e353f80000000000000000"
FEE_B = "0x68db8bac710cb4000000000000000"
SQRT_LIMIT = 18446748437148339061


def _node(fee: str = FEE_A) -> RouteNode:
    return RouteNode(
        pool_key=PoolKey(token0=ETH, token1=STRK, fee=fee, tick_spacing=200, extension="0x0"),
        sqrt_ratio_limit=SQRT_LIMIT,
        skip_ahead=0,
    )


@pytest.fixture
def route_node() -> RouteNode:
    return _node()


@pytest.fixture
def single_split_quote() -> SwapQuote:
    split = SwapSplit(amount_specified=-1_000_000_000_000_000_000, route=(_node(),))
    return SwapQuote(impact=0.01, total=50_000_000_000_000_000_000, splits=(split,))


@pytest.fixture
def multi_split_quote() -> SwapQuote:
    splits = (
        SwapSplit(amount_specified=-500_000_000_000_000_000, route=(_node(),)),
        SwapSplit(amount_specified=-500_000_000_000_000_000, route=(_node(FEE_B),)),
    )
    return SwapQuote(impact=0.015, total=51_000_000_000_000_000_000, splits=splits)


@pytest.fixture
def empty_quote() -> SwapQuote:
    return SwapQuote(impact=0.0, total=0, splits=())


@pytest.fixture
def quote_payload() -> Dict[str, Any]:
    return {
        "price_impact": 0.01,
        "total_calculated": "-50000000000000000000",
        "splits": [
            {
                "amount_specified": "-1000000000000000000",
                "amount_calculated": "50000000000000000000",
                "route": [
                    {
                        "pool_key": {
                            "token0": ETH,
                            "token1": STRK,
                            "fee": FEE_A,
                            "tick_spacing": 200,
                            "extension": "0x0",
                        },
                        "sqrt_ratio_limit": str(SQRT_LIMIT),
                        "skip_ahead": 0,
                    }
                ],
            }
        ],
    }

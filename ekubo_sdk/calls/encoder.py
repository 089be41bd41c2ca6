from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence, Tuple

from ekubo_sdk.types import RouteNode
from ekubo_sdk.utils import U128, addresses_equal, to_hex


@dataclass(frozen=True)
class EncodedRoute:
    token: str
    encoded: Tuple[str, ...]


def encode_route_node(node: RouteNode, current_token: str) -> Tuple[str, Tuple[str, ...]]:
    """Encode one hop and return (next_token, calldata words).

    The hop leaves through whichever pool token is not ``current_token``;
    the comparison is numeric so padding and case do not matter.
    """
    key = node.pool_key
    next_token = key.token0 if addresses_equal(current_token, key.token1) else key.token1
    sqrt_limit = int(node.sqrt_ratio_limit)
    calldata = (
        key.token0,
        key.token1,
        key.fee,
        to_hex(key.tick_spacing),
        key.extension,
        to_hex(sqrt_limit % U128),
        to_hex(sqrt_limit >> 128),
        to_hex(node.skip_ahead),
    )
    return next_token, calldata


def encode_route(route: Sequence[RouteNode], target_token: str) -> EncodedRoute:
    token = target_token
    encoded: List[str] = []
    for node in route:
        token, words = encode_route_node(node, token)
        encoded.extend(words)
    return EncodedRoute(token=token, encoded=tuple(encoded))

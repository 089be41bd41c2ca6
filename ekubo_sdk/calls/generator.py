from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from ekubo_sdk import config
from ekubo_sdk.calls.encoder import encode_route
from ekubo_sdk.chains import CHAIN_IDS, router_address_for
from ekubo_sdk.errors import InvalidChainError
from ekubo_sdk.types import SwapCall, SwapCallsResult, SwapQuote, SwapSplit
from ekubo_sdk.utils import add_slippage, normalize_address, split_u256, to_hex

logger = logging.getLogger(__name__)

# is_exact_amount_received
EXACT_RECEIVED_FLAG = "0x1"


def _router(chain_id: str, router_address: Optional[str]) -> str:
    router = router_address or router_address_for(chain_id)
    if not router:
        raise InvalidChainError(chain_id, f"Router address not found for chain ID: {chain_id}")
    return router


def _split_payload(split: SwapSplit, target_token: str) -> List[str]:
    route = encode_route(split.route, target_token)
    return [
        to_hex(len(split.route)),
        *route.encoded,
        target_token,
        to_hex(abs(int(split.amount_specified))),
        EXACT_RECEIVED_FLAG,
    ]


def _swap_call(splits: Sequence[SwapSplit], target_token: str, router: str) -> SwapCall:
    if len(splits) == 1:
        return SwapCall(router, "multihop_swap", tuple(_split_payload(splits[0], target_token)))
    calldata: List[str] = [to_hex(len(splits))]
    for split in splits:
        calldata.extend(_split_payload(split, target_token))
    return SwapCall(router, "multi_multihop_swap", tuple(calldata))


def transfer_amount(quote: SwapQuote, slippage_percent: int = config.DEFAULT_SLIPPAGE_PERCENT) -> int:
    return add_slippage(quote.total, slippage_percent)


def generate_swap_calls(
    *,
    sell_token: str,
    buy_token: str,
    minimum_received: int,
    quote: SwapQuote,
    chain_id: Optional[str] = None,
    router_address: Optional[str] = None,
    slippage_percent: int = config.DEFAULT_SLIPPAGE_PERCENT,
) -> SwapCallsResult:
    """Build the router call sequence for ``quote``.

    Order is transfer, swap, clear_minimum, clear. A quote without splits
    yields only transfer and clear, and the result is not executable.
    """
    chain = str(chain_id or CHAIN_IDS["MAINNET"])
    router = _router(chain, router_address)
    sell = normalize_address(sell_token)
    buy = normalize_address(buy_token)

    amount = transfer_amount(quote, slippage_percent)
    transfer_call = SwapCall(sell, "transfer", (router, *split_u256(amount)))
    clear_call = SwapCall(router, "clear", (sell,))

    if not quote.splits:
        logger.debug("no route for %s -> %s, emitting transfer and clear only", sell, buy)
        return SwapCallsResult(
            transfer_call=transfer_call,
            swap_calls=(),
            clear_call=clear_call,
            all_calls=(transfer_call, clear_call),
        )

    swap_call = _swap_call(quote.splits, buy, router)
    clear_minimum_call = SwapCall(router, "clear_minimum", (buy, *split_u256(int(minimum_received))))
    return SwapCallsResult(
        transfer_call=transfer_call,
        swap_calls=(swap_call,),
        clear_call=clear_call,
        clear_minimum_call=clear_minimum_call,
        all_calls=(transfer_call, swap_call, clear_minimum_call, clear_call),
    )


def prepare_swap_calls(
    *,
    sell_token: str,
    buy_token: str,
    minimum_received: int,
    quote: SwapQuote,
    chain_id: Optional[str] = None,
    router_address: Optional[str] = None,
    slippage_percent: int = config.DEFAULT_SLIPPAGE_PERCENT,
) -> SwapCallsResult:
    """Same as generate_swap_calls with an approve call in front."""
    result = generate_swap_calls(
        sell_token=sell_token,
        buy_token=buy_token,
        minimum_received=minimum_received,
        quote=quote,
        chain_id=chain_id,
        router_address=router_address,
        slippage_percent=slippage_percent,
    )
    router = result.clear_call.contract_address
    amount = transfer_amount(quote, slippage_percent)
    approve_call = SwapCall(normalize_address(sell_token), "approve", (router, *split_u256(amount)))
    return SwapCallsResult(
        transfer_call=result.transfer_call,
        swap_calls=result.swap_calls,
        clear_call=result.clear_call,
        clear_minimum_call=result.clear_minimum_call,
        approve_call=approve_call,
        all_calls=(approve_call, *result.all_calls),
    )

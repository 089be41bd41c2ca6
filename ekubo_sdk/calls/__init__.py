from ekubo_sdk.calls.encoder import EncodedRoute, encode_route, encode_route_node
from ekubo_sdk.calls.generator import generate_swap_calls, prepare_swap_calls, transfer_amount

__all__ = [
    "EncodedRoute",
    "encode_route",
    "encode_route_node",
    "generate_swap_calls",
    "prepare_swap_calls",
    "transfer_amount",
]

from __future__ import annotations

import math
import re
from typing import Tuple, Union

from eth_utils import to_int

_HEX_RE = re.compile(r"^0x[0-9a-fA-F]+$")

U128 = 2 ** 128
U256_MAX = 2 ** 256 - 1

IntLike = Union[int, str]


def to_int_value(value: IntLike) -> int:
    """Parse an int, a 0x-prefixed hex string or a decimal string."""
    if isinstance(value, bool):
        raise TypeError("bool is not an integer value")
    if isinstance(value, int):
        return value
    s = str(value).strip()
    if s[:2] in ("0x", "0X"):
        return to_int(hexstr=s)
    return int(s, 10)


def to_hex(value: IntLike) -> str:
    n = to_int_value(value)
    if n < 0:
        return "-0x" + format(-n, "x")
    return "0x" + format(n, "x")


def normalize_address(value: IntLike) -> str:
    return to_hex(value).lower()


def addresses_equal(a: IntLike, b: IntLike) -> bool:
    return to_int_value(a) == to_int_value(b)


def is_address(value: str) -> bool:
    return isinstance(value, str) and bool(_HEX_RE.match(value))


def split_u256(value: int) -> Tuple[str, str]:
    """Return (low, high) 128-bit halves as hex strings."""
    v = int(value)
    if v < 0 or v > U256_MAX:
        raise ValueError(f"value out of u256 range: {value}")
    return to_hex(v % U128), to_hex(v >> 128)


def parse_total_calculated(value: Union[str, int, float]) -> int:
    if isinstance(value, float):
        n = int(math.floor(value))
    elif isinstance(value, int):
        n = value
    else:
        n = to_int_value(value)
    return abs(n)


def _div_trunc(n: int, d: int) -> int:
    # Python's // floors; slippage math truncates toward zero.
    q = abs(n) // abs(d)
    return q if (n >= 0) == (d > 0) else -q


def add_slippage(amount: int, slippage_percent: int) -> int:
    amount = int(amount)
    return amount + _div_trunc(amount * int(slippage_percent), 100)


def subtract_slippage(amount: int, slippage_percent: int) -> int:
    amount = int(amount)
    return amount - _div_trunc(amount * int(slippage_percent), 100)

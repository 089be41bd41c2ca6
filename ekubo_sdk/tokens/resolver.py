from __future__ import annotations

from typing import Optional

from ekubo_sdk.errors import TokenNotFoundError
from ekubo_sdk.tokens.registry import TokenRegistry
from ekubo_sdk.types import TokenInfo
from ekubo_sdk.utils import is_address, normalize_address


def resolve_token(identifier: str, registry: Optional[TokenRegistry] = None) -> str:
    """Return the normalized address for a symbol or an address.

    Addresses pass through without needing to be registered.
    """
    if is_address(identifier):
        return normalize_address(identifier)
    reg = registry if registry is not None else TokenRegistry()
    token = reg.get_by_symbol(identifier)
    if token is None:
        raise TokenNotFoundError(identifier)
    return token.address


def resolve_token_info(identifier: str, registry: Optional[TokenRegistry] = None) -> Optional[TokenInfo]:
    reg = registry if registry is not None else TokenRegistry()
    if is_address(identifier):
        return reg.get_by_address(identifier)
    return reg.get_by_symbol(identifier)


def can_resolve_token(identifier: str, registry: Optional[TokenRegistry] = None) -> bool:
    if is_address(identifier):
        return True
    reg = registry if registry is not None else TokenRegistry()
    return reg.has_symbol(identifier)

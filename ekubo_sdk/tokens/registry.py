from __future__ import annotations

from dataclasses import replace
from typing import Dict, Iterable, List, Optional

from ekubo_sdk.chains import load_chain_config
from ekubo_sdk.types import TokenInfo
from ekubo_sdk.utils import normalize_address


def default_tokens(chain: str = "mainnet") -> List[TokenInfo]:
    cfg = load_chain_config(chain)
    if cfg is None:
        return []
    return [TokenInfo.from_dict(t) for t in cfg.tokens]


class TokenRegistry:
    """Symbol <-> address lookup table.

    Symbols are matched case-insensitively; addresses are keyed by their
    normalized form, so padding and casing differences collapse together.
    """

    def __init__(self, tokens: Iterable[TokenInfo] = (), *, include_defaults: bool = True) -> None:
        self._by_symbol: Dict[str, TokenInfo] = {}
        self._by_address: Dict[str, TokenInfo] = {}
        if include_defaults:
            for token in default_tokens():
                self.register(token)
        for token in tokens:
            self.register(token)

    def register(self, token: TokenInfo) -> TokenInfo:
        address = normalize_address(token.address)
        entry = replace(token, address=address)
        self._by_symbol[entry.symbol.upper()] = entry
        self._by_address[address] = entry
        return entry

    def get_by_symbol(self, symbol: str) -> Optional[TokenInfo]:
        return self._by_symbol.get(str(symbol).upper())

    def get_by_address(self, address: str) -> Optional[TokenInfo]:
        try:
            key = normalize_address(address)
        except ValueError:
            return None
        return self._by_address.get(key)

    def has_symbol(self, symbol: str) -> bool:
        return str(symbol).upper() in self._by_symbol

    def has_address(self, address: str) -> bool:
        return self.get_by_address(address) is not None

    def all(self) -> List[TokenInfo]:
        return list(self._by_symbol.values())

    def symbols(self) -> List[str]:
        return [t.symbol for t in self._by_symbol.values()]

    def __len__(self) -> int:
        return len(self._by_symbol)

    def __contains__(self, identifier: object) -> bool:
        if not isinstance(identifier, str):
            return False
        return self.has_symbol(identifier) or self.has_address(identifier)


def create_token_registry(custom_tokens: Iterable[TokenInfo] = ()) -> TokenRegistry:
    return TokenRegistry(custom_tokens)

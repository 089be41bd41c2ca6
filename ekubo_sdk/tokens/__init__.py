from ekubo_sdk.tokens.registry import TokenRegistry, create_token_registry, default_tokens
from ekubo_sdk.tokens.resolver import can_resolve_token, resolve_token, resolve_token_info

__all__ = [
    "TokenRegistry",
    "can_resolve_token",
    "create_token_registry",
    "default_tokens",
    "resolve_token",
    "resolve_token_info",
]

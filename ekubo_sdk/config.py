# ekubo_sdk/config.py
# Library defaults. Every value can be overridden with an EKUBO_* env var,
# read at call time by the accessors below and the from_env() constructors.
# Plain FetchConfig() / PollingConfig() use the constants as-is.

from __future__ import annotations

import os
from dataclasses import dataclass, fields, replace
from typing import Any, Optional

# Quoter API (swap quotes) and main API (tokens, prices, stats).
QUOTER_API_URL = "https://prod-api-quoter.ekubo.org"
API_URL = "https://prod-api.ekubo.org"

# Default chain when none is passed and EKUBO_CHAIN is unset.
DEFAULT_CHAIN = "mainnet"

# Per-attempt HTTP timeout and retry schedule (seconds).
FETCH_TIMEOUT_S = 10.0
FETCH_MAX_RETRIES = 3
FETCH_BASE_BACKOFF_S = 1.0
FETCH_MAX_BACKOFF_S = 5.0

# Quote polling.
POLL_INTERVAL_S = 5.0
POLL_MAX_CONSECUTIVE_ERRORS = 3

# Transfer buffer added on top of the quoted total (percent).
DEFAULT_SLIPPAGE_PERCENT = 5

# Upstream error text that marks a liquidity failure.
INSUFFICIENT_LIQUIDITY_TEXT = "Insufficient liquidity"


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not str(raw).strip():
        return float(default)
    try:
        return float(raw)
    except ValueError:
        return float(default)


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not str(raw).strip():
        return int(default)
    try:
        return int(raw)
    except ValueError:
        return int(default)


def env_str(name: str, default: Optional[str] = None) -> Optional[str]:
    raw = os.getenv(name)
    if raw is None:
        return default
    raw = raw.strip()
    return raw or default


def default_chain() -> str:
    return str(env_str("EKUBO_CHAIN", DEFAULT_CHAIN)).lower()


def default_slippage_percent() -> int:
    return _env_int("EKUBO_SLIPPAGE_PERCENT", DEFAULT_SLIPPAGE_PERCENT)


def quoter_api_url(default: Optional[str] = None) -> str:
    return str(env_str("EKUBO_QUOTER_API_URL", default or QUOTER_API_URL)).rstrip("/")


def api_url(default: Optional[str] = None) -> str:
    return str(env_str("EKUBO_API_URL", default or API_URL)).rstrip("/")


class _Mergeable:
    def merged(self, **overrides: Any):
        """Return a copy with the non-None overrides applied."""
        names = {f.name for f in fields(self)}  # type: ignore[arg-type]
        clean = {k: v for k, v in overrides.items() if v is not None and k in names}
        return replace(self, **clean)  # type: ignore[type-var]


@dataclass(frozen=True)
class FetchConfig(_Mergeable):
    timeout_s: float = FETCH_TIMEOUT_S
    max_retries: int = FETCH_MAX_RETRIES
    base_backoff_s: float = FETCH_BASE_BACKOFF_S
    max_backoff_s: float = FETCH_MAX_BACKOFF_S

    def __post_init__(self) -> None:
        if self.max_retries < 1:
            raise ValueError("max_retries must be >= 1")
        if self.timeout_s <= 0:
            raise ValueError("timeout_s must be > 0")
        if self.base_backoff_s < 0 or self.max_backoff_s < 0:
            raise ValueError("backoff values must be >= 0")

    @classmethod
    def from_env(cls) -> "FetchConfig":
        return cls(
            timeout_s=_env_float("EKUBO_FETCH_TIMEOUT_S", FETCH_TIMEOUT_S),
            max_retries=_env_int("EKUBO_FETCH_MAX_RETRIES", FETCH_MAX_RETRIES),
            base_backoff_s=_env_float("EKUBO_FETCH_BASE_BACKOFF_S", FETCH_BASE_BACKOFF_S),
            max_backoff_s=_env_float("EKUBO_FETCH_MAX_BACKOFF_S", FETCH_MAX_BACKOFF_S),
        )


@dataclass(frozen=True)
class PollingConfig(_Mergeable):
    interval_s: float = POLL_INTERVAL_S
    max_consecutive_errors: int = POLL_MAX_CONSECUTIVE_ERRORS

    def __post_init__(self) -> None:
        if self.interval_s <= 0:
            raise ValueError("interval_s must be > 0")
        if self.max_consecutive_errors < 1:
            raise ValueError("max_consecutive_errors must be >= 1")

    @classmethod
    def from_env(cls) -> "PollingConfig":
        return cls(
            interval_s=_env_float("EKUBO_POLL_INTERVAL_S", POLL_INTERVAL_S),
            max_consecutive_errors=_env_int("EKUBO_POLL_MAX_CONSECUTIVE_ERRORS", POLL_MAX_CONSECUTIVE_ERRORS),
        )

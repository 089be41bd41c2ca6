from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional


class ErrorKind(str, Enum):
    INSUFFICIENT_LIQUIDITY = "INSUFFICIENT_LIQUIDITY"
    RATE_LIMIT = "RATE_LIMIT"
    API_ERROR = "API_ERROR"
    TIMEOUT = "TIMEOUT"
    ABORTED = "ABORTED"
    TOKEN_NOT_FOUND = "TOKEN_NOT_FOUND"
    INVALID_CHAIN = "INVALID_CHAIN"


# Kinds that a retry loop must surface on first sight.
NON_RETRYABLE_KINDS = frozenset(
    {
        ErrorKind.INSUFFICIENT_LIQUIDITY,
        ErrorKind.ABORTED,
        ErrorKind.TOKEN_NOT_FOUND,
        ErrorKind.INVALID_CHAIN,
    }
)


class EkuboError(Exception):
    """Base error. Switch on ``kind`` rather than on the concrete class."""

    kind: ErrorKind = ErrorKind.API_ERROR

    def __init__(self, message: str, *, cause: Optional[BaseException] = None) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause

    @property
    def code(self) -> str:
        return self.kind.value

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind.value, "message": self.message}


class InsufficientLiquidityError(EkuboError):
    kind = ErrorKind.INSUFFICIENT_LIQUIDITY

    def __init__(self, message: str = "Insufficient liquidity for swap") -> None:
        super().__init__(message)


class ApiError(EkuboError):
    kind = ErrorKind.API_ERROR

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        *,
        retryable: bool = True,
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message, cause=cause)
        self.status_code = status_code
        self.retryable = bool(retryable)

    def to_dict(self) -> Dict[str, Any]:
        out = super().to_dict()
        out["status_code"] = self.status_code
        return out


class RateLimitError(EkuboError):
    kind = ErrorKind.RATE_LIMIT

    def __init__(self, message: str = "Rate limited by API", retry_after: Optional[str] = None) -> None:
        super().__init__(message)
        # Raw Retry-After header value (seconds or HTTP-date).
        self.retry_after = retry_after


class RequestTimeoutError(EkuboError):
    kind = ErrorKind.TIMEOUT

    def __init__(self, timeout_s: float, message: Optional[str] = None) -> None:
        super().__init__(message or f"Request timed out after {timeout_s}s")
        self.timeout_s = float(timeout_s)


class AbortError(EkuboError):
    kind = ErrorKind.ABORTED

    def __init__(self, message: str = "Request aborted") -> None:
        super().__init__(message)


class TokenNotFoundError(EkuboError):
    kind = ErrorKind.TOKEN_NOT_FOUND

    def __init__(self, token_identifier: str, message: Optional[str] = None) -> None:
        super().__init__(message or f"Token not found: {token_identifier}")
        self.token_identifier = token_identifier


class InvalidChainError(EkuboError):
    kind = ErrorKind.INVALID_CHAIN

    def __init__(self, chain_id: str, message: Optional[str] = None) -> None:
        super().__init__(message or f"Invalid or unsupported chain: {chain_id}")
        self.chain_id = str(chain_id)


def error_kind(exc: BaseException) -> Optional[ErrorKind]:
    return exc.kind if isinstance(exc, EkuboError) else None


def is_retryable(exc: BaseException) -> bool:
    kind = error_kind(exc)
    if kind is None:
        return True
    if kind in NON_RETRYABLE_KINDS:
        return False
    if kind is ErrorKind.API_ERROR:
        return bool(getattr(exc, "retryable", True))
    return True


def is_non_retryable(exc: BaseException) -> bool:
    return not is_retryable(exc)

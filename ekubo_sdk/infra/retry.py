from __future__ import annotations

import asyncio
import logging
import random
import time
from email.utils import parsedate_to_datetime
from typing import Awaitable, Callable, Optional, TypeVar

from ekubo_sdk.errors import AbortError, ApiError, is_retryable
from ekubo_sdk.infra.cancel import CancelToken

logger = logging.getLogger(__name__)

T = TypeVar("T")

RetryCallback = Callable[[int, BaseException, float], None]


def parse_retry_after(value: Optional[str], *, now_s: Optional[float] = None) -> Optional[float]:
    """Parse a Retry-After header into seconds (integer seconds or HTTP-date)."""
    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    if text.isdigit():
        return float(int(text))
    try:
        when = parsedate_to_datetime(text)
    except (TypeError, ValueError, IndexError):
        return None
    if when is None:
        return None
    now = time.time() if now_s is None else float(now_s)
    delay = when.timestamp() - now
    return delay if delay > 0 else None


def calculate_backoff(
    attempt: int,
    base_backoff_s: float,
    max_backoff_s: float,
    retry_after: Optional[str] = None,
) -> float:
    hint = parse_retry_after(retry_after)
    if hint is not None and hint > 0:
        return hint
    delay = min(float(max_backoff_s), float(base_backoff_s) * (2 ** int(attempt)))
    # jitter in [delay/2, delay]
    return random.uniform(delay / 2.0, delay)


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    *,
    max_attempts: int,
    base_backoff_s: float,
    max_backoff_s: float,
    cancel_token: Optional[CancelToken] = None,
    on_retry: Optional[RetryCallback] = None,
    label: str = "operation",
) -> T:
    """Run ``operation`` with bounded retries and exponential backoff.

    Non-retryable failures (see ``errors.is_retryable``) propagate at once.
    A failure exposing ``retry_after`` overrides the computed delay.
    """
    attempts = max(1, int(max_attempts))
    last_err: Optional[BaseException] = None

    for attempt in range(attempts):
        if cancel_token is not None and cancel_token.cancelled:
            raise AbortError(f"Request aborted ({cancel_token.reason})")

        try:
            return await operation()
        except Exception as exc:
            last_err = exc
            if not is_retryable(exc):
                raise
            if attempt == attempts - 1:
                break

            delay = calculate_backoff(
                attempt,
                base_backoff_s,
                max_backoff_s,
                retry_after=getattr(exc, "retry_after", None),
            )
            logger.warning(
                "%s failed (attempt %d/%d): %s; retrying in %.3fs",
                label,
                attempt + 1,
                attempts,
                exc,
                delay,
            )
            if on_retry is not None:
                on_retry(attempt, exc, delay)
            if cancel_token is not None:
                await cancel_token.sleep(delay)
            else:
                await asyncio.sleep(delay)

    if last_err is None:
        raise ApiError(f"{label} failed: unknown error")
    raise last_err

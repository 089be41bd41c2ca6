import asyncio
from email.utils import parsedate_to_datetime

import pytest

from ekubo_sdk.errors import AbortError, ApiError, InsufficientLiquidityError, RateLimitError
from ekubo_sdk.infra.cancel import CancelToken
from ekubo_sdk.infra.retry import calculate_backoff, parse_retry_after, with_retry


class FlakyOp:
    def __init__(self, failures, result="ok") -> None:
        self.failures = list(failures)
        self.result = result
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        if self.failures:
            raise self.failures.pop(0)
        return self.result


@pytest.mark.asyncio
async def test_two_failures_then_success() -> None:
    op = FlakyOp([ApiError("boom", 500), ApiError("boom", 502)])
    retries = []
    res = await with_retry(
        op,
        max_attempts=3,
        base_backoff_s=0.0,
        max_backoff_s=0.0,
        on_retry=lambda attempt, exc, delay: retries.append((attempt, delay)),
    )
    assert res == "ok"
    assert op.calls == 3
    assert retries == [(0, 0.0), (1, 0.0)]


@pytest.mark.asyncio
async def test_non_retryable_fails_once() -> None:
    op = FlakyOp([InsufficientLiquidityError(), ApiError("never reached")])
    with pytest.raises(InsufficientLiquidityError):
        await with_retry(op, max_attempts=5, base_backoff_s=0.0, max_backoff_s=0.0)
    assert op.calls == 1


@pytest.mark.asyncio
async def test_exhausted_raises_last_error() -> None:
    op = FlakyOp([ApiError("a", 500), ApiError("b", 500), RateLimitError(retry_after="0")])
    with pytest.raises(RateLimitError):
        await with_retry(op, max_attempts=3, base_backoff_s=0.0, max_backoff_s=0.0)
    assert op.calls == 3


@pytest.mark.asyncio
async def test_cancel_during_backoff_aborts() -> None:
    token = CancelToken()
    op = FlakyOp([ApiError("boom", 500)] * 5)
    asyncio.get_running_loop().call_later(0.05, token.cancel, "caller")
    with pytest.raises(AbortError):
        await asyncio.wait_for(
            with_retry(op, max_attempts=5, base_backoff_s=10.0, max_backoff_s=10.0, cancel_token=token),
            timeout=2.0,
        )
    assert op.calls == 1


@pytest.mark.asyncio
async def test_precancelled_token_never_calls() -> None:
    token = CancelToken()
    token.cancel()
    op = FlakyOp([])
    with pytest.raises(AbortError):
        await with_retry(op, max_attempts=3, base_backoff_s=0.0, max_backoff_s=0.0, cancel_token=token)
    assert op.calls == 0


def test_calculate_backoff_bounds() -> None:
    for _ in range(50):
        d0 = calculate_backoff(0, 1.0, 5.0)
        assert 0.5 <= d0 <= 1.0
        d2 = calculate_backoff(2, 1.0, 5.0)
        assert 2.0 <= d2 <= 4.0
        capped = calculate_backoff(10, 1.0, 5.0)
        assert 2.5 <= capped <= 5.0


def test_retry_after_overrides_backoff() -> None:
    assert calculate_backoff(0, 1.0, 5.0, retry_after="7") == 7.0
    # zero hint falls back to computed backoff
    assert 0.5 <= calculate_backoff(0, 1.0, 5.0, retry_after="0") <= 1.0


def test_parse_retry_after() -> None:
    assert parse_retry_after("3") == 3.0
    assert parse_retry_after("0") == 0.0
    assert parse_retry_after(None) is None
    assert parse_retry_after("") is None
    assert parse_retry_after("soon") is None

    date = "Wed, 21 Oct 2015 07:28:00 GMT"
    ts = parsedate_to_datetime(date).timestamp()
    assert parse_retry_after(date, now_s=ts - 10.0) == pytest.approx(10.0)
    assert parse_retry_after(date, now_s=ts + 10.0) is None

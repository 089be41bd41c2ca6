from ekubo_sdk.errors import (
    AbortError,
    ApiError,
    ErrorKind,
    InsufficientLiquidityError,
    InvalidChainError,
    RateLimitError,
    RequestTimeoutError,
    TokenNotFoundError,
    error_kind,
    is_non_retryable,
    is_retryable,
)


def test_retry_classification_by_kind() -> None:
    assert is_retryable(RateLimitError(retry_after="1"))
    assert is_retryable(RequestTimeoutError(2.0))
    assert is_retryable(ApiError("boom", 500))
    assert not is_retryable(ApiError("bad body", 200, retryable=False))
    assert not is_retryable(InsufficientLiquidityError())
    assert not is_retryable(AbortError())
    assert not is_retryable(TokenNotFoundError("XYZ"))
    assert not is_retryable(InvalidChainError("999"))
    assert is_retryable(RuntimeError("transient"))


def test_is_non_retryable_negates() -> None:
    assert is_non_retryable(InsufficientLiquidityError())
    assert not is_non_retryable(RateLimitError())


def test_error_fields() -> None:
    err = TokenNotFoundError("XYZ")
    assert err.kind is ErrorKind.TOKEN_NOT_FOUND
    assert err.token_identifier == "XYZ"
    assert "XYZ" in str(err)
    assert error_kind(err) is ErrorKind.TOKEN_NOT_FOUND
    assert error_kind(ValueError("x")) is None

    api = ApiError("nope", 503)
    assert api.to_dict()["status_code"] == 503
    assert api.code == "API_ERROR"

    rl = RateLimitError(retry_after="5")
    assert rl.retry_after == "5"
    assert InvalidChainError("999").chain_id == "999"
    assert RequestTimeoutError(1.5).timeout_s == 1.5

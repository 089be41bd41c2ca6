from ekubo_sdk.infra.cancel import CancelToken, run_with_timeout
from ekubo_sdk.infra.metrics import Metrics
from ekubo_sdk.infra.retry import calculate_backoff, parse_retry_after, with_retry

__all__ = [
    "CancelToken",
    "Metrics",
    "calculate_backoff",
    "parse_retry_after",
    "run_with_timeout",
    "with_retry",
]

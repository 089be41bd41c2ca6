from ekubo_sdk.infra.metrics import POLL_ERROR, POLL_QUOTE, Metrics


def test_requests_and_failures() -> None:
    m = Metrics()
    m.record_request("quoter.test")
    m.record_request("quoter.test")
    m.record_request("")
    m.record_failure("rate_limit")
    m.record_failure("rate_limit")
    assert m.requests == 3
    assert m.requests_by_host == {"quoter.test": 2, "unknown": 1}
    assert m.snapshot()["failures"] == {"rate_limit": 2}


def test_latency_percentiles_bounded() -> None:
    m = Metrics(max_samples=10)
    for v in range(100):
        m.record_latency(float(v))
    m.record_latency(float("nan"))
    lat = m.latency()
    assert lat["count"] == 10
    assert lat["p50"] >= 90.0
    assert lat["p95"] == 99.0


def test_empty_latency() -> None:
    assert Metrics().latency() == {"count": 0, "p50": None, "p95": None}


def test_reset() -> None:
    m = Metrics()
    m.record_request("h")
    m.record_poll(POLL_QUOTE)
    m.record_poll(POLL_ERROR)
    m.record_latency(1.0)
    m.reset()
    assert m.snapshot() == {
        "requests": 0,
        "requests_by_host": {},
        "failures": {},
        "polls": {},
        "latency_ms": {"count": 0, "p50": None, "p95": None},
    }

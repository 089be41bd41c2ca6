import pytest
from aioresponses import aioresponses

from conftest import ETH, MAINNET_CHAIN_ID, STRK
from ekubo_sdk import config
from ekubo_sdk.api.http import get_json
from ekubo_sdk.api.quote import fetch_swap_quote
from ekubo_sdk.client import EkuboClient
from ekubo_sdk.config import FetchConfig, PollingConfig
from ekubo_sdk.errors import ApiError
from ekubo_sdk.polling.poller import QuotePoller, QuotePollerParams
from ekubo_sdk.utils import normalize_address


def _calls(m: aioresponses) -> int:
    return sum(len(v) for v in m.requests.values())


def test_url_env_overrides(monkeypatch) -> None:
    assert config.quoter_api_url() == config.QUOTER_API_URL
    assert config.api_url("https://chain.test") == "https://chain.test"
    monkeypatch.setenv("EKUBO_QUOTER_API_URL", "https://quoter.env/")
    monkeypatch.setenv("EKUBO_API_URL", "https://api.env")
    assert config.quoter_api_url() == "https://quoter.env"
    assert config.api_url("https://chain.test") == "https://api.env"


def test_fetch_and_polling_from_env(monkeypatch) -> None:
    monkeypatch.setenv("EKUBO_FETCH_TIMEOUT_S", "2.5")
    monkeypatch.setenv("EKUBO_FETCH_MAX_RETRIES", "not-a-number")
    monkeypatch.setenv("EKUBO_POLL_INTERVAL_S", "0.5")
    fetch = FetchConfig.from_env()
    assert fetch.timeout_s == 2.5
    assert fetch.max_retries == config.FETCH_MAX_RETRIES
    assert PollingConfig.from_env().interval_s == 0.5
    assert FetchConfig().timeout_s == config.FETCH_TIMEOUT_S


def test_client_url_precedence(monkeypatch) -> None:
    assert EkuboClient().config.api_url == "https://prod-api.ekubo.org"
    monkeypatch.setenv("EKUBO_QUOTER_API_URL", "https://quoter.env")
    monkeypatch.setenv("EKUBO_API_URL", "https://api.env")
    client = EkuboClient()
    assert client.config.quoter_api_url == "https://quoter.env"
    assert client.config.api_url == "https://api.env"
    explicit = EkuboClient(api_url="https://api.explicit")
    assert explicit.config.api_url == "https://api.explicit"


def test_poller_default_polling_reads_env(monkeypatch) -> None:
    monkeypatch.setenv("EKUBO_POLL_MAX_CONSECUTIVE_ERRORS", "7")
    poller = QuotePoller(
        QuotePollerParams(amount=1, token_from=ETH, token_to=STRK),
        on_quote=lambda quote: None,
    )
    assert poller.polling_config.max_consecutive_errors == 7


@pytest.mark.asyncio
async def test_module_quote_uses_env_quoter_url(monkeypatch, quote_payload) -> None:
    monkeypatch.setenv("EKUBO_QUOTER_API_URL", "https://quoter.env")
    url = f"https://quoter.env/{MAINNET_CHAIN_ID}/{10 ** 18}/{normalize_address(ETH)}/{normalize_address(STRK)}"
    with aioresponses() as m:
        m.get(url, payload=quote_payload)
        quote = await fetch_swap_quote(amount=10 ** 18, token_from=ETH, token_to=STRK, chain_id=MAINNET_CHAIN_ID)
        assert _calls(m) == 1
    assert quote.total == 50 * 10 ** 18


@pytest.mark.asyncio
async def test_get_json_default_fetch_config_reads_env(monkeypatch) -> None:
    monkeypatch.setenv("EKUBO_FETCH_MAX_RETRIES", "1")
    with aioresponses() as m:
        m.get("https://api.test/overview/tvl", status=503, body="down", repeat=True)
        with pytest.raises(ApiError) as ei:
            await get_json("https://api.test/overview/tvl", label="TVL")
        assert _calls(m) == 1
    assert ei.value.status_code == 503

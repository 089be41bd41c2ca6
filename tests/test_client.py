import asyncio
import re

import pytest
from aioresponses import aioresponses

from conftest import ETH, MAINNET_CHAIN_ID, MAINNET_ROUTER, STRK, USDC
from ekubo_sdk.client import EkuboClient, create_ekubo_client
from ekubo_sdk.config import FetchConfig, PollingConfig
from ekubo_sdk.errors import InsufficientLiquidityError, InvalidChainError, TokenNotFoundError
from ekubo_sdk.types import TokenInfo
from ekubo_sdk.utils import normalize_address

QUOTER = "https://quoter.test"
API = "https://api.test"
FAST = FetchConfig(timeout_s=2.0, max_retries=1, base_backoff_s=0.0, max_backoff_s=0.0)
ONE = 10 ** 18


def _client(**kw) -> EkuboClient:
    params = dict(quoter_api_url=QUOTER, api_url=API, fetch=FAST)
    params.update(kw)
    return EkuboClient(**params)


def _quote_url(amount, src, dst) -> str:
    return f"{QUOTER}/{MAINNET_CHAIN_ID}/{amount}/{normalize_address(src)}/{normalize_address(dst)}"


def test_default_chain_config() -> None:
    client = EkuboClient(chain="mainnet")
    assert client.chain_id == MAINNET_CHAIN_ID
    assert client.router_address == MAINNET_ROUTER
    assert client.config.default_slippage_percent == 5
    assert client.config.quoter_api_url == "https://prod-api-quoter.ekubo.org"


def test_sepolia_chain_config() -> None:
    client = create_ekubo_client("sepolia")
    assert client.chain_id == "393402133025997798000961"
    assert client.router_address == "0x0045f933adf0607292468ad1c1dedaa74d5ad166392590e72676a34d01d7b763"
    # no well-known tokens on sepolia
    with pytest.raises(TokenNotFoundError):
        client.resolve_token("ETH")


def test_unknown_chain() -> None:
    with pytest.raises(InvalidChainError):
        EkuboClient(chain="nowhere")
    client = EkuboClient(chain="nowhere", chain_id="777")
    assert client.chain_id == "777"
    assert client.router_address == ""


def test_resolve_token_and_custom_tokens() -> None:
    client = _client(custom_tokens=[TokenInfo(symbol="FOO", address="0x000abc", decimals=6)])
    assert client.resolve_token("eth") == normalize_address(ETH)
    assert client.resolve_token("FOO") == "0xabc"
    assert client.resolve_token("0x0000ABC") == "0xabc"
    with pytest.raises(TokenNotFoundError):
        client.resolve_token("NOPE")
    client.register_token(TokenInfo(symbol="BAR", address="0x1"))
    assert client.resolve_token("bar") == "0x1"


@pytest.mark.asyncio
async def test_get_quote_with_symbols(quote_payload) -> None:
    async with _client() as client:
        with aioresponses() as m:
            m.get(_quote_url(ONE, ETH, STRK), payload=quote_payload)
            quote = await client.get_quote("ETH", "STRK", ONE)
        assert quote.total == 50 * ONE
        assert client.metrics.requests == 1


@pytest.mark.asyncio
async def test_get_usdc_prices_collects_errors(quote_payload) -> None:
    async with _client() as client:
        with aioresponses() as m:
            m.get(_quote_url(ONE, ETH, USDC), payload=quote_payload)
            m.get(_quote_url(ONE, STRK, USDC), payload={"error": "Insufficient liquidity"})
            batch = await client.get_usdc_prices({"ETH": ONE, "STRK": ONE})
    assert batch.prices == {"ETH": 50 * ONE}
    assert isinstance(batch.errors["STRK"], InsufficientLiquidityError)


def test_generate_swap_calls_uses_client_defaults(single_split_quote) -> None:
    client = _client(default_slippage_percent=10)
    result = client.generate_swap_calls("ETH", "STRK", single_split_quote, 45 * ONE)
    assert result.transfer_call.calldata[1] == hex(55 * ONE)
    assert result.swap_calls[0].contract_address == MAINNET_ROUTER
    prepared = client.prepare_swap_calls("ETH", "STRK", single_split_quote, 45 * ONE, slippage_percent=0)
    assert prepared.approve_call.calldata[1] == hex(50 * ONE)
    assert len(prepared.all_calls) == 5


def test_generate_swap_calls_router_override(single_split_quote) -> None:
    client = _client(router_address="0xbeef")
    result = client.generate_swap_calls("ETH", "STRK", single_split_quote, 1)
    assert result.clear_call.contract_address == "0xbeef"


@pytest.mark.asyncio
async def test_sync_tokens_from_api() -> None:
    rows = [{"address": "0x0999", "name": "New", "symbol": "NEW", "decimals": 8}]
    async with _client() as client:
        with aioresponses() as m:
            m.get(re.compile(r"^https://api\.test/tokens\?.*$"), payload=rows)
            n = await client.sync_tokens_from_api()
    assert n == 1
    assert client.resolve_token("NEW") == "0x999"
    assert client.tokens.get_by_address("0x999").decimals == 8


@pytest.mark.asyncio
async def test_quote_poller_through_client(quote_payload) -> None:
    got = []
    async with _client() as client:
        with aioresponses() as m:
            m.get(_quote_url(ONE, ETH, STRK), payload=quote_payload, repeat=True)
            poller = client.create_quote_poller(
                "ETH",
                "STRK",
                ONE,
                on_quote=got.append,
                polling=PollingConfig(interval_s=0.01),
            )
            async with poller:
                for _ in range(200):
                    if len(got) >= 2:
                        break
                    await asyncio.sleep(0.01)
    assert len(got) >= 2
    assert got[0].total == 50 * ONE
    assert poller.params.token_from == normalize_address(ETH)


@pytest.mark.asyncio
async def test_close_is_idempotent() -> None:
    client = _client()
    await client.close()
    with aioresponses() as m:
        m.get(re.compile(r"^https://api\.test/overview/tvl\?.*$"), payload={"tvl_usd": 1})
        stats = await client.get_tvl()
    assert stats.tvl_usd == 1.0
    await client.close()
    await client.close()

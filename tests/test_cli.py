import json
import logging

import pytest
from aioresponses import aioresponses

from conftest import ETH, MAINNET_CHAIN_ID, STRK
from ekubo_sdk.__main__ import main
from ekubo_sdk.utils import normalize_address


@pytest.fixture(autouse=True)
def _reset_package_logger():
    yield
    logger = logging.getLogger("ekubo_sdk")
    for h in list(logger.handlers):
        if not isinstance(h, logging.NullHandler):
            logger.removeHandler(h)


def test_tokens_command_lists_registry(capsys) -> None:
    assert main(["tokens"]) == 0
    rows = json.loads(capsys.readouterr().out)
    assert {r["symbol"] for r in rows} >= {"ETH", "STRK", "USDC"}


def test_quote_command_with_calls(capsys, monkeypatch, quote_payload) -> None:
    monkeypatch.setenv("EKUBO_FETCH_MAX_RETRIES", "1")
    url = (
        f"https://prod-api-quoter.ekubo.org/{MAINNET_CHAIN_ID}/1000000000000000000/"
        f"{normalize_address(ETH)}/{normalize_address(STRK)}"
    )
    with aioresponses() as m:
        m.get(url, payload=quote_payload)
        code = main(["quote", "ETH", "STRK", "1000000000000000000", "--calls", "--slippage", "10"])
    assert code == 0
    out = json.loads(capsys.readouterr().out)
    assert out["quote"]["total"] == str(50 * 10 ** 18)
    assert out["minimum_received"] == str(45 * 10 ** 18)
    assert [c["entrypoint"] for c in out["calls"]] == ["transfer", "multihop_swap", "clear_minimum", "clear"]


def test_unknown_token_exits_nonzero(capsys) -> None:
    assert main(["quote", "NOPE", "STRK", "1"]) == 1
    err = json.loads(capsys.readouterr().err.strip().splitlines()[-1])
    assert err["kind"] == "TOKEN_NOT_FOUND"

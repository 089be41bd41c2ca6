import pytest

from ekubo_sdk.chains import (
    CHAIN_IDS,
    ROUTER_ADDRESSES,
    get_chain_config,
    get_ekubo_chain_id,
    load_chain_config,
    router_address_for,
    usdc_address_for,
)
from ekubo_sdk.errors import InvalidChainError


def test_load_chain_config_mainnet() -> None:
    cfg = load_chain_config("mainnet")
    assert cfg is not None
    assert cfg.chain_id == "23448594291968334"
    assert cfg.router_address.startswith("0x")
    assert any(t["symbol"] == "ETH" for t in cfg.tokens)


def test_load_chain_config_sepolia() -> None:
    cfg = load_chain_config("SEPOLIA")
    assert cfg is not None
    assert cfg.chain_id == "393402133025997798000961"
    assert cfg.tokens == ()


def test_lookup_by_ids() -> None:
    assert load_chain_config("23448594291968334").name == "mainnet"
    assert load_chain_config("0x534e5f4d41494e").name == "mainnet"
    assert get_ekubo_chain_id("0x534E5F4D41494E") == CHAIN_IDS["MAINNET"]
    assert get_ekubo_chain_id("0x1") is None
    assert load_chain_config("nowhere") is None


def test_get_chain_config_raises() -> None:
    with pytest.raises(InvalidChainError):
        get_chain_config("nowhere")


def test_address_tables() -> None:
    assert set(CHAIN_IDS) == {"MAINNET", "SEPOLIA"}
    assert router_address_for(CHAIN_IDS["SEPOLIA"]) == ROUTER_ADDRESSES[CHAIN_IDS["SEPOLIA"]]
    assert router_address_for("999") is None
    assert usdc_address_for("999") == usdc_address_for(CHAIN_IDS["MAINNET"])


def test_default_chain_from_env(monkeypatch) -> None:
    monkeypatch.setenv("EKUBO_CHAIN", "sepolia")
    assert load_chain_config().name == "sepolia"

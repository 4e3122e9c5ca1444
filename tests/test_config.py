"""Tests for aave_actions.config."""

from __future__ import annotations

import pytest
from web3 import Web3

from aave_actions.config import (
    DEFAULT_RECEIPT_TIMEOUT,
    LendingClientConfig,
    parse_asset_registry,
)
from aave_actions.exceptions import InvalidInputError
from aave_actions.types import Asset
from conftest import DAI, GATEWAY, POOL, make_config

PRIVATE_KEY = "0x" + "01" * 32


def _env(**extra: str) -> dict[str, str]:
    env = {
        "AAVE_PRIVATE_KEY": PRIVATE_KEY,
        "AAVE_RPC_URL": "https://rpc.sepolia.example",
        "AAVE_CHAIN_ID": "11155111",
        "AAVE_POOL_ADDRESS": POOL,
    }
    env.update(extra)
    return env


def test_from_env_minimal() -> None:
    config = LendingClientConfig.from_env(_env())

    assert config.chain_id == 11155111
    assert config.pool_address == POOL
    assert config.gateway_address is None
    assert config.referral_code == 0
    assert config.receipt_timeout == DEFAULT_RECEIPT_TIMEOUT
    assert config.simulate_transactions is True
    assert config.assets == {}


def test_from_env_reports_every_missing_variable() -> None:
    with pytest.raises(InvalidInputError) as excinfo:
        LendingClientConfig.from_env({"AAVE_RPC_URL": "https://rpc"})

    message = excinfo.value.message
    for name in ("AAVE_PRIVATE_KEY", "AAVE_CHAIN_ID", "AAVE_POOL_ADDRESS"):
        assert name in message
    assert "AAVE_RPC_URL" not in message


def test_from_env_optional_values() -> None:
    config = LendingClientConfig.from_env(
        _env(
            AAVE_GATEWAY_ADDRESS=GATEWAY,
            AAVE_REFERRAL_CODE="7",
            AAVE_RECEIPT_TIMEOUT="45.5",
            AAVE_SIMULATE="false",
            AAVE_ASSETS=f"dai:{DAI}:18, usdc:0x7777777777777777777777777777777777777777:6",
        )
    )

    assert config.gateway_address == GATEWAY
    assert config.referral_code == 7
    assert config.receipt_timeout == 45.5
    assert config.simulate_transactions is False
    assert config.assets["DAI"] == Asset(DAI, "DAI", 18)
    assert config.assets["USDC"].decimals == 6


def test_from_env_rejects_bad_chain_id() -> None:
    with pytest.raises(InvalidInputError) as excinfo:
        LendingClientConfig.from_env(_env(AAVE_CHAIN_ID="sepolia"))

    assert excinfo.value.field == "AAVE_CHAIN_ID"


def test_invalid_pool_address_rejected() -> None:
    with pytest.raises(InvalidInputError) as excinfo:
        LendingClientConfig.from_env(_env(AAVE_POOL_ADDRESS="0x123"))

    assert excinfo.value.field == "pool_address"


def test_lowercase_addresses_are_checksummed() -> None:
    lowered = "0xfff9976782d46cc05630d1f6ebab18b2324d6b14"
    config = make_config(wrapped_native_address=lowered)

    assert config.wrapped_native_address == Web3.to_checksum_address(lowered)
    assert config.wrapped_native_address != lowered


def test_private_key_hidden_from_repr() -> None:
    assert PRIVATE_KEY not in repr(make_config(private_key=PRIVATE_KEY))


def test_referral_code_must_fit_uint16() -> None:
    with pytest.raises(InvalidInputError):
        make_config(referral_code=70_000)


def test_resolve_asset_by_symbol() -> None:
    config = make_config()

    assert config.resolve_asset("dai") == Asset(DAI)
    native = config.resolve_asset("eth")
    assert native is not None and native.is_native
    assert config.resolve_asset("WBTC") is None


@pytest.mark.parametrize("raw", ["DAI", f"DAI:{DAI}:18:extra", ":0x1234"])
def test_parse_asset_registry_rejects_malformed_entries(raw: str) -> None:
    with pytest.raises(InvalidInputError):
        parse_asset_registry(raw)

"""Tests for aave_actions.health."""

from __future__ import annotations

from decimal import Decimal

import pytest
from web3.exceptions import ContractLogicError

from aave_actions.constants import MAX_UINT256
from aave_actions.exceptions import (
    InsufficientCollateralError,
    InvalidInputError,
    UnregisteredAccountError,
)
from aave_actions.health import AccountHealthChecker, classify_risk
from aave_actions.types import Asset, RiskStatus
from conftest import ACCOUNT, DAI, ORACLE, POOL, WETH, FakeChainClient


@pytest.mark.parametrize(
    ("health_factor", "expected"),
    [
        (0.9, RiskStatus.HIGH_RISK),
        (1.2, RiskStatus.MEDIUM_RISK),
        (2.0, RiskStatus.HEALTHY),
        (1.0, RiskStatus.MEDIUM_RISK),
        (1.5, RiskStatus.HEALTHY),
        (Decimal("0.999999"), RiskStatus.HIGH_RISK),
        (Decimal("Infinity"), RiskStatus.HEALTHY),
    ],
)
def test_classify_risk(health_factor, expected: RiskStatus) -> None:
    assert classify_risk(health_factor) is expected


@pytest.mark.parametrize("health_factor", [Decimal("NaN"), float("nan")])
def test_classify_risk_rejects_nan(health_factor) -> None:
    with pytest.raises(InvalidInputError) as excinfo:
        classify_risk(health_factor)

    assert excinfo.value.field == "health_factor"


def test_get_position_normalises_raw_values(chain: FakeChainClient) -> None:
    chain.account_data = (1000, 500, 200, 8250, 8000, 1_850_000_000_000_000_000)
    checker = AccountHealthChecker(chain, pool_address=POOL)

    position = checker.get_position(ACCOUNT)

    assert chain.reads == [(POOL, "getUserAccountData", [ACCOUNT])]
    assert position.total_collateral_base == 1000
    assert position.total_debt_base == 500
    assert position.available_borrows_base == 200
    assert position.liquidation_threshold == Decimal("0.825")
    assert position.loan_to_value == Decimal("0.8")
    assert position.health_factor == Decimal("1.85")
    assert position.risk_status is RiskStatus.HEALTHY


def test_position_without_debt_is_healthy(chain: FakeChainClient) -> None:
    chain.account_data = (1000, 0, 800, 8250, 8000, MAX_UINT256)
    position = AccountHealthChecker(chain, pool_address=POOL).get_position(ACCOUNT)

    assert position.health_factor.is_infinite()
    assert position.risk_status is RiskStatus.HEALTHY


def test_position_as_dict_reports_risk(chain: FakeChainClient) -> None:
    chain.account_data = (1000, 900, 0, 8250, 8000, 950_000_000_000_000_000)
    payload = AccountHealthChecker(chain, pool_address=POOL).get_position(ACCOUNT).as_dict()

    assert payload["healthFactor"] == pytest.approx(0.95)
    assert payload["riskStatus"] == "HIGH_RISK"
    assert payload["ltv"] == pytest.approx(0.8)
    assert "timestamp" in payload


def test_read_revert_is_unregistered_account(chain: FakeChainClient) -> None:
    chain.read_error = ContractLogicError("execution reverted")
    checker = AccountHealthChecker(chain, pool_address=POOL)

    with pytest.raises(UnregisteredAccountError) as excinfo:
        checker.get_position(ACCOUNT)

    assert excinfo.value.account == ACCOUNT
    assert excinfo.value.details["error"] == "execution reverted"


def test_invalid_account_address_rejected(chain: FakeChainClient) -> None:
    with pytest.raises(InvalidInputError):
        AccountHealthChecker(chain, pool_address=POOL).get_position("0xabc")
    assert chain.reads == []


def test_borrow_above_capacity_rejected(chain: FakeChainClient) -> None:
    chain.account_data = (100, 0, 2, 8250, 8000, MAX_UINT256)
    checker = AccountHealthChecker(chain, pool_address=POOL)

    with pytest.raises(InsufficientCollateralError) as excinfo:
        checker.ensure_can_borrow(ACCOUNT, Asset(DAI, "DAI", 18), 10)

    assert excinfo.value.requested == 10
    assert excinfo.value.available == 2


def test_borrow_within_capacity_passes(chain: FakeChainClient) -> None:
    chain.account_data = (100, 0, 10, 8250, 8000, MAX_UINT256)
    checker = AccountHealthChecker(chain, pool_address=POOL)

    position = checker.ensure_can_borrow(ACCOUNT, Asset(DAI, "DAI", 18), 10)

    assert position.available_borrows_base == 10


def test_risky_borrow_is_advisory_only(chain: FakeChainClient, caplog) -> None:
    chain.account_data = (1000, 800, 50, 8250, 8000, 1_100_000_000_000_000_000)
    checker = AccountHealthChecker(chain, pool_address=POOL)

    with caplog.at_level("WARNING"):
        position = checker.ensure_can_borrow(ACCOUNT, Asset(DAI, "DAI", 18), 50)

    assert position.risk_status is RiskStatus.MEDIUM_RISK
    assert "MEDIUM_RISK" in caplog.text


def test_borrow_valued_through_oracle(chain: FakeChainClient) -> None:
    # 1 DAI = 1.00 USD in 8-decimal base currency
    chain.prices[DAI] = 100_000_000
    chain.account_data = (0, 0, 150_000_000, 8250, 8000, MAX_UINT256)
    checker = AccountHealthChecker(chain, pool_address=POOL, oracle_address=ORACLE)
    dai = Asset(DAI, "DAI", 18)

    checker.ensure_can_borrow(ACCOUNT, dai, 10**18)

    with pytest.raises(InsufficientCollateralError) as excinfo:
        checker.ensure_can_borrow(ACCOUNT, dai, 2 * 10**18)
    assert excinfo.value.requested == 200_000_000
    assert excinfo.value.available == 150_000_000


def test_native_borrow_priced_via_wrapped_token(chain: FakeChainClient) -> None:
    chain.prices[WETH] = 2_000 * 100_000_000
    chain.account_data = (0, 0, 1_000 * 100_000_000, 8250, 8000, MAX_UINT256)
    checker = AccountHealthChecker(
        chain, pool_address=POOL, oracle_address=ORACLE, wrapped_native_address=WETH
    )

    with pytest.raises(InsufficientCollateralError):
        checker.ensure_can_borrow(ACCOUNT, Asset.native(), 10**18)

    assert (ORACLE, "getAssetPrice", [WETH]) in chain.reads


def test_native_borrow_with_oracle_requires_wrapped_token(chain: FakeChainClient) -> None:
    checker = AccountHealthChecker(chain, pool_address=POOL, oracle_address=ORACLE)

    with pytest.raises(InvalidInputError) as excinfo:
        checker.ensure_can_borrow(ACCOUNT, Asset.native(), 1)

    assert excinfo.value.field == "wrapped_native_address"


def test_oracle_valuation_rounds_up(chain: FakeChainClient) -> None:
    # 0.3 tokens at price 3 is worth 0.9 base units
    chain.prices[DAI] = 3
    chain.account_data = (0, 0, 0, 8250, 8000, MAX_UINT256)
    checker = AccountHealthChecker(chain, pool_address=POOL, oracle_address=ORACLE)

    with pytest.raises(InsufficientCollateralError) as excinfo:
        checker.ensure_can_borrow(ACCOUNT, Asset(DAI, "DAI", 1), 3)

    assert excinfo.value.requested == 1
    assert excinfo.value.available == 0

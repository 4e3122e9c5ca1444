from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

import pytest

from aave_actions.abi import ContractFunction
from aave_actions.base import ChainClient
from aave_actions.config import LendingClientConfig
from aave_actions.types import Asset, TransactionRequest

ACCOUNT = "0x1111111111111111111111111111111111111111"
POOL = "0x2222222222222222222222222222222222222222"
GATEWAY = "0x3333333333333333333333333333333333333333"
DAI = "0x4444444444444444444444444444444444444444"
ORACLE = "0x5555555555555555555555555555555555555555"
WETH = "0x6666666666666666666666666666666666666666"
TX_HASH = "0x" + "ab" * 32

HEALTHY_ACCOUNT_DATA = (
    10_000_00000000,  # collateral, 8-decimal base currency
    2_000_00000000,  # debt
    5_000_00000000,  # available borrows
    8250,
    8000,
    3_500_000_000_000_000_000,
)


class FakeChainClient(ChainClient):
    """In-memory stand-in for a node, recording every call."""

    def __init__(self) -> None:
        self.account_data: tuple[int, ...] = HEALTHY_ACCOUNT_DATA
        self.prices: dict[str, int] = {}
        self.token_decimals: dict[str, int] = {}
        self.read_error: BaseException | None = None
        self.simulate_error: BaseException | None = None
        self.send_error: BaseException | None = None
        self.receipt_error: BaseException | None = None
        self.receipt: dict[str, Any] = {"status": 1, "blockNumber": 123, "transactionHash": TX_HASH}
        self.reads: list[tuple[str, str, list[Any]]] = []
        self.simulated: list[TransactionRequest] = []
        self.sent: list[TransactionRequest] = []
        self.waited: list[tuple[str, float]] = []

    @property
    def account_address(self) -> str:
        return ACCOUNT

    def read_state(
        self, target: str, function: ContractFunction, args: Sequence[Any]
    ) -> tuple[Any, ...]:
        self.reads.append((target, function.name, list(args)))
        if self.read_error is not None:
            raise self.read_error
        if function.name == "getUserAccountData":
            return self.account_data
        if function.name == "getAssetPrice":
            return (self.prices[args[0].lower()],)
        if function.name == "decimals":
            return (self.token_decimals[target.lower()],)
        raise AssertionError(f"unexpected read {function.name}")

    def simulate(self, request: TransactionRequest) -> None:
        self.simulated.append(request)
        if self.simulate_error is not None:
            raise self.simulate_error

    def sign_and_send(self, request: TransactionRequest) -> str:
        self.sent.append(request)
        if self.send_error is not None:
            raise self.send_error
        return TX_HASH

    def wait_for_receipt(self, tx_hash: str, timeout: float) -> Mapping[str, Any]:
        self.waited.append((tx_hash, timeout))
        if self.receipt_error is not None:
            raise self.receipt_error
        return self.receipt


def make_config(**overrides: Any) -> LendingClientConfig:
    values: dict[str, Any] = {
        "private_key": "0x" + "01" * 32,
        "rpc_url": "https://rpc.sepolia.example",
        "chain_id": 11155111,
        "pool_address": POOL,
        "gateway_address": GATEWAY,
        "receipt_timeout": 30.0,
        "assets": {"DAI": Asset(address=DAI, symbol="DAI", decimals=18)},
    }
    values.update(overrides)
    return LendingClientConfig(**values)


@pytest.fixture
def chain() -> FakeChainClient:
    return FakeChainClient()


@pytest.fixture
def config() -> LendingClientConfig:
    return make_config()

"""Chain client capability interface."""

from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from typing import Any

from .abi import ContractFunction
from .types import Address, TransactionRequest


class ChainClient(ABC):
    """Read, sign and broadcast access to an EVM node for one signing account.

    Implementations are safe for sequential reuse but not for concurrent
    submission from the same account; callers serialise writes.
    """

    @property
    @abstractmethod
    def account_address(self) -> Address:
        pass

    @abstractmethod
    def read_state(
        self, target: Address, function: ContractFunction, args: Sequence[Any]
    ) -> tuple[Any, ...]:
        pass

    @abstractmethod
    def simulate(self, request: TransactionRequest) -> None:
        """Dry-run ``request`` against the latest block, raising on revert."""

    @abstractmethod
    def sign_and_send(self, request: TransactionRequest) -> str:
        """Sign and broadcast ``request``, returning the 0x transaction hash."""

    @abstractmethod
    def wait_for_receipt(self, tx_hash: str, timeout: float) -> Mapping[str, Any]:
        pass

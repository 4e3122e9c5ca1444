"""Web3 connection and signing for the lending action client."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any, cast

from eth_account import Account
from eth_account.signers.local import LocalAccount
from web3 import HTTPProvider, Web3
from web3.types import TxParams

from ..abi import ContractFunction
from ..base import ChainClient
from ..config import LendingClientConfig
from ..exceptions import InvalidInputError, NetworkError, UnknownProtocolError
from ..types import Address, TransactionRequest

logger = logging.getLogger(__name__)


class Web3Connections(ChainClient):
    """Manage the Web3 provider and local signer for one account."""

    def __init__(self, config: LendingClientConfig):
        self.config = config
        self._provider: HTTPProvider | None = None
        self._web3: Web3 | None = None
        self._account: LocalAccount | None = None
        self._connected = False

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def connect(self) -> None:
        """Initialise the provider, signer and verify the target chain."""

        try:
            signer = cast(LocalAccount, Account.from_key(self.config.private_key))  # type: ignore[arg-type]
        except Exception as exc:
            # Never include the key itself in the error
            raise InvalidInputError(
                "Failed to derive signer account from provided private key",
                field="private_key",
                details={"error": type(exc).__name__},
            ) from exc

        provider = HTTPProvider(
            self.config.rpc_url, request_kwargs={"timeout": self.config.request_timeout}
        )
        web3 = Web3(provider)
        if not web3.is_connected():
            raise NetworkError("Unable to connect to RPC endpoint", endpoint=self.config.rpc_url)

        chain_id = web3.eth.chain_id
        if chain_id != self.config.chain_id:
            raise NetworkError(
                f"RPC endpoint serves chain {chain_id}, expected {self.config.chain_id}",
                endpoint=self.config.rpc_url,
                details={"chain_id": chain_id},
            )

        self._account = signer
        self._provider = provider
        self._web3 = web3
        self._connected = True
        logger.info(
            "Connected to chain %s at %s as %s", chain_id, self.config.rpc_url, signer.address
        )

    def disconnect(self) -> None:
        self._provider = None
        self._web3 = None
        self._account = None
        self._connected = False

    def is_connected(self) -> bool:
        return self._connected and self._web3 is not None and self._account is not None

    def ensure_connected(self) -> None:
        if not self.is_connected():
            raise NetworkError("Chain client is not connected", endpoint=self.config.rpc_url)

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------
    @property
    def account(self) -> LocalAccount:
        if self._account is None:
            raise NetworkError(
                "Signer account is not initialised; call connect() first",
                endpoint=self.config.rpc_url,
            )
        return self._account

    @property
    def web3(self) -> Web3:
        if self._web3 is None:
            raise NetworkError("RPC provider not connected", endpoint=self.config.rpc_url)
        return self._web3

    @property
    def account_address(self) -> Address:
        return self.account.address

    # ------------------------------------------------------------------
    # ChainClient
    # ------------------------------------------------------------------
    def read_state(
        self, target: Address, function: ContractFunction, args: Sequence[Any]
    ) -> tuple[Any, ...]:
        web3 = self.web3
        destination = Web3.to_checksum_address(target)
        result = web3.eth.call({"to": destination, "data": function.encode_call(args)})

        try:
            return function.decode_output(bytes(result))
        except Exception as exc:
            raise UnknownProtocolError(
                f"Failed to decode {function.name} response from {destination}",
                details={"error": str(exc), "raw": bytes(result).hex()},
            ) from exc

    def simulate(self, request: TransactionRequest) -> None:
        tx: TxParams = {
            "from": self.account_address,
            "to": Web3.to_checksum_address(request.target),
            "data": request.data,
            "value": request.value,
        }
        self.web3.eth.call(tx)

    def sign_and_send(self, request: TransactionRequest) -> str:
        tx = self._transaction_fields(request)
        signed = self.account.sign_transaction(tx)
        tx_hash = self.web3.eth.send_raw_transaction(signed.raw_transaction)
        return tx_hash.to_0x_hex()

    def wait_for_receipt(self, tx_hash: str, timeout: float) -> Mapping[str, Any]:
        return self.web3.eth.wait_for_transaction_receipt(tx_hash, timeout=timeout)  # type: ignore[arg-type]

    # ------------------------------------------------------------------
    # Internal wiring
    # ------------------------------------------------------------------
    def _transaction_fields(self, request: TransactionRequest) -> dict[str, Any]:
        web3 = self.web3
        address = self.account_address

        max_fee = request.max_fee_per_gas
        priority_fee = request.max_priority_fee_per_gas
        if max_fee is None or priority_fee is None:
            max_fee, priority_fee = self._network_fees(max_fee, priority_fee)
            logger.debug(
                "Using network fees for %s: maxFee=%d priority=%d",
                request.kind.value,
                max_fee,
                priority_fee,
            )

        return {
            "type": 2,
            "chainId": self.config.chain_id,
            "nonce": web3.eth.get_transaction_count(address, "pending"),
            "to": Web3.to_checksum_address(request.target),
            "data": request.data_hex,
            "value": request.value,
            "gas": request.gas_limit,
            "maxFeePerGas": max_fee,
            "maxPriorityFeePerGas": priority_fee,
        }

    def _network_fees(self, max_fee: int | None, priority_fee: int | None) -> tuple[int, int]:
        eth = self.web3.eth
        if priority_fee is None:
            priority_fee = int(eth.max_priority_fee)
        if max_fee is None:
            base_fee = int(eth.get_block("latest").get("baseFeePerGas", 0))
            max_fee = 2 * base_fee + priority_fee
        return max_fee, priority_fee

"""Pure construction of pool transactions from requested operations."""

from __future__ import annotations

import logging
from dataclasses import replace

from .abi import Pool, WrappedTokenGateway
from .constants import DEFAULT_REFERRAL_CODE
from .exceptions import InvalidInputError
from .types import (
    Address,
    Asset,
    GasParameters,
    InterestRateMode,
    Operation,
    OperationKind,
    TransactionRequest,
)
from .utils import normalise_address

logger = logging.getLogger(__name__)

_RATE_MODE_KINDS = (OperationKind.BORROW, OperationKind.REPAY)


class TransactionBuilder:
    """Encode pool or gateway calls for an :class:`Operation`.

    No network access: the same operation and gas parameters always produce
    the same request.
    """

    def __init__(
        self,
        *,
        pool_address: Address,
        account_address: Address,
        gateway_address: Address | None = None,
        referral_code: int = DEFAULT_REFERRAL_CODE,
    ) -> None:
        self._pool = normalise_address(pool_address, "pool_address")
        self._account = normalise_address(account_address, "account_address")
        self._gateway = (
            normalise_address(gateway_address, "gateway_address") if gateway_address else None
        )
        self._referral_code = referral_code

    def validate(self, operation: Operation) -> Operation:
        """Return a normalised copy of ``operation`` or raise ``InvalidInputError``."""

        try:
            kind = OperationKind(operation.kind)
        except ValueError as exc:
            raise InvalidInputError(
                f"Unsupported operation: {operation.kind!r}", field="kind", value=operation.kind
            ) from exc

        if not isinstance(operation.asset, Asset):
            raise InvalidInputError("Asset is required", field="asset", value=operation.asset)
        if operation.asset.is_native:
            asset_address = operation.asset.address
        else:
            asset_address = normalise_address(operation.asset.address, "asset")

        amount = operation.amount
        if isinstance(amount, bool) or not isinstance(amount, int):
            raise InvalidInputError(
                "Amount must be an integer number of base units", field="amount", value=amount
            )
        if amount <= 0:
            raise InvalidInputError("Amount must be greater than zero", field="amount", value=amount)
        if amount >= 2**256:
            raise InvalidInputError("Amount exceeds uint256", field="amount", value=amount)

        rate_mode: InterestRateMode | None = None
        if kind in _RATE_MODE_KINDS:
            rate_mode = self._validate_rate_mode(operation.interest_rate_mode)

        beneficiary = (
            normalise_address(operation.beneficiary, "beneficiary")
            if operation.beneficiary is not None
            else self._account
        )
        # borrowETH has no onBehalfOf; the debt always lands on the signer
        native_borrow = kind is OperationKind.BORROW and operation.asset.is_native
        if native_borrow and beneficiary != self._account:
            raise InvalidInputError(
                "Native asset borrows are always taken by the signing account",
                field="beneficiary",
                value=beneficiary,
            )

        return replace(
            operation,
            kind=kind,
            asset=replace(operation.asset, address=asset_address),
            interest_rate_mode=rate_mode,
            beneficiary=beneficiary,
        )

    def build(self, operation: Operation, gas: GasParameters) -> TransactionRequest:
        operation = self.validate(operation)
        if operation.asset.is_native:
            target, data, value = self._gateway_call(operation)
        else:
            target, data, value = self._pool_call(operation)

        logger.debug(
            "Built %s call to %s (%d bytes, value=%d)", operation.kind.value, target, len(data), value
        )
        return TransactionRequest(
            target=target,
            data=data,
            value=value,
            gas_limit=gas.gas_limit,
            max_fee_per_gas=gas.max_fee_per_gas,
            max_priority_fee_per_gas=gas.max_priority_fee_per_gas,
            kind=operation.kind,
            operation=operation,
        )

    # ------------------------------------------------------------------
    # Encoding
    # ------------------------------------------------------------------
    def _pool_call(self, operation: Operation) -> tuple[Address, bytes, int]:
        asset = operation.asset.address
        amount = operation.amount
        beneficiary = operation.beneficiary
        kind = operation.kind

        if kind is OperationKind.SUPPLY:
            data = Pool.SUPPLY.encode_call([asset, amount, beneficiary, self._referral_code])
        elif kind is OperationKind.BORROW:
            data = Pool.BORROW.encode_call(
                [asset, amount, int(operation.interest_rate_mode), self._referral_code, beneficiary]
            )
        elif kind is OperationKind.REPAY:
            data = Pool.REPAY.encode_call(
                [asset, amount, int(operation.interest_rate_mode), beneficiary]
            )
        else:
            data = Pool.WITHDRAW.encode_call([asset, amount, beneficiary])
        return self._pool, data, 0

    def _gateway_call(self, operation: Operation) -> tuple[Address, bytes, int]:
        if self._gateway is None:
            raise InvalidInputError(
                "Native asset operations require a configured gateway address",
                field="gateway_address",
            )

        amount = operation.amount
        beneficiary = operation.beneficiary
        kind = operation.kind

        if kind is OperationKind.SUPPLY:
            data = WrappedTokenGateway.DEPOSIT_ETH.encode_call(
                [self._pool, beneficiary, self._referral_code]
            )
            return self._gateway, data, amount
        if kind is OperationKind.BORROW:
            data = WrappedTokenGateway.BORROW_ETH.encode_call(
                [self._pool, amount, int(operation.interest_rate_mode), self._referral_code]
            )
            return self._gateway, data, 0
        if kind is OperationKind.REPAY:
            data = WrappedTokenGateway.REPAY_ETH.encode_call(
                [self._pool, amount, int(operation.interest_rate_mode), beneficiary]
            )
            return self._gateway, data, amount
        data = WrappedTokenGateway.WITHDRAW_ETH.encode_call([self._pool, amount, beneficiary])
        return self._gateway, data, 0

    @staticmethod
    def _validate_rate_mode(value: object) -> InterestRateMode:
        if value is None:
            raise InvalidInputError(
                "Interest rate mode is required (1 for stable, 2 for variable)",
                field="interest_rate_mode",
            )
        if isinstance(value, bool):
            raise InvalidInputError(
                "Invalid interest rate mode", field="interest_rate_mode", value=value
            )
        try:
            return InterestRateMode(value)
        except ValueError as exc:
            raise InvalidInputError(
                f"Invalid interest rate mode {value!r}; use 1 (stable) or 2 (variable)",
                field="interest_rate_mode",
                value=value,
            ) from exc

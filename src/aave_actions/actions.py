"""Lending actions exposed to the orchestrating agent."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from decimal import Decimal
from typing import Any

from .abi import ERC20
from .base import ChainClient
from .builder import TransactionBuilder
from .config import LendingClientConfig
from .constants import NATIVE_ASSET_ADDRESS
from .errors import ErrorClassifier
from .evm.connections import Web3Connections
from .evm.transactions import TransactionSubmitter
from .exceptions import ErrorKind, InvalidInputError, LendingProtocolError
from .gas import GasPolicy
from .health import AccountHealthChecker
from .types import (
    Address,
    Asset,
    InterestRateMode,
    Operation,
    OperationKind,
    Response,
)
from .utils import format_amount, normalise_address, to_base_units

logger = logging.getLogger(__name__)

Amount = str | int | float | Decimal

_SUCCESS_TEMPLATES = {
    OperationKind.SUPPLY: "Successfully supplied {amount} {asset} to the pool",
    OperationKind.BORROW: "Successfully borrowed {amount} {asset} from the pool",
    OperationKind.REPAY: "Successfully repaid {amount} {asset} to the pool",
    OperationKind.WITHDRAW: "Successfully withdrew {amount} {asset} from the pool",
}

_ASSET_PARAM = {
    "type": "string",
    "description": "Asset symbol (e.g. ETH for the native coin) or token contract address",
}
_RATE_MODE_PARAM = {
    "type": "integer",
    "enum": [int(InterestRateMode.STABLE), int(InterestRateMode.VARIABLE)],
    "description": "Interest rate mode (1 for stable, 2 for variable)",
}


def _amount_param(verb: str) -> dict[str, str]:
    return {"type": "string", "description": f"The amount to {verb} in human units (e.g. 0.5)"}


TOOL_SPECS: tuple[dict[str, Any], ...] = (
    {
        "name": "aave_supply",
        "description": "Supply an asset to the Aave pool (native coin goes through the gateway)",
        "parameters": {
            "type": "object",
            "properties": {"asset": _ASSET_PARAM, "amount": _amount_param("supply")},
            "required": ["asset", "amount"],
        },
    },
    {
        "name": "aave_borrow",
        "description": "Borrow an asset from the Aave pool against supplied collateral",
        "parameters": {
            "type": "object",
            "properties": {
                "asset": _ASSET_PARAM,
                "amount": _amount_param("borrow"),
                "interestRateMode": _RATE_MODE_PARAM,
            },
            "required": ["asset", "amount", "interestRateMode"],
        },
    },
    {
        "name": "aave_repay",
        "description": "Repay borrowed assets to the Aave pool",
        "parameters": {
            "type": "object",
            "properties": {
                "asset": _ASSET_PARAM,
                "amount": _amount_param("repay"),
                "interestRateMode": _RATE_MODE_PARAM,
            },
            "required": ["asset", "amount", "interestRateMode"],
        },
    },
    {
        "name": "aave_withdraw",
        "description": "Withdraw a supplied asset from the Aave pool",
        "parameters": {
            "type": "object",
            "properties": {"asset": _ASSET_PARAM, "amount": _amount_param("withdraw")},
            "required": ["asset", "amount"],
        },
    },
    {
        "name": "aave_get_user_data",
        "description": (
            "Get an account's Aave data including collateral, debt, and health factor "
            "(defaults to the signing account)"
        ),
        "parameters": {
            "type": "object",
            "properties": {
                "userAddress": {"type": "string", "description": "The address of the user to query"}
            },
            "required": [],
        },
    },
)


class LendingActions:
    """Run supply / borrow / repay / withdraw pipelines for the signing account.

    Each call validates, risk-checks (borrow only), sizes gas, builds, signs,
    broadcasts and waits for one confirmation before returning a
    :class:`Response`. Calls must not overlap for the same account.
    """

    def __init__(
        self,
        config: LendingClientConfig,
        client: ChainClient,
        *,
        gas_policy: GasPolicy | None = None,
        classifier: ErrorClassifier | None = None,
    ) -> None:
        self._config = config
        self._client = client
        self._classifier = classifier or ErrorClassifier()
        self._gas = gas_policy or GasPolicy(config.gas_overrides)
        self._health = AccountHealthChecker(
            client,
            pool_address=config.pool_address,
            oracle_address=config.oracle_address,
            wrapped_native_address=config.wrapped_native_address,
            classifier=self._classifier,
        )
        self._submitter = TransactionSubmitter(
            client,
            receipt_timeout=config.receipt_timeout,
            simulate=config.simulate_transactions,
            classifier=self._classifier,
        )
        self._decimals: dict[str, int] = {}

    @classmethod
    def from_config(cls, config: LendingClientConfig, **kwargs: Any) -> LendingActions:
        """Connect a :class:`Web3Connections` client and wrap it."""

        connections = Web3Connections(config)
        connections.connect()
        return cls(config, connections, **kwargs)

    @property
    def account_address(self) -> Address:
        return self._client.account_address

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------
    def supply(
        self,
        asset: str | Asset,
        amount: Amount,
        *,
        on_behalf_of: Address | None = None,
        timeout: float | None = None,
    ) -> Response:
        return self._execute(OperationKind.SUPPLY, asset, amount, None, on_behalf_of, timeout)

    def borrow(
        self,
        asset: str | Asset,
        amount: Amount,
        interest_rate_mode: InterestRateMode | int = InterestRateMode.VARIABLE,
        *,
        on_behalf_of: Address | None = None,
        timeout: float | None = None,
    ) -> Response:
        return self._execute(
            OperationKind.BORROW, asset, amount, interest_rate_mode, on_behalf_of, timeout
        )

    def repay(
        self,
        asset: str | Asset,
        amount: Amount,
        interest_rate_mode: InterestRateMode | int = InterestRateMode.VARIABLE,
        *,
        on_behalf_of: Address | None = None,
        timeout: float | None = None,
    ) -> Response:
        return self._execute(
            OperationKind.REPAY, asset, amount, interest_rate_mode, on_behalf_of, timeout
        )

    def withdraw(
        self,
        asset: str | Asset,
        amount: Amount,
        *,
        to: Address | None = None,
        timeout: float | None = None,
    ) -> Response:
        return self._execute(OperationKind.WITHDRAW, asset, amount, None, to, timeout)

    def get_user_data(self, user_address: Address | None = None) -> Response:
        try:
            account = user_address or self._client.account_address
            logger.info("Fetching pool account data for %s", account)
            position = self._health.get_position(account)
        except LendingProtocolError as exc:
            logger.warning("Account data read failed: %s", exc.message)
            return self._failure("Failed to read account data", exc)
        except Exception as exc:
            logger.exception("Unexpected get_user_data failure")
            return Response(
                success=False,
                message=f"Failed to read account data: {exc}",
                error=str(exc),
                error_kind=ErrorKind.UNKNOWN.value,
            )

        message = (
            f"Health factor {position.health_factor:.4f} ({position.risk_status.value}); "
            f"collateral {position.total_collateral_base}, debt {position.total_debt_base}, "
            f"available to borrow {position.available_borrows_base} (base currency units); "
            f"LTV {position.loan_to_value:.2%}, liquidation threshold "
            f"{position.liquidation_threshold:.2%}"
        )
        return Response(success=True, message=message, data=position.as_dict())

    # ------------------------------------------------------------------
    # Tool registry
    # ------------------------------------------------------------------
    @staticmethod
    def tool_specs() -> list[dict[str, Any]]:
        """Describe every action as a function-calling tool definition."""

        return [dict(spec) for spec in TOOL_SPECS]

    def invoke(self, name: str, arguments: Mapping[str, Any] | None = None) -> Response:
        """Dispatch a tool call produced by the agent."""

        handlers: dict[str, Callable[..., Response]] = {
            "aave_supply": lambda asset, amount: self.supply(asset, amount),
            "aave_borrow": lambda asset, amount, interestRateMode: self.borrow(
                asset, amount, _coerce_rate_mode(interestRateMode)
            ),
            "aave_repay": lambda asset, amount, interestRateMode: self.repay(
                asset, amount, _coerce_rate_mode(interestRateMode)
            ),
            "aave_withdraw": lambda asset, amount: self.withdraw(asset, amount),
            "aave_get_user_data": lambda userAddress=None: self.get_user_data(userAddress),
        }
        handler = handlers.get(name)
        if handler is None:
            return self._failure(
                "Unknown action", InvalidInputError(f"Unknown action: {name}", field="name")
            )
        try:
            return handler(**dict(arguments or {}))
        except TypeError as exc:
            return self._failure(
                f"Invalid arguments for {name}",
                InvalidInputError(str(exc), field="arguments", value=dict(arguments or {})),
            )

    # ------------------------------------------------------------------
    # Pipeline
    # ------------------------------------------------------------------
    def _execute(
        self,
        kind: OperationKind,
        asset: str | Asset,
        amount: Amount,
        interest_rate_mode: InterestRateMode | int | None,
        beneficiary: Address | None,
        timeout: float | None,
    ) -> Response:
        label = asset.label if isinstance(asset, Asset) else str(asset)
        try:
            resolved = self.resolve_asset(asset)
            label = resolved.label
            decimals = resolved.decimals if resolved.decimals is not None else 0
            operation = Operation(
                kind=kind,
                asset=resolved,
                amount=to_base_units(amount, decimals),
                interest_rate_mode=interest_rate_mode,
                beneficiary=beneficiary,
            )

            builder = self._builder()
            operation = builder.validate(operation)
            if kind is OperationKind.BORROW:
                self._health.ensure_can_borrow(
                    operation.beneficiary or self._client.account_address,
                    operation.asset,
                    operation.amount,
                )

            request = builder.build(operation, self._gas.parameters_for(kind))
            result = self._submitter.submit(request, timeout=timeout)
        except LendingProtocolError as exc:
            logger.warning("%s of %s failed (%s): %s", kind.value, label, exc.kind.value, exc.message)
            return self._failure(f"Failed to {kind.value} {label}", exc)
        except Exception as exc:
            logger.exception("Unexpected %s failure", kind.value)
            return Response(
                success=False,
                message=f"Failed to {kind.value} {label}: {exc}",
                error=str(exc),
                error_kind=ErrorKind.UNKNOWN.value,
            )

        display_amount = format_amount(operation.amount, resolved.decimals)
        message = _SUCCESS_TEMPLATES[kind].format(amount=display_amount, asset=label)
        return Response(
            success=True,
            message=f"{message}. TX: {result.tx_hash}",
            transaction_hash=result.tx_hash,
            data={
                "kind": kind.value,
                "asset": operation.asset.address,
                "amount": operation.amount,
                "block_number": result.block_number,
            },
        )

    def resolve_asset(self, asset: str | Asset) -> Asset:
        """Resolve a symbol, address or :class:`Asset` to an asset with known decimals."""

        if isinstance(asset, Asset):
            resolved = asset
        elif isinstance(asset, str) and asset.strip():
            symbol_match = self._config.resolve_asset(asset.strip())
            if asset.strip().lower() == NATIVE_ASSET_ADDRESS.lower():
                resolved = Asset.native()
            elif symbol_match is not None:
                resolved = symbol_match
            else:
                address = normalise_address(asset.strip(), "asset")
                resolved = next(
                    (
                        known
                        for known in self._config.assets.values()
                        if known.address.lower() == address.lower()
                    ),
                    Asset(address=address),
                )
        else:
            raise InvalidInputError("Asset is required", field="asset", value=asset)

        if resolved.decimals is None:
            resolved = Asset(
                address=resolved.address,
                symbol=resolved.symbol,
                decimals=self._token_decimals(resolved.address),
            )
        return resolved

    def _token_decimals(self, address: Address) -> int:
        key = address.lower()
        if key not in self._decimals:
            try:
                (decimals,) = self._client.read_state(address, ERC20.DECIMALS, [])
            except Exception as exc:
                raise InvalidInputError(
                    f"Unable to read decimals for token {address}",
                    field="asset",
                    value=address,
                    details={"error": str(exc)},
                ) from exc
            self._decimals[key] = int(decimals)
        return self._decimals[key]

    def _builder(self) -> TransactionBuilder:
        return TransactionBuilder(
            pool_address=self._config.pool_address,
            account_address=self._client.account_address,
            gateway_address=self._config.gateway_address,
            referral_code=self._config.referral_code,
        )

    @staticmethod
    def _failure(prefix: str, exc: LendingProtocolError) -> Response:
        return Response(
            success=False,
            message=f"{prefix}: {exc.message}",
            error=exc.message,
            error_kind=exc.kind.value,
            data=dict(exc.details) or None,
        )


def _coerce_rate_mode(value: Any) -> Any:
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return value

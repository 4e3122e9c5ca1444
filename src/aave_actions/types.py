"""Type definitions and data models for lending actions."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum, IntEnum
from typing import Any

from .constants import NATIVE_ASSET_ADDRESS, NATIVE_ASSET_DECIMALS, NATIVE_ASSET_SYMBOL


class OperationKind(str, Enum):
    """Debt and collateral operations supported by the pool."""

    SUPPLY = "supply"
    BORROW = "borrow"
    REPAY = "repay"
    WITHDRAW = "withdraw"


class InterestRateMode(IntEnum):
    """Borrow rate type."""

    STABLE = 1
    VARIABLE = 2


class RiskStatus(str, Enum):
    HIGH_RISK = "HIGH_RISK"
    MEDIUM_RISK = "MEDIUM_RISK"
    HEALTHY = "HEALTHY"


Address = str  # Ethereum address
Wei = int  # Amount in an asset's base units


@dataclass(frozen=True)
class Asset:
    """An ERC-20 reserve or the chain's native coin, identified by address."""

    address: Address
    symbol: str | None = None
    decimals: int | None = None

    @classmethod
    def native(cls) -> Asset:
        return cls(
            address=NATIVE_ASSET_ADDRESS,
            symbol=NATIVE_ASSET_SYMBOL,
            decimals=NATIVE_ASSET_DECIMALS,
        )

    @property
    def is_native(self) -> bool:
        return self.address.lower() == NATIVE_ASSET_ADDRESS.lower()

    @property
    def label(self) -> str:
        return self.symbol or self.address

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Asset):
            return NotImplemented
        return self.address.lower() == other.address.lower()

    def __hash__(self) -> int:
        return hash(self.address.lower())


@dataclass(frozen=True)
class Operation:
    """A single requested pool operation, amounts in base units."""

    kind: OperationKind
    asset: Asset
    amount: Wei
    interest_rate_mode: InterestRateMode | int | None = None
    beneficiary: Address | None = None


@dataclass(frozen=True)
class GasParameters:
    """Gas limit and EIP-1559 fee caps; ``None`` fees defer to the network."""

    gas_limit: int
    max_fee_per_gas: int | None = None
    max_priority_fee_per_gas: int | None = None

    @property
    def uses_network_fees(self) -> bool:
        return self.max_fee_per_gas is None or self.max_priority_fee_per_gas is None


@dataclass(frozen=True)
class TransactionRequest:
    """Fully determined, unsigned transaction."""

    target: Address
    data: bytes
    value: Wei
    gas_limit: int
    max_fee_per_gas: int | None
    max_priority_fee_per_gas: int | None
    kind: OperationKind
    operation: Operation

    @property
    def data_hex(self) -> str:
        return "0x" + self.data.hex()


@dataclass(frozen=True)
class TransactionResult:
    """Terminal outcome of a submitted transaction."""

    tx_hash: str
    confirmed: bool
    block_number: int | None = None
    receipt: dict[str, Any] | None = None


@dataclass(frozen=True)
class AccountPosition:
    """Snapshot of ``getUserAccountData``; valid only at ``read_at``."""

    total_collateral_base: int
    total_debt_base: int
    available_borrows_base: int
    liquidation_threshold: Decimal
    loan_to_value: Decimal
    health_factor: Decimal
    risk_status: RiskStatus
    read_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def as_dict(self) -> dict[str, Any]:
        return {
            "totalCollateralBase": self.total_collateral_base,
            "totalDebtBase": self.total_debt_base,
            "availableBorrowsBase": self.available_borrows_base,
            "currentLiquidationThreshold": float(self.liquidation_threshold),
            "ltv": float(self.loan_to_value),
            "healthFactor": float(self.health_factor),
            "riskStatus": self.risk_status.value,
            "timestamp": self.read_at.isoformat(),
        }


@dataclass
class Response:
    """Result handed back to the calling agent for every action."""

    success: bool
    message: str
    transaction_hash: str | None = None
    error: str | None = None
    error_kind: str | None = None
    data: dict[str, Any] | None = None

    def __str__(self) -> str:
        return self.message

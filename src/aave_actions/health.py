"""Account position reads and borrow preconditions."""

from __future__ import annotations

import logging
from decimal import Decimal

from .abi import Pool, PriceOracle
from .base import ChainClient
from .constants import HEALTH_FACTOR_DECIMALS, MAX_UINT256, PERCENTAGE_FACTOR
from .errors import ErrorClassifier, ErrorPhase
from .exceptions import (
    InsufficientCollateralError,
    InvalidInputError,
    LendingProtocolError,
    UnknownProtocolError,
)
from .types import AccountPosition, Address, Asset, RiskStatus
from .utils import normalise_address

logger = logging.getLogger(__name__)

HIGH_RISK_BELOW = Decimal(1)
MEDIUM_RISK_BELOW = Decimal("1.5")


def classify_risk(health_factor: Decimal | float) -> RiskStatus:
    """Classify a health factor; boundary values fall on the lower-risk side."""
    value = Decimal(str(health_factor))
    if value.is_nan():
        raise InvalidInputError(
            "Health factor is not a number", field="health_factor", value=health_factor
        )
    if value < HIGH_RISK_BELOW:
        return RiskStatus.HIGH_RISK
    if value < MEDIUM_RISK_BELOW:
        return RiskStatus.MEDIUM_RISK
    return RiskStatus.HEALTHY


class AccountHealthChecker:
    """Read ``getUserAccountData`` and enforce borrowing capacity."""

    def __init__(
        self,
        client: ChainClient,
        *,
        pool_address: Address,
        oracle_address: Address | None = None,
        wrapped_native_address: Address | None = None,
        classifier: ErrorClassifier | None = None,
    ) -> None:
        self._client = client
        self._pool = normalise_address(pool_address, "pool_address")
        self._oracle = oracle_address
        self._wrapped_native = wrapped_native_address
        self._classifier = classifier or ErrorClassifier()

    def get_position(self, account: Address) -> AccountPosition:
        account = normalise_address(account, "user_address")
        try:
            raw = self._client.read_state(self._pool, Pool.GET_USER_ACCOUNT_DATA, [account])
        except Exception as exc:
            raise self._classifier.classify(exc, phase=ErrorPhase.READ, account=account) from exc

        collateral, debt, available, threshold, ltv, health_factor = (int(v) for v in raw)
        hf = (
            Decimal(health_factor).scaleb(-HEALTH_FACTOR_DECIMALS)
            if health_factor != MAX_UINT256
            else Decimal("Infinity")
        )
        return AccountPosition(
            total_collateral_base=collateral,
            total_debt_base=debt,
            available_borrows_base=available,
            liquidation_threshold=Decimal(threshold) / PERCENTAGE_FACTOR,
            loan_to_value=Decimal(ltv) / PERCENTAGE_FACTOR,
            health_factor=hf,
            risk_status=classify_risk(hf),
        )

    def ensure_can_borrow(self, account: Address, asset: Asset, amount: int) -> AccountPosition:
        """Raise ``InsufficientCollateralError`` if ``amount`` exceeds borrowing capacity."""

        position = self.get_position(account)
        requested = self._value_in_base_currency(asset, amount)

        if requested > position.available_borrows_base:
            raise InsufficientCollateralError(
                f"Cannot borrow {amount} base units of {asset.label}. "
                f"Maximum available to borrow is {position.available_borrows_base} "
                f"(requested {requested})",
                requested=requested,
                available=position.available_borrows_base,
                details={"account": account, "health_factor": str(position.health_factor)},
            )

        if position.risk_status is not RiskStatus.HEALTHY:
            logger.warning(
                "Borrowing with health factor %s (%s) for %s",
                position.health_factor,
                position.risk_status.value,
                account,
            )
        return position

    def _value_in_base_currency(self, asset: Asset, amount: int) -> int:
        """Express ``amount`` in the pool's base currency when an oracle is configured."""

        if self._oracle is None:
            return amount

        if asset.decimals is None:
            raise InvalidInputError(
                "Asset decimals are required to price a borrow", field="asset", value=asset.address
            )

        priced_address = asset.address
        if asset.is_native:
            if self._wrapped_native is None:
                raise InvalidInputError(
                    "Pricing the native asset requires a wrapped native token address",
                    field="wrapped_native_address",
                )
            priced_address = self._wrapped_native

        try:
            (price,) = self._client.read_state(
                self._oracle, PriceOracle.GET_ASSET_PRICE, [priced_address]
            )
        except LendingProtocolError:
            raise
        except Exception as exc:
            raise UnknownProtocolError(
                f"Failed to read oracle price for {asset.label}: {exc}",
                details={"error": str(exc), "oracle": self._oracle},
            ) from exc

        # ceiling division: the valuation never understates the borrow
        return -(-int(amount) * int(price) // 10**asset.decimals)

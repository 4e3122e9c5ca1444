"""Classification of node and contract failures into the action error taxonomy.

Classification is best effort. Structured revert reasons are decoded first;
message substrings are only a fallback, and their wording differs between
node implementations.
"""

from __future__ import annotations

import logging
import re
from enum import Enum
from typing import Any

from eth_abi import decode as abi_decode
from hexbytes import HexBytes
from web3.exceptions import ContractLogicError

from .constants import ProtocolErrorCode
from .exceptions import (
    InsufficientCollateralError,
    LendingProtocolError,
    LiquidationRiskError,
    SubmissionError,
    UnknownProtocolError,
    UnregisteredAccountError,
)

logger = logging.getLogger(__name__)

# keccak("Error(string)")[:4]
ERROR_STRING_SELECTOR = bytes.fromhex("08c379a0")

_REVERT_REASON = re.compile(r"execution reverted:?\s*(?P<reason>[^\s,'\"]*)", re.IGNORECASE)

_COLLATERAL_CODES = {
    ProtocolErrorCode.COLLATERAL_BALANCE_IS_ZERO.value,
    ProtocolErrorCode.COLLATERAL_CANNOT_COVER_NEW_BORROW.value,
    ProtocolErrorCode.LTV_VALIDATION_FAILED.value,
}
_HEALTH_FACTOR_CODES = {ProtocolErrorCode.HEALTH_FACTOR_LOWER_THAN_LIQUIDATION_THRESHOLD.value}

_COLLATERAL_HINTS = ("availableborrow", "insufficient collateral", "collateral cannot cover")
_HEALTH_FACTOR_HINTS = ("health factor", "healthfactor")


class ErrorPhase(str, Enum):
    """Pipeline stage in which a failure was observed."""

    READ = "read"
    SIMULATE = "simulate"
    SUBMIT = "submit"
    CONFIRM = "confirm"


class ErrorClassifier:
    """Map raw failures onto :class:`LendingProtocolError` subclasses."""

    def classify(
        self,
        error: BaseException | str,
        *,
        phase: ErrorPhase,
        account: str | None = None,
        tx_hash: str | None = None,
    ) -> LendingProtocolError:
        if isinstance(error, LendingProtocolError):
            return error

        message = _error_text(error)
        details: dict[str, Any] = {"error": message, "phase": phase.value}
        if tx_hash:
            details["tx_hash"] = tx_hash

        reason = self.revert_reason(error)
        if reason is not None:
            details["revert_reason"] = reason
            if reason in _COLLATERAL_CODES:
                return InsufficientCollateralError(
                    f"Insufficient collateral (protocol error {reason}): {message}",
                    details=details,
                )
            if reason in _HEALTH_FACTOR_CODES:
                return LiquidationRiskError(
                    f"Action would risk liquidation (protocol error {reason}): {message}",
                    details=details,
                )

        lowered = message.lower()
        if any(hint in lowered for hint in _COLLATERAL_HINTS):
            return InsufficientCollateralError(f"Insufficient collateral: {message}", details=details)
        if any(hint in lowered for hint in _HEALTH_FACTOR_HINTS):
            return LiquidationRiskError(f"Action would risk liquidation: {message}", details=details)

        if phase is ErrorPhase.READ and (reason is not None or "execution reverted" in lowered):
            return UnregisteredAccountError(
                "Contract execution failed - the address may not be registered with the pool",
                account=account,
                details=details,
            )

        if phase is ErrorPhase.SUBMIT:
            return SubmissionError(
                f"Node rejected transaction: {message}", tx_hash=tx_hash, details=details
            )

        logger.debug("Unclassified %s failure: %s", phase.value, message)
        return UnknownProtocolError(message, tx_hash=tx_hash, details=details)

    @staticmethod
    def revert_reason(error: BaseException | str) -> str | None:
        """Extract the revert reason string, preferring ABI-encoded revert data."""

        if isinstance(error, ContractLogicError):
            decoded = _decode_error_string(error.data)
            if decoded is not None:
                return decoded

        match = _REVERT_REASON.search(_error_text(error))
        if match is None:
            return None
        return match.group("reason") or None


def _decode_error_string(data: Any) -> str | None:
    if not data or not isinstance(data, str | bytes | bytearray):
        return None
    try:
        raw = bytes(HexBytes(data))
    except (TypeError, ValueError):
        return None
    if not raw.startswith(ERROR_STRING_SELECTOR):
        return None
    try:
        (reason,) = abi_decode(["string"], raw[4:])
    except Exception:
        return None
    return reason or None


def _error_text(error: BaseException | str) -> str:
    if isinstance(error, str):
        return error
    # web3 exceptions keep the node message apart from their args tuple
    message = getattr(error, "message", None)
    if isinstance(message, str) and message:
        return message
    return str(error) or type(error).__name__

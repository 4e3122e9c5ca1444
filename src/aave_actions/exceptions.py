"""Exception hierarchy for lending protocol actions."""

from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    """Closed set of failure categories reported to the calling agent."""

    INVALID_INPUT = "invalid_input"
    INSUFFICIENT_COLLATERAL = "insufficient_collateral"
    LIQUIDATION_RISK = "liquidation_risk"
    UNREGISTERED_ACCOUNT = "unregistered_account"
    SUBMISSION_ERROR = "submission_error"
    TIMEOUT = "timeout"
    UNKNOWN = "unknown"


class LendingProtocolError(Exception):
    """Base exception for all lending protocol errors."""

    kind: ErrorKind = ErrorKind.UNKNOWN

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class InvalidInputError(LendingProtocolError):
    """Raised when an operation or configuration value fails validation."""

    kind = ErrorKind.INVALID_INPUT

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: Any | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.field = field
        self.value = value


class InsufficientCollateralError(LendingProtocolError):
    """Raised when a borrow exceeds the account's borrowing capacity."""

    kind = ErrorKind.INSUFFICIENT_COLLATERAL

    def __init__(
        self,
        message: str,
        requested: int | None = None,
        available: int | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.requested = requested
        self.available = available


class LiquidationRiskError(LendingProtocolError):
    """Raised when the protocol refuses an action that would breach the health factor."""

    kind = ErrorKind.LIQUIDATION_RISK


class UnregisteredAccountError(LendingProtocolError):
    """Raised when position data cannot be read for an account."""

    kind = ErrorKind.UNREGISTERED_ACCOUNT

    def __init__(self, message: str, account: str | None = None, details: dict | None = None):
        super().__init__(message, details)
        self.account = account


class SubmissionError(LendingProtocolError):
    """Raised when the node rejects a transaction broadcast."""

    kind = ErrorKind.SUBMISSION_ERROR

    def __init__(self, message: str, tx_hash: str | None = None, details: dict | None = None):
        super().__init__(message, details)
        self.tx_hash = tx_hash


class TransactionTimeoutError(LendingProtocolError):
    """Raised when no confirmation is observed before the deadline.

    The transaction has been broadcast and may still be mined.
    """

    kind = ErrorKind.TIMEOUT

    def __init__(
        self,
        message: str,
        tx_hash: str | None = None,
        timeout: float | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.tx_hash = tx_hash
        self.timeout = timeout


class UnknownProtocolError(LendingProtocolError):
    """Raised for failures that match no known category."""

    kind = ErrorKind.UNKNOWN

    def __init__(self, message: str, tx_hash: str | None = None, details: dict | None = None):
        super().__init__(message, details)
        self.tx_hash = tx_hash


class NetworkError(LendingProtocolError):
    """Raised when network/connection issues occur."""

    def __init__(
        self,
        message: str,
        endpoint: str | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.endpoint = endpoint

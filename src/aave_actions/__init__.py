"""Aave actions - transaction layer for agent-driven lending operations.

This library turns supply, borrow, repay and withdraw requests into
validated, risk-checked Aave V3 transactions signed by a single configured
account, and reports the outcome in a form an agent can act on.
"""

from .actions import TOOL_SPECS, LendingActions
from .base import ChainClient
from .builder import TransactionBuilder
from .config import LendingClientConfig
from .errors import ErrorClassifier, ErrorPhase
from .evm import TransactionSubmitter, Web3Connections
from .exceptions import (
    ErrorKind,
    InsufficientCollateralError,
    InvalidInputError,
    LendingProtocolError,
    LiquidationRiskError,
    NetworkError,
    SubmissionError,
    TransactionTimeoutError,
    UnknownProtocolError,
    UnregisteredAccountError,
)
from .gas import DEFAULT_GAS_TABLE, GasPolicy
from .health import AccountHealthChecker, classify_risk
from .types import (
    AccountPosition,
    Address,
    Asset,
    GasParameters,
    InterestRateMode,
    Operation,
    OperationKind,
    Response,
    RiskStatus,
    TransactionRequest,
    TransactionResult,
    Wei,
)
from .utils import from_base_units, serialise_receipt, to_base_units

__version__ = "0.1.0"

__all__ = [
    # Entry points
    "LendingActions",
    "LendingClientConfig",
    "TOOL_SPECS",
    # Components
    "ChainClient",
    "Web3Connections",
    "TransactionBuilder",
    "AccountHealthChecker",
    "GasPolicy",
    "DEFAULT_GAS_TABLE",
    "TransactionSubmitter",
    "ErrorClassifier",
    "ErrorPhase",
    # Types and enums
    "Asset",
    "Operation",
    "OperationKind",
    "InterestRateMode",
    "RiskStatus",
    "AccountPosition",
    "GasParameters",
    "TransactionRequest",
    "TransactionResult",
    "Response",
    "Address",
    "Wei",
    # Exceptions
    "ErrorKind",
    "LendingProtocolError",
    "InvalidInputError",
    "InsufficientCollateralError",
    "LiquidationRiskError",
    "UnregisteredAccountError",
    "SubmissionError",
    "TransactionTimeoutError",
    "UnknownProtocolError",
    "NetworkError",
    # Utility functions
    "to_base_units",
    "from_base_units",
    "serialise_receipt",
    "classify_risk",
]

"""Web3-backed chain client and transaction submission."""

from .connections import Web3Connections
from .transactions import TransactionSubmitter

__all__ = ["Web3Connections", "TransactionSubmitter"]

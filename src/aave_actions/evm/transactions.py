"""Transaction submission and receipt handling for lending actions."""

from __future__ import annotations

import logging

from web3.exceptions import TimeExhausted

from ..base import ChainClient
from ..errors import ErrorClassifier, ErrorPhase
from ..exceptions import TransactionTimeoutError
from ..types import TransactionRequest, TransactionResult
from ..utils import serialise_receipt

logger = logging.getLogger(__name__)


class TransactionSubmitter:
    """Sign, broadcast and await confirmation of a single request.

    Nothing is retried. Once ``sign_and_send`` succeeds the state change is
    irreversible even if the receipt wait later times out.
    """

    def __init__(
        self,
        client: ChainClient,
        *,
        receipt_timeout: float,
        simulate: bool = True,
        classifier: ErrorClassifier | None = None,
    ) -> None:
        self._client = client
        self._receipt_timeout = receipt_timeout
        self._simulate = simulate
        self._classifier = classifier or ErrorClassifier()

    def submit(self, request: TransactionRequest, *, timeout: float | None = None) -> TransactionResult:
        action = request.kind.value

        if self._simulate:
            try:
                self._client.simulate(request)
            except Exception as exc:
                error = self._classifier.classify(exc, phase=ErrorPhase.SIMULATE)
                logger.warning("Simulation of %s failed: %s", action, error.message)
                raise error from exc

        logger.info("Dispatching %s to %s (value=%d)", action, request.target, request.value)
        try:
            tx_hash = self._client.sign_and_send(request)
        except Exception as exc:
            error = self._classifier.classify(exc, phase=ErrorPhase.SUBMIT)
            logger.warning("Broadcast of %s rejected: %s", action, error.message)
            raise error from exc

        logger.info("Transaction sent for action=%s hash=%s", action, tx_hash)

        deadline = timeout if timeout is not None else self._receipt_timeout
        try:
            receipt = self._client.wait_for_receipt(tx_hash, deadline)
        except TimeExhausted as exc:
            raise TransactionTimeoutError(
                f"Transaction {tx_hash} was broadcast but not confirmed within {deadline}s; "
                "it may still be mined",
                tx_hash=tx_hash,
                timeout=deadline,
                details={"error": str(exc)},
            ) from exc
        except Exception as exc:
            raise self._classifier.classify(exc, phase=ErrorPhase.CONFIRM, tx_hash=tx_hash) from exc

        block_number = receipt.get("blockNumber")
        if receipt.get("status", 1) == 0:
            error = self._classifier.classify(
                f"Transaction {tx_hash} reverted in block {block_number}",
                phase=ErrorPhase.CONFIRM,
                tx_hash=tx_hash,
            )
            logger.warning("Transaction reverted for action=%s hash=%s", action, tx_hash)
            raise error

        logger.info(
            "Transaction confirmed for action=%s hash=%s block=%s", action, tx_hash, block_number
        )
        return TransactionResult(
            tx_hash=tx_hash,
            confirmed=True,
            block_number=block_number,
            receipt=serialise_receipt(receipt),
        )

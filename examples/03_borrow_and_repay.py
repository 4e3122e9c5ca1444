"""Example: Borrow a configured ERC-20 at the variable rate and repay it.

Repaying an ERC-20 requires the pool to be approved to pull the token.
"""

from __future__ import annotations

import logging
import os

from dotenv import load_dotenv

from aave_actions import InterestRateMode, LendingActions, LendingClientConfig, Web3Connections

load_dotenv()

logging.basicConfig(
    level=os.getenv("LOGLEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

logger = logging.getLogger("borrow_and_repay")

ASSET = os.getenv("ASSET", "DAI")
AMOUNT = os.getenv("AMOUNT", "1")


def main() -> None:
    config = LendingClientConfig.from_env()

    connections = Web3Connections(config)
    connections.connect()
    try:
        actions = LendingActions(config, connections)

        borrow = actions.borrow(ASSET, AMOUNT, InterestRateMode.VARIABLE)
        if not borrow.success:
            logger.error("Borrow failed (%s): %s", borrow.error_kind, borrow.error)
            return
        logger.info(borrow.message)

        repay = actions.repay(ASSET, AMOUNT, InterestRateMode.VARIABLE)
        if repay.success:
            logger.info(repay.message)
        else:
            logger.error("Repay failed (%s): %s", repay.error_kind, repay.error)
    finally:
        connections.disconnect()


if __name__ == "__main__":
    main()

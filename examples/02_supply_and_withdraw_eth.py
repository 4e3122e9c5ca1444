"""Example: Supply native ETH through the gateway, then withdraw it again.

Withdrawing through the gateway requires the gateway to be approved to pull
the account's aWETH beforehand.
"""

from __future__ import annotations

import logging
import os

from dotenv import load_dotenv

from aave_actions import LendingActions, LendingClientConfig, Web3Connections

load_dotenv()

logging.basicConfig(
    level=os.getenv("LOGLEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

logger = logging.getLogger("supply_and_withdraw")

AMOUNT = os.getenv("AMOUNT", "0.01")  # ETH


def main() -> None:
    config = LendingClientConfig.from_env()
    if config.gateway_address is None:
        raise ValueError("AAVE_GATEWAY_ADDRESS must be set for native ETH operations")

    connections = Web3Connections(config)
    connections.connect()
    try:
        actions = LendingActions(config, connections)

        logger.info("Supplying %s ETH", AMOUNT)
        supply = actions.supply("ETH", AMOUNT, timeout=180)
        if not supply.success:
            logger.error("Supply failed (%s): %s", supply.error_kind, supply.error)
            raise RuntimeError("Supply failed, aborting")
        logger.info(supply.message)

        logger.info(actions.get_user_data().message)

        withdraw = actions.withdraw("ETH", AMOUNT, timeout=180)
        if withdraw.success:
            logger.info(withdraw.message)
        else:
            logger.error("Withdraw failed (%s): %s", withdraw.error_kind, withdraw.error)
    finally:
        connections.disconnect()


if __name__ == "__main__":
    main()

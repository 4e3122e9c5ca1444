"""Example: Read the signing account's pool position and risk status."""

from __future__ import annotations

import json
import logging
import os
import sys

from dotenv import load_dotenv

from aave_actions import LendingActions, LendingClientConfig, Web3Connections

load_dotenv()

logging.basicConfig(
    level=os.getenv("LOGLEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

logger = logging.getLogger("account_health")


def main() -> None:
    config = LendingClientConfig.from_env()

    connections = Web3Connections(config)
    connections.connect()
    try:
        actions = LendingActions(config, connections)
        user = sys.argv[1] if len(sys.argv) > 1 else None
        response = actions.get_user_data(user)
        if not response.success:
            logger.error("Account query failed (%s): %s", response.error_kind, response.error)
            return

        logger.info(response.message)
        print(json.dumps(response.data, indent=2))
    finally:
        connections.disconnect()


if __name__ == "__main__":
    main()

"""Constants and mappings for Aave V3 lending actions."""

from enum import Enum

# Sentinel used across EVM tooling to denote the chain's native coin
NATIVE_ASSET_ADDRESS = "0xEeeeeEeeeEeEeeEeEeEeeEEEeeeeEeeeeeeeEEeE"
NATIVE_ASSET_SYMBOL = "ETH"
NATIVE_ASSET_DECIMALS = 18

DEFAULT_REFERRAL_CODE = 0

# Scaling used by Pool.getUserAccountData
HEALTH_FACTOR_DECIMALS = 18
PERCENTAGE_FACTOR = 10_000

# Health factor reported for accounts without debt
MAX_UINT256 = 2**256 - 1

GWEI = 10**9


class ProtocolErrorCode(str, Enum):
    """Subset of Aave V3 ``Errors.sol`` revert reasons relevant to risk checks.

    https://github.com/aave/aave-v3-core/blob/master/contracts/protocol/libraries/helpers/Errors.sol
    """

    INVALID_AMOUNT = "26"
    COLLATERAL_BALANCE_IS_ZERO = "34"
    HEALTH_FACTOR_LOWER_THAN_LIQUIDATION_THRESHOLD = "35"
    COLLATERAL_CANNOT_COVER_NEW_BORROW = "36"
    LTV_VALIDATION_FAILED = "57"

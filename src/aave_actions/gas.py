"""Per-operation gas and fee policy."""

from __future__ import annotations

from collections.abc import Mapping

from .constants import GWEI
from .types import GasParameters, OperationKind

# Fixed limits and fee caps applied instead of network estimation
DEFAULT_GAS_TABLE: Mapping[OperationKind, GasParameters] = {
    OperationKind.SUPPLY: GasParameters(
        gas_limit=750_000,
        max_fee_per_gas=150 * GWEI,
        max_priority_fee_per_gas=8 * GWEI,
    ),
    OperationKind.BORROW: GasParameters(
        gas_limit=750_000,
        max_fee_per_gas=150 * GWEI,
        max_priority_fee_per_gas=8 * GWEI,
    ),
    OperationKind.WITHDRAW: GasParameters(
        gas_limit=500_000,
        max_fee_per_gas=50 * GWEI,
        max_priority_fee_per_gas=2 * GWEI,
    ),
    # Fees left to network estimation unless overridden
    OperationKind.REPAY: GasParameters(gas_limit=750_000),
}


class GasPolicy:
    """Resolve gas parameters for an operation kind from a fixed table."""

    def __init__(self, overrides: Mapping[OperationKind, GasParameters] | None = None) -> None:
        table = dict(DEFAULT_GAS_TABLE)
        table.update(overrides or {})
        self._table = table

    def parameters_for(self, kind: OperationKind) -> GasParameters:
        return self._table[OperationKind(kind)]

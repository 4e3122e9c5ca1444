"""Utility functions for lending actions."""

from collections.abc import Mapping, Sequence
from decimal import Decimal, InvalidOperation, localcontext
from typing import Any

from hexbytes import HexBytes
from web3 import Web3

from .exceptions import InvalidInputError

# largest power of ten that fits in a uint256
MAX_UINT256_EXPONENT = 77


def _exact_precision(value: Decimal, decimals: int) -> int:
    # enough digits that scaling by 10**decimals never rounds
    return max(28, len(value.as_tuple().digits) + abs(decimals) + 2)


def to_base_units(amount: str | int | float | Decimal, decimals: int) -> int:
    """Convert a human-readable amount into an integer of base units."""
    if isinstance(amount, bool):
        raise InvalidInputError("Amount must be numeric", field="amount", value=amount)

    try:
        value = Decimal(str(amount).strip())
    except (InvalidOperation, ValueError) as exc:
        raise InvalidInputError(
            f"Invalid amount: {amount!r}", field="amount", value=amount
        ) from exc

    if not value.is_finite():
        raise InvalidInputError("Amount must be finite", field="amount", value=amount)
    if value and value.adjusted() + decimals > MAX_UINT256_EXPONENT:
        raise InvalidInputError("Amount exceeds uint256", field="amount", value=amount)

    with localcontext() as ctx:
        ctx.prec = _exact_precision(value, decimals)
        scaled = value.scaleb(decimals)
        if scaled != scaled.to_integral_value():
            raise InvalidInputError(
                f"Amount {amount} has more than {decimals} decimal places",
                field="amount",
                value=amount,
            )
        return int(scaled)


def from_base_units(amount: int, decimals: int) -> Decimal:
    """Convert base units back to a Decimal for display."""
    value = Decimal(amount)
    with localcontext() as ctx:
        ctx.prec = _exact_precision(value, decimals)
        return value.scaleb(-decimals).normalize()


def format_amount(amount: int, decimals: int | None) -> str:
    if decimals is None:
        return str(amount)
    return format(from_base_units(amount, decimals), "f")


def normalise_address(value: Any, field: str = "address") -> str:
    """Return the checksum form of ``value`` or raise ``InvalidInputError``."""
    if not isinstance(value, str) or not Web3.is_address(value):
        raise InvalidInputError(f"Invalid address: {value!r}", field=field, value=value)
    return Web3.to_checksum_address(value)


def serialise_receipt(receipt: Any) -> Any:
    """Serialise web3 receipt objects into JSON-friendly structures."""
    if receipt is None:
        return None
    if isinstance(receipt, Mapping):
        return {key: serialise_receipt(value) for key, value in receipt.items()}
    if isinstance(receipt, Sequence) and not isinstance(
        receipt, str | bytes | bytearray | HexBytes
    ):
        return [serialise_receipt(item) for item in receipt]
    if isinstance(receipt, bytes | bytearray | HexBytes):
        return HexBytes(receipt).to_0x_hex()
    return receipt

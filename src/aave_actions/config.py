"""Configuration containers for the lending action client."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field

from dotenv import load_dotenv

from .constants import DEFAULT_REFERRAL_CODE, NATIVE_ASSET_SYMBOL
from .exceptions import InvalidInputError
from .types import Asset, GasParameters, OperationKind
from .utils import normalise_address

DEFAULT_REQUEST_TIMEOUT = 10.0
DEFAULT_RECEIPT_TIMEOUT = 120.0

REQUIRED_ENV_VARS = (
    "AAVE_PRIVATE_KEY",
    "AAVE_RPC_URL",
    "AAVE_CHAIN_ID",
    "AAVE_POOL_ADDRESS",
)


@dataclass(frozen=True)
class LendingClientConfig:
    """Aggregated configuration used to construct the lending action client."""

    private_key: str = field(repr=False)
    rpc_url: str
    chain_id: int
    pool_address: str
    gateway_address: str | None = None
    oracle_address: str | None = None
    wrapped_native_address: str | None = None
    referral_code: int = DEFAULT_REFERRAL_CODE
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    receipt_timeout: float = DEFAULT_RECEIPT_TIMEOUT
    simulate_transactions: bool = True
    gas_overrides: Mapping[OperationKind, GasParameters] = field(default_factory=dict)
    assets: Mapping[str, Asset] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "pool_address", normalise_address(self.pool_address, "pool_address"))
        for name in ("gateway_address", "oracle_address", "wrapped_native_address"):
            value = getattr(self, name)
            if value is not None:
                object.__setattr__(self, name, normalise_address(value, name))
        if not 0 <= self.referral_code < 2**16:
            raise InvalidInputError(
                "Referral code must fit in uint16", field="referral_code", value=self.referral_code
            )
        if self.receipt_timeout <= 0:
            raise InvalidInputError(
                "Receipt timeout must be positive",
                field="receipt_timeout",
                value=self.receipt_timeout,
            )

    def resolve_asset(self, symbol: str) -> Asset | None:
        """Look up a configured asset by symbol (case-insensitive)."""

        if symbol.upper() == NATIVE_ASSET_SYMBOL:
            return Asset.native()
        for key, asset in self.assets.items():
            if key.upper() == symbol.upper():
                return asset
        return None

    @classmethod
    def from_env(
        cls,
        environ: Mapping[str, str] | None = None,
        *,
        dotenv_path: str | None = None,
    ) -> LendingClientConfig:
        """Build a configuration from ``AAVE_*`` environment variables.

        When ``environ`` is omitted the process environment is used after
        loading a ``.env`` file, if one exists.
        """

        if environ is None:
            load_dotenv(dotenv_path)
            environ = os.environ

        missing = [name for name in REQUIRED_ENV_VARS if not environ.get(name)]
        if missing:
            raise InvalidInputError(
                f"Required environment variables are not set: {', '.join(missing)}",
                field="environment",
                value=missing,
            )

        def _optional(name: str) -> str | None:
            value = environ.get(name)
            return value.strip() if value and value.strip() else None

        chain_id = _parse_int(environ["AAVE_CHAIN_ID"], "AAVE_CHAIN_ID")
        referral = _optional("AAVE_REFERRAL_CODE")
        receipt_timeout = _optional("AAVE_RECEIPT_TIMEOUT")
        request_timeout = _optional("AAVE_REQUEST_TIMEOUT")
        simulate = _optional("AAVE_SIMULATE")
        assets = _optional("AAVE_ASSETS")

        return cls(
            private_key=environ["AAVE_PRIVATE_KEY"].strip(),
            rpc_url=environ["AAVE_RPC_URL"].strip(),
            chain_id=chain_id,
            pool_address=environ["AAVE_POOL_ADDRESS"].strip(),
            gateway_address=_optional("AAVE_GATEWAY_ADDRESS"),
            oracle_address=_optional("AAVE_ORACLE_ADDRESS"),
            wrapped_native_address=_optional("AAVE_WRAPPED_NATIVE_ADDRESS"),
            referral_code=(
                _parse_int(referral, "AAVE_REFERRAL_CODE") if referral else DEFAULT_REFERRAL_CODE
            ),
            receipt_timeout=(
                _parse_float(receipt_timeout, "AAVE_RECEIPT_TIMEOUT")
                if receipt_timeout
                else DEFAULT_RECEIPT_TIMEOUT
            ),
            request_timeout=(
                _parse_float(request_timeout, "AAVE_REQUEST_TIMEOUT")
                if request_timeout
                else DEFAULT_REQUEST_TIMEOUT
            ),
            simulate_transactions=(
                simulate.lower() not in {"0", "false", "no", "off"} if simulate else True
            ),
            assets=parse_asset_registry(assets) if assets else {},
        )


def parse_asset_registry(raw: str) -> dict[str, Asset]:
    """Parse ``SYMBOL:address[:decimals]`` entries separated by commas."""

    registry: dict[str, Asset] = {}
    for entry in raw.split(","):
        entry = entry.strip()
        if not entry:
            continue
        parts = [part.strip() for part in entry.split(":")]
        if len(parts) not in (2, 3) or not parts[0]:
            raise InvalidInputError(
                f"Invalid asset entry {entry!r}; expected SYMBOL:address[:decimals]",
                field="AAVE_ASSETS",
                value=entry,
            )
        symbol = parts[0].upper()
        decimals = _parse_int(parts[2], "AAVE_ASSETS") if len(parts) == 3 else None
        registry[symbol] = Asset(
            address=normalise_address(parts[1], "AAVE_ASSETS"),
            symbol=symbol,
            decimals=decimals,
        )
    return registry


def _parse_int(raw: str, name: str) -> int:
    try:
        return int(raw.strip(), 0)
    except ValueError as exc:
        raise InvalidInputError(f"{name} must be an integer", field=name, value=raw) from exc


def _parse_float(raw: str, name: str) -> float:
    try:
        return float(raw)
    except ValueError as exc:
        raise InvalidInputError(f"{name} must be a number", field=name, value=raw) from exc

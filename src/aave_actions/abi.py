"""Fixed contract fragments for the Aave V3 Pool, WrappedTokenGateway and oracle."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from eth_abi import decode as abi_decode
from eth_abi import encode as abi_encode
from web3 import Web3


@dataclass(frozen=True)
class ContractFunction:
    """A single contract function with its ABI input and output types."""

    name: str
    input_types: tuple[str, ...]
    output_types: tuple[str, ...] = ()

    @property
    def signature(self) -> str:
        return f"{self.name}({','.join(self.input_types)})"

    @property
    def selector(self) -> bytes:
        return bytes(Web3.keccak(text=self.signature)[:4])

    def encode_call(self, args: Sequence[Any]) -> bytes:
        """Return selector-prefixed calldata for ``args``."""

        if len(args) != len(self.input_types):
            raise ValueError(
                f"{self.signature} expects {len(self.input_types)} arguments, got {len(args)}"
            )
        return self.selector + abi_encode(list(self.input_types), list(args))

    def decode_output(self, data: bytes) -> tuple[Any, ...]:
        if not self.output_types:
            return tuple()
        return tuple(abi_decode(list(self.output_types), data))


class Pool:
    """IPool functions used by the action layer."""

    SUPPLY = ContractFunction("supply", ("address", "uint256", "address", "uint16"))
    BORROW = ContractFunction("borrow", ("address", "uint256", "uint256", "uint16", "address"))
    REPAY = ContractFunction("repay", ("address", "uint256", "uint256", "address"))
    WITHDRAW = ContractFunction("withdraw", ("address", "uint256", "address"))
    GET_USER_ACCOUNT_DATA = ContractFunction(
        "getUserAccountData",
        ("address",),
        ("uint256", "uint256", "uint256", "uint256", "uint256", "uint256"),
    )


class WrappedTokenGateway:
    """WrappedTokenGatewayV3 functions for native-asset positions."""

    DEPOSIT_ETH = ContractFunction("depositETH", ("address", "address", "uint16"))
    BORROW_ETH = ContractFunction("borrowETH", ("address", "uint256", "uint256", "uint16"))
    REPAY_ETH = ContractFunction("repayETH", ("address", "uint256", "uint256", "address"))
    WITHDRAW_ETH = ContractFunction("withdrawETH", ("address", "uint256", "address"))


class PriceOracle:
    GET_ASSET_PRICE = ContractFunction("getAssetPrice", ("address",), ("uint256",))


class ERC20:
    DECIMALS = ContractFunction("decimals", (), ("uint8",))

"""Type definitions and data models for the Rifi protocol SDK."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from eth_typing import HexStr

Address = str  # Checksummed EVM address
Mantissa = int  # Fixed-point integer scaled by 10 ** decimals
Amount = int | float | str | Decimal


@dataclass(frozen=True)
class NetworkDescriptor:
    """Chain a client is connected to, resolved once per client."""

    chain_id: int
    name: str


@dataclass(frozen=True)
class AssetDescriptor:
    """A token known to the protocol on one network."""

    symbol: str
    decimals: int
    address: Address | None
    is_wrapper: bool = False
    underlying_symbol: str | None = None
    name: str | None = None
    native: bool = False


@dataclass(frozen=True)
class VaultDescriptor:
    """Staking vault and the tokens it accepts and pays out."""

    name: str
    address: Address
    deposit_token: str
    reward_token: str
    reward_locker: str


@dataclass(frozen=True)
class CallSpecification:
    """A single contract invocation, built per call and discarded afterwards."""

    target_address: Address
    method: str
    parameters: tuple[Any, ...] = ()
    is_write: bool = False


@dataclass(frozen=True)
class Signature:
    """The v, r and s components of an EIP-712 signature."""

    v: int
    r: HexStr
    s: HexStr

    @classmethod
    def from_dict(cls, data: Any) -> Signature:
        if isinstance(data, Signature):
            return data
        if not isinstance(data, dict):
            raise TypeError(f"Unsupported signature container: {type(data)!r}")
        return cls(v=data.get("v"), r=data.get("r"), s=data.get("s"))

    def as_dict(self) -> dict[str, Any]:
        return {"v": self.v, "r": self.r, "s": self.s}


@dataclass(frozen=True)
class VestingSchedule:
    """One reward vesting schedule held by the reward locker."""

    start_block: int
    end_block: int
    quantity: int
    vested_quantity: int

    @classmethod
    def from_tuple(cls, raw: Any) -> VestingSchedule:
        if isinstance(raw, dict):
            return cls(
                start_block=int(raw["startBlock"]),
                end_block=int(raw["endBlock"]),
                quantity=int(raw["quantity"]),
                vested_quantity=int(raw["vestedQuantity"]),
            )
        start_block, end_block, quantity, vested_quantity = raw
        return cls(int(start_block), int(end_block), int(quantity), int(vested_quantity))

    @property
    def unvested(self) -> int:
        return self.quantity - self.vested_quantity


@dataclass(frozen=True)
class RewardBalances:
    """Vault reward position of an account, in reward-token mantissa."""

    pending: int
    vesting: int
    claimable: int

"""Rifi API - async Python SDK for the Rifi lending protocol.

Supply, borrow, redeem and repay against the protocol's markets, price
assets through its on-chain feed, manage governance delegation and stake
in reward vaults, all through a single :class:`Rifi` client.
"""

from .api import RifiAPI, get_support_tokens
from .client import Rifi
from .constants import CHAIN_ID_NAMES, Contract, get_net_name_with_chain_id
from .eth import CallDispatcher, CallOptions, PendingTransaction, RifiConfig, read, trx
from .exceptions import (
    ArgumentTypeError,
    NetworkError,
    RegistryError,
    RifiError,
    ValidationError,
)
from .governance import get_rifi_accrued, get_rifi_balance
from .registry import AssetRegistry, get_abi, get_address, load_default_registry
from .types import (
    Address,
    Amount,
    AssetDescriptor,
    Mantissa,
    NetworkDescriptor,
    RewardBalances,
    Signature,
    VaultDescriptor,
    VestingSchedule,
)
from .utils import to_fixed_point, to_human

__version__ = "0.1.0"

__all__ = [
    # Client
    "Rifi",
    "RifiAPI",
    "RifiConfig",
    "CallOptions",
    "CallDispatcher",
    "PendingTransaction",
    # Types
    "Address",
    "Amount",
    "AssetDescriptor",
    "Mantissa",
    "NetworkDescriptor",
    "RewardBalances",
    "Signature",
    "VaultDescriptor",
    "VestingSchedule",
    # Registry
    "AssetRegistry",
    "CHAIN_ID_NAMES",
    "Contract",
    "get_abi",
    "get_address",
    "get_net_name_with_chain_id",
    "load_default_registry",
    # Exceptions
    "RifiError",
    "ValidationError",
    "ArgumentTypeError",
    "RegistryError",
    "NetworkError",
    # Standalone helpers
    "get_rifi_accrued",
    "get_rifi_balance",
    "get_support_tokens",
    "read",
    "trx",
    "to_fixed_point",
    "to_human",
]

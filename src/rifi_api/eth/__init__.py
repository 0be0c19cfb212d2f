"""Provider, signer and contract-call plumbing for the Rifi client."""

from .config import CallOptions, RifiConfig
from .connections import ProviderConnections, build_account, build_web3
from .network import NetworkResolver
from .signature import parse_function_signature
from .transactions import CallDispatcher, PendingTransaction, read, trx

__all__ = [
    "CallDispatcher",
    "CallOptions",
    "NetworkResolver",
    "PendingTransaction",
    "ProviderConnections",
    "RifiConfig",
    "build_account",
    "build_web3",
    "parse_function_signature",
    "read",
    "trx",
]

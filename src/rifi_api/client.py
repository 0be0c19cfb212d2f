"""The Rifi client: one provider, one resolved network, every protocol operation."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

import requests
from web3 import AsyncWeb3
from web3.types import ChecksumAddress

from .api import RifiAPI
from .base import Options
from .cointroller import Cointroller
from .constants import DEFAULT_QUOTE_ASSET
from .eth.config import RifiConfig
from .eth.connections import ProviderConnections, ProviderSpec
from .eth.network import NetworkResolver
from .eth.transactions import CallDispatcher, PendingTransaction, read, trx
from .governance import (
    DEFAULT_DELEGATION_EXPIRY,
    Governance,
    get_rifi_accrued,
    get_rifi_balance,
)
from .lens import Lens
from .markets import Markets
from .price_feed import PriceFeed
from .registry import AssetRegistry, get_abi, get_address, load_default_registry
from .types import Amount, NetworkDescriptor, Signature
from .vault import Vault

logger = logging.getLogger(__name__)


class Rifi:
    """Async client for the Rifi lending protocol.

    ``provider`` may be an ``AsyncWeb3`` instance, an async web3 provider
    (such as an injected wallet), a JSON-RPC URL, or a network name with a
    default public endpoint. Signing uses ``config.private_key`` or
    ``config.mnemonic`` when set, otherwise the provider's own accounts.

    The chain id is probed once; every operation waits for that probe and
    uses the resolved network to look up addresses in the deployment table.

    The bundled deployment table only covers the local development chain
    (chain ids 1337 and 31337). On any other network, including the default
    ``"mainnet"`` endpoint, pass ``registry=`` or set
    ``config.deployments_path`` to a table listing that network; otherwise
    protocol operations raise ``RegistryError``.
    """

    # Standalone helpers that build their own provider from options
    read = staticmethod(read)
    trx = staticmethod(trx)
    get_rifi_balance = staticmethod(get_rifi_balance)
    get_rifi_accrued = staticmethod(get_rifi_accrued)
    get_address = staticmethod(get_address)
    get_abi = staticmethod(get_abi)

    def __init__(
        self,
        provider: ProviderSpec = "mainnet",
        config: RifiConfig | None = None,
        *,
        registry: AssetRegistry | None = None,
        session: requests.Session | None = None,
    ) -> None:
        config = config or RifiConfig()
        if registry is None:
            registry = (
                AssetRegistry.from_file(config.deployments_path)
                if config.deployments_path
                else load_default_registry()
            )

        self._config = config
        self._registry = registry
        self._connections = ProviderConnections(provider, config)
        self._resolver = NetworkResolver(self._connections.web3, config.default_network_name)
        self._dispatcher = CallDispatcher(
            self._connections,
            request_timeout=config.request_timeout,
            receipt_timeout=config.receipt_timeout,
        )

        parts = (config, self._connections, self._resolver, registry, self._dispatcher)
        self._markets = Markets(*parts)
        self._cointroller = Cointroller(*parts)
        self._price_feed = PriceFeed(*parts)
        self._governance = Governance(*parts)
        self._lens = Lens(*parts)
        self.vault = Vault(*parts)
        self.api = RifiAPI(
            session, base_url=config.api_base_url, request_timeout=config.request_timeout
        )

    # ------------------------------------------------------------------
    # Connection state
    # ------------------------------------------------------------------
    @property
    def web3(self) -> AsyncWeb3:
        return self._connections.web3

    @property
    def registry(self) -> AssetRegistry:
        return self._registry

    @property
    def network(self) -> NetworkDescriptor | None:
        return self._resolver.network

    async def resolve_network(self) -> NetworkDescriptor:
        return await self._resolver.resolve()

    async def user_address(self) -> ChecksumAddress:
        return await self._connections.user_address()

    # ------------------------------------------------------------------
    # Markets
    # ------------------------------------------------------------------
    async def supply(
        self, asset: str, amount: Amount, no_approve: bool = False, options: Options = None
    ) -> PendingTransaction:
        return await self._markets.supply(asset, amount, no_approve, options)

    async def redeem(self, asset: str, amount: Amount, options: Options = None) -> PendingTransaction:
        return await self._markets.redeem(asset, amount, options)

    async def borrow(self, asset: str, amount: Amount, options: Options = None) -> PendingTransaction:
        return await self._markets.borrow(asset, amount, options)

    async def repay_borrow(
        self,
        asset: str,
        amount: Amount,
        borrower: str | None = None,
        no_approve: bool = False,
        options: Options = None,
    ) -> PendingTransaction:
        return await self._markets.repay_borrow(asset, amount, borrower, no_approve, options)

    async def token_read(
        self,
        func: str,
        wrapper: str,
        parameters: list[Any] | None = None,
        options: Options = None,
    ) -> Any:
        return await self._markets.token_read(func, wrapper, parameters, options)

    async def get_balance_of(self, wrapper: str, account: str, options: Options = None) -> int:
        return await self._markets.get_balance_of(wrapper, account, options)

    async def get_borrow_balance_of(
        self, wrapper: str, account: str, options: Options = None
    ) -> int:
        return await self._markets.get_borrow_balance_of(wrapper, account, options)

    # ------------------------------------------------------------------
    # Cointroller
    # ------------------------------------------------------------------
    async def enter_markets(
        self, markets: str | Sequence[str] = (), options: Options = None
    ) -> PendingTransaction:
        return await self._cointroller.enter_markets(markets, options)

    async def exit_market(self, market: str, options: Options = None) -> PendingTransaction:
        return await self._cointroller.exit_market(market, options)

    async def get_collateral_factor(self, market: str, options: Options = None) -> int:
        return await self._cointroller.get_collateral_factor(market, options)

    async def check_membership(self, account: str, wrapper: str, options: Options = None) -> bool:
        return await self._cointroller.check_membership(account, wrapper, options)

    async def get_close_factor(self, options: Options = None) -> int:
        return await self._cointroller.get_close_factor(options)

    async def get_liquidation_incentive(self, options: Options = None) -> int:
        return await self._cointroller.get_liquidation_incentive(options)

    # ------------------------------------------------------------------
    # Prices
    # ------------------------------------------------------------------
    async def get_price(self, asset: str, in_asset: str = DEFAULT_QUOTE_ASSET) -> float:
        return await self._price_feed.get_price(asset, in_asset)

    async def get_underlying_price(self, asset: str) -> float:
        return await self._price_feed.get_underlying_price(asset)

    # ------------------------------------------------------------------
    # Governance
    # ------------------------------------------------------------------
    async def claim_rifi(self, options: Options = None) -> PendingTransaction:
        return await self._governance.claim_rifi(options)

    async def delegate(self, delegatee: str, options: Options = None) -> PendingTransaction:
        return await self._governance.delegate(delegatee, options)

    async def delegate_by_sig(
        self,
        delegatee: str,
        nonce: int,
        expiry: int,
        signature: Signature | dict[str, Any],
        options: Options = None,
    ) -> PendingTransaction:
        return await self._governance.delegate_by_sig(delegatee, nonce, expiry, signature, options)

    async def create_delegate_signature(
        self, delegatee: str, expiry: int = DEFAULT_DELEGATION_EXPIRY
    ) -> Signature:
        return await self._governance.create_delegate_signature(delegatee, expiry)

    # ------------------------------------------------------------------
    # Lens
    # ------------------------------------------------------------------
    async def read_lens(
        self, func: str, parameters: list[Any] | None = None, options: Options = None
    ) -> Any:
        return await self._lens.read_lens(func, parameters, options)

    async def r_token_metadata_all(self, options: Options = None) -> Any:
        return await self._lens.r_token_metadata_all(options)

    async def r_token_metadata(self, wrapper: str, options: Options = None) -> Any:
        return await self._lens.r_token_metadata(wrapper, options)

    async def r_token_balances_all(self, account: str, options: Options = None) -> Any:
        return await self._lens.r_token_balances_all(account, options)

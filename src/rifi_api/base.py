"""Shared plumbing for the protocol components composed by the client."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from web3 import AsyncWeb3
from web3.types import ChecksumAddress

from .eth.config import CallOptions, RifiConfig
from .eth.connections import ProviderConnections, signing_address
from .eth.network import NetworkResolver
from .eth.transactions import CallDispatcher
from .registry import AssetRegistry, NetworkDeployment

logger = logging.getLogger(__name__)

Options = CallOptions | Mapping[str, Any] | None


class ProtocolComponent:
    """Base for helpers that resolve the network, then read or write contracts."""

    def __init__(
        self,
        config: RifiConfig,
        connections: ProviderConnections,
        resolver: NetworkResolver,
        registry: AssetRegistry,
        dispatcher: CallDispatcher,
    ) -> None:
        self._config = config
        self._connections = connections
        self._resolver = resolver
        self._registry = registry
        self._dispatcher = dispatcher

    async def _network_name(self) -> str:
        network = await self._resolver.resolve()
        return network.name

    async def _deployment(self) -> NetworkDeployment:
        return self._registry.network(await self._network_name())

    async def _sender(self, options: CallOptions) -> ChecksumAddress:
        """Address the call will be sent from."""

        if options.from_address:
            return AsyncWeb3.to_checksum_address(options.from_address)

        if not options.has_own_provider:
            return await self._connections.user_address()

        web3, account = self._connections.for_options(options)
        return await signing_address(web3, account)

"""One-time detection of the chain a client's provider is connected to."""

from __future__ import annotations

import asyncio
import logging

from web3 import AsyncWeb3

from ..constants import DEFAULT_NETWORK_NAME, get_net_name_with_chain_id
from ..types import NetworkDescriptor

logger = logging.getLogger(__name__)


class NetworkResolver:
    """Gate operations on a single ``eth_chainId`` probe.

    The probe starts as soon as an event loop is available. Every caller of
    :meth:`resolve` awaits the same task; once it succeeds the descriptor is
    kept for the lifetime of the resolver and the task is dropped. A failed
    probe is kept so that pending and later callers all see its error.
    """

    def __init__(self, web3: AsyncWeb3, default_name: str = DEFAULT_NETWORK_NAME) -> None:
        self._web3 = web3
        self._default_name = default_name
        self._network: NetworkDescriptor | None = None
        self._probe: asyncio.Task[NetworkDescriptor] | None = None

        try:
            asyncio.get_running_loop()
        except RuntimeError:
            return
        self._start()

    @property
    def network(self) -> NetworkDescriptor | None:
        """The resolved network, or ``None`` while the probe is outstanding."""
        return self._network

    def _start(self) -> asyncio.Task[NetworkDescriptor]:
        if self._probe is None:
            self._probe = asyncio.ensure_future(self._detect())
        return self._probe

    async def _detect(self) -> NetworkDescriptor:
        chain_id = int(await self._web3.eth.chain_id)
        name = get_net_name_with_chain_id(chain_id, self._default_name)
        logger.info("Resolved network chain_id=%s name=%s", chain_id, name)
        return NetworkDescriptor(chain_id=chain_id, name=name)

    async def resolve(self) -> NetworkDescriptor:
        if self._network is not None:
            return self._network

        probe = self._start()
        # Shield so one cancelled caller does not cancel the shared probe.
        network = await asyncio.shield(probe)
        if self._network is None:
            self._network = network
            self._probe = None
        return self._network

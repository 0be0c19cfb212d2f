"""Generic read/write dispatch of contract calls."""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from typing import Any

from hexbytes import HexBytes
from web3 import AsyncWeb3

from ..types import Address, CallSpecification
from ..utils import serialise_receipt
from .config import DEFAULT_RECEIPT_TIMEOUT, DEFAULT_REQUEST_TIMEOUT, CallOptions
from .connections import ProviderConnections, resolve_call_provider
from .signature import parse_function_signature

logger = logging.getLogger(__name__)


class PendingTransaction:
    """Handle to a submitted transaction; await ``wait()`` for its receipt."""

    def __init__(
        self,
        tx_hash: bytes,
        *,
        method: str,
        address: Address,
        web3: AsyncWeb3,
        receipt_timeout: float = DEFAULT_RECEIPT_TIMEOUT,
    ) -> None:
        self.tx_hash = HexBytes(tx_hash)
        self.method = method
        self.address = address
        self._web3 = web3
        self._receipt_timeout = receipt_timeout

    @property
    def hash(self) -> str:
        return self.tx_hash.to_0x_hex()

    async def wait(self, timeout: float | None = None) -> dict[str, Any]:
        receipt = await self._web3.eth.wait_for_transaction_receipt(
            self.tx_hash, timeout=self._receipt_timeout if timeout is None else timeout
        )
        logger.info(
            "Transaction confirmed method=%s hash=%s block=%s",
            self.method,
            self.hash,
            receipt.get("blockNumber"),
        )
        return serialise_receipt(receipt)

    def __repr__(self) -> str:
        return f"PendingTransaction(method={self.method!r}, hash={self.hash!r})"


def contract_function(web3: AsyncWeb3, address: Address, method: str, abi: Any = None) -> Any:
    """Resolve the callable contract function for ``method`` at ``address``.

    With an explicit ABI the method is looked up by name, or by full signature
    when it contains parentheses. Without one, ``method`` must be a single
    human-readable signature.
    """

    checksum = AsyncWeb3.to_checksum_address(address)

    if abi is None:
        entry = parse_function_signature(method)
        contract = web3.eth.contract(address=checksum, abi=[entry])
        return contract.get_function_by_name(entry["name"])

    if isinstance(abi, str | bytes):
        abi = json.loads(abi)

    contract = web3.eth.contract(address=checksum, abi=abi)
    if "(" in method:
        return contract.get_function_by_signature(method.replace(" ", ""))
    return contract.get_function_by_name(method)


class CallDispatcher:
    """Perform state-changing or read-only contract calls."""

    def __init__(
        self,
        connections: ProviderConnections | None = None,
        *,
        request_timeout: float = DEFAULT_REQUEST_TIMEOUT,
        receipt_timeout: float = DEFAULT_RECEIPT_TIMEOUT,
    ) -> None:
        self._connections = connections
        self._request_timeout = request_timeout
        self._receipt_timeout = receipt_timeout

    def _provider_for(self, options: CallOptions) -> AsyncWeb3:
        if self._connections is not None:
            web3, _ = self._connections.for_options(options)
        else:
            web3, _ = resolve_call_provider(options, request_timeout=self._request_timeout)
        return web3

    async def invoke(
        self,
        is_write: bool,
        address: Address,
        method: str,
        parameters: Sequence[Any] = (),
        options: CallOptions | dict[str, Any] | None = None,
    ) -> Any:
        options = CallOptions.coerce(options)
        spec = CallSpecification(
            target_address=address,
            method=method,
            parameters=tuple(parameters),
            is_write=is_write,
        )

        web3 = self._provider_for(options)
        function = contract_function(web3, spec.target_address, spec.method, options.abi)
        bound = function(*spec.parameters)
        overrides = options.transaction_overrides()

        if not spec.is_write:
            logger.debug("Reading %s at %s", spec.method, spec.target_address)
            return await bound.call(overrides)

        if "from" not in overrides and not isinstance(web3.eth.default_account, str):
            accounts = await web3.eth.accounts
            if accounts:
                overrides["from"] = accounts[0]

        try:
            tx_hash = await bound.transact(overrides)
        except Exception:
            logger.debug("Transaction %s at %s was rejected", spec.method, spec.target_address)
            raise

        pending = PendingTransaction(
            tx_hash,
            method=spec.method,
            address=spec.target_address,
            web3=web3,
            receipt_timeout=self._receipt_timeout,
        )
        logger.info("Transaction sent method=%s hash=%s", spec.method, pending.hash)
        return pending

    async def read(
        self,
        address: Address,
        method: str,
        parameters: Sequence[Any] = (),
        options: CallOptions | dict[str, Any] | None = None,
    ) -> Any:
        return await self.invoke(False, address, method, parameters, options)

    async def trx(
        self,
        address: Address,
        method: str,
        parameters: Sequence[Any] = (),
        options: CallOptions | dict[str, Any] | None = None,
    ) -> PendingTransaction:
        return await self.invoke(True, address, method, parameters, options)


async def read(
    address: Address,
    method: str,
    parameters: Sequence[Any] = (),
    options: CallOptions | dict[str, Any] | None = None,
) -> Any:
    """Read-only call with a provider built from ``options`` alone."""
    return await CallDispatcher().read(address, method, parameters, options)


async def trx(
    address: Address,
    method: str,
    parameters: Sequence[Any] = (),
    options: CallOptions | dict[str, Any] | None = None,
) -> PendingTransaction:
    """Send a transaction with a provider and signer built from ``options`` alone."""
    return await CallDispatcher().trx(address, method, parameters, options)

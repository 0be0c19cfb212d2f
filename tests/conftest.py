from __future__ import annotations

from typing import Any

import pytest
from eth_abi import encode as abi_encode
from eth_utils import function_signature_to_4byte_selector
from web3.providers import AsyncBaseProvider

from rifi_api.eth.config import CallOptions, RifiConfig
from rifi_api.registry import AssetRegistry, load_default_registry
from rifi_api.types import NetworkDescriptor

USER = "0x70997970C51812dc3A010C7d01b50e0d17dc79C8"
OTHER = "0x3C44CdDdB6a900fa2b585dd299e03d12FA4293BC"
TX_HASH = "0x" + "ab" * 32


class DummyPending:
    def __init__(self, method: str) -> None:
        self.method = method
        self.waited = False

    async def wait(self, timeout: float | None = None) -> dict[str, Any]:
        self.waited = True
        return {"status": 1}


class DummyDispatcher:
    """Records every call; reads answer from ``reads`` keyed by method name.

    A dict value answers per contract address.
    """

    def __init__(self, reads: dict[str, Any] | None = None) -> None:
        self.reads = reads or {}
        self.calls: list[tuple[str, str, str, list[Any], CallOptions]] = []
        self.pending: list[DummyPending] = []

    async def read(self, address, method, parameters=(), options=None):
        self.calls.append(("read", address, method, list(parameters), CallOptions.coerce(options)))
        result = self.reads[method]
        if isinstance(result, dict):
            result = result[address]
        if isinstance(result, Exception):
            raise result
        return result(list(parameters)) if callable(result) else result

    async def trx(self, address, method, parameters=(), options=None):
        self.calls.append(("trx", address, method, list(parameters), CallOptions.coerce(options)))
        pending = DummyPending(method)
        self.pending.append(pending)
        return pending

    def methods(self, kind: str | None = None) -> list[str]:
        return [call[2] for call in self.calls if kind is None or call[0] == kind]

    def last(self, method: str) -> tuple[str, str, str, list[Any], CallOptions]:
        return [call for call in self.calls if call[2] == method][-1]


class DummyResolver:
    def __init__(self, chain_id: int = 31337, name: str = "development") -> None:
        self.network = NetworkDescriptor(chain_id=chain_id, name=name)
        self.resolved = 0

    async def resolve(self) -> NetworkDescriptor:
        self.resolved += 1
        return self.network


class DummyConnections:
    def __init__(self, address: str = USER) -> None:
        self.address = address
        self.account = None
        self.web3 = None

    async def user_address(self) -> str:
        return self.address

    def for_options(self, options: CallOptions):
        return self.web3, self.account


@pytest.fixture
def registry() -> AssetRegistry:
    return load_default_registry()


@pytest.fixture
def dispatcher() -> DummyDispatcher:
    return DummyDispatcher()


@pytest.fixture
def resolver() -> DummyResolver:
    return DummyResolver()


@pytest.fixture
def component_parts(registry, dispatcher, resolver):
    """Positional arguments for any ProtocolComponent subclass."""
    return (RifiConfig(), DummyConnections(), resolver, registry, dispatcher)


class FakeRPCProvider(AsyncBaseProvider):
    """In-memory JSON-RPC endpoint answering the handful of methods the SDK uses.

    ``calls`` maps a function signature (``balanceOf(address)``) to the ABI
    types and values returned by ``eth_call``.
    """

    def __init__(
        self,
        chain_id: int = 31337,
        *,
        accounts: list[str] | None = None,
        calls: dict[str, tuple[list[str], list[Any]]] | None = None,
        errors: dict[str, dict[str, Any]] | None = None,
    ) -> None:
        super().__init__()
        self.chain_id = chain_id
        self.accounts = accounts or []
        self.errors = errors or {}
        self.requests: list[tuple[str, Any]] = []
        self._calls = {
            "0x" + function_signature_to_4byte_selector(signature).hex(): abi_encode(*result)
            for signature, result in (calls or {}).items()
        }

    async def make_request(self, method, params):
        self.requests.append((method, params))
        if method in self.errors:
            return {"jsonrpc": "2.0", "id": 1, "error": self.errors[method]}
        return {"jsonrpc": "2.0", "id": 1, "result": self._result(method, params)}

    def _result(self, method: str, params: Any) -> Any:
        if method == "eth_chainId":
            return hex(self.chain_id)
        if method == "eth_accounts":
            return self.accounts
        if method == "eth_call":
            data = params[0].get("data") or params[0].get("input")
            return "0x" + self._calls[data[:10]].hex()
        if method == "eth_sendTransaction":
            return TX_HASH
        if method == "eth_getBlockByNumber":
            return {
                "number": "0x1",
                "hash": "0x" + "11" * 32,
                "parentHash": "0x" + "00" * 32,
                "gasLimit": hex(30_000_000),
                "gasUsed": "0x0",
                "baseFeePerGas": "0x1",
                "timestamp": "0x1",
                "transactions": [],
            }
        if method == "eth_getTransactionReceipt":
            return {
                "transactionHash": params[0],
                "blockNumber": "0x1",
                "blockHash": "0x" + "11" * 32,
                "status": "0x1",
                "gasUsed": "0x5208",
                "cumulativeGasUsed": "0x5208",
                "logs": [],
            }
        raise AssertionError(f"unexpected RPC method {method}")

    def requests_for(self, method: str) -> list[Any]:
        return [params for name, params in self.requests if name == method]

"""Governance token balances, RIFI rewards and vote delegation."""

from __future__ import annotations

import json
import logging
from typing import Any

from eth_account.messages import encode_typed_data
from hexbytes import HexBytes
from web3 import AsyncWeb3

from .abi import Cointroller_abi, RIFI_abi, RifiLens_abi
from .base import Options, ProtocolComponent
from .constants import Contract, get_net_name_with_chain_id
from .eth.config import DEFAULT_REQUEST_TIMEOUT, CallOptions
from .eth.connections import ProviderSpec, build_web3
from .eth.transactions import CallDispatcher, PendingTransaction
from .exceptions import ArgumentTypeError, ValidationError, error_prefix
from .registry import AssetRegistry, load_default_registry
from .types import Signature
from .utils import validate_address

logger = logging.getLogger(__name__)

DEFAULT_DELEGATION_EXPIRY = 10**10

DELEGATION_TYPES = {
    "EIP712Domain": [
        {"name": "name", "type": "string"},
        {"name": "chainId", "type": "uint256"},
        {"name": "verifyingContract", "type": "address"},
    ],
    "Delegation": [
        {"name": "delegatee", "type": "address"},
        {"name": "nonce", "type": "uint256"},
        {"name": "expiry", "type": "uint256"},
    ],
}


def delegation_typed_data(
    delegatee: str, nonce: int, expiry: int, *, chain_id: int, verifying_contract: str
) -> dict[str, Any]:
    """EIP-712 payload authorising a delegation of votes to ``delegatee``."""

    return {
        "types": DELEGATION_TYPES,
        "primaryType": "Delegation",
        "domain": {
            "name": "Rifi",
            "chainId": chain_id,
            "verifyingContract": verifying_contract,
        },
        "message": {"delegatee": delegatee, "nonce": nonce, "expiry": expiry},
    }


def split_signature(signature: bytes | str) -> Signature:
    """Split a 65-byte ``r || s || v`` signature into its components."""

    raw = HexBytes(signature)
    if len(raw) != 65:
        raise ValidationError(
            "Signature must be 65 bytes long", field="signature", value=raw.to_0x_hex()
        )
    v = raw[64]
    if v < 27:
        v += 27
    return Signature(v=v, r=HexBytes(raw[:32]).to_0x_hex(), s=HexBytes(raw[32:64]).to_0x_hex())


async def _standalone_network(
    provider: ProviderSpec, registry: AssetRegistry | None, request_timeout: float
) -> tuple[AsyncWeb3, str, AssetRegistry]:
    web3 = build_web3(provider, request_timeout=request_timeout)
    chain_id = await web3.eth.chain_id
    return web3, get_net_name_with_chain_id(chain_id), registry or load_default_registry()


async def get_rifi_balance(
    address: str,
    provider: ProviderSpec = "mainnet",
    *,
    registry: AssetRegistry | None = None,
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT,
) -> int:
    """RIFI balance of ``address``, read through a provider of its own."""

    prefix = error_prefix("getRifiBalance")
    address = validate_address(address, "_address", prefix)

    web3, network, registry = await _standalone_network(provider, registry, request_timeout)
    rifi = registry.address(network, Contract.RIFI.value)
    return await CallDispatcher().read(
        rifi, "balanceOf", [address], CallOptions(provider=web3, abi=RIFI_abi)
    )


async def get_rifi_accrued(
    address: str,
    provider: ProviderSpec = "mainnet",
    *,
    registry: AssetRegistry | None = None,
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT,
) -> Any:
    """Balance, votes, delegate and accrued RIFI of ``address`` from the lens."""

    prefix = error_prefix("getRifiAccrued")
    address = validate_address(address, "_address", prefix)

    web3, network, registry = await _standalone_network(provider, registry, request_timeout)
    parameters = [
        registry.address(network, Contract.RIFI.value),
        registry.address(network, Contract.COINTROLLER.value),
        address,
    ]
    return await CallDispatcher().read(
        registry.address(network, Contract.LENS.value),
        "getRifiBalanceMetadataExt",
        parameters,
        CallOptions(provider=web3, abi=RifiLens_abi),
    )


class Governance(ProtocolComponent):
    """Claim RIFI rewards and delegate governance votes."""

    async def claim_rifi(self, options: Options = None) -> PendingTransaction:
        """Claim all RIFI accrued by the sender across every market."""

        options = CallOptions.coerce(options)
        network = await self._network_name()
        holder = await self._sender(options)
        cointroller = self._registry.address(network, Contract.COINTROLLER.value)
        return await self._dispatcher.trx(
            cointroller, "claimRifi(address)", [holder], options.merged(abi=Cointroller_abi)
        )

    async def delegate(self, delegatee: str, options: Options = None) -> PendingTransaction:
        prefix = error_prefix("delegate")
        options = CallOptions.coerce(options)
        delegatee = validate_address(delegatee, "_address", prefix)

        network = await self._network_name()
        rifi = self._registry.address(network, Contract.RIFI.value)
        return await self._dispatcher.trx(
            rifi, "delegate", [delegatee], options.merged(abi=RIFI_abi)
        )

    async def delegate_by_sig(
        self,
        delegatee: str,
        nonce: int,
        expiry: int,
        signature: Signature | dict[str, Any],
        options: Options = None,
    ) -> PendingTransaction:
        """Submit a delegation signed off-chain by the delegator."""

        prefix = error_prefix("delegateBySig")
        options = CallOptions.coerce(options)
        delegatee = validate_address(delegatee, "_address", prefix)

        for name, value in (("nonce", nonce), ("expiry", expiry)):
            if isinstance(value, bool) or not isinstance(value, int):
                raise ArgumentTypeError(
                    f"{prefix}Argument `{name}` must be an integer.", field=name, value=value
                )

        try:
            parts = Signature.from_dict(signature)
        except TypeError:
            parts = None
        if parts is None or not parts.v or not parts.r or not parts.s:
            raise ValidationError(
                f"{prefix}Argument `signature` must be an object that contains the v, r, "
                "and s pieces of an EIP-712 signature.",
                field="signature",
                value=signature,
            )

        network = await self._network_name()
        rifi = self._registry.address(network, Contract.RIFI.value)
        parameters = [delegatee, nonce, expiry, parts.v, HexBytes(parts.r), HexBytes(parts.s)]
        return await self._dispatcher.trx(
            rifi, "delegateBySig", parameters, options.merged(abi=RIFI_abi)
        )

    async def create_delegate_signature(
        self, delegatee: str, expiry: int = DEFAULT_DELEGATION_EXPIRY
    ) -> Signature:
        """Sign a ``Delegation`` for ``delegatee`` with the client's signer.

        A local account signs directly; otherwise the injected provider is
        asked to sign with ``eth_signTypedData_v4``.
        """

        prefix = error_prefix("createDelegateSignature")
        delegatee = validate_address(delegatee, "delegatee", prefix)

        network = await self._resolver.resolve()
        rifi = self._registry.address(network.name, Contract.RIFI.value)
        signer = await self._connections.user_address()

        nonce = await self._dispatcher.read(
            rifi, "function nonces(address) returns (uint)", [signer], CallOptions()
        )
        typed_data = delegation_typed_data(
            delegatee,
            int(nonce),
            expiry,
            chain_id=network.chain_id,
            verifying_contract=rifi,
        )

        account = self._connections.account
        if account is not None:
            signed = account.sign_message(encode_typed_data(full_message=typed_data))
            return Signature(
                v=signed.v,
                r=HexBytes(signed.r.to_bytes(32, "big")).to_0x_hex(),
                s=HexBytes(signed.s.to_bytes(32, "big")).to_0x_hex(),
            )

        logger.debug("Requesting delegation signature from provider for %s", signer)
        raw = await self._connections.web3.manager.coro_request(
            "eth_signTypedData_v4", [signer, json.dumps(typed_data)]
        )
        return split_signature(raw)

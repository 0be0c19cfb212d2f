"""Deployment tables: network -> symbol -> address, decimals and wrapper pairing."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Any

from eth_utils import is_address, to_checksum_address

from .abi import get_abi as _get_abi
from .constants import ORACLE_SYMBOL_ALIASES, WRAPPER_DECIMALS, WRAPPER_PREFIX
from .exceptions import RegistryError
from .types import Address, AssetDescriptor, VaultDescriptor

logger = logging.getLogger(__name__)

DEFAULT_DEPLOYMENTS_PATH = Path(__file__).parent / "data" / "deployments.json"


@dataclass(frozen=True)
class NetworkDeployment:
    """Everything the SDK knows about the protocol on one network."""

    name: str
    chain_id: int | None
    contracts: Mapping[str, Address]
    assets: Mapping[str, AssetDescriptor]
    wrappers: Mapping[str, AssetDescriptor]
    vaults: Mapping[str, VaultDescriptor] = field(default_factory=dict)
    native_wrapper: str | None = None
    price_feed_assets: frozenset[str] = frozenset()

    @property
    def underlyings(self) -> tuple[str, ...]:
        return tuple(self.assets)

    @property
    def wrapper_symbols(self) -> tuple[str, ...]:
        return tuple(self.wrappers)

    def address_of(self, symbol: str) -> Address | None:
        if symbol in self.contracts:
            return self.contracts[symbol]
        if symbol in self.wrappers:
            return self.wrappers[symbol].address
        if symbol in self.assets:
            return self.assets[symbol].address
        if symbol in self.vaults:
            return self.vaults[symbol].address
        return None


class AssetRegistry:
    """Typed, validated view over one or more network deployment tables."""

    def __init__(self, networks: Mapping[str, NetworkDeployment]) -> None:
        self._networks = dict(networks)

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------
    @classmethod
    def from_file(cls, path: str | Path) -> AssetRegistry:
        path = Path(path)
        try:
            with path.open(encoding="utf-8") as handle:
                document = json.load(handle)
        except (OSError, json.JSONDecodeError) as exc:
            raise RegistryError(
                f"Unable to read deployment table {path}", details={"error": str(exc)}
            ) from exc
        registry = cls.from_mapping(document)
        logger.debug("Loaded deployment table %s (%d networks)", path, len(registry._networks))
        return registry

    @classmethod
    def from_mapping(cls, document: Mapping[str, Any]) -> AssetRegistry:
        networks = document.get("networks") if isinstance(document, Mapping) else None
        if not isinstance(networks, Mapping) or not networks:
            raise RegistryError("Deployment table must define a non-empty 'networks' object")

        return cls({name: _parse_network(name, entry) for name, entry in networks.items()})

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------
    @property
    def network_names(self) -> tuple[str, ...]:
        return tuple(self._networks)

    def has_network(self, name: str) -> bool:
        return name in self._networks

    def network(self, name: str) -> NetworkDeployment:
        try:
            return self._networks[name]
        except KeyError:
            raise RegistryError(
                f"Network '{name}' is not present in the deployment table", network=name
            ) from None

    def address(self, network: str, symbol: str) -> Address:
        address = self.network(network).address_of(symbol)
        if address is None:
            raise RegistryError(
                f"No address for '{symbol}' on network '{network}'",
                network=network,
                symbol=symbol,
            )
        return address

    def find_address(self, network: str, symbol: str) -> Address | None:
        if not self.has_network(network):
            return None
        return self._networks[network].address_of(symbol)

    def asset(self, network: str, symbol: str) -> AssetDescriptor:
        deployment = self.network(network)
        if symbol in deployment.wrappers:
            return deployment.wrappers[symbol]
        if symbol in deployment.assets:
            return deployment.assets[symbol]
        raise RegistryError(
            f"Unknown asset '{symbol}' on network '{network}'", network=network, symbol=symbol
        )

    def decimals(self, network: str, symbol: str) -> int:
        return self.asset(network, symbol).decimals

    def is_wrapper(self, network: str, symbol: str) -> bool:
        return symbol in self.network(network).wrappers

    def is_underlying(self, network: str, symbol: str) -> bool:
        return symbol in self.network(network).assets

    def wrapper_for(self, network: str, underlying: str) -> AssetDescriptor | None:
        return self.network(network).wrappers.get(WRAPPER_PREFIX + underlying)

    def underlying_of(self, network: str, wrapper: str) -> AssetDescriptor:
        descriptor = self.asset(network, wrapper)
        if not descriptor.is_wrapper or descriptor.underlying_symbol is None:
            raise RegistryError(
                f"'{wrapper}' is not a wrapper token on network '{network}'",
                network=network,
                symbol=wrapper,
            )
        return self.asset(network, descriptor.underlying_symbol)

    def is_native_wrapper(self, network: str, wrapper: str) -> bool:
        return self.network(network).native_wrapper == wrapper

    def vault(self, network: str, name: str) -> VaultDescriptor:
        vault = self.network(network).vaults.get(name)
        if vault is None:
            raise RegistryError(
                f"Vault '{name}' is not present on network '{network}'",
                network=network,
                symbol=name,
            )
        return vault

    def oracle_symbol(self, underlying: str) -> str:
        return ORACLE_SYMBOL_ALIASES.get(underlying, underlying)


# ----------------------------------------------------------------------
# Parsing and load-time validation
# ----------------------------------------------------------------------
def _checksum(value: Any, network: str, symbol: str) -> Address:
    if not isinstance(value, str) or not is_address(value):
        raise RegistryError(
            f"Invalid address for '{symbol}' on network '{network}'",
            network=network,
            symbol=symbol,
            details={"value": value},
        )
    return to_checksum_address(value)


def _decimals(value: Any, network: str, symbol: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= 77:
        raise RegistryError(
            f"Invalid decimals for '{symbol}' on network '{network}'",
            network=network,
            symbol=symbol,
            details={"value": value},
        )
    return value


def _section(entry: Mapping[str, Any], key: str, network: str) -> Mapping[str, Any]:
    section = entry.get(key, {})
    if not isinstance(section, Mapping):
        raise RegistryError(f"Section '{key}' of network '{network}' must be an object", network)
    return section


def _entries(entry: Mapping[str, Any], key: str, network: str) -> list[tuple[str, Mapping[str, Any]]]:
    entries = list(_section(entry, key, network).items())
    for symbol, raw in entries:
        if not isinstance(raw, Mapping):
            raise RegistryError(
                f"Entry '{symbol}' in section '{key}' of network '{network}' must be an object",
                network=network,
                symbol=symbol,
                details={"value": raw},
            )
    return entries


def _parse_network(name: str, entry: Any) -> NetworkDeployment:
    if not isinstance(entry, Mapping):
        raise RegistryError(f"Network '{name}' must be an object", network=name)

    contracts = {
        symbol: _checksum(address, name, symbol)
        for symbol, address in _section(entry, "contracts", name).items()
    }

    assets: dict[str, AssetDescriptor] = {}
    for symbol, raw in _entries(entry, "assets", name):
        native = bool(raw.get("native", False))
        address = raw.get("address")
        assets[symbol] = AssetDescriptor(
            symbol=symbol,
            decimals=_decimals(raw.get("decimals"), name, symbol),
            address=None if native and address is None else _checksum(address, name, symbol),
            name=raw.get("name"),
            native=native,
        )

    wrappers: dict[str, AssetDescriptor] = {}
    for symbol, raw in _entries(entry, "wrappers", name):
        underlying = raw.get("underlying")
        if underlying not in assets:
            raise RegistryError(
                f"Wrapper '{symbol}' names unknown underlying '{underlying}'",
                network=name,
                symbol=symbol,
            )
        if not symbol.startswith(WRAPPER_PREFIX) or symbol[len(WRAPPER_PREFIX) :] != underlying:
            raise RegistryError(
                f"Wrapper '{symbol}' must be named '{WRAPPER_PREFIX}{underlying}'",
                network=name,
                symbol=symbol,
            )
        wrappers[symbol] = AssetDescriptor(
            symbol=symbol,
            decimals=_decimals(raw.get("decimals", WRAPPER_DECIMALS), name, symbol),
            address=_checksum(raw.get("address"), name, symbol),
            is_wrapper=True,
            underlying_symbol=underlying,
            name=raw.get("name"),
        )

    native_wrapper = entry.get("native_wrapper")
    if native_wrapper is not None and native_wrapper not in wrappers:
        raise RegistryError(
            f"Native wrapper '{native_wrapper}' is not a listed wrapper",
            network=name,
            symbol=native_wrapper,
        )

    vaults: dict[str, VaultDescriptor] = {}
    for vault_name, raw in _entries(entry, "vaults", name):
        vault = VaultDescriptor(
            name=vault_name,
            address=_checksum(raw.get("address"), name, vault_name),
            deposit_token=raw.get("deposit_token"),
            reward_token=raw.get("reward_token"),
            reward_locker=raw.get("reward_locker"),
        )
        for token in (vault.deposit_token, vault.reward_token):
            if token not in assets:
                raise RegistryError(
                    f"Vault '{vault_name}' references unknown token '{token}'",
                    network=name,
                    symbol=vault_name,
                )
        if vault.reward_locker not in contracts:
            raise RegistryError(
                f"Vault '{vault_name}' references unknown locker '{vault.reward_locker}'",
                network=name,
                symbol=vault_name,
            )
        vaults[vault_name] = vault

    chain_id = entry.get("chain_id")
    return NetworkDeployment(
        name=name,
        chain_id=int(chain_id) if chain_id is not None else None,
        contracts=contracts,
        assets=assets,
        wrappers=wrappers,
        vaults=vaults,
        native_wrapper=native_wrapper,
        price_feed_assets=frozenset(entry.get("price_feed_assets", ())),
    )


@lru_cache(maxsize=None)
def load_default_registry() -> AssetRegistry:
    """Load the deployment table shipped with the package."""
    return AssetRegistry.from_file(DEFAULT_DEPLOYMENTS_PATH)


def get_address(contract: str, network: str = "development") -> Address:
    """Get the address of a protocol contract or token from the bundled table."""
    return load_default_registry().address(network, contract)


def get_abi(contract: str) -> list[dict[str, Any]]:
    """Get a protocol contract ABI by name."""
    return _get_abi(contract)

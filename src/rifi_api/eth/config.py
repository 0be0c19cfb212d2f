"""Configuration containers for the Rifi client and individual calls."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, fields, replace
from typing import Any

from ..constants import ALTERNATE_ORACLE_CHAIN_IDS, DEFAULT_API_URL, DEFAULT_NETWORK_NAME
from ..exceptions import ValidationError

logger = logging.getLogger(__name__)

DEFAULT_REQUEST_TIMEOUT = 10.0
DEFAULT_RECEIPT_TIMEOUT = 120.0


@dataclass(frozen=True)
class RifiConfig:
    """Client-wide settings, fixed at construction."""

    private_key: str | None = None
    mnemonic: str | None = None
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    receipt_timeout: float = DEFAULT_RECEIPT_TIMEOUT
    default_network_name: str = DEFAULT_NETWORK_NAME
    alternate_oracle_chain_ids: frozenset[int] = ALTERNATE_ORACLE_CHAIN_IDS
    deployments_path: str | None = None
    api_base_url: str = DEFAULT_API_URL

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> RifiConfig:
        """Build a config from ``RIFI_*`` environment variables."""

        env = os.environ if environ is None else environ

        chain_ids = env.get("RIFI_ALTERNATE_ORACLE_CHAIN_IDS")
        alternate = (
            frozenset(int(item) for item in chain_ids.split(",") if item.strip())
            if chain_ids
            else ALTERNATE_ORACLE_CHAIN_IDS
        )

        return cls(
            private_key=env.get("RIFI_PRIVATE_KEY") or None,
            mnemonic=env.get("RIFI_MNEMONIC") or None,
            request_timeout=float(env.get("RIFI_REQUEST_TIMEOUT", DEFAULT_REQUEST_TIMEOUT)),
            receipt_timeout=float(env.get("RIFI_RECEIPT_TIMEOUT", DEFAULT_RECEIPT_TIMEOUT)),
            default_network_name=env.get("RIFI_DEFAULT_NETWORK", DEFAULT_NETWORK_NAME),
            alternate_oracle_chain_ids=alternate,
            deployments_path=env.get("RIFI_DEPLOYMENTS") or None,
            api_base_url=env.get("RIFI_API_URL", DEFAULT_API_URL).rstrip("/"),
        )


# camelCase spellings accepted by CallOptions.from_mapping
_OPTION_ALIASES = {
    "gasPrice": "gas_price",
    "gasLimit": "gas_limit",
    "chainId": "chain_id",
    "from": "from_address",
    "privateKey": "private_key",
    "maxRepay": "max_repay",
}


@dataclass(frozen=True)
class CallOptions:
    """Per-call options and transaction overrides.

    ``mantissa`` marks amounts that are already integer fixed-point values and
    ``max_repay`` requests repayment of the full outstanding borrow.
    """

    network: str = "mainnet"
    abi: Any = None
    provider: Any = None
    private_key: str | None = None
    mnemonic: str | None = None
    gas_price: int | None = None
    gas_limit: int | None = None
    nonce: int | None = None
    value: int | None = None
    chain_id: int | None = None
    from_address: str | None = None
    mantissa: bool = False
    max_repay: bool = False

    @classmethod
    def from_mapping(cls, options: Mapping[str, Any], *, strict: bool = True) -> CallOptions:
        known = {f.name for f in fields(cls)}
        values: dict[str, Any] = {}
        unknown: list[str] = []
        for key, value in options.items():
            name = _OPTION_ALIASES.get(key, key)
            if name in known:
                values[name] = value
            else:
                unknown.append(key)

        if unknown:
            if strict:
                raise ValidationError(
                    f"Unrecognized call options: {', '.join(sorted(unknown))}",
                    field="options",
                    value=unknown,
                )
            logger.debug("Ignoring unrecognized call options: %s", unknown)

        return cls(**values)

    @classmethod
    def coerce(cls, options: CallOptions | Mapping[str, Any] | None) -> CallOptions:
        if options is None:
            return cls()
        if isinstance(options, CallOptions):
            return options
        if isinstance(options, Mapping):
            return cls.from_mapping(options)
        raise ValidationError(
            "Call options must be a CallOptions instance or a mapping",
            field="options",
            value=options,
        )

    def merged(self, **changes: Any) -> CallOptions:
        return replace(self, **changes)

    @property
    def has_own_provider(self) -> bool:
        return (
            self.provider is not None
            or self.private_key is not None
            or self.mnemonic is not None
        )

    def transaction_overrides(self) -> dict[str, Any]:
        """Return the web3 transaction parameters set on these options."""

        overrides = {
            "gasPrice": self.gas_price,
            "nonce": self.nonce,
            "value": self.value,
            "chainId": self.chain_id,
            "from": self.from_address,
            "gas": self.gas_limit,
        }
        return {key: value for key, value in overrides.items() if value is not None}

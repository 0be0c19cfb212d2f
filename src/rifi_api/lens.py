"""Batched market and account reads through the RifiLens helper contract."""

from __future__ import annotations

from typing import Any

from .abi import RifiLens_abi
from .base import Options, ProtocolComponent
from .constants import LENS_FUNCTIONS, WRAPPER_PREFIX, Contract
from .eth.config import CallOptions
from .exceptions import ValidationError, error_prefix
from .utils import validate_address


class Lens(ProtocolComponent):
    async def read_lens(
        self, func: str, parameters: list[Any] | None = None, options: Options = None
    ) -> Any:
        """Call one of the whitelisted lens functions."""

        prefix = error_prefix("readLens")
        options = CallOptions.coerce(options)
        if func not in LENS_FUNCTIONS:
            raise ValidationError(f"{prefix}Invalid function name.", field="func", value=func)

        network = await self._network_name()
        lens = self._registry.address(network, Contract.LENS.value)
        return await self._dispatcher.read(
            lens, func, parameters or [], options.merged(abi=RifiLens_abi)
        )

    async def _wrapper_addresses(self) -> list[str]:
        deployment = await self._deployment()
        return [wrapper.address for wrapper in deployment.wrappers.values()]

    async def r_token_metadata_all(self, options: Options = None) -> Any:
        return await self.read_lens("rTokenMetadataAll", [await self._wrapper_addresses()], options)

    async def r_token_metadata(self, wrapper: str, options: Options = None) -> Any:
        prefix = error_prefix("rTokenMetadata")
        deployment = await self._deployment()
        descriptor = deployment.wrappers.get(wrapper) if isinstance(wrapper, str) else None
        if descriptor is None or not wrapper.startswith(WRAPPER_PREFIX):
            raise ValidationError(
                f"{prefix}Argument `rTokenName` is not a rToken.", field="rTokenName", value=wrapper
            )
        return await self.read_lens("rTokenMetadata", [descriptor.address], options)

    async def r_token_balances_all(self, account: str, options: Options = None) -> Any:
        prefix = error_prefix("rTokenBalancesAll")
        account = validate_address(account, "account", prefix)
        return await self.read_lens(
            "rTokenBalancesAll", [await self._wrapper_addresses(), account], options
        )

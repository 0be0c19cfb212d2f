"""Market membership and risk parameters held by the Cointroller."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from .abi import Cointroller_abi
from .base import Options, ProtocolComponent
from .constants import WRAPPER_PREFIX, Contract
from .eth.config import CallOptions
from .eth.transactions import PendingTransaction
from .exceptions import ArgumentTypeError, ValidationError, error_prefix
from .registry import NetworkDeployment
from .types import Address
from .utils import require_symbol, validate_address

logger = logging.getLogger(__name__)


def _market_address(deployment: NetworkDeployment, market: str, prefix: str) -> Address:
    if not market.startswith(WRAPPER_PREFIX):
        market = WRAPPER_PREFIX + market
    wrapper = deployment.wrappers.get(market)
    if wrapper is None:
        raise ValidationError(
            f"{prefix}Provided market `{market}` is not a recognized rToken.",
            field="markets",
            value=market,
        )
    return wrapper.address


class Cointroller(ProtocolComponent):
    """Enter and exit markets and read the Cointroller's risk parameters."""

    async def _cointroller(self) -> tuple[NetworkDeployment, Address]:
        deployment = await self._deployment()
        return deployment, self._registry.address(deployment.name, Contract.COINTROLLER.value)

    async def enter_markets(
        self, markets: str | Sequence[str] = (), options: Options = None
    ) -> PendingTransaction:
        """Enter one market or a list of markets; an empty list is sent as-is."""

        prefix = error_prefix("enterMarkets")
        options = CallOptions.coerce(options)
        if isinstance(markets, str):
            markets = [markets]
        if not isinstance(markets, list | tuple):
            raise ArgumentTypeError(
                f"{prefix}Argument `markets` must be an array or string.",
                field="markets",
                value=markets,
            )
        for market in markets:
            require_symbol(market, "markets", prefix)

        deployment, cointroller = await self._cointroller()
        addresses = [_market_address(deployment, market, prefix) for market in markets]
        return await self._dispatcher.trx(
            cointroller, "enterMarkets", [addresses], options.merged(abi=Cointroller_abi)
        )

    async def exit_market(self, market: str, options: Options = None) -> PendingTransaction:
        prefix = error_prefix("exitMarket")
        options = CallOptions.coerce(options)
        if not isinstance(market, str) or not market:
            raise ArgumentTypeError(
                f"{prefix}Argument `market` must be a string of a rToken market name.",
                field="market",
                value=market,
            )

        deployment, cointroller = await self._cointroller()
        address = _market_address(deployment, market, prefix)
        return await self._dispatcher.trx(
            cointroller, "exitMarket", [address], options.merged(abi=Cointroller_abi)
        )

    async def get_collateral_factor(self, market: str, options: Options = None) -> int:
        """Collateral factor mantissa (1e18 = 100%) of ``market``."""

        prefix = error_prefix("getCollateralFactor")
        options = CallOptions.coerce(options)
        if not isinstance(market, str) or not market:
            raise ArgumentTypeError(
                f"{prefix}Argument `market` must be a string of a rToken market name.",
                field="market",
                value=market,
            )

        deployment, cointroller = await self._cointroller()
        address = _market_address(deployment, market, prefix)
        _, collateral_factor, _ = await self._dispatcher.read(
            cointroller, "markets", [address], options.merged(abi=Cointroller_abi)
        )
        return collateral_factor

    async def check_membership(
        self, account: str, wrapper: str, options: Options = None
    ) -> bool:
        prefix = error_prefix("checkMembership")
        options = CallOptions.coerce(options)
        account = validate_address(account, "accountAddr", prefix)
        require_symbol(wrapper, "rTokenName", prefix)

        deployment, cointroller = await self._cointroller()
        descriptor = deployment.wrappers.get(wrapper)
        if descriptor is None:
            raise ValidationError(
                f'{prefix}"{wrapper}" is not a recognized rToken.', field="rTokenName", value=wrapper
            )
        return await self._dispatcher.read(
            cointroller,
            "checkMembership",
            [account, descriptor.address],
            options.merged(abi=Cointroller_abi),
        )

    async def _read_parameter(self, method: str, options: Options) -> Any:
        options = CallOptions.coerce(options)
        _, cointroller = await self._cointroller()
        return await self._dispatcher.read(
            cointroller, method, [], options.merged(abi=Cointroller_abi)
        )

    async def get_close_factor(self, options: Options = None) -> int:
        return await self._read_parameter("closeFactorMantissa", options)

    async def get_liquidation_incentive(self, options: Options = None) -> int:
        return await self._read_parameter("liquidationIncentiveMantissa", options)

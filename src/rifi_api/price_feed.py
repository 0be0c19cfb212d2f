"""Asset prices from the protocol's on-chain price feed."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal

from .abi import PriceFeed_abi
from .base import ProtocolComponent
from .constants import (
    DEFAULT_QUOTE_ASSET,
    EXCHANGE_RATE_DECIMALS,
    WRAPPER_DECIMALS,
    WRAPPER_PREFIX,
    Contract,
)
from .eth.config import CallOptions
from .exceptions import RifiError, ValidationError, error_prefix
from .markets import market_abi
from .registry import NetworkDeployment
from .types import AssetDescriptor
from .utils import require_symbol

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _PricedAsset:
    """One side of a price query after validation."""

    is_wrapper: bool
    wrapper: AssetDescriptor | None
    oracle_symbol: str
    underlying_decimals: int | None


class PriceFeed(ProtocolComponent):
    """Price one asset in another, accounting for wrapper exchange rates."""

    def _validate_asset(
        self, deployment: NetworkDeployment, asset: str, argument: str, prefix: str
    ) -> _PricedAsset:
        # Wrappers are recognised by name alone.
        is_wrapper = asset.startswith(WRAPPER_PREFIX)
        wrapper_name = asset if is_wrapper else WRAPPER_PREFIX + asset
        underlying_name = asset[len(WRAPPER_PREFIX) :] if is_wrapper else asset

        listed = wrapper_name in deployment.wrappers and underlying_name in deployment.assets
        oracle_only = not is_wrapper and underlying_name in deployment.price_feed_assets
        if not listed and not oracle_only:
            raise ValidationError(
                f"{prefix}Argument `{argument}` is not supported.", field=argument, value=asset
            )

        underlying = deployment.assets.get(underlying_name)
        return _PricedAsset(
            is_wrapper=is_wrapper,
            wrapper=deployment.wrappers.get(wrapper_name),
            oracle_symbol=self._registry.oracle_symbol(underlying_name),
            underlying_decimals=underlying.decimals if underlying is not None else None,
        )

    def _price_feed(self, deployment: NetworkDeployment) -> str:
        return self._registry.address(deployment.name, Contract.PRICE_FEED.value)

    async def _wrapper_in_underlying(
        self, deployment: NetworkDeployment, side: _PricedAsset
    ) -> Decimal:
        """Underlying units one wrapper token is worth at the current exchange rate."""

        wrapper = side.wrapper
        abi = market_abi(deployment, wrapper.symbol)
        rate = await self._dispatcher.read(
            wrapper.address, "exchangeRateCurrent", [], CallOptions(abi=abi)
        )
        scale = EXCHANGE_RATE_DECIMALS + (side.underlying_decimals or 0) - WRAPPER_DECIMALS
        return Decimal(int(rate)).scaleb(-scale)

    @staticmethod
    def _divisor(value: Decimal, description: str, prefix: str) -> Decimal:
        if not value:
            raise RifiError(f"{prefix}{description} is zero.", {"value": str(value)})
        return value

    async def get_price(self, asset: str, in_asset: str = DEFAULT_QUOTE_ASSET) -> float:
        """Price of ``asset`` denominated in ``in_asset``.

        Either side may be a wrapper token, in which case its exchange rate
        against the underlying is folded into the ratio of oracle prices.
        A zero oracle price or exchange rate on the dividing side raises
        ``RifiError``.
        """

        prefix = error_prefix("getPrice")
        require_symbol(asset, "asset", prefix)
        require_symbol(in_asset, "inAsset", prefix)

        deployment = await self._deployment()
        source = self._validate_asset(deployment, asset, "asset", prefix)
        target = self._validate_asset(deployment, in_asset, "inAsset", prefix)

        price_feed = self._price_feed(deployment)
        options = CallOptions(abi=PriceFeed_abi)
        source_price = await self._dispatcher.read(
            price_feed, "price", [source.oracle_symbol], options
        )
        target_price = await self._dispatcher.read(
            price_feed, "price", [target.oracle_symbol], options
        )

        ratio = Decimal(int(source_price)) / self._divisor(
            Decimal(int(target_price)), f"Oracle price of `{in_asset}`", prefix
        )

        if source.is_wrapper and target.is_wrapper:
            source_rate = self._divisor(
                await self._wrapper_in_underlying(deployment, source),
                f"Exchange rate of `{asset}`",
                prefix,
            )
            target_rate = await self._wrapper_in_underlying(deployment, target)
            result = ratio / source_rate * target_rate
        elif source.is_wrapper:
            result = ratio * await self._wrapper_in_underlying(deployment, source)
        elif target.is_wrapper:
            target_rate = await self._wrapper_in_underlying(deployment, target)
            result = ratio / self._divisor(target_rate, f"Exchange rate of `{in_asset}`", prefix)
        else:
            result = ratio

        logger.debug("Price of %s in %s: %s", asset, in_asset, result)
        return float(result)

    async def get_underlying_price(self, asset: str) -> float:
        """USD price of the underlying of ``asset`` from the per-market accessor."""

        prefix = error_prefix("getUnderlyingPrice")
        require_symbol(asset, "asset", prefix)

        network = await self._resolver.resolve()
        deployment = self._registry.network(network.name)
        side = self._validate_asset(deployment, asset, "asset", prefix)
        if side.wrapper is None:
            raise ValidationError(
                f"{prefix}Argument `asset` has no market.", field="asset", value=asset
            )

        price = await self._dispatcher.read(
            self._price_feed(deployment),
            "getUnderlyingPrice",
            [side.wrapper.address],
            CallOptions(abi=PriceFeed_abi),
        )

        decimals = side.underlying_decimals or 0
        if network.chain_id in self._config.alternate_oracle_chain_ids:
            return float(Decimal(int(price)).scaleb(-(26 - decimals)))
        return float(Decimal(int(price)).scaleb(-decimals))

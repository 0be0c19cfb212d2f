"""Supply, redeem, borrow and repay against the protocol's wrapper-token markets."""

from __future__ import annotations

import logging
from typing import Any

from .abi import Bep20_abi, Maximillion_abi, rBep20_abi, rBinance_abi
from .base import Options, ProtocolComponent
from .constants import (
    MAX_REPAY_NATIVE_BUFFER,
    MAX_UINT256,
    READ_FUNCTIONS,
    WRAPPER_PREFIX,
    Contract,
)
from .eth.config import CallOptions
from .eth.transactions import PendingTransaction
from .exceptions import ValidationError, error_prefix
from .registry import NetworkDeployment
from .types import Address, Amount, AssetDescriptor
from .utils import require_symbol, scale_amount, validate_address, validate_amount

logger = logging.getLogger(__name__)


def market_abi(deployment: NetworkDeployment, wrapper: str) -> list[dict[str, Any]]:
    """ABI of a wrapper market; the native coin market takes value instead of amounts."""
    return rBinance_abi if deployment.native_wrapper == wrapper else rBep20_abi


class Markets(ProtocolComponent):
    """Wrapper-token market operations."""

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    @staticmethod
    def _lendable(
        deployment: NetworkDeployment, asset: str, message: str, prefix: str
    ) -> tuple[AssetDescriptor, AssetDescriptor]:
        wrapper = deployment.wrappers.get(WRAPPER_PREFIX + asset)
        underlying = deployment.assets.get(asset)
        if wrapper is None or underlying is None:
            raise ValidationError(f"{prefix}Argument `asset` {message}", field="asset", value=asset)
        return wrapper, underlying

    async def _ensure_allowance(
        self,
        token: Address,
        spender: Address,
        amount: int,
        options: CallOptions,
    ) -> None:
        owner = await self._sender(options)
        allowance = await self._dispatcher.read(
            token, "allowance", [owner, spender], options.merged(abi=Bep20_abi, value=None)
        )
        if allowance >= amount:
            return

        logger.info("Approving %s to spend %s of %s", spender, amount, token)
        approval = await self._dispatcher.trx(
            token, "approve", [spender, amount], options.merged(abi=Bep20_abi, value=None)
        )
        await approval.wait()

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------
    async def supply(
        self,
        asset: str,
        amount: Amount,
        no_approve: bool = False,
        options: Options = None,
    ) -> PendingTransaction:
        """Supply ``asset`` to its market, approving the wrapper first if needed."""

        prefix = error_prefix("supply")
        options = CallOptions.coerce(options)
        require_symbol(asset, "asset", prefix)
        validate_amount(amount, "amount", prefix)

        deployment = await self._deployment()
        wrapper, underlying = self._lendable(deployment, asset, "cannot be supplied.", prefix)
        value = scale_amount(amount, underlying.decimals, mantissa=options.mantissa, prefix=prefix)
        native = deployment.native_wrapper == wrapper.symbol

        if not native and not no_approve:
            await self._ensure_allowance(underlying.address, wrapper.address, value, options)

        abi = market_abi(deployment, wrapper.symbol)
        if native:
            return await self._dispatcher.trx(
                wrapper.address, "mint", [], options.merged(abi=abi, value=value)
            )
        return await self._dispatcher.trx(wrapper.address, "mint", [value], options.merged(abi=abi))

    async def redeem(self, asset: str, amount: Amount, options: Options = None) -> PendingTransaction:
        """Redeem wrapper tokens, or an amount of underlying when ``asset`` is unwrapped."""

        prefix = error_prefix("redeem")
        options = CallOptions.coerce(options)
        require_symbol(asset, "asset", prefix)
        validate_amount(amount, "amount", prefix)

        deployment = await self._deployment()
        is_wrapper = asset.startswith(WRAPPER_PREFIX)
        wrapper_name = asset if is_wrapper else WRAPPER_PREFIX + asset
        underlying_name = asset[len(WRAPPER_PREFIX) :] if is_wrapper else asset

        if wrapper_name not in deployment.wrappers or underlying_name not in deployment.assets:
            raise ValidationError(
                f"{prefix}Argument `asset` is not supported.", field="asset", value=asset
            )

        descriptor = deployment.wrappers[wrapper_name] if is_wrapper else deployment.assets[asset]
        value = scale_amount(amount, descriptor.decimals, mantissa=options.mantissa, prefix=prefix)
        method = "redeem" if is_wrapper else "redeemUnderlying"

        return await self._dispatcher.trx(
            deployment.wrappers[wrapper_name].address,
            method,
            [value],
            options.merged(abi=market_abi(deployment, wrapper_name)),
        )

    async def borrow(self, asset: str, amount: Amount, options: Options = None) -> PendingTransaction:
        """Borrow ``asset``; collateral must already be supplied and its market entered."""

        prefix = error_prefix("borrow")
        options = CallOptions.coerce(options)
        require_symbol(asset, "asset", prefix)
        validate_amount(amount, "amount", prefix)

        deployment = await self._deployment()
        wrapper, underlying = self._lendable(deployment, asset, "cannot be borrowed.", prefix)
        value = scale_amount(amount, underlying.decimals, mantissa=options.mantissa, prefix=prefix)

        return await self._dispatcher.trx(
            wrapper.address,
            "borrow",
            [value],
            options.merged(abi=market_abi(deployment, wrapper.symbol)),
        )

    async def repay_borrow(
        self,
        asset: str,
        amount: Amount,
        borrower: str | None = None,
        no_approve: bool = False,
        options: Options = None,
    ) -> PendingTransaction:
        """Repay a borrow of ``asset`` for the sender or on behalf of ``borrower``.

        With ``max_repay`` set, non-native markets are sent the maximum uint256
        so the whole outstanding balance is repaid. The native market has no
        such sentinel, so the payment goes through Maximillion with a 1% buffer
        that it refunds.
        """

        prefix = error_prefix("repayBorrow")
        options = CallOptions.coerce(options)
        require_symbol(asset, "asset", prefix)
        validate_amount(amount, "amount", prefix)

        if borrower:
            try:
                borrower = validate_address(borrower, "borrower", prefix)
            except ValidationError as exc:
                raise ValidationError(
                    f"{prefix}Invalid `borrower` address.", field="borrower", value=borrower
                ) from exc
        else:
            borrower = None

        deployment = await self._deployment()
        wrapper, underlying = self._lendable(deployment, asset, "is not supported.", prefix)
        value = scale_amount(amount, underlying.decimals, mantissa=options.mantissa, prefix=prefix)
        native = deployment.native_wrapper == wrapper.symbol

        if options.max_repay and native:
            numerator, denominator = MAX_REPAY_NATIVE_BUFFER
            target = borrower or await self._sender(options)
            return await self._dispatcher.trx(
                self._registry.address(deployment.name, Contract.MAXIMILLION.value),
                "repayBehalf",
                [target],
                options.merged(abi=Maximillion_abi, value=value * numerator // denominator),
            )

        if options.max_repay:
            value = MAX_UINT256

        method = "repayBorrowBehalf" if borrower else "repayBorrow"
        parameters: list[Any] = [borrower] if borrower else []

        if native:
            return await self._dispatcher.trx(
                wrapper.address, method, parameters, options.merged(abi=rBinance_abi, value=value)
            )

        if not no_approve:
            await self._ensure_allowance(underlying.address, wrapper.address, value, options)

        parameters.append(value)
        return await self._dispatcher.trx(
            wrapper.address, method, parameters, options.merged(abi=rBep20_abi)
        )

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    async def _wrapper(self, wrapper: Any, message: str, prefix: str) -> tuple[AssetDescriptor, list]:
        require_symbol(wrapper, "rTokenName", prefix)
        deployment = await self._deployment()
        descriptor = deployment.wrappers.get(wrapper)
        if descriptor is None:
            raise ValidationError(f"{prefix}{message}", field="rTokenName", value=wrapper)
        return descriptor, market_abi(deployment, wrapper)

    async def token_read(
        self,
        func: str,
        wrapper: str,
        parameters: list[Any] | None = None,
        options: Options = None,
    ) -> Any:
        """Call one of the whitelisted views of a wrapper token."""

        prefix = error_prefix("tokenRead")
        options = CallOptions.coerce(options)
        if func not in READ_FUNCTIONS:
            raise ValidationError(f"{prefix}Invalid function name.", field="func", value=func)

        descriptor, abi = await self._wrapper(wrapper, f'Cannot call {func} on "{wrapper}".', prefix)
        return await self._dispatcher.read(
            descriptor.address, func, parameters or [], options.merged(abi=abi)
        )

    async def get_balance_of(self, wrapper: str, account: str, options: Options = None) -> int:
        prefix = error_prefix("getBalanceOf")
        options = CallOptions.coerce(options)
        account = validate_address(account, "accountAddr", prefix)
        descriptor, abi = await self._wrapper(wrapper, f'Cannot get balance on "{wrapper}".', prefix)
        return await self._dispatcher.read(
            descriptor.address, "balanceOf", [account], options.merged(abi=abi)
        )

    async def get_borrow_balance_of(
        self, wrapper: str, account: str, options: Options = None
    ) -> int:
        prefix = error_prefix("getBorrowBalanceOf")
        options = CallOptions.coerce(options)
        account = validate_address(account, "accountAddr", prefix)
        descriptor, abi = await self._wrapper(
            wrapper, f'Cannot get borrow balance on "{wrapper}".', prefix
        )
        return await self._dispatcher.read(
            descriptor.address, "borrowBalanceStored", [account], options.merged(abi=abi)
        )

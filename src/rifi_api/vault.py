"""Staking vaults: deposits, withdrawals and vested reward claims."""

from __future__ import annotations

import asyncio
import logging

from web3.exceptions import Web3Exception

from .abi import Bep20_abi, RewardLocker_abi, Vault_abi
from .base import Options, ProtocolComponent
from .constants import MAX_UINT256, SAFE_ALLOWANCE
from .eth.config import CallOptions
from .eth.transactions import PendingTransaction
from .exceptions import RegistryError, ValidationError, error_prefix
from .types import Address, Amount, RewardBalances, VaultDescriptor, VestingSchedule
from .utils import scale_amount, validate_address, validate_amount

logger = logging.getLogger(__name__)

# Reverts and transport failures of the claimable estimate count as nothing claimable.
_ESTIMATE_ERRORS = (Web3Exception, OSError, asyncio.TimeoutError)


class Vault(ProtocolComponent):
    """Operations on the protocol's reward vaults, addressed by vault name."""

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    async def _vault(self, name: str, operation: str) -> tuple[str, VaultDescriptor]:
        network = await self._network_name()
        try:
            return network, self._registry.vault(network, name)
        except RegistryError as exc:
            raise ValidationError(
                f"{error_prefix(operation, 'Vault')}Vault `vault` not found.",
                field="vault",
                value=name,
            ) from exc

    async def _is_approved(
        self, token: Address, owner: Address, spender: Address, amount: int, options: CallOptions
    ) -> bool:
        allowance = await self._dispatcher.read(
            token, "allowance", [owner, spender], options.merged(abi=Bep20_abi)
        )
        return allowance >= amount

    async def _approve(
        self, token: Address, spender: Address, amount: int, options: CallOptions
    ) -> PendingTransaction:
        logger.info("Approving vault %s to spend %s of %s", spender, amount, token)
        return await self._dispatcher.trx(
            token, "approve", [spender, amount], options.merged(abi=Bep20_abi)
        )

    # ------------------------------------------------------------------
    # Deposits
    # ------------------------------------------------------------------
    async def deposit_enabled(self, vault: str, options: Options = None) -> bool:
        """Whether the vault may pull deposit tokens without a new approval."""

        options = CallOptions.coerce(options)
        network, descriptor = await self._vault(vault, "depositEnabled")
        token = self._registry.address(network, descriptor.deposit_token)
        owner = await self._sender(options)
        return await self._is_approved(token, owner, descriptor.address, SAFE_ALLOWANCE, options)

    async def enable_deposit(self, vault: str, options: Options = None) -> PendingTransaction | None:
        """Approve the vault for unlimited deposits; ``None`` when already approved."""

        options = CallOptions.coerce(options)
        network, descriptor = await self._vault(vault, "enableDeposit")
        token = self._registry.address(network, descriptor.deposit_token)
        owner = await self._sender(options)
        if await self._is_approved(token, owner, descriptor.address, SAFE_ALLOWANCE, options):
            return None
        return await self._approve(token, descriptor.address, MAX_UINT256, options)

    async def deposit(
        self,
        vault: str,
        amount: Amount,
        no_approve: bool = False,
        options: Options = None,
    ) -> PendingTransaction:
        prefix = error_prefix("deposit", "Vault")
        options = CallOptions.coerce(options)
        validate_amount(amount, "amount", prefix)

        network, descriptor = await self._vault(vault, "deposit")
        token = self._registry.asset(network, descriptor.deposit_token)
        value = scale_amount(amount, token.decimals, mantissa=options.mantissa, prefix=prefix)

        if not no_approve:
            owner = await self._sender(options)
            if not await self._is_approved(token.address, owner, descriptor.address, value, options):
                approval = await self._approve(token.address, descriptor.address, value, options)
                await approval.wait()

        return await self._dispatcher.trx(
            descriptor.address, "deposit", [value], options.merged(abi=Vault_abi)
        )

    async def withdraw(
        self, vault: str, amount: Amount | None = None, options: Options = None
    ) -> PendingTransaction:
        """Withdraw ``amount`` of the deposit token, or everything when omitted."""

        prefix = error_prefix("withdraw", "Vault")
        options = CallOptions.coerce(options)
        if amount is not None:
            validate_amount(amount, "amount", prefix)

        network, descriptor = await self._vault(vault, "withdraw")
        if amount is None:
            return await self._dispatcher.trx(
                descriptor.address, "withdrawAll", [], options.merged(abi=Vault_abi)
            )

        decimals = self._registry.decimals(network, descriptor.deposit_token)
        value = scale_amount(amount, decimals, mantissa=options.mantissa, prefix=prefix)
        return await self._dispatcher.trx(
            descriptor.address, "withdraw", [value], options.merged(abi=Vault_abi)
        )

    # ------------------------------------------------------------------
    # Rewards
    # ------------------------------------------------------------------
    async def harvest_reward(self, vault: str, options: Options = None) -> PendingTransaction:
        options = CallOptions.coerce(options)
        _, descriptor = await self._vault(vault, "harvestReward")
        return await self._dispatcher.trx(
            descriptor.address, "harvest", [], options.merged(abi=Vault_abi)
        )

    def _locker(self, network: str, descriptor: VaultDescriptor) -> tuple[Address, Address]:
        return (
            self._registry.address(network, descriptor.reward_locker),
            self._registry.address(network, descriptor.reward_token),
        )

    async def claim_reward(self, vault: str, options: Options = None) -> PendingTransaction | None:
        """Vest every reward schedule of the sender; ``None`` when there are none."""

        options = CallOptions.coerce(options)
        network, descriptor = await self._vault(vault, "claimReward")
        locker, token = self._locker(network, descriptor)
        owner = await self._sender(options)
        locker_options = options.merged(abi=RewardLocker_abi)

        schedules = await self._dispatcher.read(
            locker, "numVestingSchedules", [owner, token], locker_options
        )
        if schedules <= 0:
            return None
        return await self._dispatcher.trx(
            locker, "vestSchedulesInRange", [token, 0, schedules - 1], locker_options
        )

    async def get_deposit_of(
        self, vault: str, account: str | None = None, options: Options = None
    ) -> int:
        prefix = error_prefix("getDepositOf", "Vault")
        options = CallOptions.coerce(options)
        if account is not None:
            account = validate_address(account, "account", prefix)

        _, descriptor = await self._vault(vault, "getDepositOf")
        if account is None:
            account = await self._sender(options)
        return await self._dispatcher.read(
            descriptor.address, "getBalance", [account], options.merged(abi=Vault_abi)
        )

    async def get_reward_balances(self, vault: str, options: Options = None) -> RewardBalances:
        """Pending, vesting and claimable rewards of the sender.

        The claimable amount is estimated by simulating a vest of every
        schedule; if that call fails the estimate counts as zero.
        """

        options = CallOptions.coerce(options)
        network, descriptor = await self._vault(vault, "getRewardBalances")
        locker, token = self._locker(network, descriptor)
        owner = await self._sender(options)
        locker_options = options.merged(abi=RewardLocker_abi)

        pending = await self._dispatcher.read(
            descriptor.address, "getUnclaimedReward", [owner], options.merged(abi=Vault_abi)
        )
        count = await self._dispatcher.read(
            locker, "numVestingSchedules", [owner, token], locker_options
        )
        if count <= 0:
            return RewardBalances(pending=pending, vesting=0, claimable=0)

        try:
            claimable = await self._dispatcher.read(
                locker, "vestSchedulesInRange", [token, 0, count - 1], locker_options
            )
        except _ESTIMATE_ERRORS as exc:
            logger.warning("Claimable reward estimate failed for %s: %s", owner, exc)
            claimable = 0

        raw = await self._dispatcher.read(
            locker, "getVestingSchedules", [owner, token], locker_options
        )
        unvested = sum(VestingSchedule.from_tuple(item).unvested for item in raw)
        return RewardBalances(pending=pending, vesting=unvested - claimable, claimable=claimable)

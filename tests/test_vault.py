from __future__ import annotations

import pytest
from web3.exceptions import ContractLogicError

from conftest import USER, DummyDispatcher
from rifi_api.constants import MAX_UINT256, SAFE_ALLOWANCE
from rifi_api.exceptions import ValidationError
from rifi_api.types import RewardBalances
from rifi_api.vault import Vault

VAULT = "RifiVault"
ONE = 10**18


@pytest.fixture
def dispatcher():
    return DummyDispatcher(
        reads={
            "allowance": 0,
            "getBalance": 12 * ONE,
            "getUnclaimedReward": 3 * ONE,
            "numVestingSchedules": 2,
            "vestSchedulesInRange": ONE,
            "getVestingSchedules": [(1, 100, 4 * ONE, ONE), (50, 150, 2 * ONE, 0)],
        }
    )


@pytest.fixture
def vault(component_parts):
    return Vault(*component_parts)


def _address(registry, symbol):
    return registry.address("development", symbol)


@pytest.mark.asyncio
async def test_unknown_vault(vault, dispatcher):
    with pytest.raises(ValidationError) as excinfo:
        await vault.withdraw("Nope")
    assert str(excinfo.value) == "Vault [withdraw] | Vault `vault` not found."
    assert dispatcher.calls == []


class TestDeposits:
    @pytest.mark.asyncio
    async def test_deposit_approves_first(self, vault, dispatcher, registry):
        await vault.deposit(VAULT, 2)

        assert dispatcher.methods() == ["allowance", "approve", "deposit"]
        assert dispatcher.last("allowance")[1] == _address(registry, "RIFI")
        assert dispatcher.last("approve")[3] == [_address(registry, VAULT), 2 * ONE]
        assert dispatcher.pending[0].waited
        assert dispatcher.last("deposit")[3] == [2 * ONE]

    @pytest.mark.asyncio
    async def test_deposit_without_approval(self, vault, dispatcher):
        await vault.deposit(VAULT, 2, no_approve=True)
        assert dispatcher.methods() == ["deposit"]

    @pytest.mark.asyncio
    async def test_deposit_enabled(self, vault, dispatcher):
        assert await vault.deposit_enabled(VAULT) is False
        dispatcher.reads["allowance"] = SAFE_ALLOWANCE
        assert await vault.deposit_enabled(VAULT) is True

    @pytest.mark.asyncio
    async def test_enable_deposit(self, vault, dispatcher):
        pending = await vault.enable_deposit(VAULT)
        assert pending is dispatcher.pending[0]
        assert dispatcher.last("approve")[3][1] == MAX_UINT256

    @pytest.mark.asyncio
    async def test_enable_deposit_when_already_enabled(self, vault, dispatcher):
        dispatcher.reads["allowance"] = MAX_UINT256
        assert await vault.enable_deposit(VAULT) is None
        assert dispatcher.methods("trx") == []


class TestWithdraw:
    @pytest.mark.asyncio
    async def test_withdraw_amount(self, vault, dispatcher):
        await vault.withdraw(VAULT, "0.5")
        assert dispatcher.last("withdraw")[3] == [ONE // 2]

    @pytest.mark.asyncio
    async def test_withdraw_everything(self, vault, dispatcher):
        await vault.withdraw(VAULT)
        assert dispatcher.methods() == ["withdrawAll"]


class TestRewards:
    @pytest.mark.asyncio
    async def test_harvest(self, vault, dispatcher, registry):
        await vault.harvest_reward(VAULT)
        assert dispatcher.calls[0][1:3] == (_address(registry, VAULT), "harvest")

    @pytest.mark.asyncio
    async def test_claim_reward_vests_every_schedule(self, vault, dispatcher, registry):
        await vault.claim_reward(VAULT)

        assert dispatcher.last("numVestingSchedules")[3] == [USER, _address(registry, "RIFI")]
        kind, locker, _, params, _ = dispatcher.last("vestSchedulesInRange")
        assert kind == "trx"
        assert locker == _address(registry, "RewardLocker")
        assert params == [_address(registry, "RIFI"), 0, 1]

    @pytest.mark.asyncio
    async def test_claim_reward_without_schedules(self, vault, dispatcher):
        dispatcher.reads["numVestingSchedules"] = 0
        assert await vault.claim_reward(VAULT) is None
        assert dispatcher.methods("trx") == []

    @pytest.mark.asyncio
    async def test_reward_balances(self, vault):
        balances = await vault.get_reward_balances(VAULT)
        # 3 + 2 unvested, 1 of which can be vested now
        assert balances == RewardBalances(pending=3 * ONE, vesting=4 * ONE, claimable=ONE)

    @pytest.mark.asyncio
    async def test_failed_claimable_estimate_counts_as_zero(self, vault, dispatcher, caplog):
        dispatcher.reads["vestSchedulesInRange"] = ContractLogicError("execution reverted")
        balances = await vault.get_reward_balances(VAULT)
        assert balances.claimable == 0
        assert balances.vesting == 5 * ONE
        assert "Claimable reward estimate failed" in caplog.text

    @pytest.mark.asyncio
    @pytest.mark.parametrize("error", [TimeoutError("timed out"), ConnectionError("reset")])
    async def test_transport_failure_in_claimable_estimate(self, vault, dispatcher, error):
        dispatcher.reads["vestSchedulesInRange"] = error
        balances = await vault.get_reward_balances(VAULT)
        assert balances == RewardBalances(pending=3 * ONE, vesting=5 * ONE, claimable=0)

    @pytest.mark.asyncio
    async def test_reward_balances_without_schedules(self, vault, dispatcher):
        dispatcher.reads["numVestingSchedules"] = 0
        balances = await vault.get_reward_balances(VAULT)
        assert balances == RewardBalances(pending=3 * ONE, vesting=0, claimable=0)
        assert "getVestingSchedules" not in dispatcher.methods()


@pytest.mark.asyncio
async def test_deposit_of(vault, dispatcher, registry):
    assert await vault.get_deposit_of(VAULT) == 12 * ONE
    assert dispatcher.last("getBalance")[3] == [USER]

    await vault.get_deposit_of(VAULT, USER.lower())
    assert dispatcher.last("getBalance")[3] == [USER]

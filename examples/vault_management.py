"""Vault management example for the Rifi API."""

import asyncio
import os

from dotenv import load_dotenv

from rifi_api import Rifi, RifiConfig

# Load environment variables from .env file
load_dotenv()


async def example_vault_operations():
    """Example of vault deposit, reward and withdrawal operations."""

    config = RifiConfig.from_env()
    if not config.private_key:
        raise ValueError("RIFI_PRIVATE_KEY not found in environment variables")

    # RIFI_DEPLOYMENTS must name a deployment table listing the RPC_URL network
    rifi = Rifi(os.getenv("RPC_URL", "bsc_testnet"), config)
    vault = os.getenv("VAULT_NAME", "RifiVault")
    print(f"Using vault {vault}")
    print()

    # 1. One-off unlimited approval
    print("1. Enable Deposits")
    approval = await rifi.vault.enable_deposit(vault)
    if approval is None:
        print("Deposits already enabled")
    else:
        await approval.wait()
        print(f"Approved in {approval.hash}")

    # 2. Deposit
    print("2. Deposit")
    deposit = await rifi.vault.deposit(vault, 10, no_approve=True)
    await deposit.wait()
    print(f"Deposited: {await rifi.vault.get_deposit_of(vault)}")

    # 3. Rewards
    print("3. Rewards")
    balances = await rifi.vault.get_reward_balances(vault)
    print(f"Pending: {balances.pending}")
    print(f"Vesting: {balances.vesting}")
    print(f"Claimable: {balances.claimable}")

    harvest = await rifi.vault.harvest_reward(vault)
    await harvest.wait()
    claim = await rifi.vault.claim_reward(vault)
    if claim is not None:
        await claim.wait()
        print(f"Claimed vested rewards in {claim.hash}")

    # 4. Withdraw everything
    print("4. Withdraw")
    withdraw = await rifi.vault.withdraw(vault)
    await withdraw.wait()
    print(f"Withdrew all in {withdraw.hash}")


if __name__ == "__main__":
    asyncio.run(example_vault_operations())

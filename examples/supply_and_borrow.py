"""Supply, borrow and repay example for the Rifi API."""

import asyncio
import os

from dotenv import load_dotenv

from rifi_api import Rifi, RifiConfig

# Load environment variables from .env file
load_dotenv()


async def example_market_operations():
    """Supply collateral, borrow against it, then repay in full."""

    config = RifiConfig.from_env()
    if not config.private_key and not config.mnemonic:
        raise ValueError("RIFI_PRIVATE_KEY or RIFI_MNEMONIC not found in environment variables")

    # RIFI_DEPLOYMENTS must name a deployment table listing the RPC_URL network
    rifi = Rifi(os.getenv("RPC_URL", "bsc_testnet"), config)
    account = await rifi.user_address()
    print(f"Using account {account}")

    # 1. Supply BUSD; the market is approved first if needed
    supply = await rifi.supply("BUSD", 100)
    receipt = await supply.wait()
    print(f"Supplied 100 BUSD in block {receipt['blockNumber']}")

    # 2. Use the supply as collateral
    enter = await rifi.enter_markets(["rBUSD"])
    await enter.wait()
    factor = await rifi.get_collateral_factor("rBUSD")
    print(f"rBUSD collateral factor: {factor / 1e18:.0%}")

    # 3. Borrow some BNB
    borrow = await rifi.borrow("BNB", "0.05")
    await borrow.wait()
    owed = await rifi.get_borrow_balance_of("rBNB", account)
    print(f"Borrowed BNB, outstanding mantissa: {owed}")

    # 4. Repay the whole borrow; the 1% buffer is refunded
    repay = await rifi.repay_borrow("BNB", owed, options={"mantissa": True, "maxRepay": True})
    await repay.wait()
    print(f"Repaid in transaction {repay.hash}")

    # 5. Claim accrued RIFI rewards
    claim = await rifi.claim_rifi()
    await claim.wait()
    print(f"Claimed RIFI in transaction {claim.hash}")


if __name__ == "__main__":
    asyncio.run(example_market_operations())

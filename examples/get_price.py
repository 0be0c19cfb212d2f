"""Price fetching example for the Rifi API."""

import asyncio
import logging
import os

from dotenv import load_dotenv

from rifi_api import Rifi, RifiConfig
from rifi_api.exceptions import ValidationError

# Configure logging to see detailed execution
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Load environment variables from .env file
load_dotenv()


async def price_fetching():
    """Demonstrate price queries against the on-chain price feed."""

    # RIFI_DEPLOYMENTS must name a deployment table listing the RPC_URL network
    rifi = Rifi(os.getenv("RPC_URL", "bsc_testnet"), RifiConfig.from_env())
    network = await rifi.resolve_network()
    logger.info("Connected to %s (chain id %s)", network.name, network.chain_id)

    print("=" * 60)
    print("Rifi Price Feed Examples")
    print("=" * 60)

    # Example 1: Prices in the default quote asset (BUSD)
    print("\n1. Asset Prices in BUSD")
    print("-" * 30)
    for asset in ["BNB", "WBTC", "ETH", "RIFI"]:
        try:
            price = await rifi.get_price(asset)
            print(f"{asset:>6}: {price:>12,.4f} BUSD")
        except ValidationError as e:
            print(f"{asset:>6}: {e}")

    # Example 2: Wrapper tokens fold in their exchange rate
    print("\n2. Wrapper Token Prices")
    print("-" * 30)
    rbnb_in_bnb = await rifi.get_price("rBNB", "BNB")
    print(f"1 rBNB = {rbnb_in_bnb:.8f} BNB")

    # Example 3: USD price reported for a market's underlying
    print("\n3. Underlying Prices")
    print("-" * 30)
    usd_price = await rifi.get_underlying_price("rBNB")
    print(f"BNB: ${usd_price:,.2f}")

    # Example 4: Unsupported assets are rejected before any call
    print("\n4. Error Handling")
    print("-" * 30)
    try:
        await rifi.get_price("INVALID_ASSET")
    except ValidationError as e:
        print(f"Correctly caught error for invalid asset: {e}")


if __name__ == "__main__":
    asyncio.run(price_fetching())

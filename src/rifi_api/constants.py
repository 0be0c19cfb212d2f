"""Constants and lookup tables for the Rifi protocol SDK."""

from enum import Enum

# Chain id -> symbolic network name used as the key of deployment tables.
CHAIN_ID_NAMES = {
    1: "mainnet",
    3: "ropsten",
    4: "rinkeby",
    5: "goerli",
    42: "kovan",
    56: "bsc_mainnet",
    97: "bsc_testnet",
    81: "shibuya",
    137: "polygon",
    592: "astar_mainnet",
    1337: "development",
    31337: "development",
    80001: "mumbai",
}

DEFAULT_NETWORK_NAME = "bsc_mainnet"

# Public JSON-RPC endpoints used when no provider is configured.
DEFAULT_RPC_URLS = {
    "mainnet": "https://cloudflare-eth.com",
    "goerli": "https://rpc.ankr.com/eth_goerli",
    "bsc_mainnet": "https://bsc-dataseed.binance.org",
    "bsc_testnet": "https://data-seed-prebsc-1-s1.binance.org:8545",
    "polygon": "https://polygon-rpc.com",
    "mumbai": "https://rpc-mumbai.maticvigil.com",
    "astar_mainnet": "https://evm.astar.network",
    "shibuya": "https://evm.shibuya.astar.network",
    "development": "http://127.0.0.1:8545",
}

DEFAULT_API_URL = "https://api.rifi.finance"

# Wrapper tokens are named by prefixing the underlying symbol.
WRAPPER_PREFIX = "r"
WRAPPER_DECIMALS = 8
EXCHANGE_RATE_DECIMALS = 18

DEFAULT_QUOTE_ASSET = "BUSD"

# The price feed reports BTC rather than the wrapped ERC-20.
ORACLE_SYMBOL_ALIASES = {"WBTC": "BTC"}

# Chain ids whose oracle scales underlying prices by 10 ** (26 - decimals).
ALTERNATE_ORACLE_CHAIN_IDS = frozenset({81, 592, 5, 80001})

MAX_UINT256 = 2**256 - 1
# The governance token caps allowances at 2**96 - 1, so approval checks use a lower bar.
SAFE_ALLOWANCE = 2**88 - 1

# Buffer applied to native-coin max repayments routed through Maximillion.
MAX_REPAY_NATIVE_BUFFER = (101, 100)

READ_FUNCTIONS = (
    "borrowRatePerBlock",
    "exchangeRateStored",
    "getCash",
    "supplyRatePerBlock",
    "totalBorrows",
    "totalReserves",
    "totalSupply",
)

LENS_FUNCTIONS = (
    "rTokenMetadata",
    "rTokenMetadataAll",
    "rTokenBalances",
    "rTokenBalancesAll",
    "rTokenUnderlyingPrice",
    "rTokenUnderlyingPriceAll",
    "getAccountLimits",
)


class Contract(str, Enum):
    """Protocol contract names as they appear in deployment tables."""

    COINTROLLER = "Cointroller"
    PRICE_FEED = "PriceFeed"
    RIFI = "RIFI"
    LENS = "RifiLens"
    MAXIMILLION = "Maximillion"


def get_net_name_with_chain_id(chain_id: int, default: str = DEFAULT_NETWORK_NAME) -> str:
    """Get the symbolic network name for a chain id.

    Args:
        chain_id: Numeric EIP-155 chain id

    Returns:
        Network name, or ``default`` when the chain id is unknown
    """
    return CHAIN_ID_NAMES.get(int(chain_id), default)

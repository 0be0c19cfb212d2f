"""Contract ABIs used by the Rifi protocol SDK."""

from __future__ import annotations

from typing import Any

AbiEntry = dict[str, Any]


def _param(type_: str, name: str = "", components: list[AbiEntry] | None = None) -> AbiEntry:
    entry: AbiEntry = {"name": name, "type": type_}
    if components is not None:
        entry["components"] = components
    return entry


def _fn(
    name: str,
    inputs: list[AbiEntry] | None = None,
    outputs: list[AbiEntry] | None = None,
    mutability: str = "nonpayable",
) -> AbiEntry:
    return {
        "type": "function",
        "name": name,
        "inputs": inputs or [],
        "outputs": outputs or [],
        "stateMutability": mutability,
    }


def _view(name: str, inputs: list[AbiEntry] | None = None, *outputs: AbiEntry) -> AbiEntry:
    return _fn(name, inputs, list(outputs), "view")


_UINT = _param("uint256")
_BOOL = _param("bool")


Bep20_abi: list[AbiEntry] = [
    _view("name", None, _param("string")),
    _view("symbol", None, _param("string")),
    _view("decimals", None, _param("uint8")),
    _view("totalSupply", None, _UINT),
    _view("balanceOf", [_param("address", "owner")], _UINT),
    _view("allowance", [_param("address", "owner"), _param("address", "spender")], _UINT),
    _fn("approve", [_param("address", "spender"), _param("uint256", "amount")], [_BOOL]),
    _fn("transfer", [_param("address", "dst"), _param("uint256", "amount")], [_BOOL]),
]

_R_TOKEN_COMMON: list[AbiEntry] = [
    _view("name", None, _param("string")),
    _view("symbol", None, _param("string")),
    _view("decimals", None, _param("uint8")),
    _view("underlying", None, _param("address")),
    _view("totalSupply", None, _UINT),
    _view("balanceOf", [_param("address", "owner")], _UINT),
    _view("allowance", [_param("address", "owner"), _param("address", "spender")], _UINT),
    _fn("approve", [_param("address", "spender"), _param("uint256", "amount")], [_BOOL]),
    _fn("exchangeRateCurrent", None, [_UINT]),
    _view("exchangeRateStored", None, _UINT),
    _view("borrowRatePerBlock", None, _UINT),
    _view("supplyRatePerBlock", None, _UINT),
    _view("getCash", None, _UINT),
    _view("totalBorrows", None, _UINT),
    _view("totalReserves", None, _UINT),
    _view("borrowBalanceStored", [_param("address", "account")], _UINT),
    _fn("borrowBalanceCurrent", [_param("address", "account")], [_UINT]),
    _fn("balanceOfUnderlying", [_param("address", "owner")], [_UINT]),
    _fn("redeem", [_param("uint256", "redeemTokens")], [_UINT]),
    _fn("redeemUnderlying", [_param("uint256", "redeemAmount")], [_UINT]),
    _fn("borrow", [_param("uint256", "borrowAmount")], [_UINT]),
]

rBep20_abi: list[AbiEntry] = _R_TOKEN_COMMON + [
    _fn("mint", [_param("uint256", "mintAmount")], [_UINT]),
    _fn("repayBorrow", [_param("uint256", "repayAmount")], [_UINT]),
    _fn(
        "repayBorrowBehalf",
        [_param("address", "borrower"), _param("uint256", "repayAmount")],
        [_UINT],
    ),
]

rBinance_abi: list[AbiEntry] = _R_TOKEN_COMMON + [
    _fn("mint", None, None, "payable"),
    _fn("repayBorrow", None, None, "payable"),
    _fn("repayBorrowBehalf", [_param("address", "borrower")], None, "payable"),
]

Maximillion_abi: list[AbiEntry] = [
    _fn("repayBehalf", [_param("address", "borrower")], None, "payable"),
    _fn(
        "repayBehalfExplicit",
        [_param("address", "borrower"), _param("address", "rBinance_")],
        None,
        "payable",
    ),
]

PriceFeed_abi: list[AbiEntry] = [
    _view("price", [_param("string", "symbol")], _UINT),
    _view("getUnderlyingPrice", [_param("address", "rToken")], _UINT),
]

Cointroller_abi: list[AbiEntry] = [
    _fn("enterMarkets", [_param("address[]", "rTokens")], [_param("uint256[]")]),
    _fn("exitMarket", [_param("address", "rTokenAddress")], [_UINT]),
    _view(
        "markets",
        [_param("address", "")],
        _param("bool", "isListed"),
        _param("uint256", "collateralFactorMantissa"),
        _param("bool", "isRified"),
    ),
    _view(
        "checkMembership",
        [_param("address", "account"), _param("address", "rToken")],
        _BOOL,
    ),
    _view("getAssetsIn", [_param("address", "account")], _param("address[]")),
    _view(
        "getAccountLiquidity",
        [_param("address", "account")],
        _UINT,
        _param("uint256", "liquidity"),
        _param("uint256", "shortfall"),
    ),
    _view("closeFactorMantissa", None, _UINT),
    _view("liquidationIncentiveMantissa", None, _UINT),
    _fn("claimRifi", [_param("address", "holder")]),
    _fn("claimRifi", [_param("address", "holder"), _param("address[]", "rTokens")]),
]

RIFI_abi: list[AbiEntry] = [
    _view("name", None, _param("string")),
    _view("symbol", None, _param("string")),
    _view("decimals", None, _param("uint8")),
    _view("balanceOf", [_param("address", "account")], _UINT),
    _view("nonces", [_param("address", "")], _UINT),
    _view("delegates", [_param("address", "")], _param("address")),
    _view("getCurrentVotes", [_param("address", "account")], _param("uint96")),
    _fn("delegate", [_param("address", "delegatee")]),
    _fn(
        "delegateBySig",
        [
            _param("address", "delegatee"),
            _param("uint256", "nonce"),
            _param("uint256", "expiry"),
            _param("uint8", "v"),
            _param("bytes32", "r"),
            _param("bytes32", "s"),
        ],
    ),
]

_R_TOKEN_METADATA = [
    _param("address", "rToken"),
    _param("uint256", "exchangeRateCurrent"),
    _param("uint256", "supplyRatePerBlock"),
    _param("uint256", "borrowRatePerBlock"),
    _param("uint256", "reserveFactorMantissa"),
    _param("uint256", "totalBorrows"),
    _param("uint256", "totalReserves"),
    _param("uint256", "totalSupply"),
    _param("uint256", "totalCash"),
    _param("bool", "isListed"),
    _param("uint256", "collateralFactorMantissa"),
    _param("address", "underlyingAssetAddress"),
    _param("uint256", "rTokenDecimals"),
    _param("uint256", "underlyingDecimals"),
]

_R_TOKEN_BALANCES = [
    _param("address", "rToken"),
    _param("uint256", "balanceOf"),
    _param("uint256", "borrowBalanceCurrent"),
    _param("uint256", "balanceOfUnderlying"),
    _param("uint256", "tokenBalance"),
    _param("uint256", "tokenAllowance"),
]

_R_TOKEN_PRICE = [_param("address", "rToken"), _param("uint256", "underlyingPrice")]

RifiLens_abi: list[AbiEntry] = [
    _fn(
        "rTokenMetadata",
        [_param("address", "rToken")],
        [_param("tuple", "", _R_TOKEN_METADATA)],
    ),
    _fn(
        "rTokenMetadataAll",
        [_param("address[]", "rTokens")],
        [_param("tuple[]", "", _R_TOKEN_METADATA)],
    ),
    _fn(
        "rTokenBalances",
        [_param("address", "rToken"), _param("address", "account")],
        [_param("tuple", "", _R_TOKEN_BALANCES)],
    ),
    _fn(
        "rTokenBalancesAll",
        [_param("address[]", "rTokens"), _param("address", "account")],
        [_param("tuple[]", "", _R_TOKEN_BALANCES)],
    ),
    _view(
        "rTokenUnderlyingPrice",
        [_param("address", "rToken")],
        _param("tuple", "", _R_TOKEN_PRICE),
    ),
    _view(
        "rTokenUnderlyingPriceAll",
        [_param("address[]", "rTokens")],
        _param("tuple[]", "", _R_TOKEN_PRICE),
    ),
    _view(
        "getAccountLimits",
        [_param("address", "cointroller"), _param("address", "account")],
        _param(
            "tuple",
            "",
            [
                _param("address[]", "markets"),
                _param("uint256", "liquidity"),
                _param("uint256", "shortfall"),
            ],
        ),
    ),
    _fn(
        "getRifiBalanceMetadataExt",
        [
            _param("address", "rifi"),
            _param("address", "cointroller"),
            _param("address", "account"),
        ],
        [
            _param(
                "tuple",
                "",
                [
                    _param("uint256", "balance"),
                    _param("uint256", "votes"),
                    _param("address", "delegate"),
                    _param("uint256", "allocated"),
                ],
            )
        ],
    ),
]

Vault_abi: list[AbiEntry] = [
    _fn("deposit", [_param("uint256", "amount")]),
    _fn("withdraw", [_param("uint256", "amount")]),
    _fn("withdrawAll"),
    _fn("harvest"),
    _view("getBalance", [_param("address", "account")], _UINT),
    _view("getUnclaimedReward", [_param("address", "account")], _UINT),
]

RewardLocker_abi: list[AbiEntry] = [
    _view(
        "numVestingSchedules",
        [_param("address", "account"), _param("address", "token")],
        _UINT,
    ),
    _fn(
        "vestSchedulesInRange",
        [
            _param("address", "token"),
            _param("uint256", "startIndex"),
            _param("uint256", "endIndex"),
        ],
        [_UINT],
    ),
    _view(
        "getVestingSchedules",
        [_param("address", "account"), _param("address", "token")],
        _param(
            "tuple[]",
            "schedules",
            [
                _param("uint64", "startBlock"),
                _param("uint64", "endBlock"),
                _param("uint128", "quantity"),
                _param("uint128", "vestedQuantity"),
            ],
        ),
    ),
]

ABIS: dict[str, list[AbiEntry]] = {
    "Bep20": Bep20_abi,
    "rBep20": rBep20_abi,
    "rBinance": rBinance_abi,
    "Maximillion": Maximillion_abi,
    "PriceFeed": PriceFeed_abi,
    "Cointroller": Cointroller_abi,
    "RIFI": RIFI_abi,
    "RifiLens": RifiLens_abi,
    "Vault": Vault_abi,
    "RewardLocker": RewardLocker_abi,
}


def get_abi(contract: str) -> list[AbiEntry]:
    """Return the ABI for one of the protocol contracts by name."""
    if contract not in ABIS:
        raise KeyError(f"Unknown contract ABI: {contract}")
    return ABIS[contract]

from __future__ import annotations

import pytest

from rifi_api.eth.signature import parse_function_signature
from rifi_api.exceptions import ValidationError


def test_parses_function_with_returns():
    entry = parse_function_signature("function nonces(address) returns (uint)")
    assert entry == {
        "type": "function",
        "name": "nonces",
        "inputs": [{"name": "", "type": "address"}],
        "outputs": [{"name": "", "type": "uint256"}],
        "stateMutability": "nonpayable",
    }


def test_parses_named_parameters_and_modifiers():
    entry = parse_function_signature(
        "function transfer(address to, uint amount) external returns (bool ok)"
    )
    assert entry["inputs"] == [
        {"name": "to", "type": "address"},
        {"name": "amount", "type": "uint256"},
    ]
    assert entry["outputs"] == [{"name": "ok", "type": "bool"}]


def test_view_and_payable_modifiers():
    assert parse_function_signature("balanceOf(address) view returns (uint256)")[
        "stateMutability"
    ] == "view"
    assert parse_function_signature("mint() payable")["stateMutability"] == "payable"


def test_drops_data_locations():
    entry = parse_function_signature("function price(string memory symbol) view returns (uint)")
    assert entry["inputs"] == [{"name": "symbol", "type": "string"}]


def test_array_types():
    entry = parse_function_signature("enterMarkets(address[]) returns (uint[])")
    assert entry["inputs"][0]["type"] == "address[]"
    assert entry["outputs"][0]["type"] == "uint256[]"


@pytest.mark.parametrize(
    "signature",
    [
        "nonces",
        "function (address)",
        "function 1nonces(address)",
        "function nonces(address",
        "function nonces(adress)",
        "function nonces(uint7)",
        "function nonces(address) sometimes",
        "function nonces(address) returns uint",
        "function f((uint256,address) pair)",
    ],
)
def test_rejects_malformed_signatures(signature):
    with pytest.raises(ValidationError):
        parse_function_signature(signature)

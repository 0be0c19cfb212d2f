"""Tests for unit conversion and helper functions."""

from decimal import Decimal

import pytest
from hexbytes import HexBytes

from rifi_api.exceptions import ArgumentTypeError, ValidationError
from rifi_api.utils import (
    scale_amount,
    serialise_receipt,
    to_fixed_point,
    to_human,
    validate_address,
    validate_amount,
)


class TestFixedPoint:
    """Test human amount -> mantissa scaling."""

    def test_string_amount(self):
        assert to_fixed_point("1.5", 18) == 1_500_000_000_000_000_000

    def test_float_amount_has_no_binary_artifacts(self):
        assert to_fixed_point(0.1, 18) == 100_000_000_000_000_000
        assert to_fixed_point(1.1, 6) == 1_100_000

    def test_int_and_decimal_amounts(self):
        assert to_fixed_point(3, 8) == 300_000_000
        assert to_fixed_point(Decimal("0.00000001"), 8) == 1

    def test_extra_digits_are_truncated_not_rounded(self):
        assert to_fixed_point("1.23456789", 4) == 12345
        assert to_fixed_point("0.99999", 2) == 99

    def test_zero_decimals(self):
        assert to_fixed_point("5.9", 0) == 5

    def test_amount_below_precision_becomes_zero(self):
        assert to_fixed_point("1e-7", 6) == 0

    @pytest.mark.parametrize(
        ("value", "decimals"),
        [("0.1", 18), ("123.456789", 6), ("7", 8), ("0.000123456", 4), ("98765.4321", 18)],
    )
    def test_round_trip_never_exceeds_original(self, value, decimals):
        recovered = to_human(to_fixed_point(value, decimals), decimals)
        assert recovered <= float(value)
        assert float(value) - recovered <= 10**-decimals + 1e-12


class TestToHuman:
    def test_to_human(self):
        assert to_human(1_500_000, 6) == 1.5

    def test_to_human_zero(self):
        assert to_human(0, 18) == 0.0


class TestScaleAmount:
    def test_mantissa_passes_exact_integer(self):
        raw = "123456789012345678901234567890"
        assert scale_amount(raw, 18, mantissa=True) == 123456789012345678901234567890

    def test_mantissa_rejects_fractions(self):
        with pytest.raises(ValidationError, match="must be an integer"):
            scale_amount(1.5, 18, mantissa=True)

    def test_scaling_by_default(self):
        assert scale_amount("2", 6) == 2_000_000


class TestAmountValidation:
    @pytest.mark.parametrize("value", [None, True, [1], object()])
    def test_wrong_type(self, value):
        with pytest.raises(ArgumentTypeError, match="must be a string, number, or Decimal"):
            validate_amount(value)

    @pytest.mark.parametrize("value", ["abc", "", float("inf"), "nan"])
    def test_non_numeric(self, value):
        with pytest.raises(ValidationError):
            to_fixed_point(value, 18)

    def test_negative(self):
        with pytest.raises(ValidationError, match="cannot be negative"):
            to_fixed_point(-1, 18)

    def test_prefix_is_included(self):
        with pytest.raises(ValidationError) as excinfo:
            validate_amount("x", "amount", "Rifi [supply] | ")
        assert str(excinfo.value).startswith("Rifi [supply] | Argument `amount`")
        assert excinfo.value.field == "amount"


class TestAddressValidation:
    def test_checksums_lowercase_address(self):
        address = validate_address("0x70997970c51812dc3a010c7d01b50e0d17dc79c8", "account")
        assert address == "0x70997970C51812dc3A010C7d01b50e0d17dc79C8"

    def test_invalid_address(self):
        with pytest.raises(ValidationError, match="valid Ethereum address"):
            validate_address("0x1234", "account")

    def test_non_string(self):
        with pytest.raises(ArgumentTypeError):
            validate_address(1234, "account")


def test_serialise_receipt_hexlifies_bytes():
    receipt = {
        "transactionHash": HexBytes("0x" + "ab" * 32),
        "logs": [{"data": b"\x01\x02", "topics": [HexBytes("0x00")]}],
        "status": 1,
    }
    assert serialise_receipt(receipt) == {
        "transactionHash": "0x" + "ab" * 32,
        "logs": [{"data": "0x0102", "topics": ["0x00"]}],
        "status": 1,
    }

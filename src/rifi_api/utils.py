"""Unit conversion and helper functions for the Rifi protocol SDK."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from decimal import ROUND_DOWN, Decimal, InvalidOperation, localcontext
from typing import Any

from eth_utils import is_address, to_checksum_address
from hexbytes import HexBytes

from .exceptions import ArgumentTypeError, ValidationError
from .types import Address, Amount


def _to_decimal(value: Amount, field: str, prefix: str) -> Decimal:
    if isinstance(value, bool) or not isinstance(value, int | float | str | Decimal):
        raise ArgumentTypeError(
            f"{prefix}Argument `{field}` must be a string, number, or Decimal.",
            field=field,
            value=value,
        )

    try:
        if isinstance(value, float):
            amount = Decimal(str(value))
        elif isinstance(value, str):
            amount = Decimal(value.strip())
        else:
            amount = Decimal(value)
    except InvalidOperation as exc:
        raise ValidationError(
            f"{prefix}Argument `{field}` must be numeric.", field=field, value=value
        ) from exc

    if not amount.is_finite():
        raise ValidationError(
            f"{prefix}Argument `{field}` must be finite.", field=field, value=value
        )
    if amount < 0:
        raise ValidationError(
            f"{prefix}Argument `{field}` cannot be negative.", field=field, value=value
        )
    return amount


def to_fixed_point(
    value: Amount, decimals: int, *, field: str = "amount", prefix: str = ""
) -> int:
    """Scale a human-readable amount to its integer mantissa.

    The amount is fixed to ``decimals + 1`` fractional digits and the trailing
    digit is dropped, so the result never exceeds the requested amount.
    """
    amount = _to_decimal(value, field, prefix)

    with localcontext() as ctx:
        ctx.prec = max(28, amount.adjusted() + decimals + 8)
        quantizer = Decimal(1).scaleb(-(decimals + 1))
        fixed = format(amount.quantize(quantizer, rounding=ROUND_DOWN), "f")
        truncated = Decimal(fixed[:-1])
        return int(truncated.scaleb(decimals))


def to_human(mantissa: int, decimals: int) -> float:
    """Convert an integer mantissa back to a float amount."""
    return float(Decimal(int(mantissa)).scaleb(-int(decimals)))


def to_mantissa(value: Amount, *, field: str = "amount", prefix: str = "") -> int:
    """Coerce an already scaled amount to ``int`` without changing its value."""
    amount = _to_decimal(value, field, prefix)
    if amount != amount.to_integral_value():
        raise ValidationError(
            f"{prefix}Argument `{field}` must be an integer when `mantissa` is set.",
            field=field,
            value=value,
        )
    return int(amount)


def scale_amount(
    value: Amount,
    decimals: int,
    *,
    mantissa: bool = False,
    field: str = "amount",
    prefix: str = "",
) -> int:
    """Return the on-chain integer for ``value``, skipping scaling for mantissas."""
    if mantissa:
        return to_mantissa(value, field=field, prefix=prefix)
    return to_fixed_point(value, decimals, field=field, prefix=prefix)


def validate_address(value: Any, field: str, prefix: str = "") -> Address:
    """Return ``value`` as a checksummed address or raise ``ValidationError``."""
    if not isinstance(value, str):
        raise ArgumentTypeError(
            f"{prefix}Argument `{field}` must be a string.", field=field, value=value
        )
    if not is_address(value):
        raise ValidationError(
            f"{prefix}Argument `{field}` must be a valid Ethereum address.",
            field=field,
            value=value,
        )
    return to_checksum_address(value)


def require_symbol(value: Any, field: str, prefix: str = "") -> str:
    """Validate a non-empty asset or market symbol."""
    if not isinstance(value, str) or len(value) < 1:
        raise ArgumentTypeError(
            f"{prefix}Argument `{field}` must be a non-empty string.", field=field, value=value
        )
    return value


def serialise_receipt(receipt: Any) -> Any:
    """Serialise web3 receipt objects into JSON-friendly structures."""
    if receipt is None:
        return None
    if isinstance(receipt, Mapping):
        return {key: serialise_receipt(value) for key, value in receipt.items()}
    if isinstance(receipt, Sequence) and not isinstance(
        receipt, str | bytes | bytearray | HexBytes
    ):
        return [serialise_receipt(item) for item in receipt]
    if isinstance(receipt, bytes | bytearray | HexBytes):
        return HexBytes(receipt).to_0x_hex()
    return receipt


def validate_amount(value: Any, field: str = "amount", prefix: str = "") -> Decimal:
    """Check an amount's type and format without scaling it."""
    return _to_decimal(value, field, prefix)

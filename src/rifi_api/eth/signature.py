"""Parse human-readable function signatures into single-entry ABIs."""

from __future__ import annotations

import re

from eth_abi.exceptions import ABITypeError, ParseError
from eth_abi.grammar import normalize, parse

from ..exceptions import ValidationError

_NAME_RE = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")
_MODIFIERS = {"view", "pure", "constant", "payable", "nonpayable", "external", "public"}
_LOCATIONS = {"memory", "calldata", "storage", "indexed"}
_BASE_TYPES = {"address", "bool", "string", "bytes", "int", "uint", "fixed", "ufixed", "function"}


def _split_top_level(text: str) -> list[str]:
    parts: list[str] = []
    depth = 0
    current = ""
    for char in text:
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
        if char == "," and depth == 0:
            parts.append(current.strip())
            current = ""
        else:
            current += char
    if current.strip():
        parts.append(current.strip())
    return parts


def _closing_paren(text: str, start: int) -> int:
    depth = 0
    for index in range(start, len(text)):
        if text[index] == "(":
            depth += 1
        elif text[index] == ")":
            depth -= 1
            if depth == 0:
                return index
    raise ValidationError("Unbalanced parentheses in function signature", value=text)


def _parse_params(text: str, signature: str) -> list[dict[str, str]]:
    params = []
    for raw in _split_top_level(text):
        tokens = [token for token in raw.split() if token not in _LOCATIONS]
        if not tokens:
            continue
        type_str = tokens[0]
        if type_str.startswith("(") or type_str.startswith("tuple"):
            raise ValidationError(
                "Tuple parameters require an explicit ABI", field="method", value=signature
            )
        try:
            canonical = normalize(type_str)
            parsed = parse(canonical)
            parsed.validate()
        except (ABITypeError, ParseError) as exc:
            raise ValidationError(
                f"Invalid parameter type '{type_str}'", field="method", value=signature
            ) from exc
        if getattr(parsed, "base", None) not in _BASE_TYPES:
            raise ValidationError(
                f"Unknown parameter type '{type_str}'", field="method", value=signature
            )
        params.append({"name": tokens[1] if len(tokens) > 1 else "", "type": canonical})
    return params


def parse_function_signature(signature: str) -> dict:
    """Build an ABI entry from e.g. ``function nonces(address) returns (uint)``."""

    text = signature.strip()
    if text.startswith("function "):
        text = text[len("function ") :].strip()

    open_index = text.find("(")
    if open_index <= 0:
        raise ValidationError("Malformed function signature", field="method", value=signature)

    name = text[:open_index].strip()
    if not _NAME_RE.match(name):
        raise ValidationError(
            f"Invalid function name '{name}'", field="method", value=signature
        )

    close_index = _closing_paren(text, open_index)
    inputs = _parse_params(text[open_index + 1 : close_index], signature)

    rest = text[close_index + 1 :].strip()
    outputs: list[dict[str, str]] = []
    returns_at = rest.find("returns")
    if returns_at != -1:
        modifiers = rest[:returns_at].split()
        out_open = rest.find("(", returns_at)
        if out_open == -1:
            raise ValidationError(
                "Malformed returns clause", field="method", value=signature
            )
        out_close = _closing_paren(rest, out_open)
        outputs = _parse_params(rest[out_open + 1 : out_close], signature)
    else:
        modifiers = rest.split()

    unknown = [word for word in modifiers if word not in _MODIFIERS]
    if unknown:
        raise ValidationError(
            f"Unknown function modifiers {unknown}", field="method", value=signature
        )

    if "payable" in modifiers:
        mutability = "payable"
    elif {"view", "constant"} & set(modifiers):
        mutability = "view"
    elif "pure" in modifiers:
        mutability = "pure"
    else:
        mutability = "nonpayable"

    return {
        "type": "function",
        "name": name,
        "inputs": inputs,
        "outputs": outputs,
        "stateMutability": mutability,
    }

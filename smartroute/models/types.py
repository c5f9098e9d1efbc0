"""Shared type definitions for request/response models.

Integers that may exceed 2^53 travel as decimal strings so that no JSON
client silently rounds them.
"""

import re
from typing import Annotated, Any

from pydantic import BeforeValidator, Field

# Maximum uint256 value
UINT256_MAX = 2**256 - 1

_DECIMAL_AMOUNT_RE = re.compile(r"^[0-9]*\.?[0-9]*$")


def validate_uint256(value: Any) -> str:
    """Validate that a value is a valid uint256 decimal string.

    Args:
        value: Value to validate (string or int)

    Returns:
        Valid uint256 as decimal string

    Raises:
        ValueError: If value is not a valid non-negative integer within uint256 range
    """
    if isinstance(value, bool):
        raise ValueError("Uint256 must be string or int, got bool")

    if isinstance(value, int):
        int_value = value
    elif isinstance(value, str):
        try:
            int_value = int(value)
        except ValueError as err:
            raise ValueError(f"Uint256 must be a decimal integer string: '{value}'") from err
    else:
        raise ValueError(f"Uint256 must be string or int, got {type(value).__name__}")

    if int_value < 0:
        raise ValueError(f"Uint256 cannot be negative: {value}")
    if int_value > UINT256_MAX:
        raise ValueError(f"Uint256 overflow: {value} > 2^256-1")

    return str(int_value)


def validate_decimal_amount(value: Any) -> str:
    """Validate a human-readable token amount such as "1.5" or "1000".

    The string is returned untouched: it is part of the quote cache key and
    must round-trip byte for byte.
    """
    if not isinstance(value, str):
        raise ValueError(f"Amount must be a decimal string, got {type(value).__name__}")
    if not value or value == "." or not _DECIMAL_AMOUNT_RE.match(value):
        raise ValueError(f"Invalid decimal amount: '{value}'")
    return value


# Ethereum address (40 hex chars after 0x prefix)
Address = Annotated[str, Field(pattern=r"^0x[a-fA-F0-9]{40}$")]

# 256-bit unsigned integer as decimal string (validated)
Uint256 = Annotated[
    str,
    BeforeValidator(validate_uint256),
    Field(description="256-bit unsigned integer as decimal string"),
]

# Human-readable decimal token amount (e.g. "1.25")
DecimalAmount = Annotated[
    str,
    BeforeValidator(validate_decimal_amount),
    Field(description="Token amount in whole units as a decimal string"),
]


def normalize_address(address: str) -> str:
    """Normalize an Ethereum address to lowercase.

    Args:
        address: An Ethereum address (with or without 0x prefix)

    Returns:
        Lowercase address with 0x prefix
    """
    addr = address.lower()
    if not addr.startswith("0x"):
        addr = "0x" + addr

    return addr


def is_valid_address(address: str) -> bool:
    """Check if a string is a valid Ethereum address (0x + 40 hex chars)."""
    if not isinstance(address, str):
        return False
    if not address.startswith("0x"):
        return False
    if len(address) != 42:
        return False
    try:
        int(address, 16)
        return True
    except ValueError:
        return False


__all__ = [
    "UINT256_MAX",
    "Address",
    "Uint256",
    "DecimalAmount",
    "validate_uint256",
    "validate_decimal_amount",
    "normalize_address",
    "is_valid_address",
]

"""Packed multi-hop path encoding for the UniswapV3 quoter and router.

A path is the tight concatenation

    token0 (20 bytes) | fee0 (3 bytes) | token1 (20 bytes) | fee1 | ... | tokenN

with no length prefix or separators, the layout `abi.encodePacked` produces
for alternating `address` and `uint24` values.
"""

from __future__ import annotations

from collections.abc import Sequence

from eth_abi.packed import encode_packed

from smartroute.exceptions import InvalidInputError
from smartroute.models.types import is_valid_address, normalize_address

from .constants import MAX_FEE

ADDR_SIZE = 20
FEE_SIZE = 3
NEXT_OFFSET = ADDR_SIZE + FEE_SIZE


def encode_path(tokens: Sequence[str], fees: Sequence[int]) -> bytes:
    """Encode a token route and its fee tiers into a packed path.

    Args:
        tokens: Token addresses in swap order, at least one
        fees: Fee tier of each hop, exactly one fewer than tokens

    Returns:
        Packed path bytes

    Raises:
        InvalidInputError: On a length mismatch, a malformed address or a
            fee outside the uint24 range
    """
    if not tokens or len(tokens) != len(fees) + 1:
        raise InvalidInputError(
            f"Invalid path: {len(tokens)} tokens need {len(tokens) - 1} fees, got {len(fees)}"
        )

    types: list[str] = []
    values: list[bytes | int] = []
    for i, token in enumerate(tokens):
        normalized = normalize_address(token)
        if not is_valid_address(normalized):
            raise InvalidInputError(f"Invalid token address in path: {token}")
        types.append("address")
        values.append(bytes.fromhex(normalized[2:]))

        if i < len(fees):
            fee = fees[i]
            if not 0 <= fee <= MAX_FEE:
                raise InvalidInputError(f"Fee {fee} does not fit in uint24")
            types.append("uint24")
            values.append(fee)

    return encode_packed(types, values)


def decode_path(path: bytes | str) -> tuple[list[str], list[int]]:
    """Split a packed path back into lowercase token addresses and fees.

    Args:
        path: Raw bytes, or a hex string with or without 0x prefix

    Returns:
        (tokens, fees)

    Raises:
        InvalidInputError: If the buffer is not 20 + 23k bytes long
    """
    if isinstance(path, str):
        hex_str = path[2:] if path.startswith("0x") else path
        try:
            data = bytes.fromhex(hex_str)
        except ValueError as err:
            raise InvalidInputError(f"Path is not valid hex: {path}") from err
    else:
        data = bytes(path)

    if len(data) < ADDR_SIZE or (len(data) - ADDR_SIZE) % NEXT_OFFSET != 0:
        raise InvalidInputError(f"Truncated path: {len(data)} bytes")

    tokens: list[str] = []
    fees: list[int] = []
    offset = 0
    while True:
        tokens.append("0x" + data[offset : offset + ADDR_SIZE].hex())
        offset += ADDR_SIZE
        if offset == len(data):
            break
        fees.append(int.from_bytes(data[offset : offset + FEE_SIZE], "big"))
        offset += FEE_SIZE

    return tokens, fees


__all__ = [
    "ADDR_SIZE",
    "FEE_SIZE",
    "NEXT_OFFSET",
    "encode_path",
    "decode_path",
]

"""Protocol constants for the smart router.

Centralizes fixed-point scaling factors and the bounds enforced by the
concentrated-liquidity pool contracts.
"""

from smartroute.models.types import is_valid_address

# Q64.96 and Q128.128 fixed-point scaling factors
Q96 = 2**96
Q128 = 2**128

# Tick bounds: 1.0001^tick must fit in a Q64.96 sqrt price
MIN_TICK = -887272
MAX_TICK = 887272

# sqrt price at MIN_TICK and MAX_TICK (TickMath.sol)
MIN_SQRT_RATIO = 4295128739
MAX_SQRT_RATIO = 1461446703485210103287273052203988822378723970342

# Base of the tick price scale
TICK_BASE = 1.0001


def _validate_token_address(name: str, address: str) -> str:
    """Validate and return a token address.

    Raises:
        ValueError: If the address is invalid
    """
    if not is_valid_address(address):
        raise ValueError(f"Invalid {name} address: {address} (must be 0x + 40 hex chars)")
    return address


# The zero address stands for the chain's native asset; it is swapped for the
# wrapped asset before any pool is queried.
NATIVE_TOKEN_ADDRESS = _validate_token_address(
    "native", "0x0000000000000000000000000000000000000000"
)


__all__ = [
    "Q96",
    "Q128",
    "MIN_TICK",
    "MAX_TICK",
    "MIN_SQRT_RATIO",
    "MAX_SQRT_RATIO",
    "TICK_BASE",
    "NATIVE_TOKEN_ADDRESS",
]

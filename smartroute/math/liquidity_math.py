"""Liquidity <-> token amount conversions for a concentrated-liquidity range.

All sqrt prices are Q64.96 integers. With sqrtP the current price and
sqrtA/sqrtB the range bounds, a position of liquidity L holds, in range:

    amount0 = L * Q96 * (sqrtB - sqrtP) / (sqrtP * sqrtB)
    amount1 = L * (sqrtP - sqrtA) / Q96

Below the range it holds only token0, above it only token1. Everything here
stays in integer arithmetic; a float anywhere in this path drifts at the
extremes of the tick range.
"""

from __future__ import annotations

from smartroute.constants import Q96
from smartroute.math.tick_math import TickRange, tick_to_sqrt_price_x96
from smartroute.safe_int import S


def get_amount1_for_amount0(
    amount0: int,
    sqrt_price_x96: int,
    sqrt_price_lower_x96: int,
    sqrt_price_upper_x96: int,
) -> int:
    """Amount of token1 that pairs with amount0 at the current price.

    Derives L from amount0 (which involves the upper bound) and substitutes
    it into the amount1 identity (which involves the lower bound), as one
    combined fraction so no intermediate division loses precision.

    Returns:
        Matching token1 amount, or 0 when the price is outside the range
    """
    if sqrt_price_x96 <= sqrt_price_lower_x96 or sqrt_price_x96 >= sqrt_price_upper_x96:
        return 0

    p, lo, hi = S(sqrt_price_x96), S(sqrt_price_lower_x96), S(sqrt_price_upper_x96)
    numerator = S(amount0) * p * hi * (p - lo)
    denominator = S(Q96) * Q96 * (hi - p)
    return (numerator // denominator).value


def get_amount0_for_amount1(
    amount1: int,
    sqrt_price_x96: int,
    sqrt_price_lower_x96: int,
    sqrt_price_upper_x96: int,
) -> int:
    """Amount of token0 that pairs with amount1 at the current price.

    Returns:
        Matching token0 amount, or 0 when the price is outside the range
    """
    if sqrt_price_x96 <= sqrt_price_lower_x96 or sqrt_price_x96 >= sqrt_price_upper_x96:
        return 0

    p, lo, hi = S(sqrt_price_x96), S(sqrt_price_lower_x96), S(sqrt_price_upper_x96)
    numerator = S(amount1) * Q96 * Q96 * (hi - p)
    denominator = (p - lo) * p * hi
    return (numerator // denominator).value


def calculate_amounts_for_liquidity(
    input_amount: int,
    is_token0: bool,
    current_sqrt_price_x96: int,
    tick_lower: int,
    tick_upper: int,
) -> tuple[int, int]:
    """Both deposit amounts for a one-sided input.

    Args:
        input_amount: Raw amount the caller entered
        is_token0: True when input_amount is denominated in token0
        current_sqrt_price_x96: Pool's current sqrt price
        tick_lower: Lower tick of the range
        tick_upper: Upper tick of the range

    Returns:
        (amount0, amount1) with the entered side unchanged
    """
    sqrt_lower = tick_to_sqrt_price_x96(tick_lower)
    sqrt_upper = tick_to_sqrt_price_x96(tick_upper)

    if is_token0:
        amount1 = get_amount1_for_amount0(
            input_amount, current_sqrt_price_x96, sqrt_lower, sqrt_upper
        )
        return input_amount, amount1

    amount0 = get_amount0_for_amount1(input_amount, current_sqrt_price_x96, sqrt_lower, sqrt_upper)
    return amount0, input_amount


def get_liquidity_for_amounts(
    sqrt_price_x96: int,
    sqrt_price_lower_x96: int,
    sqrt_price_upper_x96: int,
    amount0: int,
    amount1: int,
) -> int:
    """Largest liquidity that both amounts can fund.

    In range the liquidity implied by each amount is computed independently
    and the smaller (binding) one is returned. Degenerate ranges give 0.
    """
    p, lo, hi = S(sqrt_price_x96), S(sqrt_price_lower_x96), S(sqrt_price_upper_x96)

    if p <= lo:
        if hi <= lo:
            return 0
        return (S(amount0) * lo * hi // (S(Q96) * (hi - lo))).value

    if p >= hi:
        if hi <= lo:
            return 0
        return (S(amount1) * Q96 // (hi - lo)).value

    liquidity0 = (S(amount0) * p * hi).checked_div(S(Q96) * (hi - p))
    liquidity1 = (S(amount1) * Q96).checked_div(p - lo)
    if liquidity0 is None or liquidity1 is None:
        return 0
    return liquidity0.min(liquidity1).value


def get_tokens_from_liquidity(
    liquidity: int,
    current_sqrt_price_x96: int,
    tick_lower: int,
    tick_upper: int,
) -> tuple[int, int]:
    """Token amounts currently backing a position.

    Zero liquidity and zero price bounds produce zero amounts rather than
    a division error.

    Returns:
        (amount0, amount1) in raw units
    """
    if liquidity == 0:
        return 0, 0

    sqrt_lower = tick_to_sqrt_price_x96(tick_lower)
    sqrt_upper = tick_to_sqrt_price_x96(tick_upper)
    current = current_sqrt_price_x96
    L = S(liquidity)

    if current <= sqrt_lower:
        if sqrt_lower <= 0 or sqrt_upper <= sqrt_lower:
            return 0, 0
        amount0 = L * (sqrt_upper - sqrt_lower) * Q96 // (S(sqrt_lower) * sqrt_upper)
        return amount0.value, 0

    if current >= sqrt_upper:
        amount1 = L * (sqrt_upper - sqrt_lower) // Q96
        return 0, amount1.value

    amount0 = 0
    if current > 0:
        amount0 = (L * Q96 * (sqrt_upper - current) // (S(current) * sqrt_upper)).value
    amount1 = (L * (current - sqrt_lower) // Q96).value
    return amount0, amount1


def compute_position_amounts(
    liquidity: int, current_sqrt_price_x96: int, tick_range: TickRange
) -> tuple[int, int]:
    """(amount0, amount1) held by a position over tick_range."""
    return get_tokens_from_liquidity(
        liquidity, current_sqrt_price_x96, tick_range.lower, tick_range.upper
    )


__all__ = [
    "get_amount1_for_amount0",
    "get_amount0_for_amount1",
    "calculate_amounts_for_liquidity",
    "get_liquidity_for_amounts",
    "get_tokens_from_liquidity",
    "compute_position_amounts",
]

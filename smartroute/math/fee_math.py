"""Uncollected fee accounting for concentrated-liquidity positions.

Fee growth counters are uint256 accumulators that are allowed to overflow,
so every subtraction here wraps modulo 2^256 exactly as the pool contract
does. A negative intermediate is a normal state, not an error.
"""

from __future__ import annotations

from smartroute.constants import Q128
from smartroute.safe_int import S


def fee_growth_inside(
    fee_growth_global: int,
    fee_growth_outside_lower: int,
    fee_growth_outside_upper: int,
    current_tick: int,
    tick_lower: int,
    tick_upper: int,
) -> int:
    """Fee growth per unit of liquidity accumulated inside [tick_lower, tick_upper).

    Args:
        fee_growth_global: Pool's feeGrowthGlobalX128 for one token
        fee_growth_outside_lower: feeGrowthOutsideX128 of the lower tick
        fee_growth_outside_upper: feeGrowthOutsideX128 of the upper tick
        current_tick: Pool's current tick
        tick_lower: Position's lower tick
        tick_upper: Position's upper tick

    Returns:
        feeGrowthInsideX128, in [0, 2^256)
    """
    global_ = S(fee_growth_global)

    if current_tick >= tick_lower:
        below = S(fee_growth_outside_lower)
    else:
        below = global_.wrapping_sub(fee_growth_outside_lower)

    if current_tick < tick_upper:
        above = S(fee_growth_outside_upper)
    else:
        above = global_.wrapping_sub(fee_growth_outside_upper)

    return global_.wrapping_sub(below).wrapping_sub(above).value


def unclaimed_fees(
    liquidity: int,
    fee_growth_inside_current: int,
    fee_growth_inside_last: int,
    tokens_owed: int,
) -> int:
    """tokens_owed plus fees earned since the position's last checkpoint."""
    if liquidity == 0:
        return tokens_owed
    delta = S(fee_growth_inside_current).wrapping_sub(fee_growth_inside_last)
    return tokens_owed + (S(liquidity) * delta // Q128).value


def compute_unclaimed_fees(
    liquidity: int,
    fee_growth_global: int,
    fee_growth_outside_lower: int,
    fee_growth_outside_upper: int,
    current_tick: int,
    tick_lower: int,
    tick_upper: int,
    fee_growth_inside_last: int,
    tokens_owed: int,
) -> int:
    """Uncollected fees for one token of a position, from raw pool counters."""
    inside = fee_growth_inside(
        fee_growth_global,
        fee_growth_outside_lower,
        fee_growth_outside_upper,
        current_tick,
        tick_lower,
        tick_upper,
    )
    return unclaimed_fees(liquidity, inside, fee_growth_inside_last, tokens_owed)


__all__ = [
    "fee_growth_inside",
    "unclaimed_fees",
    "compute_unclaimed_fees",
]

"""Fixed-point math for concentrated-liquidity pools.

This package provides:
- tick_math: price <-> sqrt price <-> tick conversions
- liquidity_math: liquidity <-> token amount conversions for a tick range
- fee_math: uncollected fee accounting from fee growth counters
- decimal_utils: token amount parsing and formatting
"""

from smartroute.math.fee_math import compute_unclaimed_fees, fee_growth_inside, unclaimed_fees
from smartroute.math.liquidity_math import (
    compute_position_amounts,
    get_liquidity_for_amounts,
    get_tokens_from_liquidity,
)
from smartroute.math.tick_math import (
    price_to_sqrt_price_x96,
    price_to_tick,
    sqrt_price_x96_to_price,
    tick_to_price,
    tick_to_sqrt_price_x96,
)

__all__ = [
    "tick_to_sqrt_price_x96",
    "price_to_sqrt_price_x96",
    "sqrt_price_x96_to_price",
    "price_to_tick",
    "tick_to_price",
    "get_liquidity_for_amounts",
    "get_tokens_from_liquidity",
    "compute_position_amounts",
    "fee_growth_inside",
    "unclaimed_fees",
    "compute_unclaimed_fees",
]

"""Price, sqrt price and tick conversions for concentrated-liquidity pools.

Prices are expressed as token1 per token0 for the canonically ordered pair
(token0 has the lower address). "Human" prices are in whole-token units;
raw prices are in smallest units, so the two differ by
10^(decimals0 - decimals1).

tick_to_sqrt_price_x96 is bit-exact with the on-chain TickMath library.
The float-based conversions (price_to_tick / tick_to_price) are approximate
inverses of each other and agree to within one tick.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from smartroute.constants import (
    MAX_SQRT_RATIO,
    MAX_TICK,
    MIN_SQRT_RATIO,
    MIN_TICK,
    TICK_BASE,
)
from smartroute.exceptions import InvalidInputError
from smartroute.safe_int import UINT256_MAX

# sqrt(1.0001)^-(2^i) in Q128.128, one entry per bit of |tick| above bit 0
_TICK_BIT_RATIOS = (
    (0x2, 0xFFF97272373D413259A46990580E213A),
    (0x4, 0xFFF2E50F5F656932EF12357CF3C7FDCC),
    (0x8, 0xFFE5CACA7E10E4E61C3624EAA0941CD0),
    (0x10, 0xFFCB9843D60F6159C9DB58835C926644),
    (0x20, 0xFF973B41FA98C081472E6896DFB254C0),
    (0x40, 0xFF2EA16466C96A3843EC78B326B52861),
    (0x80, 0xFE5DEE046A99A2A811C461F1969C3053),
    (0x100, 0xFCBE86C7900A88AEDCFFC83B479AA3A4),
    (0x200, 0xF987A7253AC413176F2B074CF7815E54),
    (0x400, 0xF3392B0822B70005940C7A398E4B70F3),
    (0x800, 0xE7159475A2C29B7443B29C7FA6E889D9),
    (0x1000, 0xD097F3BDFD2022B8845AD8F792AA5825),
    (0x2000, 0xA9F746462D870FDF8A65DC1F90E061E5),
    (0x4000, 0x70D869A156D2A1B890BB3DF62BAF32F7),
    (0x8000, 0x31BE135F97D08FD981231505542FCFA6),
    (0x10000, 0x9AA508B5B7A84E1C677DE54F3E99BC9),
    (0x20000, 0x5D6AF8DEDB81196699C329225EE604),
    (0x40000, 0x2216E584F5FA1EA926041BEDFE98),
    (0x80000, 0x48A170391F7DC42444E8FA2),
)
_TICK_BIT0_RATIO = 0xFFFCB933BD6FAD37AA2D162D1A594001

# 2^48: the float half of the 2^96 scale factor
_TWO_48 = 2**48

# Tick spacing by fee tier (hundredths of a bip)
TICK_SPACINGS: dict[int, int] = {
    100: 1,
    500: 10,
    3000: 60,
    10000: 200,
    100000: 2000,
}
DEFAULT_TICK_SPACING = 60

# Ticks spanning a 10x price move: floor(ln(10) / ln(1.0001))
WIDE_RANGE_TICKS = math.floor(math.log(10) / math.log(TICK_BASE))


@dataclass(frozen=True)
class TickRange:
    """A position's price range as (lower, upper) ticks, lower < upper."""

    lower: int
    upper: int

    def __post_init__(self) -> None:
        _check_tick(self.lower)
        _check_tick(self.upper)
        if self.lower >= self.upper:
            raise InvalidInputError(
                f"Tick range lower must be below upper: {self.lower} >= {self.upper}"
            )


def _check_tick(tick: int) -> None:
    if not MIN_TICK <= tick <= MAX_TICK:
        raise InvalidInputError(f"Tick {tick} outside [{MIN_TICK}, {MAX_TICK}]")


def _decimal_adjustment(decimals0: int, decimals1: int) -> float:
    return 10.0 ** (decimals0 - decimals1)


def tick_to_sqrt_price_x96(tick: int) -> int:
    """Compute sqrt(1.0001^tick) * 2^96, matching TickMath.getSqrtRatioAtTick.

    Args:
        tick: Tick in [MIN_TICK, MAX_TICK]

    Returns:
        Q64.96 sqrt price in [MIN_SQRT_RATIO, MAX_SQRT_RATIO]

    Raises:
        InvalidInputError: If |tick| exceeds MAX_TICK
    """
    abs_tick = abs(tick)
    if abs_tick > MAX_TICK:
        raise InvalidInputError(f"Tick {tick} outside [{MIN_TICK}, {MAX_TICK}]")

    ratio = _TICK_BIT0_RATIO if abs_tick & 0x1 else 1 << 128
    for mask, multiplier in _TICK_BIT_RATIOS:
        if abs_tick & mask:
            ratio = (ratio * multiplier) >> 128

    if tick > 0:
        ratio = UINT256_MAX // ratio

    # Q128.128 -> Q64.96, rounding up
    return (ratio >> 32) + (1 if ratio % (1 << 32) else 0)


def price_to_sqrt_price_x96(price: float, decimals0: int, decimals1: int) -> int:
    """Convert a human price (token1 per token0) to a Q64.96 sqrt price.

    The 2^96 scale is applied in two 2^48 steps: one in float, where the
    product still fits a double's mantissa, then an integer shift.

    Returns:
        Sqrt price clamped to [MIN_SQRT_RATIO, MAX_SQRT_RATIO]
    """
    adjusted = price / _decimal_adjustment(decimals0, decimals1)
    if not adjusted > 0:
        return MIN_SQRT_RATIO
    if math.isinf(adjusted):
        return MAX_SQRT_RATIO

    scaled = math.sqrt(adjusted) * _TWO_48
    sqrt_price_x96 = math.floor(scaled + 0.5) << 48

    if sqrt_price_x96 < MIN_SQRT_RATIO:
        return MIN_SQRT_RATIO
    if sqrt_price_x96 > MAX_SQRT_RATIO:
        return MAX_SQRT_RATIO
    return sqrt_price_x96


def sqrt_price_x96_to_price(sqrt_price_x96: int, decimals0: int, decimals1: int) -> float:
    """Convert a Q64.96 sqrt price to a human price (token1 per token0)."""
    raw_price = (sqrt_price_x96 / 2**96) ** 2
    return raw_price * _decimal_adjustment(decimals0, decimals1)


def price_to_tick(price: float, decimals0: int, decimals1: int) -> int:
    """Convert a human price to the tick at or below it, clamped to tick bounds."""
    adjusted = price / _decimal_adjustment(decimals0, decimals1)
    if not adjusted > 0:
        return MIN_TICK
    if math.isinf(adjusted):
        return MAX_TICK

    tick = math.floor(math.log(adjusted) / math.log(TICK_BASE))
    return max(MIN_TICK, min(MAX_TICK, tick))


def tick_to_price(tick: int, decimals0: int, decimals1: int) -> float:
    """Convert a tick to a human price (token1 per token0)."""
    return TICK_BASE**tick * _decimal_adjustment(decimals0, decimals1)


def get_nearest_usable_tick(tick: int, tick_spacing: int) -> int:
    """Round a tick to the nearest multiple of tick_spacing within tick bounds.

    Halves round toward +infinity. A rounded tick that falls outside the
    bounds is replaced by the closest in-bounds multiple, not by the bound
    itself.
    """
    if tick_spacing <= 0:
        raise InvalidInputError(f"Tick spacing must be positive: {tick_spacing}")

    rounded = ((2 * tick + tick_spacing) // (2 * tick_spacing)) * tick_spacing
    if rounded < MIN_TICK:
        return -(MIN_TICK // -tick_spacing) * tick_spacing
    if rounded > MAX_TICK:
        return (MAX_TICK // tick_spacing) * tick_spacing
    return rounded


def get_tick_spacing(fee: int) -> int:
    """Tick spacing for a fee tier; unknown tiers get the 0.3% spacing."""
    return TICK_SPACINGS.get(fee, DEFAULT_TICK_SPACING)


def get_full_range_ticks(fee: int) -> TickRange:
    spacing = get_tick_spacing(fee)
    return TickRange(
        get_nearest_usable_tick(MIN_TICK, spacing),
        get_nearest_usable_tick(MAX_TICK, spacing),
    )


def get_wide_range_ticks(
    current_price: float, decimals0: int, decimals1: int, fee: int
) -> TickRange:
    """Usable ticks covering roughly a 10x price move either side of current_price."""
    spacing = get_tick_spacing(fee)
    current_tick = price_to_tick(current_price, decimals0, decimals1)
    return TickRange(
        get_nearest_usable_tick(current_tick - WIDE_RANGE_TICKS, spacing),
        get_nearest_usable_tick(current_tick + WIDE_RANGE_TICKS, spacing),
    )


def is_position_in_range(tick: int, tick_lower: int, tick_upper: int) -> bool:
    return tick_lower <= tick <= tick_upper


def sort_tokens(token_a: str, token_b: str) -> tuple[str, str]:
    """Order two token addresses as (token0, token1) by lowercase address."""
    if token_a.lower() < token_b.lower():
        return token_a, token_b
    return token_b, token_a


def calculate_min_amounts_with_slippage(
    amount0: int, amount1: int, slippage_percent: float
) -> tuple[int, int]:
    """Minimum acceptable amounts after slippage, at basis-point granularity."""
    factor = math.floor((100 - slippage_percent) * 100)
    return amount0 * factor // 10000, amount1 * factor // 10000


__all__ = [
    "TickRange",
    "TICK_SPACINGS",
    "DEFAULT_TICK_SPACING",
    "WIDE_RANGE_TICKS",
    "tick_to_sqrt_price_x96",
    "price_to_sqrt_price_x96",
    "sqrt_price_x96_to_price",
    "price_to_tick",
    "tick_to_price",
    "get_nearest_usable_tick",
    "get_tick_spacing",
    "get_full_range_ticks",
    "get_wide_range_ticks",
    "is_position_in_range",
    "sort_tokens",
    "calculate_min_amounts_with_slippage",
]

"""Half-amount probe estimate of price impact.

The route is quoted again at half the input. On a perfectly linear pool the
full-size output is exactly twice the half-size output; the relative gap
between the two is reported as the impact:

    expected = 2 * quote(amount // 2)
    impact_bps = |expected - actual| * 10000 // expected
    impact_percent = impact_bps / 100

This is a risk signal tuned for UI warning thresholds, not a derivative of
the pool curve.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable

import structlog

from smartroute.exceptions import QuoteCancelledError

logger = structlog.get_logger()

HalfQuoteFn = Callable[[int], Awaitable[int | None]]


def impact_from_half_output(actual_output: int, half_output: int) -> float:
    """Price impact in percent given the full-size and half-size outputs."""
    expected = half_output * 2
    if expected <= 0 or actual_output <= 0:
        return 0.0
    impact_bps = abs(expected - actual_output) * 10000 // expected
    return impact_bps / 100


async def probe_price_impact(
    amount_in: int,
    actual_output: int,
    quote_half: HalfQuoteFn,
    **log_context: object,
) -> float:
    """Re-quote at half the input and estimate the price impact.

    Args:
        amount_in: Full input amount
        actual_output: Output quoted for amount_in
        quote_half: Coroutine function quoting the same route for a given input
        **log_context: Extra fields for the debug log on probe failure

    Returns:
        Impact in percent; 0.0 when the half amount is zero or the probe fails
    """
    half = amount_in // 2
    if half <= 0:
        return 0.0

    try:
        half_output = await quote_half(half)
    except QuoteCancelledError:
        raise
    except Exception as e:
        logger.debug("price_impact_probe_failed", error=str(e), **log_context)
        return 0.0

    if half_output is None:
        return 0.0
    return impact_from_half_output(actual_output, half_output)


__all__ = ["HalfQuoteFn", "impact_from_half_output", "probe_price_impact"]

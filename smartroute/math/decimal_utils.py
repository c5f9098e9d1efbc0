"""Token amount parsing and formatting.

Amounts arrive from callers as decimal strings in whole-token units ("1.5")
and are converted to raw integer units with exact Decimal arithmetic, never
through a float.
"""

from __future__ import annotations

import decimal
import re
from decimal import Decimal

from smartroute.exceptions import InvalidInputError

# uint256 values (up to ~10^77) plus the fractional digits shown on display
DECIMAL_HIGH_PREC_CONTEXT = decimal.Context(prec=96)

MAX_DECIMALS = 77

_AMOUNT_RE = re.compile(r"^[0-9]*\.?[0-9]*$")

# Values below this are shown in scientific notation
_DISPLAY_MIN = Decimal("0.000001")


def parse_amount(value: str, decimals: int) -> int:
    """Convert a decimal string in whole-token units to raw units.

    "", "." and "0" parse to 0.

    Args:
        value: Amount such as "1000" or "0.25"
        decimals: Token decimals, 0..77

    Returns:
        Raw integer amount

    Raises:
        InvalidInputError: If the string is malformed, has more fractional
            digits than the token supports, or decimals is out of range
    """
    if not isinstance(decimals, int) or not 0 <= decimals <= MAX_DECIMALS:
        raise InvalidInputError(f"Invalid decimals value: {decimals}")

    text = value.strip()
    if text in ("", ".", "0"):
        return 0
    if not _AMOUNT_RE.match(text):
        raise InvalidInputError(f"Invalid amount format: '{value}'")

    whole, _, fraction = text.partition(".")
    fraction = fraction.rstrip("0")
    if len(fraction) > decimals:
        raise InvalidInputError(
            f"Amount '{value}' has more than {decimals} fractional digits"
        )

    return int(whole or "0") * 10**decimals + int(fraction.ljust(decimals, "0") or "0")


def format_amount(value: int, decimals: int) -> str:
    """Render a raw amount for display, at most 6 fractional digits.

    Display only: precision is dropped. Non-zero amounts below 1e-6 use
    scientific notation.
    """
    if value == 0:
        return "0"

    with decimal.localcontext(DECIMAL_HIGH_PREC_CONTEXT):
        amount = Decimal(value).scaleb(-decimals)
        if 0 < amount < _DISPLAY_MIN:
            return f"{amount:.2e}"
        rounded = amount.quantize(_DISPLAY_MIN, rounding=decimal.ROUND_HALF_EVEN)

    text = f"{rounded:f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def convert_decimals(value: int, from_decimals: int, to_decimals: int) -> int:
    """Rescale a raw amount between decimal precisions, truncating on the way down."""
    if from_decimals == to_decimals:
        return value
    if from_decimals < to_decimals:
        return value * 10 ** (to_decimals - from_decimals)
    return value // 10 ** (from_decimals - to_decimals)


__all__ = [
    "DECIMAL_HIGH_PREC_CONTEXT",
    "MAX_DECIMALS",
    "parse_amount",
    "format_amount",
    "convert_decimals",
]

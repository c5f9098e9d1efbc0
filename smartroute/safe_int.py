"""Checked integer wrapper for fixed-point and token-amount arithmetic.

On-chain math is done on unsigned 256-bit words. Python integers are
unbounded, so this module makes the EVM rules explicit:
- Division by zero raises ArithmeticError (instead of a silent zero)
- Subtraction underflow raises ArithmeticError, unless the caller asks
  for wrapping (mod 2^256) semantics

Usage pattern:
    from smartroute.safe_int import S

    def liquidity_for_amount1(amount1: int, sqrt_current: int, sqrt_lower: int) -> int:
        # Wrap at entry
        a, c, lo = S(amount1), S(sqrt_current), S(sqrt_lower)

        # Natural arithmetic - raises on underflow or zero divisor
        return ((a * Q96) // (c - lo)).value

    # Fee growth counters wrap instead of underflowing
    delta = S(fee_growth_inside).wrapping_sub(fee_growth_inside_last).value
"""

from __future__ import annotations

UINT256_MAX = 2**256 - 1


class SafeIntError(ArithmeticError):
    """Base class for SafeInt arithmetic errors."""

    pass


class DivisionByZero(SafeIntError):
    """Division by zero."""

    pass


class Underflow(SafeIntError):
    """Subtraction would produce negative result."""

    pass


class SafeInt:
    """Integer with EVM-flavoured checked arithmetic.

    Attributes:
        value: The underlying integer value (read-only)
    """

    __slots__ = ("_value",)
    _value: int

    def __init__(self, value: int | SafeInt) -> None:
        if isinstance(value, SafeInt):
            self._value = value._value
        elif isinstance(value, int) and not isinstance(value, bool):
            self._value = value
        else:
            raise TypeError(f"SafeInt requires int, got {type(value).__name__}")

    @property
    def value(self) -> int:
        """The underlying integer value."""
        return self._value

    def __repr__(self) -> str:
        return f"SafeInt({self._value})"

    # --- Arithmetic operations ---

    def __add__(self, other: SafeInt | int) -> SafeInt:
        return SafeInt(self._value + _extract_value(other))

    def __sub__(self, other: SafeInt | int) -> SafeInt:
        """Subtract other from self.

        Raises:
            Underflow: If result would be negative
        """
        other_val = _extract_value(other)
        result = self._value - other_val
        if result < 0:
            raise Underflow(f"Underflow: {self._value} - {other_val} = {result}")
        return SafeInt(result)

    def __mul__(self, other: SafeInt | int) -> SafeInt:
        return SafeInt(self._value * _extract_value(other))

    def __floordiv__(self, other: SafeInt | int) -> SafeInt:
        """Integer division, rounding toward zero for non-negative operands.

        Raises:
            DivisionByZero: If other is zero
        """
        other_val = _extract_value(other)
        if other_val == 0:
            raise DivisionByZero(f"Division by zero: {self._value} // 0")
        return SafeInt(self._value // other_val)

    # --- Comparison operations ---

    def __eq__(self, other: object) -> bool:
        if isinstance(other, SafeInt):
            return self._value == other._value
        if isinstance(other, int):
            return self._value == other
        return NotImplemented

    def __le__(self, other: SafeInt | int) -> bool:
        return self._value <= _extract_value(other)

    def __ge__(self, other: SafeInt | int) -> bool:
        return self._value >= _extract_value(other)

    # --- Named operations ---

    def wrapping_sub(self, other: SafeInt | int) -> SafeInt:
        """Subtract modulo 2^256, the way unchecked Solidity math does.

        Never raises: a negative intermediate wraps around to the top of
        the range, e.g. S(5).wrapping_sub(10) == 2^256 - 5.
        """
        return SafeInt((self._value - _extract_value(other)) & UINT256_MAX)

    def checked_div(self, other: SafeInt | int) -> SafeInt | None:
        """Divide, returning None on a zero divisor instead of raising."""
        other_val = _extract_value(other)
        if other_val == 0:
            return None
        return SafeInt(self._value // other_val)

    def min(self, other: SafeInt | int) -> SafeInt:
        return SafeInt(min(self._value, _extract_value(other)))


def _extract_value(x: SafeInt | int) -> int:
    """Extract integer value from SafeInt or int."""
    if isinstance(x, SafeInt):
        return x._value
    return x


# Convenience alias for concise code
S = SafeInt


__all__ = [
    "UINT256_MAX",
    "SafeIntError",
    "DivisionByZero",
    "Underflow",
    "SafeInt",
    "S",
]

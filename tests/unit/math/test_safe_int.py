"""Tests for SafeInt checked arithmetic wrapper."""

import pytest

from smartroute.safe_int import UINT256_MAX, DivisionByZero, S, SafeInt, SafeIntError, Underflow


class TestSafeIntConstruction:
    """Tests for SafeInt construction."""

    def test_from_int(self):
        assert SafeInt(42).value == 42

    def test_from_safeint(self):
        assert SafeInt(SafeInt(42)).value == 42

    def test_from_invalid_type_raises(self):
        with pytest.raises(TypeError):
            SafeInt("42")  # type: ignore
        with pytest.raises(TypeError):
            SafeInt(3.14)  # type: ignore
        with pytest.raises(TypeError):
            SafeInt(True)  # type: ignore

    def test_alias_s(self):
        assert S is SafeInt


class TestSafeIntArithmetic:
    def test_add_sub_mul(self):
        assert (S(10) + 5).value == 15
        assert (S(10) - S(4)).value == 6
        assert (S(10) * 3).value == 30

    def test_floordiv(self):
        assert (S(10) // 3).value == 3

    def test_comparisons(self):
        assert S(5) == 5
        assert S(5) == S(5)
        assert S(4) <= 5
        assert S(6) >= S(6)


class TestSafeIntErrors:
    def test_underflow(self):
        with pytest.raises(Underflow):
            S(3) - 5

    def test_division_by_zero(self):
        with pytest.raises(DivisionByZero):
            S(3) // 0

    def test_errors_are_arithmetic_errors(self):
        assert issubclass(SafeIntError, ArithmeticError)
        assert issubclass(Underflow, SafeIntError)
        assert issubclass(DivisionByZero, SafeIntError)


class TestSafeIntNamedOperations:
    def test_wrapping_sub_wraps(self):
        assert S(5).wrapping_sub(10).value == UINT256_MAX + 1 - 5

    def test_wrapping_sub_without_wrap(self):
        assert S(10).wrapping_sub(5).value == 5

    def test_checked_div(self):
        assert S(10).checked_div(2) == 5
        assert S(10).checked_div(0) is None

    def test_min(self):
        assert S(3).min(7).value == 3
        assert S(9).min(S(7)).value == 7

"""
Тесты для Money — Decimal-примитивов rollup-расчётов

Coverage:
- to_money: конверсия, отклонение NaN/Inf и нечисловых значений
- line_value: units × unit_price, units=None
- sum_money: пустая последовательность, точность Decimal
- quantize_money: ROUND_HALF_UP, places=None, отрицательные places
"""

from decimal import Decimal

import pytest

from src.core.math import (
    ZERO_MONEY,
    line_value,
    quantize_money,
    sum_money,
    to_money,
)


class TestToMoney:
    """Тесты to_money."""

    @pytest.mark.parametrize(
        "value, expected",
        [
            (Decimal("2.50"), Decimal("2.50")),
            (3, Decimal("3")),
            (0.1, Decimal("0.1")),
            ("4.25", Decimal("4.25")),
        ],
    )
    def test_conversion(self, value, expected):
        assert to_money(value) == expected

    @pytest.mark.parametrize("value", ["NaN", "Infinity", float("nan"), float("inf"), Decimal("-Infinity")])
    def test_nan_inf_rejected(self, value):
        with pytest.raises(ValueError, match="NaN/Inf"):
            to_money(value)

    def test_garbage_string_rejected(self):
        with pytest.raises(ValueError, match="Not a decimal number"):
            to_money("two dollars")

    def test_bool_rejected(self):
        with pytest.raises(ValueError, match="Boolean"):
            to_money(True)

    def test_unsupported_type_rejected(self):
        with pytest.raises(ValueError, match="Unsupported money type"):
            to_money([1])


class TestLineValue:
    """Тесты line_value."""

    def test_units_times_price(self):
        assert line_value(9, Decimal("4")) == Decimal("36")

    def test_missing_units_contribute_zero(self):
        assert line_value(None, Decimal("4")) == ZERO_MONEY

    def test_fractional_price_exact(self):
        """3 × 0.1 = 0.3 точно (в отличие от float)."""
        assert line_value(3, Decimal("0.1")) == Decimal("0.3")


class TestSumMoney:
    """Тесты sum_money."""

    def test_empty_is_decimal_zero(self):
        total = sum_money([])

        assert total == Decimal("0")
        assert isinstance(total, Decimal)

    def test_sum(self):
        assert sum_money([Decimal("36"), Decimal("33"), Decimal("20")]) == Decimal("89")


class TestQuantizeMoney:
    """Тесты quantize_money."""

    def test_half_up(self):
        assert quantize_money(Decimal("10.005"), 2) == Decimal("10.01")

    def test_zero_places(self):
        assert quantize_money(Decimal("2.5"), 0) == Decimal("3")

    def test_none_keeps_value(self):
        assert quantize_money(Decimal("10.005"), None) == Decimal("10.005")

    def test_negative_places_rejected(self):
        with pytest.raises(ValueError, match="non-negative"):
            quantize_money(Decimal("1"), -1)

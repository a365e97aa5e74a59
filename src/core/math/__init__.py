"""
Core math modules для rollup-агрегации

Денежные примитивы на Decimal с гарантией детерминированности.
"""

# Money
from src.core.math.money import (
    MONEY_ROUNDING,
    ZERO_MONEY,
    line_value,
    quantize_money,
    sum_money,
    to_money,
)

__all__ = [
    # Money — Constants
    "MONEY_ROUNDING",
    "ZERO_MONEY",
    # Money — Functions
    "line_value",
    "quantize_money",
    "sum_money",
    "to_money",
]

"""
Money — Decimal-примитивы для денежных rollup-расчётов

Модуль обеспечивает детерминированную арифметику стоимости позиций заказа:
- Конверсия в Decimal без двоичного шума float (через str)
- Отклонение NaN/Inf до того, как они попадут в сумму
- Стоимость строки: units × unit_price
- Суммирование и опциональное квантование итогов

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. Все денежные значения — Decimal, float никогда не участвует в сумме напрямую
2. NaN/Inf никогда не пропагируют (ValueError на входе)
3. Отсутствующее количество (None) вносит 0 в стоимость
4. Все операции детерминированы и воспроизводимы
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Final, Iterable, Optional, Union

# =============================================================================
# КОНСТАНТЫ
# =============================================================================

# Нулевая сумма (стартовое значение аккумулятора)
ZERO_MONEY: Final[Decimal] = Decimal("0")

# Режим округления при квантовании итогов
MONEY_ROUNDING: Final[str] = ROUND_HALF_UP

MoneyLike = Union[Decimal, int, float, str]


# =============================================================================
# КОНВЕРСИЯ
# =============================================================================


def to_money(value: MoneyLike) -> Decimal:
    """
    Конверсия значения в конечный Decimal.

    float конвертируется через str, чтобы 0.1 оставался Decimal("0.1"),
    а не 0.1000000000000000055511151231257827.

    Args:
        value: Decimal, int, float или строковое представление числа

    Returns:
        Конечный Decimal

    Raises:
        ValueError: если значение не число, NaN или Inf

    Examples:
        >>> to_money(0.1)
        Decimal('0.1')
        >>> to_money("2.50")
        Decimal('2.50')
    """
    if isinstance(value, bool):
        raise ValueError(f"Boolean is not a money value: {value!r}")

    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, (int, float, str)):
        try:
            result = Decimal(str(value))
        except InvalidOperation:
            raise ValueError(f"Not a decimal number: {value!r}")
    else:
        raise ValueError(f"Unsupported money type: {type(value).__name__}")

    if not result.is_finite():
        raise ValueError(f"Money value contains NaN/Inf: {value!r}")

    return result


# =============================================================================
# СТОИМОСТЬ И СУММЫ
# =============================================================================


def line_value(units: Optional[int], unit_price: Decimal) -> Decimal:
    """
    Стоимость строки заказа: units × unit_price.

    Args:
        units: Количество (None — строка без количества)
        unit_price: Текущая цена единицы лота

    Returns:
        Стоимость строки (Decimal); 0 при units=None
    """
    if units is None:
        return ZERO_MONEY
    return Decimal(units) * to_money(unit_price)


def sum_money(values: Iterable[Decimal]) -> Decimal:
    """
    Сумма денежных значений, начиная с ZERO_MONEY.

    Пустая последовательность даёт Decimal("0"), а не int 0.
    """
    total = ZERO_MONEY
    for value in values:
        total += to_money(value)
    return total


def quantize_money(value: Decimal, places: Optional[int]) -> Decimal:
    """
    Квантование суммы до заданного числа знаков после запятой.

    Args:
        value: Денежное значение
        places: Число знаков (None — без квантования)

    Returns:
        Квантованное значение (ROUND_HALF_UP)

    Raises:
        ValueError: если places < 0

    Examples:
        >>> quantize_money(Decimal("10.005"), 2)
        Decimal('10.01')
        >>> quantize_money(Decimal("10.005"), None)
        Decimal('10.005')
    """
    if places is None:
        return value
    if places < 0:
        raise ValueError(f"places must be non-negative, got {places}")

    exponent = Decimal(1).scaleb(-places)
    return value.quantize(exponent, rounding=MONEY_ROUNDING)

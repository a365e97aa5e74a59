"""
Rollup errors — иерархия исключений движка агрегации

Все исключения фатальны для текущего batch / заказа: производные итоги
иначе окажутся неверными без видимых симптомов. Повторов внутри ядра нет,
повторный вызов с теми же входами даёт тот же результат.
"""

from typing import Optional


class RollupError(Exception):
    """Базовое исключение движка rollup-агрегации."""

    pass


class InvalidChangeRecord(RollupError):
    """
    Некорректная запись изменения строки заказа.

    Возникает, если запись не несёт ни before, ни after состояния,
    или если before/after описывают разные строки.
    """

    def __init__(self, message: str, index: Optional[int] = None):
        self.index = index
        if index is not None:
            message = f"change #{index}: {message}"
        super().__init__(message)


class OrderMismatch(RollupError):
    """
    Строка, переданная на агрегацию, ссылается на другой заказ.

    Нарушение контракта вызывающей стороной: источник должен отдавать
    только строки целевого заказа.
    """

    def __init__(self, order_id: str, line_item_id: str, item_order_id: Optional[str]):
        self.order_id = order_id
        self.line_item_id = line_item_id
        self.item_order_id = item_order_id
        super().__init__(
            f"Line item {line_item_id} references order {item_order_id!r}, "
            f"expected {order_id!r}"
        )


class UnresolvedLot(RollupError):
    """Лот строки заказа не найден (отсутствующая зависимость)."""

    def __init__(self, lot_id: str, line_item_id: str):
        self.lot_id = lot_id
        self.line_item_id = line_item_id
        super().__init__(f"Lot {lot_id!r} of line item {line_item_id} cannot be resolved")

"""Line-item source — граница движка с оркестрацией/хранением.

LineItemSource — протокол чтения, которого движку достаточно:
заказ, полный текущий набор его строк и разрешение лота.

InMemoryLineItemSource — эталонная in-memory реализация. Bulk-мутации
(insert/update/delete/restore) применяются к набору и возвращают записи
LineItemChange для движка; apply() записывает пересчитанные снапшоты
обратно в заказы. Транзакционной изоляции и персистентности нет.
"""

from typing import Dict, Iterable, List, Optional, Protocol, Sequence

from src.core.domain.change import LineItemChange
from src.core.domain.line_item import LineItem
from src.core.domain.lot import Lot
from src.core.domain.order import Order
from src.rollup.aggregator import RollupResult


class LineItemSource(Protocol):
    """Источник данных для пересчёта (read-after-write в рамках batch)."""

    def get_order(self, order_id: str) -> Order:
        ...

    def get_line_items(self, order_id: str) -> Sequence[LineItem]:
        ...

    def get_lot(self, lot_id: str) -> Optional[Lot]:
        ...


class InMemoryLineItemSource:
    """In-memory источник строк заказов.

    Порядок строк заказа — порядок их вставки в источник; он задаёт
    first-seen порядок для tie-break ранжирования категорий.
    """

    def __init__(
        self,
        lots: Iterable[Lot] = (),
        orders: Iterable[Order] = (),
        line_items: Iterable[LineItem] = (),
    ):
        self._lots: Dict[str, Lot] = {lot.lot_id: lot for lot in lots}
        self._orders: Dict[str, Order] = {order.order_id: order for order in orders}
        self._line_items: Dict[str, LineItem] = {}

        # Удалённые строки (для restore)
        self._recycle_bin: Dict[str, LineItem] = {}

        for item in line_items:
            self._line_items[item.line_item_id] = item

    # -------------------------------------------------------------------------
    # LineItemSource
    # -------------------------------------------------------------------------

    def get_order(self, order_id: str) -> Order:
        """
        Raises:
            KeyError: если заказ не найден
        """
        try:
            return self._orders[order_id]
        except KeyError:
            raise KeyError(f"Order not found: {order_id}")

    def get_line_items(self, order_id: str) -> List[LineItem]:
        return [item for item in self._line_items.values() if item.order_id == order_id]

    def get_lot(self, lot_id: str) -> Optional[Lot]:
        return self._lots.get(lot_id)

    # -------------------------------------------------------------------------
    # Справочные данные
    # -------------------------------------------------------------------------

    def put_lot(self, lot: Lot) -> None:
        """Добавление или замена лота (например, изменение цены)."""
        self._lots[lot.lot_id] = lot

    def put_order(self, order: Order) -> None:
        self._orders[order.order_id] = order

    def get_line_item(self, line_item_id: str) -> LineItem:
        return self._line_items[line_item_id]

    # -------------------------------------------------------------------------
    # Bulk-мутации строк
    # -------------------------------------------------------------------------

    def insert(self, items: Sequence[LineItem]) -> List[LineItemChange]:
        """Вставка строк.

        Raises:
            ValueError: если строка с таким id уже существует или id повторяется в batch
        """
        self._check_unique([item.line_item_id for item in items])
        for item in items:
            if item.line_item_id in self._line_items:
                raise ValueError(f"Line item already exists: {item.line_item_id}")

        changes = []
        for item in items:
            self._line_items[item.line_item_id] = item
            changes.append(LineItemChange.insert(item))
        return changes

    def update(self, items: Sequence[LineItem]) -> List[LineItemChange]:
        """Обновление строк (units, lot_id, order_id).

        Raises:
            ValueError: если id повторяется в batch
            KeyError: если строка не найдена (в том числе удалена в recycle bin)
        """
        self._check_unique([item.line_item_id for item in items])
        befores = [self._require(item.line_item_id) for item in items]

        changes = []
        for before, after in zip(befores, items):
            self._line_items[after.line_item_id] = after
            changes.append(LineItemChange.update(before, after))
        return changes

    def delete(self, line_item_ids: Sequence[str]) -> List[LineItemChange]:
        """Удаление строк в recycle bin.

        Raises:
            ValueError: если id повторяется в batch
            KeyError: если строка не найдена
        """
        self._check_unique(line_item_ids)
        befores = [self._require(line_item_id) for line_item_id in line_item_ids]

        changes = []
        for item in befores:
            del self._line_items[item.line_item_id]
            self._recycle_bin[item.line_item_id] = item
            changes.append(LineItemChange.delete(item))
        return changes

    def restore(self, line_item_ids: Sequence[str]) -> List[LineItemChange]:
        """Восстановление удалённых строк с их сохранённой ссылкой на заказ.

        Raises:
            ValueError: если id повторяется в batch или занят живой строкой
            KeyError: если строки нет в recycle bin
        """
        self._check_unique(line_item_ids)
        for line_item_id in line_item_ids:
            if line_item_id not in self._recycle_bin:
                raise KeyError(f"Line item not in recycle bin: {line_item_id}")
            if line_item_id in self._line_items:
                raise ValueError(f"Line item already exists: {line_item_id}")

        changes = []
        for line_item_id in line_item_ids:
            item = self._recycle_bin.pop(line_item_id)
            self._line_items[line_item_id] = item
            changes.append(LineItemChange.restore(item))
        return changes

    # -------------------------------------------------------------------------
    # Запись результатов
    # -------------------------------------------------------------------------

    def apply(self, results: Iterable[RollupResult]) -> int:
        """Запись изменившихся снапшотов в заказы.

        Returns:
            Количество записанных заказов
        """
        written = 0
        for result in results:
            if not result.changed:
                continue
            order = self.get_order(result.order_id)
            self._orders[result.order_id] = order.with_rollup(result.snapshot)
            written += 1
        return written

    def _require(self, line_item_id: str) -> LineItem:
        try:
            return self._line_items[line_item_id]
        except KeyError:
            raise KeyError(f"Line item not found: {line_item_id}")

    @staticmethod
    def _check_unique(line_item_ids: Sequence[str]) -> None:
        seen = set()
        for line_item_id in line_item_ids:
            if line_item_id in seen:
                raise ValueError(f"Duplicate line item id in batch: {line_item_id}")
            seen.add(line_item_id)

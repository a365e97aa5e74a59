"""Rollup Aggregator — пересчёт производных полей заказа.

Полный пересчёт по текущему набору строк заказа (без инкрементальных дельт):
1. Группировка строк по имени лота (категории), сумма units по группе;
   независимо — сумма units × unit_price по всем строкам (purchased)
2. Ранжирование групп по units (убывание), стабильная сортировка:
   при равенстве выше группа, встреченная первой
3. Слот 1 ← первая группа, слот 2 ← вторая, незаполненные слоты очищаются
4. Пустой набор строк → все пять производных полей None (purchased тоже)

Ошибки фатальны для заказа:
- OrderMismatch — строка ссылается на другой заказ
- UnresolvedLot — лот строки не найден
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Callable, Dict, List, Optional, Sequence, Tuple

import structlog

from src.core.domain.line_item import LineItem
from src.core.domain.lot import Lot
from src.core.domain.order import Order, OrderRollup
from src.core.math.money import line_value, quantize_money, sum_money
from src.rollup.errors import OrderMismatch, UnresolvedLot

logger = structlog.get_logger(__name__)

# Количество слотов категорий на заказе
CATEGORY_SLOTS = 2

LotLookup = Callable[[str], Optional[Lot]]


# =============================================================================
# CONFIG
# =============================================================================


@dataclass(frozen=True)
class AggregatorConfig:
    """Конфигурация агрегатора.

    - money_places: квантование purchased (None — без квантования, ROUND_HALF_UP)
    """
    money_places: Optional[int] = None


# =============================================================================
# RESULT
# =============================================================================


@dataclass(frozen=True)
class CategoryTotal:
    """Накопленное количество по категории (внутренний тип ранжирования)."""

    name: str
    units: int
    first_seen: int  # Индекс первой строки категории во входном наборе


@dataclass(frozen=True)
class RollupResult:
    """Результат пересчёта одного заказа."""

    order_id: str
    snapshot: OrderRollup
    previous: OrderRollup

    # False — значения совпали с сохранёнными, запись можно пропустить
    changed: bool

    # Диагностика
    ranking: Tuple[CategoryTotal, ...]
    line_item_count: int
    details: str


# =============================================================================
# RANKING
# =============================================================================


def rank_categories(totals: Sequence[CategoryTotal]) -> Tuple[CategoryTotal, ...]:
    """Ранжирование категорий по units (убывание).

    sorted() стабилен: при равных units сохраняется порядок входа.
    Вход упорядочивается по first_seen, поэтому при равенстве выше
    категория, встреченная первой.

    Args:
        totals: накопленные количества по категориям

    Returns:
        Категории в порядке ранга
    """
    by_encounter = sorted(totals, key=lambda total: total.first_seen)
    return tuple(sorted(by_encounter, key=lambda total: total.units, reverse=True))


def accumulate_categories(
    line_items: Sequence[LineItem],
    lots: Sequence[Lot],
) -> List[CategoryTotal]:
    """Группировка строк по категории лота с суммой units.

    Args:
        line_items: строки заказа во входном порядке
        lots: разрешённые лоты, lots[i] соответствует line_items[i]

    Returns:
        Накопленные количества в порядке первого появления категории
    """
    units_by_name: Dict[str, int] = {}
    first_seen: Dict[str, int] = {}

    for index, (item, lot) in enumerate(zip(line_items, lots)):
        name = lot.category
        if name not in units_by_name:
            units_by_name[name] = 0
            first_seen[name] = index
        units_by_name[name] += item.units or 0

    return [
        CategoryTotal(name=name, units=units, first_seen=first_seen[name])
        for name, units in units_by_name.items()
    ]


# =============================================================================
# ROLLUP
# =============================================================================


def compute_rollup(
    order_id: str,
    line_items: Sequence[LineItem],
    lot_lookup: LotLookup,
    money_places: Optional[int] = None,
) -> Tuple[OrderRollup, Tuple[CategoryTotal, ...]]:
    """Пересчёт производных полей заказа по полному набору его строк.

    Args:
        order_id: целевой заказ
        line_items: все текущие строки заказа (после применения мутации)
        lot_lookup: разрешение лота по lot_id (None — лот не найден)
        money_places: квантование purchased (None — без квантования)

    Returns:
        (snapshot, ranking): снапшот производных полей и полный ранг категорий

    Raises:
        OrderMismatch: если строка ссылается на другой заказ
        UnresolvedLot: если лот строки не найден
    """
    lots: List[Lot] = []
    for item in line_items:
        if item.order_id != order_id:
            raise OrderMismatch(order_id, item.line_item_id, item.order_id)

        lot = lot_lookup(item.lot_id)
        if lot is None:
            raise UnresolvedLot(item.lot_id, item.line_item_id)
        lots.append(lot)

    # Пустой заказ: все производные поля None (не 0)
    if not line_items:
        return OrderRollup(order_id=order_id), ()

    purchased: Decimal = sum_money(
        line_value(item.units, lot.unit_price) for item, lot in zip(line_items, lots)
    )
    purchased = quantize_money(purchased, money_places)

    ranking = rank_categories(accumulate_categories(line_items, lots))
    slots = list(ranking[:CATEGORY_SLOTS])
    slots += [None] * (CATEGORY_SLOTS - len(slots))
    first, second = slots

    snapshot = OrderRollup(
        order_id=order_id,
        purchased=purchased,
        category1_name=first.name if first else None,
        category1_units=first.units if first else None,
        category2_name=second.name if second else None,
        category2_units=second.units if second else None,
    )
    return snapshot, ranking


class RollupAggregator:
    """Rollup Aggregator: заказ + его строки → пересчитанный снапшот.

    Stateless относительно заказов: каждый вызов независим, поэтому
    пересчёт разных заказов можно распределять по потокам.
    """

    def __init__(self, config: Optional[AggregatorConfig] = None):
        """
        Args:
            config: конфигурация агрегатора
        """
        self.config = config or AggregatorConfig()

    def aggregate(
        self,
        order: Order,
        line_items: Sequence[LineItem],
        lot_lookup: LotLookup,
    ) -> RollupResult:
        """Пересчёт производных полей заказа.

        Args:
            order: заказ с сохранёнными производными полями
            line_items: полный текущий набор строк заказа
            lot_lookup: разрешение лота по lot_id

        Returns:
            RollupResult; changed=False если пересчёт совпал с сохранёнными значениями

        Raises:
            OrderMismatch: если строка ссылается на другой заказ
            UnresolvedLot: если лот строки не найден
        """
        log = logger.bind(order_id=order.order_id, line_items=len(line_items))

        snapshot, ranking = compute_rollup(
            order.order_id,
            line_items,
            lot_lookup,
            money_places=self.config.money_places,
        )
        previous = order.rollup()
        changed = snapshot != previous

        if changed:
            details = f"Rollup changed: {previous.fields()} → {snapshot.fields()}"
        else:
            details = f"Rollup unchanged: {snapshot.fields()}"

        log.debug(
            "order_rollup_computed",
            changed=changed,
            purchased=str(snapshot.purchased) if snapshot.purchased is not None else None,
            categories=len(ranking),
        )

        return RollupResult(
            order_id=order.order_id,
            snapshot=snapshot,
            previous=previous,
            changed=changed,
            ranking=ranking,
            line_item_count=len(line_items),
            details=details,
        )

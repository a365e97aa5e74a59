"""Rollup Engine — batch изменений строк → пересчитанные заказы.

Поток управления:
1. ChangeSetResolver: batch изменений → затронутые заказы
2. RollupAggregator: для каждого заказа — полный пересчёт по текущим строкам
3. (опционально) валидация снапшота по JSON контракту order_rollup
4. Вызывающая сторона записывает изменившиеся снапшоты

Пересчёт заказов независим и без общего изменяемого состояния, поэтому
при max_workers > 1 выполняется в ThreadPoolExecutor. Порядок результатов
всегда равен порядку затронутых заказов от resolver.
"""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Iterator, List, Optional, Sequence, Tuple

import structlog

from src.core.contracts import OrderRollupValidator
from src.core.domain.change import LineItemChange
from src.core.domain.order import OrderRollup
from src.rollup.aggregator import AggregatorConfig, RollupAggregator, RollupResult
from src.rollup.resolver import ChangeSetResolver, ChangeSetResult
from src.rollup.source import LineItemSource

logger = structlog.get_logger(__name__)


# =============================================================================
# CONFIG
# =============================================================================


@dataclass(frozen=True)
class EngineConfig:
    """Конфигурация движка.

    - max_workers: 1 — последовательный пересчёт, > 1 — пул потоков
    - validate_contracts: проверять каждый снапшот по схеме order_rollup
    """
    max_workers: int = 1
    validate_contracts: bool = True

    def __post_init__(self):
        if self.max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {self.max_workers}")


# =============================================================================
# RESULT
# =============================================================================


@dataclass(frozen=True)
class RollupBatchResult:
    """Результат обработки batch изменений."""

    change_set: ChangeSetResult
    results: Tuple[RollupResult, ...]

    @property
    def affected_order_ids(self) -> Tuple[str, ...]:
        return self.change_set.affected_order_ids

    @property
    def changed_count(self) -> int:
        return sum(1 for result in self.results if result.changed)

    @property
    def unchanged_count(self) -> int:
        return len(self.results) - self.changed_count

    def changed_snapshots(self) -> Iterator[OrderRollup]:
        """Снапшоты, требующие записи (changed=True)."""
        for result in self.results:
            if result.changed:
                yield result.snapshot


# =============================================================================
# ENGINE
# =============================================================================


class RollupEngine:
    """Rollup Engine: оркестрация resolver + aggregator над источником строк."""

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        aggregator_config: Optional[AggregatorConfig] = None,
    ):
        """
        Args:
            config: конфигурация движка
            aggregator_config: конфигурация агрегатора
        """
        self.config = config or EngineConfig()
        self.resolver = ChangeSetResolver()
        self.aggregator = RollupAggregator(aggregator_config)
        self._validator = OrderRollupValidator() if self.config.validate_contracts else None

    def process(
        self,
        changes: Sequence[LineItemChange],
        source: LineItemSource,
    ) -> RollupBatchResult:
        """Обработка batch изменений строк.

        Args:
            changes: записи изменений (мутация уже применена к источнику)
            source: источник заказов, строк и лотов

        Returns:
            RollupBatchResult с результатом по каждому затронутому заказу

        Raises:
            InvalidChangeRecord: некорректная запись изменения
            OrderMismatch: источник вернул строку чужого заказа
            UnresolvedLot: лот строки не найден
            jsonschema.ValidationError: снапшот нарушает контракт order_rollup
        """
        change_set = self.resolver.resolve(changes)

        order_ids = change_set.affected_order_ids
        if self.config.max_workers > 1 and len(order_ids) > 1:
            with ThreadPoolExecutor(max_workers=self.config.max_workers) as pool:
                # map сохраняет порядок входа и пробрасывает первое исключение
                results: List[RollupResult] = list(
                    pool.map(lambda order_id: self.recompute(order_id, source), order_ids)
                )
        else:
            results = [self.recompute(order_id, source) for order_id in order_ids]

        batch = RollupBatchResult(change_set=change_set, results=tuple(results))

        logger.info(
            "rollup_batch_processed",
            total_changes=change_set.total_changes,
            affected_orders=len(order_ids),
            changed=batch.changed_count,
            unchanged=batch.unchanged_count,
        )

        return batch

    def recompute(self, order_id: str, source: LineItemSource) -> RollupResult:
        """Пересчёт одного заказа по полному текущему набору строк.

        Raises:
            OrderMismatch: источник вернул строку чужого заказа
            UnresolvedLot: лот строки не найден
            jsonschema.ValidationError: снапшот нарушает контракт order_rollup
        """
        order = source.get_order(order_id)
        line_items = source.get_line_items(order_id)

        result = self.aggregator.aggregate(order, line_items, source.get_lot)

        if self._validator is not None:
            self._validator.validate(result.snapshot.model_dump(mode="json"))

        return result

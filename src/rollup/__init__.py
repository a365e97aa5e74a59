"""Rollup — движок агрегации строк заказов в производные поля заказа.

- Change-Set Resolver: batch изменений строк → затронутые заказы
- Rollup Aggregator: полный пересчёт purchased и top-2 категорий заказа
- Rollup Engine: оркестрация над источником строк (последовательно или пулом потоков)
"""

from .aggregator import (
    CATEGORY_SLOTS,
    AggregatorConfig,
    CategoryTotal,
    RollupAggregator,
    RollupResult,
    compute_rollup,
    rank_categories,
)
from .engine import EngineConfig, RollupBatchResult, RollupEngine
from .errors import InvalidChangeRecord, OrderMismatch, RollupError, UnresolvedLot
from .resolver import ChangeSetResolver, ChangeSetResult, resolve_affected_orders
from .source import InMemoryLineItemSource, LineItemSource

__all__ = [
    # Resolver
    "ChangeSetResolver",
    "ChangeSetResult",
    "resolve_affected_orders",
    # Aggregator
    "CATEGORY_SLOTS",
    "AggregatorConfig",
    "CategoryTotal",
    "RollupAggregator",
    "RollupResult",
    "compute_rollup",
    "rank_categories",
    # Engine
    "EngineConfig",
    "RollupBatchResult",
    "RollupEngine",
    # Source
    "LineItemSource",
    "InMemoryLineItemSource",
    # Errors
    "RollupError",
    "InvalidChangeRecord",
    "OrderMismatch",
    "UnresolvedLot",
]

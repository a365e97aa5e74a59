"""Change-Set Resolver — какие заказы затронуты batch изменений строк.

Чистая проекция batch изменений в множество устаревших заказов:
- ссылки before и after каждой записи объединяются
- отсутствующие ссылки (orphan) отбрасываются
- дубликаты схлопываются, порядок — порядок первого появления

Пустой batch и batch из одних orphan-изменений дают пустое множество.
"""

from dataclasses import dataclass
from typing import Dict, Sequence, Tuple

import structlog

from src.core.domain.change import ChangeKind, LineItemChange
from src.rollup.errors import InvalidChangeRecord

logger = structlog.get_logger(__name__)

# Какие состояния (before, after) обязательны для каждого вида изменения
_EXPECTED_STATES: Dict[ChangeKind, Tuple[bool, bool]] = {
    ChangeKind.INSERT: (False, True),
    ChangeKind.UPDATE: (True, True),
    ChangeKind.DELETE: (True, False),
    ChangeKind.RESTORE: (False, True),
}


# =============================================================================
# RESULT
# =============================================================================


@dataclass(frozen=True)
class ChangeSetResult:
    """Результат разрешения batch изменений."""

    # Затронутые заказы (без дубликатов, в порядке первого появления)
    affected_order_ids: Tuple[str, ...]

    # Статистика batch
    total_changes: int
    kind_counts: Dict[ChangeKind, int]
    orphan_changes: int
    moved_items: int

    @property
    def is_empty(self) -> bool:
        return not self.affected_order_ids


# =============================================================================
# RESOLVER
# =============================================================================


class ChangeSetResolver:
    """Change-Set Resolver: batch изменений строк → затронутые заказы.

    Порядок обработки записи:
    1. Проверка корректности (есть before или after, одна и та же строка,
       набор состояний соответствует kind)
    2. Сбор before_order_id и after_order_id (None пропускается)
    3. Дедупликация с сохранением порядка первого появления
    """

    def __init__(self):
        """Resolver не требует зависимостей (stateless)."""
        pass

    def resolve(self, changes: Sequence[LineItemChange]) -> ChangeSetResult:
        """Разрешение batch изменений.

        Args:
            changes: записи изменений строк заказа

        Returns:
            ChangeSetResult с затронутыми заказами и статистикой batch

        Raises:
            InvalidChangeRecord: если запись не несёт ни before, ни after,
                before/after описывают разные строки или набор состояний
                не соответствует kind
        """
        # dict как упорядоченное множество
        affected: Dict[str, None] = {}
        kind_counts: Dict[ChangeKind, int] = {kind: 0 for kind in ChangeKind}
        orphan_changes = 0
        moved_items = 0

        for index, change in enumerate(changes):
            self._check_record(index, change)

            kind_counts[change.kind] += 1

            if change.is_orphan_change:
                orphan_changes += 1
                continue

            if change.moves_order:
                moved_items += 1

            for order_id in (change.before_order_id, change.after_order_id):
                if order_id is not None:
                    affected.setdefault(order_id, None)

        result = ChangeSetResult(
            affected_order_ids=tuple(affected),
            total_changes=len(changes),
            kind_counts=kind_counts,
            orphan_changes=orphan_changes,
            moved_items=moved_items,
        )

        logger.debug(
            "change_set_resolved",
            total_changes=result.total_changes,
            affected_orders=len(result.affected_order_ids),
            orphan_changes=orphan_changes,
            moved_items=moved_items,
        )

        return result

    def _check_record(self, index: int, change: LineItemChange) -> None:
        """Проверка корректности одной записи изменения."""
        if change.before is None and change.after is None:
            raise InvalidChangeRecord("both before and after states are absent", index=index)

        if (
            change.before is not None
            and change.after is not None
            and change.before.line_item_id != change.after.line_item_id
        ):
            raise InvalidChangeRecord(
                f"before/after describe different line items: "
                f"{change.before.line_item_id} != {change.after.line_item_id}",
                index=index,
            )

        has_states = (change.before is not None, change.after is not None)
        if has_states != _EXPECTED_STATES[change.kind]:
            raise InvalidChangeRecord(
                f"{change.kind.value} expects before={_EXPECTED_STATES[change.kind][0]}, "
                f"after={_EXPECTED_STATES[change.kind][1]}; got before={has_states[0]}, "
                f"after={has_states[1]}",
                index=index,
            )


def resolve_affected_orders(changes: Sequence[LineItemChange]) -> Tuple[str, ...]:
    """Затронутые заказы batch изменений (без статистики).

    Args:
        changes: записи изменений строк заказа

    Returns:
        Кортеж идентификаторов заказов в порядке первого появления

    Raises:
        InvalidChangeRecord: при некорректной записи
    """
    return ChangeSetResolver().resolve(changes).affected_order_ids

"""
LineItemChange — Запись изменения строки заказа

Immutable Pydantic модель пары before/after состояний строки:
- INSERT: before = None, after = новая строка (возможно orphan)
- UPDATE: before = прежнее состояние, after = новое состояние
- DELETE: before = состояние на момент удаления, after = None
- RESTORE: before = None, after = восстановленная строка
  (ссылка на заказ — хранимые данные, восстанавливается как была)

Запись без before и без after некорректна; проверку выполняет
ChangeSetResolver (InvalidChangeRecord с индексом записи в batch).
"""

from enum import Enum
from typing import Optional, Tuple

from pydantic import BaseModel, Field

from .line_item import LineItem


# =============================================================================
# ENUMS
# =============================================================================


class ChangeKind(str, Enum):
    """Вид изменения строки заказа"""

    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"
    RESTORE = "restore"  # Undelete


# =============================================================================
# CHANGE MODEL
# =============================================================================


class LineItemChange(BaseModel):
    """
    Изменение одной строки заказа в batch.

    Immutable модель (frozen=True). Создаётся через фабрики insert/update/delete/restore.
    """

    kind: ChangeKind = Field(..., description="Вид изменения")
    before: Optional[LineItem] = Field(None, description="Состояние до изменения")
    after: Optional[LineItem] = Field(None, description="Состояние после изменения")

    model_config = {"frozen": True}  # Immutable

    # -------------------------------------------------------------------------
    # Фабрики
    # -------------------------------------------------------------------------

    @classmethod
    def insert(cls, item: LineItem) -> "LineItemChange":
        return cls(kind=ChangeKind.INSERT, before=None, after=item)

    @classmethod
    def update(cls, before: LineItem, after: LineItem) -> "LineItemChange":
        return cls(kind=ChangeKind.UPDATE, before=before, after=after)

    @classmethod
    def delete(cls, item: LineItem) -> "LineItemChange":
        return cls(kind=ChangeKind.DELETE, before=item, after=None)

    @classmethod
    def restore(cls, item: LineItem) -> "LineItemChange":
        return cls(kind=ChangeKind.RESTORE, before=None, after=item)

    # -------------------------------------------------------------------------
    # Ссылки на заказы
    # -------------------------------------------------------------------------

    @property
    def line_item_id(self) -> Optional[str]:
        """Идентификатор строки (after имеет приоритет)."""
        state = self.after or self.before
        return state.line_item_id if state is not None else None

    @property
    def before_order_id(self) -> Optional[str]:
        return self.before.order_id if self.before is not None else None

    @property
    def after_order_id(self) -> Optional[str]:
        return self.after.order_id if self.after is not None else None

    @property
    def is_orphan_change(self) -> bool:
        """True если ни before, ни after не ссылаются на заказ."""
        return self.before_order_id is None and self.after_order_id is None

    @property
    def moves_order(self) -> bool:
        """True если UPDATE переносит строку между заказами (или в/из orphan)."""
        return (
            self.before is not None
            and self.after is not None
            and self.before_order_id != self.after_order_id
        )

    def as_tuple(self) -> Tuple[Optional[str], Optional[str], Optional[int], Optional[str], Optional[str]]:
        """
        Плоское представление изменения.

        Returns:
            (line_item_id, lot_id, units, before_order_id, after_order_id);
            lot_id и units берутся из after (для DELETE — из before)
        """
        state = self.after or self.before
        return (
            self.line_item_id,
            state.lot_id if state is not None else None,
            state.units if state is not None else None,
            self.before_order_id,
            self.after_order_id,
        )

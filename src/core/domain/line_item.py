"""
LineItem — Модель строки заказа

Immutable Pydantic модель: количество лота, привязанное (не более чем) к одному заказу.

Строка без order_id — "сирота" (orphan): легитимно не назначена,
исключается из rollup любого заказа и никогда не назначается автоматически.
"""

from typing import Optional

from pydantic import BaseModel, Field


class LineItem(BaseModel):
    """
    Модель строки заказа.

    Immutable модель (frozen=True). Обновление строки создаёт новый экземпляр
    через model_copy(update=...).
    """

    # Идентификация
    line_item_id: str = Field(..., min_length=1, description="Идентификатор строки")
    lot_id: str = Field(..., min_length=1, description="Ссылка на лот")

    # Количество
    units: Optional[int] = Field(None, gt=0, description="Количество единиц (> 0, если задано)")

    # Привязка к заказу (None — orphan)
    order_id: Optional[str] = Field(None, min_length=1, description="Ссылка на заказ")

    model_config = {"frozen": True}  # Immutable

    @property
    def is_orphan(self) -> bool:
        """True если строка не привязана ни к одному заказу."""
        return self.order_id is None

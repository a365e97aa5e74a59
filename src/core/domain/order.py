"""
Order — Модель заказа и его rollup-снапшота

Immutable Pydantic модели:
- OrderRollup — пять производных полей заказа (снапшот для записи)
- Order — заказ аккаунта с производными полями

Производные поля не несут независимой истины: они всегда равны
результату агрегации текущих строк заказа. Вычисляет их только движок,
записывает обратно — слой хранения.
"""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field, model_validator


# =============================================================================
# ROLLUP SNAPSHOT
# =============================================================================


class OrderRollup(BaseModel):
    """
    Снапшот производных полей заказа.

    Инварианты слотов категорий:
    - name и units слота заданы вместе или вместе отсутствуют
    - слот 2 не может быть заполнен при пустом слоте 1
    """

    order_id: str = Field(..., min_length=1, description="Идентификатор заказа")
    purchased: Optional[Decimal] = Field(None, description="Сумма покупки (None — нет строк)")

    category1_name: Optional[str] = Field(None, description="Категория #1 по количеству")
    category1_units: Optional[int] = Field(None, ge=0, description="Количество категории #1")
    category2_name: Optional[str] = Field(None, description="Категория #2 по количеству")
    category2_units: Optional[int] = Field(None, ge=0, description="Количество категории #2")

    model_config = {"frozen": True}  # Immutable

    @model_validator(mode="after")
    def validate_category_slots(self) -> "OrderRollup":
        """Проверка согласованности слотов категорий."""
        for slot in (1, 2):
            name = getattr(self, f"category{slot}_name")
            units = getattr(self, f"category{slot}_units")
            if (name is None) != (units is None):
                raise ValueError(
                    f"category{slot}_name and category{slot}_units must be set together"
                )

        if self.category2_name is not None and self.category1_name is None:
            raise ValueError("category2 is set while category1 is empty")

        return self

    @property
    def is_empty(self) -> bool:
        """True если все пять производных полей пусты (заказ без строк)."""
        return (
            self.purchased is None
            and self.category1_name is None
            and self.category2_name is None
        )

    def fields(self) -> tuple:
        """
        Кортеж производных полей в порядке записи.

        Returns:
            (purchased, category1_name, category1_units, category2_name, category2_units)
        """
        return (
            self.purchased,
            self.category1_name,
            self.category1_units,
            self.category2_name,
            self.category2_units,
        )


# =============================================================================
# ORDER MODEL
# =============================================================================


class Order(BaseModel):
    """
    Модель заказа.

    Immutable модель (frozen=True). Новые производные поля применяются
    через with_rollup(), который создаёт новый экземпляр.
    """

    # Идентификация
    order_id: str = Field(..., min_length=1, description="Идентификатор заказа")
    account_id: str = Field(..., min_length=1, description="Аккаунт-владелец заказа")

    # Производные поля (rollup)
    purchased: Optional[Decimal] = Field(None, description="Сумма покупки")
    category1_name: Optional[str] = Field(None, description="Категория #1")
    category1_units: Optional[int] = Field(None, ge=0, description="Количество категории #1")
    category2_name: Optional[str] = Field(None, description="Категория #2")
    category2_units: Optional[int] = Field(None, ge=0, description="Количество категории #2")

    model_config = {"frozen": True}  # Immutable

    def rollup(self) -> OrderRollup:
        """Текущие (сохранённые) производные поля заказа как снапшот."""
        return OrderRollup(
            order_id=self.order_id,
            purchased=self.purchased,
            category1_name=self.category1_name,
            category1_units=self.category1_units,
            category2_name=self.category2_name,
            category2_units=self.category2_units,
        )

    def with_rollup(self, snapshot: OrderRollup) -> "Order":
        """
        Применение rollup-снапшота к заказу.

        Args:
            snapshot: Пересчитанные производные поля

        Returns:
            Новый экземпляр Order с обновлёнными производными полями

        Raises:
            ValueError: если снапшот относится к другому заказу
        """
        if snapshot.order_id != self.order_id:
            raise ValueError(
                f"Snapshot for order {snapshot.order_id!r} applied to order {self.order_id!r}"
            )

        return self.model_copy(
            update={
                "purchased": snapshot.purchased,
                "category1_name": snapshot.category1_name,
                "category1_units": snapshot.category1_units,
                "category2_name": snapshot.category2_name,
                "category2_units": snapshot.category2_units,
            }
        )

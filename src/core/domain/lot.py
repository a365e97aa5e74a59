"""
Lot — Модель товарного лота

Immutable Pydantic модель, представляющая лот (товарную единицу) с ценой.
Имя лота одновременно является меткой категории для rollup-группировки.

Цена читается движком в момент агрегации (текущая цена лота),
а не фиксируется в строке заказа при её создании.
"""

from decimal import Decimal

from pydantic import BaseModel, Field, field_validator

from src.core.math.money import to_money


class Lot(BaseModel):
    """
    Модель товарного лота.

    Immutable модель (frozen=True): изменение цены создаёт новый экземпляр.
    """

    lot_id: str = Field(..., min_length=1, description="Идентификатор лота")
    name: str = Field(..., min_length=1, description="Имя лота (метка категории)")
    unit_price: Decimal = Field(..., ge=0, description="Цена единицы (Decimal, ≥ 0)")

    model_config = {"frozen": True}  # Immutable

    @field_validator("unit_price", mode="before")
    @classmethod
    def coerce_unit_price(cls, v):
        """Конверсия цены в конечный Decimal (float через str, без NaN/Inf)."""
        return to_money(v)

    @property
    def category(self) -> str:
        """Метка категории для группировки (совпадает с name)."""
        return self.name

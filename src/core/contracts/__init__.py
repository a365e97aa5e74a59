"""
Contract Validation Module

Модуль для валидации JSON контрактов движка rollup-агрегации.
"""

from .validators import (
    ContractValidator,
    LineItemChangeValidator,
    OrderRollupValidator,
    SchemaLoader,
    get_schema_loader,
    validate_line_item_change,
    validate_order_rollup,
)

__all__ = [
    # Classes
    "SchemaLoader",
    "ContractValidator",
    "LineItemChangeValidator",
    "OrderRollupValidator",
    # Functions
    "get_schema_loader",
    "validate_line_item_change",
    "validate_order_rollup",
]

"""
Domain models and value objects.

Contains fundamental domain entities like Lot, LineItem, Order, LineItemChange.
"""

from src.core.domain.change import ChangeKind, LineItemChange
from src.core.domain.line_item import LineItem
from src.core.domain.lot import Lot
from src.core.domain.order import Order, OrderRollup

__all__ = [
    # Lot model
    "Lot",
    # LineItem model
    "LineItem",
    # Order model
    "Order",
    "OrderRollup",
    # Change model
    "ChangeKind",
    "LineItemChange",
]

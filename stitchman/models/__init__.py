"""
Stitchman Models.

Core models for order tracking:
- Sewer: production worker (soft-deactivated, never deleted)
- Order: wallet production order with its lifecycle state machine
"""

from stitchman.models.order import OPEN_STATUSES, TRANSITIONS, Order, OrderStatus
from stitchman.models.sewer import Sewer

__all__ = [
    "Sewer",
    "Order",
    "OrderStatus",
    "OPEN_STATUSES",
    "TRANSITIONS",
]

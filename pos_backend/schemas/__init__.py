"""
Schemas for API responses and requests
"""

from pos_backend.schemas.token import Actor, TokenPayload
from pos_backend.schemas.payment import BalanceSummary, PaymentCreate, PaymentRead
from pos_backend.schemas.order import (
    OrderCreate, OrderItemCreate, OrderStatusUpdate,
    OrderRead, OrderDetailRead, OrderItemRead, OrderStatusHistoryRead,
)
from pos_backend.schemas.table import TableStatusSummary, LocationOccupancy, TableDrift

__all__ = [
    "Actor",
    "TokenPayload",
    "BalanceSummary",
    "PaymentCreate",
    "PaymentRead",
    "OrderCreate",
    "OrderItemCreate",
    "OrderStatusUpdate",
    "OrderRead",
    "OrderDetailRead",
    "OrderItemRead",
    "OrderStatusHistoryRead",
    "TableStatusSummary",
    "LocationOccupancy",
    "TableDrift",
]

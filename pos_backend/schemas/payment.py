"""
Schemas for payments and order balances
"""

from sqlmodel import SQLModel
from datetime import datetime
from typing import Optional
from decimal import Decimal
import uuid

from pos_backend.models.order import OrderStatus
from pos_backend.models.payment import PaymentMethod, PaymentStatus


class PaymentCreate(SQLModel):
    payment_method: str
    amount: Decimal
    reference_number: Optional[str] = None


class PaymentRead(SQLModel):
    id: uuid.UUID
    order_id: uuid.UUID
    payment_method: PaymentMethod
    amount: Decimal
    status: PaymentStatus
    reference_number: Optional[str] = None
    processed_by: Optional[uuid.UUID] = None
    processed_at: Optional[datetime] = None
    created_at: datetime

    class Config:
        from_attributes = True


class BalanceSummary(SQLModel):
    """Payment position of one order"""
    order_id: uuid.UUID
    status: OrderStatus
    total: Decimal
    paid: Decimal
    pending: Decimal
    remaining: Decimal
    is_fully_paid: bool
    payment_count: int

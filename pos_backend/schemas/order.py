"""
Schemas for orders, order items and status history
"""

from sqlmodel import SQLModel
from datetime import datetime
from typing import Optional, List
from decimal import Decimal
import uuid

from pos_backend.models.order import OrderStatus, OrderType
from pos_backend.models.order_item import OrderItemStatus
from pos_backend.schemas.payment import PaymentRead


class OrderItemCreate(SQLModel):
    product_id: uuid.UUID
    quantity: int
    special_instructions: Optional[str] = None


class OrderCreate(SQLModel):
    items: List[OrderItemCreate]
    table_id: Optional[uuid.UUID] = None
    order_type: str = OrderType.DINE_IN.value
    customer_name: Optional[str] = None
    notes: Optional[str] = None


class OrderStatusUpdate(SQLModel):
    # Plain string so unknown values reach the status machine and map to ValidationError
    status: str
    notes: Optional[str] = None


class OrderItemRead(SQLModel):
    id: uuid.UUID
    order_id: uuid.UUID
    product_id: uuid.UUID
    quantity: int
    unit_price: Decimal
    total_price: Decimal
    special_instructions: Optional[str] = None
    status: OrderItemStatus
    created_at: datetime

    class Config:
        from_attributes = True


class OrderRead(SQLModel):
    id: uuid.UUID
    order_number: str
    table_id: Optional[uuid.UUID] = None
    created_by: Optional[uuid.UUID] = None
    customer_name: Optional[str] = None
    order_type: OrderType
    status: OrderStatus
    subtotal: Decimal
    tax_amount: Decimal
    discount_amount: Decimal
    total_amount: Decimal
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    served_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    items: List[OrderItemRead] = []

    class Config:
        from_attributes = True


class OrderDetailRead(OrderRead):
    payments: List[PaymentRead] = []


class OrderStatusHistoryRead(SQLModel):
    id: uuid.UUID
    order_id: uuid.UUID
    previous_status: Optional[OrderStatus] = None
    new_status: OrderStatus
    changed_by: Optional[uuid.UUID] = None
    notes: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True

"""
Order status history model
Append-only audit rows, one per status transition request
"""

from sqlmodel import Field, SQLModel
from sqlalchemy import DateTime
from datetime import datetime
from typing import Optional
import uuid

from pos_backend.core.clock import utcnow

from pos_backend.models.order import OrderStatus


class OrderStatusHistory(SQLModel, table=True):
    __tablename__ = "order_status_history"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    order_id: uuid.UUID = Field(foreign_key="orders.id", index=True)
    previous_status: Optional[OrderStatus] = Field(default=None, nullable=True)
    new_status: OrderStatus
    changed_by: Optional[uuid.UUID] = Field(default=None, nullable=True)
    notes: Optional[str] = Field(default=None, max_length=2000, nullable=True)
    created_at: datetime = Field(default_factory=utcnow, index=True, sa_type=DateTime(timezone=True))

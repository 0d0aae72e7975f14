"""
Order Item model
Individual items in an order with price snapshots
"""

from sqlmodel import Field, SQLModel, Relationship
from sqlalchemy import DateTime
from decimal import Decimal
from datetime import datetime
from typing import Optional, TYPE_CHECKING
from enum import Enum
import uuid

from pos_backend.core.clock import utcnow

if TYPE_CHECKING:
    from pos_backend.models.order import Order


class OrderItemStatus(str, Enum):
    """Kitchen status of a single item"""
    PENDING = "pending"
    PREPARING = "preparing"
    READY = "ready"
    SERVED = "served"


class OrderItem(SQLModel, table=True):
    """Line item of an order"""

    __tablename__ = "order_items"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    order_id: uuid.UUID = Field(foreign_key="orders.id", index=True)
    product_id: uuid.UUID = Field(foreign_key="products.id", index=True)

    quantity: int = Field(default=1, description="Quantity ordered, always > 0")
    unit_price: Decimal = Field(
        default=Decimal("0.00"),
        max_digits=10,
        decimal_places=2,
        description="Unit price at time of order (snapshot)"
    )
    total_price: Decimal = Field(
        default=Decimal("0.00"),
        max_digits=12,
        decimal_places=2,
        description="quantity * unit_price"
    )
    special_instructions: Optional[str] = Field(default=None, max_length=1000, nullable=True)

    status: OrderItemStatus = Field(default=OrderItemStatus.PENDING, index=True)

    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))
    updated_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))

    order: Optional["Order"] = Relationship(back_populates="items")

"""
Order model
Customer order with price totals fixed at creation
"""

from sqlmodel import Field, SQLModel, Relationship
from sqlalchemy import DateTime
from datetime import datetime
from typing import Optional, TYPE_CHECKING, List
from decimal import Decimal
from enum import Enum
import uuid

from pos_backend.core.clock import utcnow

if TYPE_CHECKING:
    from pos_backend.models.order_item import OrderItem
    from pos_backend.models.payment import Payment
    from pos_backend.models.dining_table import DiningTable


class OrderType(str, Enum):
    """How the order is served"""
    DINE_IN = "dine_in"
    TAKEOUT = "takeout"
    DELIVERY = "delivery"


class OrderStatus(str, Enum):
    """Status of an order"""
    PENDING = "pending"          # Taken, not yet acknowledged
    CONFIRMED = "confirmed"      # Acknowledged by staff
    PREPARING = "preparing"      # Kitchen is working on it
    READY = "ready"              # Waiting to be served or picked up
    SERVED = "served"            # Delivered to the guest
    COMPLETED = "completed"      # Paid and closed
    CANCELLED = "cancelled"      # Cancelled by staff


TERMINAL_STATUSES = (OrderStatus.COMPLETED, OrderStatus.CANCELLED)


class Order(SQLModel, table=True):
    """Customer order"""

    __tablename__ = "orders"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    order_number: str = Field(
        max_length=32,
        unique=True,
        index=True,
        description="Human-readable order label, globally unique"
    )

    table_id: Optional[uuid.UUID] = Field(
        default=None,
        foreign_key="dining_tables.id",
        index=True,
        nullable=True,
        description="Dining table for dine-in orders"
    )
    created_by: Optional[uuid.UUID] = Field(
        default=None,
        index=True,
        nullable=True,
        description="Staff member who took the order"
    )
    customer_name: Optional[str] = Field(default=None, max_length=255, nullable=True)

    order_type: OrderType = Field(default=OrderType.DINE_IN, index=True)
    status: OrderStatus = Field(
        default=OrderStatus.PENDING,
        index=True,
        description="Current status of the order"
    )

    # Financial amounts (fixed at creation)
    subtotal: Decimal = Field(default=Decimal("0.00"), max_digits=12, decimal_places=2)
    tax_amount: Decimal = Field(default=Decimal("0.00"), max_digits=12, decimal_places=2)
    discount_amount: Decimal = Field(default=Decimal("0.00"), max_digits=12, decimal_places=2)
    total_amount: Decimal = Field(
        default=Decimal("0.00"),
        max_digits=12,
        decimal_places=2,
        description="subtotal + tax_amount - discount_amount"
    )

    notes: Optional[str] = Field(default=None, max_length=2000, nullable=True)

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow, index=True, sa_type=DateTime(timezone=True))
    updated_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))
    served_at: Optional[datetime] = Field(default=None, nullable=True, sa_type=DateTime(timezone=True))
    completed_at: Optional[datetime] = Field(default=None, nullable=True, sa_type=DateTime(timezone=True))
    cancelled_at: Optional[datetime] = Field(default=None, nullable=True, sa_type=DateTime(timezone=True))

    # Relationships
    table: Optional["DiningTable"] = Relationship()
    items: List["OrderItem"] = Relationship(
        back_populates="order",
        sa_relationship_kwargs={"cascade": "all, delete-orphan", "order_by": "OrderItem.created_at"}
    )
    payments: List["Payment"] = Relationship(
        back_populates="order",
        sa_relationship_kwargs={"order_by": "Payment.created_at"}
    )

    def is_terminal(self) -> bool:
        """Completed and cancelled orders accept no payments or transitions"""
        return self.status in TERMINAL_STATUSES

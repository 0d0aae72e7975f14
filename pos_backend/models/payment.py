"""
Payment model
Payments recorded against an order
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


class PaymentMethod(str, Enum):
    """Payment methods supported by the system"""
    CASH = "cash"
    CREDIT_CARD = "credit_card"
    DEBIT_CARD = "debit_card"
    DIGITAL_WALLET = "digital_wallet"


class PaymentStatus(str, Enum):
    """Status of a payment"""
    PENDING = "pending"        # Initiated, not yet settled
    COMPLETED = "completed"    # Settled; counts toward the order balance
    FAILED = "failed"          # Declined or errored
    REFUNDED = "refunded"      # Returned to the customer


class Payment(SQLModel, table=True):
    """Payment transaction"""

    __tablename__ = "payments"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    order_id: uuid.UUID = Field(
        foreign_key="orders.id",
        index=True,
        description="Order this payment belongs to"
    )

    payment_method: PaymentMethod = Field(index=True)
    amount: Decimal = Field(max_digits=12, decimal_places=2, description="Payment amount, always > 0")
    status: PaymentStatus = Field(default=PaymentStatus.PENDING, index=True)
    reference_number: Optional[str] = Field(
        default=None,
        max_length=100,
        nullable=True,
        description="Card slip, wallet transaction or receipt reference"
    )
    processed_by: Optional[uuid.UUID] = Field(default=None, nullable=True)

    processed_at: Optional[datetime] = Field(default=None, nullable=True, sa_type=DateTime(timezone=True))
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))

    order: Optional["Order"] = Relationship(back_populates="payments")

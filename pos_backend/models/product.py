"""
Product model (read side of the catalog)
Menu CRUD lives elsewhere; orders only read price and availability.
"""

from sqlmodel import Field, SQLModel
from sqlalchemy import DateTime
from decimal import Decimal
from datetime import datetime
from typing import Optional
import uuid

from pos_backend.core.clock import utcnow


class Product(SQLModel, table=True):
    __tablename__ = "products"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    name: str = Field(max_length=255)
    description: Optional[str] = Field(default=None, max_length=2000, nullable=True)
    price: Decimal = Field(default=Decimal("0.00"), max_digits=10, decimal_places=2)
    is_available: bool = Field(default=True, index=True)
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))
    updated_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))

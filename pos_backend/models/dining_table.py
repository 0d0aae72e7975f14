"""
Dining table model
"""

from sqlmodel import Field, SQLModel
from sqlalchemy import DateTime
from datetime import datetime
from typing import Optional
import uuid

from pos_backend.core.clock import utcnow


class DiningTable(SQLModel, table=True):
    """Table model for restaurant seating"""

    __tablename__ = "dining_tables"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    table_number: str = Field(max_length=20, unique=True, description="Table identifier (e.g., 'A1', '12')")
    seating_capacity: int = Field(default=4, description="Maximum number of guests")
    location: Optional[str] = Field(default=None, max_length=100, nullable=True, description="Area, e.g. 'patio'")

    # Derived from active dine-in orders, never written directly
    is_occupied: bool = Field(default=False, index=True)

    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))
    updated_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))

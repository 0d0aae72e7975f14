"""
Per-day order number counter
"""

from sqlmodel import Field, SQLModel
from datetime import date


class OrderNumberSequence(SQLModel, table=True):
    """Last issued order sequence for one business day"""

    __tablename__ = "order_number_sequences"

    business_date: date = Field(primary_key=True)
    last_value: int = Field(default=0)

"""
Schemas for table occupancy reporting
"""

from sqlmodel import SQLModel
from typing import List
import uuid


class LocationOccupancy(SQLModel):
    location: str
    total: int
    occupied: int
    available: int
    occupancy_rate: float


class TableStatusSummary(SQLModel):
    total: int
    occupied: int
    available: int
    occupancy_rate: float
    by_location: List[LocationOccupancy] = []


class TableDrift(SQLModel):
    """A table whose stored occupancy disagreed with its active orders"""
    table_id: uuid.UUID
    table_number: str
    was_occupied: bool
    is_occupied: bool

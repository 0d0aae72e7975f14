"""
Tables API endpoints
"""

from fastapi import APIRouter, Depends
from typing import Optional

from pos_backend.core.dependencies import get_current_actor, get_table_tracker
from pos_backend.schemas.table import TableStatusSummary
from pos_backend.schemas.token import Actor
from pos_backend.services import TableOccupancyTracker

router = APIRouter()


@router.get("/status", response_model=TableStatusSummary)
def get_table_status(
    location: Optional[str] = None,
    actor: Actor = Depends(get_current_actor),
    tracker: TableOccupancyTracker = Depends(get_table_tracker),
):
    """Occupancy totals overall and per location"""
    return tracker.get_status(location)

"""
Table occupancy tracking

A table is occupied exactly while at least one non-terminal order references
it. The flag is written only as a side effect of order creation and of an
order reaching a terminal status; ``reconcile`` repairs any drift.
"""

from collections import OrderedDict
from typing import List, Optional
import uuid

from sqlalchemy import String, func
from sqlmodel import Session, select
import structlog

from pos_backend.core.clock import utcnow
from pos_backend.core.database import atomic, snapshot
from pos_backend.core.exceptions import NotFoundError
from pos_backend.models.dining_table import DiningTable
from pos_backend.models.order import Order, TERMINAL_STATUSES
from pos_backend.schemas.table import LocationOccupancy, TableDrift, TableStatusSummary
from pos_backend.services.locks import lock_table

logger = structlog.get_logger(__name__)

DEFAULT_LOCATION = "main_floor"


def _rate(occupied: int, total: int) -> float:
    return round(occupied / total * 100, 2) if total else 0.0


class TableOccupancyTracker:
    """Derives and stores each dining table's occupied flag"""

    def __init__(self, session: Session):
        self.session = session

    def occupy(self, table_id: uuid.UUID) -> DiningTable:
        """Mark a table occupied inside the caller's transaction"""
        table = lock_table(self.session, table_id)
        if table is None:
            raise NotFoundError("table_not_found", "Table not found")

        if not table.is_occupied:
            table.is_occupied = True
            table.updated_at = utcnow()
            self.session.add(table)
            logger.info("Table occupied", table_id=str(table_id), table_number=table.table_number)
        return table

    def release(self, table_id: uuid.UUID, closing_order_id: Optional[uuid.UUID] = None) -> DiningTable:
        """Recompute a table's flag after one of its orders closed.

        The table stays occupied while any other active order still sits at it.
        """
        table = lock_table(self.session, table_id)
        if table is None:
            raise NotFoundError("table_not_found", "Table not found")

        still_active = self._has_active_orders(table_id, exclude_order_id=closing_order_id)
        if table.is_occupied != still_active:
            table.is_occupied = still_active
            table.updated_at = utcnow()
            self.session.add(table)
            if not still_active:
                logger.info("Table released", table_id=str(table_id), table_number=table.table_number)
        return table

    def _has_active_orders(self, table_id: uuid.UUID, exclude_order_id: Optional[uuid.UUID] = None) -> bool:
        query = select(Order.id).where(
            Order.table_id == table_id,
            Order.status.not_in(TERMINAL_STATUSES),
        )
        if exclude_order_id is not None:
            query = query.where(Order.id != exclude_order_id)
        return self.session.exec(query.limit(1)).first() is not None

    def get_status(self, location: Optional[str] = None) -> TableStatusSummary:
        """Occupancy counts overall and per location.

        Args:
            location: optional case-insensitive substring filter on table location

        Returns:
            TableStatusSummary with totals and a per-location breakdown
        """
        query = select(DiningTable.location, DiningTable.is_occupied)
        if location:
            query = query.where(
                func.lower(DiningTable.location, type_=String).contains(location.lower(), autoescape=True)
            )

        with snapshot(self.session):
            rows = self.session.exec(query).all()

        groups: "OrderedDict[str, list]" = OrderedDict()
        for table_location, is_occupied in sorted(rows, key=lambda r: r[0] or DEFAULT_LOCATION):
            counts = groups.setdefault(table_location or DEFAULT_LOCATION, [0, 0])
            counts[0] += 1
            counts[1] += 1 if is_occupied else 0

        by_location = [
            LocationOccupancy(
                location=name,
                total=total,
                occupied=occupied,
                available=total - occupied,
                occupancy_rate=_rate(occupied, total),
            )
            for name, (total, occupied) in groups.items()
        ]
        total = sum(entry.total for entry in by_location)
        occupied = sum(entry.occupied for entry in by_location)

        return TableStatusSummary(
            total=total,
            occupied=occupied,
            available=total - occupied,
            occupancy_rate=_rate(occupied, total),
            by_location=by_location,
        )

    def reconcile(self) -> List[TableDrift]:
        """Recompute every table's flag from active orders and fix mismatches"""
        drifts: List[TableDrift] = []

        with atomic(self.session):
            tables = self.session.exec(
                select(DiningTable)
                .with_for_update()
                .execution_options(populate_existing=True)
            ).all()
            active_table_ids = set(self.session.exec(
                select(Order.table_id)
                .where(Order.table_id.is_not(None), Order.status.not_in(TERMINAL_STATUSES))
                .distinct()
            ).all())

            now = utcnow()
            for table in tables:
                should_be_occupied = table.id in active_table_ids
                if table.is_occupied == should_be_occupied:
                    continue
                drifts.append(TableDrift(
                    table_id=table.id,
                    table_number=table.table_number,
                    was_occupied=table.is_occupied,
                    is_occupied=should_be_occupied,
                ))
                logger.warning(
                    "Table occupancy drift corrected",
                    table_id=str(table.id),
                    table_number=table.table_number,
                    was_occupied=table.is_occupied,
                    is_occupied=should_be_occupied,
                )
                table.is_occupied = should_be_occupied
                table.updated_at = now
                self.session.add(table)

        logger.info("Table reconciliation finished", tables=len(tables), corrected=len(drifts))
        return drifts

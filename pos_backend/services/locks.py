"""
Row-lock helpers

Any read-then-write sequence on an order starts by locking the order row, so
operations on the same order run one after another while different orders
proceed in parallel.
"""

from typing import Optional
import uuid

from sqlmodel import Session, select

from pos_backend.models.dining_table import DiningTable
from pos_backend.models.order import Order


def lock_order(session: Session, order_id: uuid.UUID) -> Optional[Order]:
    """SELECT ... FOR UPDATE the order, refreshing any stale identity-map copy"""
    return session.exec(
        select(Order)
        .where(Order.id == order_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    ).first()


def lock_table(session: Session, table_id: uuid.UUID) -> Optional[DiningTable]:
    return session.exec(
        select(DiningTable)
        .where(DiningTable.id == table_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    ).first()

"""
Append-only log of order status changes
"""

from typing import List, Optional
import uuid

from sqlmodel import Session, select
import structlog

from pos_backend.core.database import snapshot
from pos_backend.core.exceptions import NotFoundError
from pos_backend.models.order import Order, OrderStatus
from pos_backend.models.order_status_history import OrderStatusHistory
from pos_backend.schemas.token import Actor

logger = structlog.get_logger(__name__)


class AuditTrail:
    """Writes and reads OrderStatusHistory rows. Rows are never updated or deleted."""

    def __init__(self, session: Session):
        self.session = session

    def record(
        self,
        order_id: uuid.UUID,
        previous_status: Optional[OrderStatus],
        new_status: OrderStatus,
        actor: Actor,
        notes: Optional[str] = None,
    ) -> OrderStatusHistory:
        """Append one history row inside the caller's transaction"""
        entry = OrderStatusHistory(
            order_id=order_id,
            previous_status=previous_status,
            new_status=new_status,
            changed_by=actor.user_id,
            notes=notes,
        )
        self.session.add(entry)
        return entry

    def history(self, order_id: uuid.UUID) -> List[OrderStatusHistory]:
        """Status changes of an order, oldest first"""
        with snapshot(self.session):
            if self.session.get(Order, order_id) is None:
                raise NotFoundError("order_not_found", "Order not found")
            return list(self.session.exec(
                select(OrderStatusHistory)
                .where(OrderStatusHistory.order_id == order_id)
                .order_by(OrderStatusHistory.created_at)
            ).all())

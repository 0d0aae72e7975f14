"""
Order status machine

Any non-terminal status may move to any other status. ``completed`` and
``cancelled`` are terminal: only re-applying the same status is accepted once
an order reaches one of them. Every call appends exactly one history row.
"""

from typing import Optional, Union
import uuid

from sqlmodel import Session
import structlog

from pos_backend.core.clock import utcnow
from pos_backend.core.database import atomic
from pos_backend.core.exceptions import ConflictError, NotFoundError, ValidationError
from pos_backend.models.order import Order, OrderStatus, TERMINAL_STATUSES
from pos_backend.models.order_status_history import OrderStatusHistory
from pos_backend.schemas.token import Actor
from pos_backend.services.audit_trail import AuditTrail
from pos_backend.services.locks import lock_order
from pos_backend.services.table_occupancy import TableOccupancyTracker

logger = structlog.get_logger(__name__)


def parse_status(value: Union[OrderStatus, str]) -> OrderStatus:
    """Map a raw status value to OrderStatus or raise ValidationError"""
    if isinstance(value, OrderStatus):
        return value
    try:
        return OrderStatus(value)
    except ValueError:
        valid = ", ".join(s.value for s in OrderStatus)
        raise ValidationError("invalid_status", f"Invalid order status '{value}', expected one of: {valid}")


class OrderStatusMachine:
    """Validates and applies order status transitions"""

    def __init__(
        self,
        session: Session,
        audit_trail: Optional[AuditTrail] = None,
        table_tracker: Optional[TableOccupancyTracker] = None,
    ):
        self.session = session
        self.audit_trail = audit_trail or AuditTrail(session)
        self.table_tracker = table_tracker or TableOccupancyTracker(session)

    def transition(
        self,
        order_id: uuid.UUID,
        new_status: Union[OrderStatus, str],
        actor: Actor,
        notes: Optional[str] = None,
    ) -> Order:
        """Move an order to ``new_status`` in its own transaction.

        Raises:
            ValidationError: unknown status value
            NotFoundError: order does not exist
            ConflictError: order is terminal and a different status was requested
        """
        status = parse_status(new_status)

        with atomic(self.session):
            order = lock_order(self.session, order_id)
            if order is None:
                raise NotFoundError("order_not_found", "Order not found")
            previous = order.status
            self.apply(order, status, actor, notes)

        self.session.refresh(order)
        logger.info(
            "Order status changed",
            order_id=str(order.id),
            order_number=order.order_number,
            previous_status=previous.value,
            new_status=status.value,
            changed_by=str(actor.user_id) if actor.user_id else None,
        )
        return order

    def apply(
        self,
        order: Order,
        new_status: OrderStatus,
        actor: Actor,
        notes: Optional[str] = None,
    ) -> OrderStatusHistory:
        """Apply a transition to an order the caller has already locked.

        Runs inside the caller's transaction and never commits, so payment
        auto-completion shares one commit with the payment insert.
        """
        previous = order.status
        if order.is_terminal() and new_status != previous:
            logger.warning(
                "Rejected transition of terminal order",
                order_id=str(order.id),
                current_status=previous.value,
                requested_status=new_status.value,
            )
            raise ConflictError("order_terminal", f"Order is already {previous.value}")

        now = utcnow()
        order.status = new_status
        order.updated_at = now

        if new_status == OrderStatus.SERVED and order.served_at is None:
            order.served_at = now
        elif new_status == OrderStatus.COMPLETED and order.completed_at is None:
            order.completed_at = now
        elif new_status == OrderStatus.CANCELLED and order.cancelled_at is None:
            order.cancelled_at = now

        self.session.add(order)

        if new_status in TERMINAL_STATUSES and order.table_id is not None:
            self.table_tracker.release(order.table_id, closing_order_id=order.id)

        return self.audit_trail.record(order.id, previous, new_status, actor, notes)

"""
Order API endpoints
Creation, retrieval, status transitions and status history
"""

from fastapi import APIRouter, Depends, status
from typing import List
import uuid

from pos_backend.core.dependencies import (
    get_audit_trail, get_current_actor, get_order_service, get_status_machine
)
from pos_backend.schemas.order import (
    OrderCreate, OrderDetailRead, OrderRead, OrderStatusHistoryRead, OrderStatusUpdate
)
from pos_backend.schemas.token import Actor
from pos_backend.services import AuditTrail, OrderService, OrderStatusMachine

router = APIRouter()


@router.post("/", response_model=OrderRead, status_code=status.HTTP_201_CREATED)
def create_order(
    order_data: OrderCreate,
    actor: Actor = Depends(get_current_actor),
    service: OrderService = Depends(get_order_service),
):
    """Create an order with priced items"""
    order = service.create_order(
        items=order_data.items,
        actor=actor,
        order_type=order_data.order_type,
        table_id=order_data.table_id,
        customer_name=order_data.customer_name,
        notes=order_data.notes,
    )
    return OrderRead.model_validate(order)


@router.get("/{order_id}", response_model=OrderDetailRead)
def get_order(
    order_id: uuid.UUID,
    actor: Actor = Depends(get_current_actor),
    service: OrderService = Depends(get_order_service),
):
    """Get order by ID with items and payments"""
    return OrderDetailRead.model_validate(service.get_order(order_id))


@router.patch("/{order_id}/status", response_model=OrderRead)
def update_order_status(
    order_id: uuid.UUID,
    update: OrderStatusUpdate,
    actor: Actor = Depends(get_current_actor),
    status_machine: OrderStatusMachine = Depends(get_status_machine),
):
    """Move an order to a new status"""
    order = status_machine.transition(order_id, update.status, actor, update.notes)
    return OrderRead.model_validate(order)


@router.get("/{order_id}/history", response_model=List[OrderStatusHistoryRead])
def get_order_history(
    order_id: uuid.UUID,
    actor: Actor = Depends(get_current_actor),
    audit_trail: AuditTrail = Depends(get_audit_trail),
):
    """Status change log of an order, oldest first"""
    return [OrderStatusHistoryRead.model_validate(entry) for entry in audit_trail.history(order_id)]

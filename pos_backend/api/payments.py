"""
Payment API endpoints
"""

from fastapi import APIRouter, Depends, status
from typing import List
import uuid

from pos_backend.core.dependencies import get_current_actor, get_payment_ledger
from pos_backend.schemas.payment import BalanceSummary, PaymentCreate, PaymentRead
from pos_backend.schemas.token import Actor
from pos_backend.services import PaymentLedger

router = APIRouter()


@router.post("/{order_id}/payments", response_model=PaymentRead, status_code=status.HTTP_201_CREATED)
def record_payment(
    order_id: uuid.UUID,
    payment_data: PaymentCreate,
    actor: Actor = Depends(get_current_actor),
    ledger: PaymentLedger = Depends(get_payment_ledger),
):
    """Record a payment against an order"""
    payment = ledger.record_payment(
        order_id,
        payment_data.payment_method,
        payment_data.amount,
        actor,
        reference_number=payment_data.reference_number,
    )
    return PaymentRead.model_validate(payment)


@router.get("/{order_id}/payments", response_model=List[PaymentRead])
def list_payments(
    order_id: uuid.UUID,
    actor: Actor = Depends(get_current_actor),
    ledger: PaymentLedger = Depends(get_payment_ledger),
):
    return [PaymentRead.model_validate(p) for p in ledger.list_payments(order_id)]


@router.get("/{order_id}/payment-summary", response_model=BalanceSummary)
def get_payment_summary(
    order_id: uuid.UUID,
    actor: Actor = Depends(get_current_actor),
    ledger: PaymentLedger = Depends(get_payment_ledger),
):
    """Total, paid, pending and remaining amounts of an order"""
    return ledger.get_balance(order_id)

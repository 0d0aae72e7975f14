"""
Payment ledger

Records payments under the non-overpayment rule: the completed payments of an
order never add up to more than its total. The balance check and the insert
run under a row lock on the order, so concurrent payments on one order are
serialized and at most the remaining balance is ever accepted.
"""

from decimal import Decimal, InvalidOperation
from typing import List, Optional, Union
import uuid

from sqlalchemy import func
from sqlmodel import Session, select
import structlog

from pos_backend.core.clock import utcnow
from pos_backend.core.database import atomic, snapshot
from pos_backend.core.exceptions import ConflictError, NotFoundError, ValidationError
from pos_backend.core.money import CENT, ZERO, to_money
from pos_backend.models.order import Order, OrderStatus
from pos_backend.models.payment import Payment, PaymentMethod, PaymentStatus
from pos_backend.schemas.payment import BalanceSummary
from pos_backend.schemas.token import Actor
from pos_backend.services.locks import lock_order
from pos_backend.services.order_status import OrderStatusMachine

logger = structlog.get_logger(__name__)

AUTO_COMPLETE_NOTE = "auto-completed by full payment"


def parse_payment_method(value: Union[PaymentMethod, str]) -> PaymentMethod:
    if isinstance(value, PaymentMethod):
        return value
    try:
        return PaymentMethod(value)
    except ValueError:
        valid = ", ".join(m.value for m in PaymentMethod)
        raise ValidationError("invalid_payment_method", f"Invalid payment method '{value}', expected one of: {valid}")


def parse_amount(value: Union[Decimal, int, float, str]) -> Decimal:
    """Validate a payment amount: positive, finite, at most two decimal places"""
    if isinstance(value, bool):
        raise ValidationError("invalid_amount", "Payment amount must be a number")
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValidationError("invalid_amount", "Payment amount must be a number")
    if not amount.is_finite() or amount <= 0:
        raise ValidationError("invalid_amount", "Payment amount must be greater than zero")
    if amount != amount.quantize(CENT):
        raise ValidationError("invalid_amount", "Payment amount cannot have more than two decimal places")
    return amount.quantize(CENT)


class PaymentLedger:
    """Records payments and reports order balances"""

    def __init__(self, session: Session, status_machine: Optional[OrderStatusMachine] = None):
        self.session = session
        self.status_machine = status_machine or OrderStatusMachine(session)

    def _completed_total(self, order_id: uuid.UUID) -> Decimal:
        paid = self.session.exec(
            select(func.coalesce(func.sum(Payment.amount), 0)).where(
                Payment.order_id == order_id,
                Payment.status == PaymentStatus.COMPLETED,
            )
        ).one()
        return to_money(paid)

    def _reject(self, code: str, message: str, order: Order, **context) -> ConflictError:
        logger.warning(
            "Payment rejected",
            reason=code,
            order_id=str(order.id),
            order_number=order.order_number,
            **context,
        )
        return ConflictError(code, message)

    def record_payment(
        self,
        order_id: uuid.UUID,
        method: Union[PaymentMethod, str],
        amount: Union[Decimal, int, float, str],
        actor: Actor,
        reference_number: Optional[str] = None,
    ) -> Payment:
        """Record a settled payment against an order.

        When the payment brings the completed total up to the order total, the
        order is completed (table released, history row written) in the same
        transaction as the payment insert.

        Raises:
            ValidationError: non-positive amount or unknown payment method
            NotFoundError: order does not exist
            ConflictError: order terminal, already fully paid, or amount
                larger than the remaining balance
        """
        payment_method = parse_payment_method(method)
        amount = parse_amount(amount)

        with atomic(self.session):
            order = lock_order(self.session, order_id)
            if order is None:
                raise NotFoundError("order_not_found", "Order not found")

            if order.is_terminal():
                raise self._reject(
                    "order_terminal",
                    f"Order cannot be paid - order is {order.status.value}",
                    order,
                    status=order.status.value,
                )

            paid = self._completed_total(order.id)
            remaining = order.total_amount - paid
            if remaining <= 0:
                raise self._reject("order_fully_paid", "Order is already fully paid", order)
            if amount > remaining:
                raise self._reject(
                    "amount_exceeds_balance",
                    f"Payment amount {amount} exceeds remaining balance {remaining}",
                    order,
                    amount=str(amount),
                    remaining=str(remaining),
                )

            # Processor integration is out of scope: settlement succeeds synchronously
            now = utcnow()
            payment = Payment(
                order_id=order_id,
                payment_method=payment_method,
                amount=amount,
                status=PaymentStatus.COMPLETED,
                reference_number=reference_number,
                processed_by=actor.user_id,
                processed_at=now,
                created_at=now,
            )
            self.session.add(payment)
            self.session.flush()

            fully_paid = paid + amount >= order.total_amount
            if fully_paid:
                self.status_machine.apply(order, OrderStatus.COMPLETED, actor, AUTO_COMPLETE_NOTE)

        self.session.refresh(payment)
        logger.info(
            "Payment recorded",
            payment_id=str(payment.id),
            order_id=str(order_id),
            method=payment_method.value,
            amount=str(amount),
            remaining=str(remaining - amount),
            order_completed=fully_paid,
        )
        return payment

    def list_payments(self, order_id: uuid.UUID) -> List[Payment]:
        """All payments of an order in the order they were recorded"""
        with snapshot(self.session):
            if self.session.get(Order, order_id) is None:
                raise NotFoundError("order_not_found", "Order not found")
            return list(self.session.exec(
                select(Payment)
                .where(Payment.order_id == order_id)
                .order_by(Payment.created_at)
            ).all())

    def get_balance(self, order_id: uuid.UUID) -> BalanceSummary:
        """Total, paid, pending and remaining amounts of an order. No locking.

        The order row and its payment sums come from one statement, so the
        status and the amounts describe the same committed state.
        """
        with snapshot(self.session):
            rows = self.session.exec(
                select(
                    Order.status,
                    Order.total_amount,
                    Payment.status,
                    func.sum(Payment.amount),
                    func.count(Payment.id),
                )
                .select_from(Order)
                .outerjoin(Payment, Payment.order_id == Order.id)
                .where(Order.id == order_id)
                .group_by(Order.status, Order.total_amount, Payment.status)
            ).all()

        if not rows:
            raise NotFoundError("order_not_found", "Order not found")

        order_status, order_total = rows[0][0], rows[0][1]
        sums = {
            payment_status: to_money(amount)
            for _, _, payment_status, amount, _ in rows
            if payment_status is not None
        }
        paid = sums.get(PaymentStatus.COMPLETED, ZERO)
        total = to_money(order_total)
        remaining = total - paid

        return BalanceSummary(
            order_id=order_id,
            status=order_status,
            total=total,
            paid=paid,
            pending=sums.get(PaymentStatus.PENDING, ZERO),
            remaining=remaining,
            is_fully_paid=remaining <= 0,
            payment_count=sum(count for _, _, _, _, count in rows),
        )

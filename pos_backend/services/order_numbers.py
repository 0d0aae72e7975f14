"""
Collision-free order numbers

Numbers look like ``ORD202610190042``: prefix, business date, and a per-day
sequence taken from a counter row locked inside the order's transaction.
"""

from datetime import date
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from pos_backend.core.clock import utcnow
from pos_backend.models.order_number_sequence import OrderNumberSequence


class OrderNumberGenerator:
    def __init__(self, session: Session, prefix: str = "ORD"):
        self.session = session
        self.prefix = prefix

    def next_number(self, business_date: Optional[date] = None) -> str:
        business_date = business_date or utcnow().date()
        sequence = self._next_value(business_date)
        return f"{self.prefix}{business_date:%Y%m%d}{sequence:04d}"

    def _lock_counter(self, business_date: date) -> Optional[OrderNumberSequence]:
        return self.session.exec(
            select(OrderNumberSequence)
            .where(OrderNumberSequence.business_date == business_date)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).first()

    def _next_value(self, business_date: date) -> int:
        counter = self._lock_counter(business_date)
        if counter is None:
            try:
                with self.session.begin_nested():
                    counter = OrderNumberSequence(business_date=business_date, last_value=0)
                    self.session.add(counter)
            except IntegrityError:
                # Another transaction created today's counter first
                counter = self._lock_counter(business_date)

        counter.last_value += 1
        self.session.add(counter)
        self.session.flush()
        return counter.last_value

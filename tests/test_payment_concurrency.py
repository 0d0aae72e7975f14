"""
Concurrent payments against one order

Every test runs against a file-backed SQLite database, where each worker gets
its own connection and `BEGIN IMMEDIATE` serializes the whole transaction.
SQLite has no row locks, so the `SELECT ... FOR UPDATE` path is only exercised
by the PostgreSQL variant, which runs when TEST_DATABASE_URL points at a
disposable PostgreSQL database (its tables are dropped and recreated).
"""

import os
import pytest
import threading
from concurrent.futures import ThreadPoolExecutor
from decimal import Decimal
import uuid

from sqlmodel import SQLModel, Session, select

from pos_backend.core.database import build_engine
from pos_backend.core.exceptions import ConflictError
from pos_backend.models import Order, OrderStatus, OrderStatusHistory, Payment, PaymentMethod, PaymentStatus, Product
from pos_backend.schemas.token import Actor
from pos_backend.services import OrderService, PaymentLedger, StaticRestaurantSettings


@pytest.fixture(params=["sqlite", "postgresql"])
def race_engine(request, tmp_path):
    if request.param == "postgresql":
        url = os.environ.get("TEST_DATABASE_URL")
        if not url:
            pytest.skip("TEST_DATABASE_URL not set")
        engine = build_engine(url, lock_timeout_ms=30000)
        SQLModel.metadata.drop_all(engine)
    else:
        engine = build_engine(f"sqlite:///{tmp_path / 'pos.db'}", lock_timeout_ms=30000)

    SQLModel.metadata.create_all(engine)
    yield engine
    if request.param == "postgresql":
        SQLModel.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def open_order(race_engine):
    """Order totalling 11.00 (one 10.00 item plus 10% tax)"""
    with Session(race_engine) as session:
        product = Product(name="Margherita Pizza", price=Decimal("10.00"))
        session.add(product)
        session.commit()
        session.refresh(product)

        service = OrderService(session, restaurant_settings=StaticRestaurantSettings(Decimal("0.10")))
        order = service.create_order(
            items=[{"product_id": product.id, "quantity": 1}],
            actor=Actor(user_id=uuid.uuid4(), role="counter"),
            order_type="takeout",
        )
        return order.id


def pay_concurrently(engine, order_id, amounts):
    """Submit all payments at once; returns "ok" or the error code per worker"""
    barrier = threading.Barrier(len(amounts))

    def worker(amount):
        with Session(engine) as session:
            ledger = PaymentLedger(session)
            barrier.wait()
            try:
                ledger.record_payment(order_id, PaymentMethod.CASH, amount, Actor(role="cashier"))
                return "ok"
            except ConflictError as e:
                return e.code

    with ThreadPoolExecutor(max_workers=len(amounts)) as pool:
        return list(pool.map(worker, amounts))


def settled_total(engine, order_id):
    with Session(engine) as session:
        payments = session.exec(
            select(Payment).where(Payment.order_id == order_id, Payment.status == PaymentStatus.COMPLETED)
        ).all()
        return sum((p.amount for p in payments), Decimal("0.00"))


class TestConcurrentPayments:

    def test_two_payments_racing_for_one_balance(self, race_engine, open_order):
        """Test only one of two 7.00 payments fits into an 11.00 total"""
        results = pay_concurrently(race_engine, open_order, [Decimal("7.00"), Decimal("7.00")])

        assert sorted(results) == ["amount_exceeds_balance", "ok"]
        assert settled_total(race_engine, open_order) == Decimal("7.00")

    def test_many_small_payments_never_overpay(self, race_engine, open_order):
        results = pay_concurrently(race_engine, open_order, [Decimal("2.00")] * 8)

        assert results.count("ok") == 5
        assert results.count("amount_exceeds_balance") == 3
        assert settled_total(race_engine, open_order) == Decimal("10.00")

        with Session(race_engine) as session:
            PaymentLedger(session).record_payment(open_order, PaymentMethod.CASH, Decimal("1.00"), Actor())
            order = session.get(Order, open_order)
            assert order.status == OrderStatus.COMPLETED

    def test_full_payments_complete_order_once(self, race_engine, open_order):
        results = pay_concurrently(race_engine, open_order, [Decimal("11.00")] * 4)

        assert results.count("ok") == 1
        assert settled_total(race_engine, open_order) == Decimal("11.00")
        with Session(race_engine) as session:
            order = session.get(Order, open_order)
            history = session.exec(
                select(OrderStatusHistory).where(OrderStatusHistory.order_id == open_order)
            ).all()
        assert order.status == OrderStatus.COMPLETED
        assert len(history) == 1

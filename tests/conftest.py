"""
Test configuration for pytest
"""

import os

# Test environment variables (must be set before the package reads settings)
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET_KEY"] = "test-jwt-secret"
os.environ["TAX_RATE"] = "0.10"
os.environ["ORDER_NUMBER_PREFIX"] = "ORD"
os.environ["LOG_JSON"] = "false"

import pytest
import uuid
from decimal import Decimal
from typing import Callable, Generator, Optional

from sqlmodel import SQLModel, Session

import pos_backend.models  # noqa: F401  (registers tables)
from pos_backend.core.database import build_engine
from pos_backend.models import DiningTable, Order, OrderType, Product
from pos_backend.schemas.order import OrderItemCreate
from pos_backend.schemas.token import Actor
from pos_backend.services import (
    OrderService, OrderStatusMachine, PaymentLedger, StaticRestaurantSettings,
    TableOccupancyTracker,
)

# In-memory SQLite shared by every session of a test (StaticPool)
sqlite_engine = build_engine("sqlite://")


@pytest.fixture(scope="function")
def db() -> Generator[Session, None, None]:
    """Create a clean database session for each test"""
    SQLModel.metadata.create_all(sqlite_engine)

    with Session(sqlite_engine) as session:
        yield session

    SQLModel.metadata.drop_all(sqlite_engine)


@pytest.fixture
def actor() -> Actor:
    """Counter staff member performing writes"""
    return Actor(user_id=uuid.uuid4(), role="counter")


@pytest.fixture
def pizza(db: Session) -> Product:
    product = Product(name="Margherita Pizza", price=Decimal("10.00"), is_available=True)
    db.add(product)
    db.commit()
    db.refresh(product)
    return product


@pytest.fixture
def lemonade(db: Session) -> Product:
    product = Product(name="Lemonade", price=Decimal("2.50"), is_available=True)
    db.add(product)
    db.commit()
    db.refresh(product)
    return product


@pytest.fixture
def sold_out_product(db: Session) -> Product:
    product = Product(name="Truffle Risotto", price=Decimal("24.00"), is_available=False)
    db.add(product)
    db.commit()
    db.refresh(product)
    return product


@pytest.fixture
def table(db: Session) -> DiningTable:
    """A free table on the main floor"""
    dining_table = DiningTable(table_number="T1", seating_capacity=4, location="Main Floor")
    db.add(dining_table)
    db.commit()
    db.refresh(dining_table)
    return dining_table


@pytest.fixture
def order_service(db: Session) -> OrderService:
    return OrderService(db, restaurant_settings=StaticRestaurantSettings(Decimal("0.10")))


@pytest.fixture
def status_machine(db: Session) -> OrderStatusMachine:
    return OrderStatusMachine(db)


@pytest.fixture
def ledger(db: Session) -> PaymentLedger:
    return PaymentLedger(db)


@pytest.fixture
def tracker(db: Session) -> TableOccupancyTracker:
    return TableOccupancyTracker(db)


@pytest.fixture
def make_order(order_service: OrderService, actor: Actor, pizza: Product) -> Callable[..., Order]:
    """Factory creating an order; one pizza (total 11.00 with 10% tax) by default"""

    def _make_order(
        table: Optional[DiningTable] = None,
        quantity: int = 1,
        product: Optional[Product] = None,
        order_type: OrderType = OrderType.DINE_IN,
    ) -> Order:
        return order_service.create_order(
            items=[OrderItemCreate(product_id=(product or pizza).id, quantity=quantity)],
            actor=actor,
            order_type=order_type,
            table_id=table.id if table else None,
        )

    return _make_order

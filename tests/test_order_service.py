"""
Tests for order creation and retrieval
"""

import pytest
from datetime import date
from decimal import Decimal
import uuid

from sqlmodel import Session, select

from pos_backend.core.exceptions import NotFoundError, ValidationError
from pos_backend.models import (
    DiningTable, Order, OrderItem, OrderStatus, OrderStatusHistory, OrderType, Product,
)
from pos_backend.schemas.order import OrderItemCreate
from pos_backend.services import OrderNumberGenerator, OrderService, StaticRestaurantSettings
from tests.conftest import sqlite_engine


class TestCreateOrder:
    """Totals, price snapshots and persistence of new orders"""

    def test_totals_from_catalog_prices(self, db, order_service, actor, pizza, lemonade):
        """Test subtotal, tax and total are computed from current prices"""
        order = order_service.create_order(
            items=[
                OrderItemCreate(product_id=pizza.id, quantity=2),
                OrderItemCreate(product_id=lemonade.id, quantity=1),
            ],
            actor=actor,
            order_type=OrderType.TAKEOUT,
            customer_name="Ana",
        )

        assert order.status == OrderStatus.PENDING
        assert order.subtotal == Decimal("22.50")
        assert order.tax_amount == Decimal("2.25")
        assert order.discount_amount == Decimal("0.00")
        assert order.total_amount == Decimal("24.75")
        assert order.total_amount == order.subtotal + order.tax_amount - order.discount_amount
        assert order.created_by == actor.user_id
        assert order.customer_name == "Ana"
        assert len(order.items) == 2

    def test_tax_rounds_half_up_to_cents(self, db, order_service, actor):
        """Test 10% of 4.25 rounds to 0.43"""
        fries = Product(name="Fries", price=Decimal("4.25"))
        db.add(fries)
        db.commit()
        db.refresh(fries)

        order = order_service.create_order(
            items=[OrderItemCreate(product_id=fries.id, quantity=1)],
            actor=actor,
            order_type=OrderType.TAKEOUT,
        )

        assert order.tax_amount == Decimal("0.43")
        assert order.total_amount == Decimal("4.68")

    def test_items_keep_price_snapshot(self, db, order_service, actor, pizza):
        """Test later menu price changes do not touch existing orders"""
        order = order_service.create_order(
            items=[OrderItemCreate(product_id=pizza.id, quantity=3, special_instructions="extra basil")],
            actor=actor,
            order_type=OrderType.TAKEOUT,
        )

        pizza.price = Decimal("15.00")
        db.add(pizza)
        db.commit()

        item = db.exec(select(OrderItem).where(OrderItem.order_id == order.id)).one()
        db.refresh(item)
        assert item.unit_price == Decimal("10.00")
        assert item.total_price == Decimal("30.00")
        assert item.special_instructions == "extra basil"
        assert sum(i.total_price for i in order.items) == order.subtotal

    def test_price_read_fresh_in_long_lived_session(self, db, actor, pizza):
        """Test a product cached by an earlier read is re-priced from the store"""
        db.commit()

        with Session(sqlite_engine, expire_on_commit=False) as session:
            cached = session.get(Product, pizza.id)
            session.commit()
            assert cached.price == Decimal("10.00")

            with Session(sqlite_engine) as other:
                product = other.get(Product, pizza.id)
                product.price = Decimal("12.00")
                other.add(product)
                other.commit()

            service = OrderService(session, restaurant_settings=StaticRestaurantSettings(Decimal("0.10")))
            order = service.create_order(
                items=[OrderItemCreate(product_id=pizza.id, quantity=1)],
                actor=actor,
                order_type=OrderType.TAKEOUT,
            )

            assert order.subtotal == Decimal("12.00")
            assert order.items[0].unit_price == Decimal("12.00")

    def test_accepts_plain_dict_items(self, order_service, actor, lemonade):
        """Test raw item dicts are validated like schema items"""
        order = order_service.create_order(
            items=[{"product_id": str(lemonade.id), "quantity": 4}],
            actor=actor,
            order_type="takeout",
        )

        assert order.subtotal == Decimal("10.00")
        assert order.order_type == OrderType.TAKEOUT

    def test_creation_writes_no_history(self, db, make_order):
        """Test creating an order does not append a status history row"""
        order = make_order()

        rows = db.exec(select(OrderStatusHistory).where(OrderStatusHistory.order_id == order.id)).all()
        assert rows == []


class TestCreateOrderValidation:
    """Rejected orders leave nothing behind"""

    def test_empty_order_rejected(self, db, order_service, actor):
        with pytest.raises(ValidationError) as exc_info:
            order_service.create_order(items=[], actor=actor)

        assert exc_info.value.code == "empty_order"
        assert db.exec(select(Order)).all() == []

    @pytest.mark.parametrize("quantity", [0, -2])
    def test_non_positive_quantity_rejected(self, db, order_service, actor, pizza, quantity):
        with pytest.raises(ValidationError) as exc_info:
            order_service.create_order(
                items=[OrderItemCreate(product_id=pizza.id, quantity=quantity)],
                actor=actor,
            )

        assert exc_info.value.code == "invalid_quantity"
        assert db.exec(select(Order)).all() == []

    def test_unknown_order_type_rejected(self, order_service, actor, pizza):
        with pytest.raises(ValidationError) as exc_info:
            order_service.create_order(
                items=[OrderItemCreate(product_id=pizza.id, quantity=1)],
                actor=actor,
                order_type="drive_through",
            )

        assert exc_info.value.code == "invalid_order_type"

    def test_table_on_takeout_rejected(self, db, order_service, actor, pizza, table):
        with pytest.raises(ValidationError) as exc_info:
            order_service.create_order(
                items=[OrderItemCreate(product_id=pizza.id, quantity=1)],
                actor=actor,
                order_type=OrderType.TAKEOUT,
                table_id=table.id,
            )

        assert exc_info.value.code == "table_not_allowed"
        db.refresh(table)
        assert table.is_occupied is False

    def test_unavailable_product_rolls_back_everything(
        self, db, order_service, actor, pizza, sold_out_product, table
    ):
        """Test a sold-out item aborts the order and the table flip"""
        with pytest.raises(NotFoundError) as exc_info:
            order_service.create_order(
                items=[
                    OrderItemCreate(product_id=pizza.id, quantity=1),
                    OrderItemCreate(product_id=sold_out_product.id, quantity=1),
                ],
                actor=actor,
                table_id=table.id,
            )

        assert exc_info.value.code == "product_unavailable"
        assert db.exec(select(Order)).all() == []
        assert db.exec(select(OrderItem)).all() == []
        db.refresh(table)
        assert table.is_occupied is False

    def test_unknown_product_rejected(self, order_service, actor):
        with pytest.raises(NotFoundError) as exc_info:
            order_service.create_order(
                items=[OrderItemCreate(product_id=uuid.uuid4(), quantity=1)],
                actor=actor,
            )

        assert exc_info.value.code == "product_unavailable"

    def test_missing_table_rejected(self, db, order_service, actor, pizza):
        with pytest.raises(NotFoundError) as exc_info:
            order_service.create_order(
                items=[OrderItemCreate(product_id=pizza.id, quantity=1)],
                actor=actor,
                table_id=uuid.uuid4(),
            )

        assert exc_info.value.code == "table_not_found"
        assert db.exec(select(Order)).all() == []


class TestTableOccupancyOnCreate:

    def test_dine_in_order_occupies_table(self, db, make_order, table):
        """Test a dine-in order on a free table marks it occupied"""
        order = make_order(table=table)

        db.refresh(table)
        assert order.table_id == table.id
        assert table.is_occupied is True

    def test_takeout_order_leaves_tables_alone(self, db, make_order, table):
        make_order(order_type=OrderType.TAKEOUT)

        db.refresh(table)
        assert table.is_occupied is False

    def test_second_order_on_occupied_table(self, db, make_order, table):
        """Test a table can carry several active orders"""
        first = make_order(table=table)
        second = make_order(table=table)

        db.refresh(table)
        assert first.table_id == second.table_id == table.id
        assert table.is_occupied is True


class TestOrderNumbers:

    def test_numbers_unique_and_sequential(self, make_order):
        orders = [make_order() for _ in range(3)]
        numbers = [o.order_number for o in orders]

        assert len(set(numbers)) == 3
        assert all(n.startswith("ORD") and len(n) == len("ORD") + 12 for n in numbers)
        sequences = [int(n[-4:]) for n in numbers]
        assert sequences == [sequences[0], sequences[0] + 1, sequences[0] + 2]

    def test_sequence_restarts_each_business_day(self, db):
        generator = OrderNumberGenerator(db, prefix="TKT")

        first = generator.next_number(date(2026, 3, 1))
        second = generator.next_number(date(2026, 3, 1))
        next_day = generator.next_number(date(2026, 3, 2))
        db.commit()

        assert first == "TKT202603010001"
        assert second == "TKT202603010002"
        assert next_day == "TKT202603020001"


class TestGetOrder:

    def test_get_order_with_items(self, order_service, make_order):
        created = make_order(quantity=2)

        order = order_service.get_order(created.id)

        assert order.id == created.id
        assert order.items[0].quantity == 2
        assert order.payments == []

    def test_get_missing_order(self, order_service):
        with pytest.raises(NotFoundError) as exc_info:
            order_service.get_order(uuid.uuid4())

        assert exc_info.value.code == "order_not_found"

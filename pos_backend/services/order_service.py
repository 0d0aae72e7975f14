"""
Order creation

An order, its items and the table occupancy flip are written in one
transaction: callers see a fully created order or nothing.
"""

from decimal import Decimal
from typing import Iterable, List, Optional, Union
import uuid

from sqlmodel import Session
import structlog

from pos_backend.core.clock import utcnow
from pos_backend.core.config import get_settings
from pos_backend.core.database import atomic, snapshot
from pos_backend.core.exceptions import NotFoundError, ValidationError
from pos_backend.core.money import ZERO, to_money
from pos_backend.models.order import Order, OrderStatus, OrderType
from pos_backend.models.order_item import OrderItem, OrderItemStatus
from pos_backend.schemas.order import OrderItemCreate
from pos_backend.schemas.token import Actor
from pos_backend.services.catalog import (
    ProductCatalog, RestaurantSettings, SqlProductCatalog, StaticRestaurantSettings
)
from pos_backend.services.order_numbers import OrderNumberGenerator
from pos_backend.services.table_occupancy import TableOccupancyTracker

logger = structlog.get_logger(__name__)


def parse_order_type(value: Union[OrderType, str]) -> OrderType:
    if isinstance(value, OrderType):
        return value
    try:
        return OrderType(value)
    except ValueError:
        valid = ", ".join(t.value for t in OrderType)
        raise ValidationError("invalid_order_type", f"Invalid order type '{value}', expected one of: {valid}")


class OrderService:
    """Creates orders from priced items and reads them back"""

    def __init__(
        self,
        session: Session,
        catalog: Optional[ProductCatalog] = None,
        restaurant_settings: Optional[RestaurantSettings] = None,
        table_tracker: Optional[TableOccupancyTracker] = None,
        order_numbers: Optional[OrderNumberGenerator] = None,
    ):
        settings = get_settings()
        self.session = session
        self.catalog = catalog or SqlProductCatalog()
        self.restaurant_settings = restaurant_settings or StaticRestaurantSettings(settings.TAX_RATE)
        self.table_tracker = table_tracker or TableOccupancyTracker(session)
        self.order_numbers = order_numbers or OrderNumberGenerator(session, settings.ORDER_NUMBER_PREFIX)

    @staticmethod
    def _validate_items(items: Iterable[Union[OrderItemCreate, dict]]) -> List[OrderItemCreate]:
        validated = [
            item if isinstance(item, OrderItemCreate) else OrderItemCreate.model_validate(item)
            for item in items or []
        ]
        if not validated:
            raise ValidationError("empty_order", "Order must contain at least one item")
        for item in validated:
            if item.quantity <= 0:
                raise ValidationError(
                    "invalid_quantity",
                    f"Quantity for product {item.product_id} must be greater than zero",
                )
        return validated

    def create_order(
        self,
        items: Iterable[Union[OrderItemCreate, dict]],
        actor: Actor,
        order_type: Union[OrderType, str] = OrderType.DINE_IN,
        table_id: Optional[uuid.UUID] = None,
        customer_name: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> Order:
        """Create an order with its items.

        Each product's price is resolved once, inside the order transaction,
        and that same price is used for the totals and stored on the item as
        its price snapshot. A dine-in order with a table marks the table
        occupied in the same transaction.

        Raises:
            ValidationError: empty item list, non-positive quantity, unknown
                order type, or a table given for a non dine-in order
            NotFoundError: unavailable product or missing table
        """
        line_requests = self._validate_items(items)
        kind = parse_order_type(order_type)
        if table_id is not None and kind != OrderType.DINE_IN:
            raise ValidationError("table_not_allowed", "Only dine-in orders can be assigned a table")

        tax_rate = self.restaurant_settings.tax_rate()

        with atomic(self.session):
            priced = []
            for line in line_requests:
                product = self.catalog.get_product(self.session, line.product_id)
                unit_price = to_money(product.price)
                priced.append((line, unit_price, to_money(unit_price * line.quantity)))

            subtotal = to_money(sum((line_total for _, _, line_total in priced), ZERO))
            tax_amount = to_money(subtotal * tax_rate)
            discount_amount = ZERO
            total_amount = subtotal + tax_amount - discount_amount

            if table_id is not None:
                self.table_tracker.occupy(table_id)

            now = utcnow()
            order = Order(
                order_number=self.order_numbers.next_number(now.date()),
                table_id=table_id,
                created_by=actor.user_id,
                customer_name=customer_name,
                order_type=kind,
                status=OrderStatus.PENDING,
                subtotal=subtotal,
                tax_amount=tax_amount,
                discount_amount=discount_amount,
                total_amount=total_amount,
                notes=notes,
                created_at=now,
                updated_at=now,
            )
            self.session.add(order)
            self.session.flush()

            for line, unit_price, line_total in priced:
                self.session.add(OrderItem(
                    order_id=order.id,
                    product_id=line.product_id,
                    quantity=line.quantity,
                    unit_price=unit_price,
                    total_price=line_total,
                    special_instructions=line.special_instructions,
                    status=OrderItemStatus.PENDING,
                    created_at=now,
                    updated_at=now,
                ))

        self.session.refresh(order)
        logger.info(
            "Order created",
            order_id=str(order.id),
            order_number=order.order_number,
            order_type=kind.value,
            table_id=str(table_id) if table_id else None,
            items=len(priced),
            total_amount=str(order.total_amount),
        )
        return order

    def get_order(self, order_id: uuid.UUID) -> Order:
        """Fetch an order; items and payments load through its relationships"""
        with snapshot(self.session):
            order = self.session.get(Order, order_id)
            if order is None:
                raise NotFoundError("order_not_found", "Order not found")
            return order

"""
Read-side adapters for the catalog and restaurant settings collaborators
"""

from decimal import Decimal
from typing import Protocol
import uuid

from sqlmodel import Session, SQLModel, select

from pos_backend.core.exceptions import NotFoundError
from pos_backend.core.money import to_money
from pos_backend.models.product import Product


class ProductSnapshot(SQLModel):
    """Price and availability of a product at one point in time"""
    product_id: uuid.UUID
    name: str
    price: Decimal
    is_available: bool


class ProductCatalog(Protocol):
    def get_product(self, session: Session, product_id: uuid.UUID) -> ProductSnapshot:
        ...


class RestaurantSettings(Protocol):
    def tax_rate(self) -> Decimal:
        ...


class SqlProductCatalog:
    """Resolves products from the products table within the caller's transaction.

    Every call re-reads the row instead of using the session's identity map.
    """

    def get_product(self, session: Session, product_id: uuid.UUID) -> ProductSnapshot:
        product = session.exec(
            select(Product)
            .where(Product.id == product_id)
            .execution_options(populate_existing=True)
        ).first()
        if product is None or not product.is_available:
            raise NotFoundError(
                "product_unavailable",
                f"Product {product_id} not found or not available",
            )
        return ProductSnapshot(
            product_id=product.id,
            name=product.name,
            price=to_money(product.price),
            is_available=product.is_available,
        )


class StaticRestaurantSettings:
    """Settings loaded once at startup and handed to the services"""

    def __init__(self, tax_rate: Decimal):
        self._tax_rate = Decimal(str(tax_rate))

    def tax_rate(self) -> Decimal:
        return self._tax_rate

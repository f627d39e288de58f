"""Product aggregate.

Products live independently of orders. They have their own lifecycle:
prices change, stock is sold and restocked, products are added and
removed from the catalog.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from storefront.domain.exceptions import ValidationError
from storefront.domain.model.value_objects import Money


class ProductCategory(Enum):
    CAR = "car"
    GROCERY = "grocery"

    @staticmethod
    def parse(raw: str) -> ProductCategory:
        try:
            return ProductCategory((raw or "").strip().lower())
        except ValueError:
            raise ValidationError("category must be 'car' or 'grocery'") from None


# Keys a product may carry in its metadata, per category.
METADATA_KEYS: dict[ProductCategory, frozenset[str]] = {
    ProductCategory.CAR: frozenset({"mileage", "fuel", "transmission", "color", "year"}),
    ProductCategory.GROCERY: frozenset({"unit", "weight", "brand", "origin"}),
}


@dataclass(frozen=True)
class ProductMetadata:
    """Typed key/value attributes attached to a product.

    The allowed keys depend on the category, so listings stay queryable
    ("all petrol cars") without accepting arbitrary blobs.
    """

    category: ProductCategory
    values: tuple[tuple[str, str], ...] = ()

    @staticmethod
    def build(category: ProductCategory, raw: dict | None) -> ProductMetadata:
        raw = raw or {}
        if not isinstance(raw, dict):
            raise ValidationError("metadata must be an object")

        allowed = METADATA_KEYS[category]
        unknown = sorted(set(raw) - allowed)
        if unknown:
            raise ValidationError(
                f"Unsupported metadata for {category.value}: {', '.join(unknown)}"
            )

        pairs = []
        for key in sorted(raw):
            value = raw[key]
            if value is None:
                continue
            if isinstance(value, (dict, list)):
                raise ValidationError(f"metadata '{key}' must be a scalar value")
            pairs.append((key, str(value).strip()))
        return ProductMetadata(category=category, values=tuple(pairs))

    def get(self, key: str, default: str | None = None) -> str | None:
        return dict(self.values).get(key, default)

    def as_dict(self) -> dict[str, str]:
        return dict(self.values)


@dataclass
class Product:
    """A product in the catalog.

    Kept as a mutable dataclass because price updates and stock
    movements are legitimate mutations on the aggregate.
    """

    id: int
    name: str
    category: ProductCategory
    price: Money
    stock_quantity: int = 0
    description: str = ""
    image_url: str = ""
    low_stock_threshold: int = 5
    metadata: ProductMetadata | None = field(default=None)

    def __post_init__(self) -> None:
        if self.metadata is None:
            self.metadata = ProductMetadata(category=self.category)

    @property
    def in_stock(self) -> bool:
        return self.stock_quantity > 0

    @property
    def is_low_stock(self) -> bool:
        return self.stock_quantity <= self.low_stock_threshold

    def update_price(self, new_price: Money) -> None:
        """Change the product price.

        This does NOT affect any existing orders because orders
        capture a price snapshot at creation time.
        """
        if new_price.amount <= 0:
            raise ValidationError("Product price must be greater than zero")
        self.price = new_price

    def restock(self, quantity: int) -> None:
        if quantity <= 0:
            raise ValidationError("Restock quantity must be positive")
        self.stock_quantity += quantity

    def set_stock(self, quantity: int) -> None:
        if quantity < 0:
            raise ValidationError("Stock quantity cannot be negative")
        self.stock_quantity = quantity


@dataclass(frozen=True)
class LowStockSummary:
    """Snapshot of the catalog's stock alerts at ``generated_at``."""

    generated_at: datetime
    total_in_stock_products: int
    products: tuple[Product, ...] = ()

    @staticmethod
    def build(products: list[Product], generated_at: datetime) -> LowStockSummary:
        low = sorted(
            (p for p in products if p.is_low_stock),
            key=lambda p: (p.stock_quantity, p.name.lower()),
        )
        return LowStockSummary(
            generated_at=generated_at,
            total_in_stock_products=sum(1 for p in products if p.in_stock),
            products=tuple(low),
        )

    @property
    def low_stock_count(self) -> int:
        return len(self.products)

"""Application service: Add Product use case."""

from __future__ import annotations

from storefront.domain.exceptions import ValidationError
from storefront.domain.model.product import Product, ProductCategory, ProductMetadata
from storefront.domain.model.value_objects import Money
from storefront.domain.repository.unit_of_work import UnitOfWork


class AddProductHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(
        self,
        name: str,
        category: str,
        price: str | int,
        stock_quantity: int = 0,
        description: str = "",
        image_url: str = "",
        low_stock_threshold: int = 5,
        metadata: dict | None = None,
    ) -> Product:
        """Add a new product to the catalog."""
        if not name or not name.strip():
            raise ValidationError("Product name is required")
        if stock_quantity < 0:
            raise ValidationError("Stock quantity cannot be negative")

        kind = ProductCategory.parse(category)
        amount = Money.of(price)
        if amount.is_zero:
            raise ValidationError("Product price must be greater than zero")

        with self._uow as uow:
            if uow.products.get_by_name(name) is not None:
                raise ValidationError(f"Product '{name.strip()}' already exists")

            product = Product(
                id=uow.products.next_id(),
                name=name.strip(),
                category=kind,
                price=amount,
                stock_quantity=stock_quantity,
                description=(description or "").strip(),
                image_url=(image_url or "").strip(),
                low_stock_threshold=low_stock_threshold,
                metadata=ProductMetadata.build(kind, metadata),
            )
            uow.products.save(product)
            uow.commit()
        return product

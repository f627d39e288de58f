"""Application services: Update, Restock and Delete Product use cases."""

from __future__ import annotations

from storefront.domain.exceptions import EntityNotFoundError, ValidationError
from storefront.domain.model.product import Product, ProductMetadata
from storefront.domain.model.value_objects import Money
from storefront.domain.repository.unit_of_work import UnitOfWork


class UpdateProductHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(
        self,
        product_id: int,
        new_price: str | int | None = None,
        stock_quantity: int | None = None,
        description: str | None = None,
        metadata: dict | None = None,
    ) -> Product:
        """Update a product's price, stock level, description or metadata.

        This does NOT affect any existing orders: they captured a price
        snapshot at creation time.
        """
        if new_price is None and stock_quantity is None and description is None and metadata is None:
            raise ValidationError("Nothing to update")

        with self._uow as uow:
            product = uow.products.get_by_id(product_id)
            if product is None:
                raise EntityNotFoundError(f"Product #{product_id} not found")

            if new_price is not None:
                product.update_price(Money.of(new_price))
            if stock_quantity is not None:
                product.set_stock(stock_quantity)
            if description is not None:
                product.description = description.strip()
            if metadata is not None:
                product.metadata = ProductMetadata.build(product.category, metadata)

            uow.products.save(product)
            uow.commit()
        return product


class RestockProductHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self, product_id: int, quantity: int) -> Product:
        with self._uow as uow:
            product = uow.products.get_by_id(product_id)
            if product is None:
                raise EntityNotFoundError(f"Product #{product_id} not found")
            product.restock(quantity)
            uow.products.save(product)
            uow.commit()
        return product


class DeleteProductHandler:
    """Remove a product from the catalog.

    Existing orders keep their line-item snapshots, so nothing else changes.
    """

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self, product_id: int) -> Product:
        with self._uow as uow:
            product = uow.products.get_by_id(product_id)
            if product is None or not uow.products.delete(product_id):
                raise EntityNotFoundError(f"Product #{product_id} not found")
            uow.commit()
        return product

"""JSON-document-backed implementation of ProductRepository."""

from __future__ import annotations

from collections.abc import Iterable

from storefront.domain.model.product import Product, ProductCategory, ProductMetadata
from storefront.domain.model.value_objects import Money
from storefront.domain.repository.product_repository import ProductRepository
from storefront.infrastructure.persistence.json_store import next_id, upsert


class JsonProductRepository(ProductRepository):

    def __init__(self, doc: dict) -> None:
        self._rows: list[dict] = doc["products"]

    # --- ProductRepository interface ------------------------------------------

    def next_id(self) -> int:
        return next_id(self._rows)

    def get_by_id(self, product_id: int) -> Product | None:
        for raw in self._rows:
            if raw["id"] == product_id:
                return self._to_domain(raw)
        return None

    def fetch_by_ids(self, product_ids: Iterable[int]) -> list[Product]:
        wanted = set(product_ids)
        return [self._to_domain(raw) for raw in self._rows if raw["id"] in wanted]

    def get_by_name(self, name: str) -> Product | None:
        needle = (name or "").strip().lower()
        for raw in self._rows:
            if raw["name"].lower() == needle:
                return self._to_domain(raw)
        return None

    def list_all(self) -> list[Product]:
        return [self._to_domain(raw) for raw in self._rows]

    def save(self, product: Product) -> None:
        upsert(self._rows, self._to_raw(product))

    def delete(self, product_id: int) -> bool:
        for index, raw in enumerate(self._rows):
            if raw["id"] == product_id:
                del self._rows[index]
                return True
        return False

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(product: Product) -> dict:
        return {
            "id": product.id,
            "name": product.name,
            "category": product.category.value,
            "price": product.price.amount,
            "currency": product.price.currency,
            "stock_quantity": product.stock_quantity,
            "description": product.description,
            "image_url": product.image_url,
            "low_stock_threshold": product.low_stock_threshold,
            "metadata": product.metadata.as_dict(),
        }

    @staticmethod
    def _to_domain(raw: dict) -> Product:
        category = ProductCategory(raw["category"])
        return Product(
            id=raw["id"],
            name=raw["name"],
            category=category,
            price=Money(raw["price"], raw.get("currency", "NGN")),
            stock_quantity=raw.get("stock_quantity", 0),
            description=raw.get("description", ""),
            image_url=raw.get("image_url", ""),
            low_stock_threshold=raw.get("low_stock_threshold", 5),
            metadata=ProductMetadata.build(category, raw.get("metadata")),
        )

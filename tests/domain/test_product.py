"""Unit tests for the Product aggregate and its metadata."""

import pytest

from storefront.domain.exceptions import ValidationError
from storefront.domain.model.product import (
    LowStockSummary,
    Product,
    ProductCategory,
    ProductMetadata,
)
from storefront.domain.model.value_objects import Money
from tests.fakes import NOW


def _product(**overrides) -> Product:
    fields = dict(id=1, name="Rice", category=ProductCategory.GROCERY, price=Money(75_000))
    fields.update(overrides)
    return Product(**fields)


class TestProduct:

    def test_defaults(self):
        p = _product()
        assert p.stock_quantity == 0
        assert not p.in_stock
        assert p.metadata.as_dict() == {}

    def test_update_price(self):
        p = _product()
        p.update_price(Money(80_000))
        assert p.price == Money(80_000)

    def test_zero_price_rejected(self):
        with pytest.raises(ValidationError, match="greater than zero"):
            _product().update_price(Money(0))

    def test_restock(self):
        p = _product(stock_quantity=2)
        p.restock(5)
        assert p.stock_quantity == 7

    def test_restock_must_be_positive(self):
        with pytest.raises(ValidationError, match="must be positive"):
            _product().restock(0)

    def test_low_stock(self):
        assert _product(stock_quantity=5).is_low_stock
        assert not _product(stock_quantity=6).is_low_stock

    def test_parse_category(self):
        assert ProductCategory.parse(" Car ") is ProductCategory.CAR
        with pytest.raises(ValidationError, match="category"):
            ProductCategory.parse("toys")


class TestLowStockSummary:

    def test_lowest_stock_first_then_name(self):
        summary = LowStockSummary.build(
            [
                _product(id=1, name="rice", stock_quantity=3),
                _product(id=2, name="Beans", stock_quantity=3),
                _product(id=3, name="Oil", stock_quantity=1),
                _product(id=4, name="Yam", stock_quantity=40),
            ],
            NOW,
        )
        assert [p.id for p in summary.products] == [3, 2, 1]
        assert summary.low_stock_count == 3
        assert summary.total_in_stock_products == 4
        assert summary.generated_at == NOW

    def test_sold_out_counts_as_low_but_not_in_stock(self):
        summary = LowStockSummary.build(
            [_product(stock_quantity=0), _product(id=2, name="Oil", stock_quantity=9)], NOW
        )
        assert [p.id for p in summary.products] == [1]
        assert summary.total_in_stock_products == 1

    def test_threshold_is_per_product(self):
        summary = LowStockSummary.build([_product(stock_quantity=8, low_stock_threshold=10)], NOW)
        assert summary.low_stock_count == 1

    def test_empty_catalog(self):
        summary = LowStockSummary.build([], NOW)
        assert summary.products == ()
        assert summary.total_in_stock_products == 0


class TestProductMetadata:

    def test_allowed_keys_per_category(self):
        meta = ProductMetadata.build(ProductCategory.CAR, {"fuel": "Petrol", "year": 2018})
        assert meta.get("fuel") == "Petrol"
        assert meta.get("year") == "2018"

    def test_unknown_keys_rejected(self):
        with pytest.raises(ValidationError, match="Unsupported metadata for grocery: fuel"):
            ProductMetadata.build(ProductCategory.GROCERY, {"fuel": "Petrol"})

    def test_nested_values_rejected(self):
        with pytest.raises(ValidationError, match="scalar"):
            ProductMetadata.build(ProductCategory.GROCERY, {"unit": ["bag"]})

    def test_none_values_dropped(self):
        meta = ProductMetadata.build(ProductCategory.GROCERY, {"unit": "bag", "brand": None})
        assert meta.as_dict() == {"unit": "bag"}

"""JSON-document-backed implementation of PromoRuleRepository."""

from __future__ import annotations

from datetime import datetime

from storefront.domain.model.coupon import DiscountType
from storefront.domain.model.product import ProductCategory
from storefront.domain.model.promo_rule import PromoRule, PromoRuleType
from storefront.domain.model.value_objects import Money
from storefront.domain.repository.promo_rule_repository import PromoRuleRepository
from storefront.infrastructure.persistence.json_store import (
    dump_datetime,
    load_datetime,
    next_id,
    upsert,
)


class JsonPromoRuleRepository(PromoRuleRepository):

    def __init__(self, doc: dict) -> None:
        self._rows: list[dict] = doc["promo_rules"]

    def list_live(self, now: datetime) -> list[PromoRule]:
        return [rule for rule in self.list_all() if rule.is_live(now)]

    def list_all(self) -> list[PromoRule]:
        return [self._to_domain(raw) for raw in self._rows]

    def save(self, rule: PromoRule) -> None:
        if rule.id is None:
            rule.id = next_id(self._rows)
        upsert(self._rows, self._to_raw(rule))

    @staticmethod
    def _to_raw(rule: PromoRule) -> dict:
        return {
            "id": rule.id,
            "name": rule.name,
            "rule_type": rule.rule_type.value,
            "min_cart_amount": rule.min_cart_amount.amount,
            "category": rule.category.value if rule.category else None,
            "discount_type": rule.discount_type.value,
            "discount_value": rule.discount_value,
            "bogo_product_id": rule.bogo_product_id,
            "bogo_buy_qty": rule.bogo_buy_qty,
            "bogo_get_qty": rule.bogo_get_qty,
            "starts_at": dump_datetime(rule.starts_at),
            "ends_at": dump_datetime(rule.ends_at),
            "is_active": rule.is_active,
            "created_at": dump_datetime(rule.created_at),
        }

    @staticmethod
    def _to_domain(raw: dict) -> PromoRule:
        category = raw.get("category")
        return PromoRule(
            id=raw["id"],
            name=raw["name"],
            rule_type=PromoRuleType(raw["rule_type"]),
            min_cart_amount=Money(raw.get("min_cart_amount", 0)),
            category=ProductCategory(category) if category else None,
            discount_type=DiscountType(raw.get("discount_type", "fixed")),
            discount_value=raw.get("discount_value", 0),
            bogo_product_id=raw.get("bogo_product_id"),
            bogo_buy_qty=raw.get("bogo_buy_qty", 1),
            bogo_get_qty=raw.get("bogo_get_qty", 1),
            starts_at=load_datetime(raw.get("starts_at")),
            ends_at=load_datetime(raw.get("ends_at")),
            is_active=raw.get("is_active", True),
            created_at=load_datetime(raw["created_at"]),
        )

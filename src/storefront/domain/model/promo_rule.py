"""Promotional rules evaluated automatically at checkout."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from storefront.domain.exceptions import ValidationError
from storefront.domain.model.coupon import DiscountType
from storefront.domain.model.product import ProductCategory
from storefront.domain.model.value_objects import Money


class PromoRuleType(Enum):
    DISCOUNT = "discount"
    BOGO = "bogo"

    @staticmethod
    def parse(raw: str) -> PromoRuleType:
        try:
            return PromoRuleType((raw or "").strip().lower())
        except ValueError:
            raise ValidationError("rule type must be 'discount' or 'bogo'") from None


@dataclass
class PromoRule:
    """A store-wide promotion.

    ``discount`` rules take a fixed amount or a percentage off the cart;
    ``bogo`` rules give ``bogo_get_qty`` free units of one product for
    every ``bogo_buy_qty`` units bought.
    """

    id: int | None
    name: str
    rule_type: PromoRuleType
    min_cart_amount: Money = field(default_factory=Money.zero)
    category: ProductCategory | None = None
    discount_type: DiscountType = DiscountType.FIXED
    discount_value: int = 0
    bogo_product_id: int | None = None
    bogo_buy_qty: int = 1
    bogo_get_qty: int = 1
    starts_at: datetime | None = None
    ends_at: datetime | None = None
    is_active: bool = True
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @staticmethod
    def create(name: str, rule_type: PromoRuleType, **options) -> PromoRule:
        """Create a new rule, enforcing all invariants."""
        if not name or not name.strip():
            raise ValidationError("Promo rule name is required")

        rule = PromoRule(id=None, name=name.strip(), rule_type=rule_type, **options)

        if rule.rule_type is PromoRuleType.BOGO:
            if rule.bogo_product_id is None:
                raise ValidationError("BOGO rules need a target product")
            if rule.bogo_buy_qty <= 0 or rule.bogo_get_qty <= 0:
                raise ValidationError("BOGO buy and get quantities must be positive")
        elif rule.discount_value <= 0:
            raise ValidationError("Discount value must be positive")
        elif rule.discount_type is DiscountType.PERCENT and rule.discount_value > 100:
            raise ValidationError("Percent discount cannot exceed 100")

        if rule.starts_at and rule.ends_at and rule.ends_at < rule.starts_at:
            raise ValidationError("Promo end date is before its start date")
        return rule

    def is_live(self, now: datetime) -> bool:
        if not self.is_active:
            return False
        if self.starts_at is not None and now < self.starts_at:
            return False
        if self.ends_at is not None and now > self.ends_at:
            return False
        return True
